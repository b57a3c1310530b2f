import logging

from ..importer import Importer
import requests


class GrafanaImporter(Importer):
    def __init__(self, params: dict, global_shared_state: dict, log_level=logging.INFO):
        super().__init__(__name__, global_shared_state, log_level)
        try:
            self._grafana_endpoint = params["endpoint"].rstrip("/")
            self._organization_id = params["orgId"]
            self.uid_filter_list = params.get("uid_filter_list", set())
            self._verify = params.get("verify_ssl", False)

            if auth_header := params.get("auth_header", None):
                authorization = auth_header
            else:
                authorization = params.get("auth_type", "Bearer ") + params["api_token"]
            self._api_headers = {
                "Authorization": authorization,
                "Content-Type": "application/json",
                "Accept": "application/json",
            }

            self._use_switch_org_api = params.get("use_switch_org_api", True)
            self.requests = requests.Session()
        except KeyError as e:
            raise ValueError(str(e))

        self.global_shared_state["grafana_url"] = self._grafana_endpoint
        self.global_shared_state["grafana_organization_id"] = self._organization_id

    def should_be_filtered_out(self, uid):
        return self.uid_filter_list and uid not in self.uid_filter_list

    def _switch_org(self):
        if not self._use_switch_org_api:
            return
        r = self.requests.post(
            f"{self._grafana_endpoint}/api/user/using/{self._organization_id}",
            headers=self._api_headers,
            verify=self._verify,
        )
        r.raise_for_status()

        r = self.requests.get(
            f"{self._grafana_endpoint}/api/org",
            headers=self._api_headers,
            verify=self._verify,
        )
        r.raise_for_status()

        current_org = r.json()["id"]
        if int(current_org) != int(self._organization_id):
            raise RuntimeError(f"Cannot switch organization to {self._organization_id}")

    def _dashboard_uids(self) -> list:
        response = self.requests.get(
            f"{self._grafana_endpoint}/api/search?type=dash-db&limit=5000&orgId={self._organization_id}",
            headers=self._api_headers,
            verify=self._verify,
        )
        response.raise_for_status()
        return [
            item["uid"]
            for item in response.json()
            if item.get("type") == "dash-db" and not self.should_be_filtered_out(item.get("uid"))
        ]

    def fetch_dashboards(self) -> list:
        self._switch_org()

        dashboards = []
        for uid in self._dashboard_uids():
            response = self.requests.get(
                f"{self._grafana_endpoint}/api/dashboards/uid/{uid}?orgId={self._organization_id}",
                headers=self._api_headers,
                verify=self._verify,
            )
            if response.status_code != 200:
                self._logger.error(f"Cannot fetch dashboard {uid}: {response.status_code}")
                continue
            dashboard = response.json()
            if "meta" not in dashboard:
                self._logger.critical(f"No meta in dashboard {uid}")
                continue
            dashboards.append(dashboard)
        self._logger.info(
            f"Fetched {len(dashboards)} dashboards from {self._grafana_endpoint} / Org: {self._organization_id}"
        )
        return dashboards
