import json
import logging
import uuid
import requests

from ..exporter import Exporter


class GrafanaRawExporter(Exporter):
    def __init__(self, params, global_shared_state, log_level=logging.INFO):
        super().__init__(
            __name__,
            global_shared_state,
            log_level,
        )
        try:
            self._api_endpoint = params["endpoint"].rstrip("/")
            self._auth_header_key = params["auth_header"]["key"]
            self._auth_header_value = params["auth_header"]["value"]
            self._api_headers = {
                self._auth_header_key: self._auth_header_value,
                "Content-Type": "application/json",
                "Cache-Control": "no-cache",
            }
            self._folder_uid = params.get("folder_uid")
            self._new_copy = params.get("new_copy", False)
            self._message = params.get("message", "Materialized panel repeats")
            self._verify = params.get("verify_ssl", False)
        except KeyError as e:
            raise ValueError(str(e))

    def _request_json(self, envelope: dict) -> dict:
        dashboard = dict(envelope["dashboard"])
        meta = envelope.get("meta", {})
        if self._new_copy:
            dashboard["id"] = None
            dashboard["uid"] = str(uuid.uuid4())
        return {
            "dashboard": dashboard,
            "folderUid": self._folder_uid or meta.get("folderUid"),
            "message": self._message,
            "overwrite": True,
        }

    def export_dashboards(self, dashboards):
        for envelope in dashboards:
            request_json = self._request_json(envelope)
            title = request_json["dashboard"].get("title")
            response = requests.post(
                self._api_endpoint + "/dashboards/db",
                data=json.dumps(request_json),
                headers=self._api_headers,
                verify=self._verify,
            )
            if response.status_code != 200:
                self._logger.error(f"Error saving dashboard {title}: {response.content}")
            else:
                self._logger.debug(f"Successfully exported dashboard: {title}")
