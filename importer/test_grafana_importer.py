from unittest.mock import MagicMock

import pytest

from importer.grafana.grafana_importer import GrafanaImporter


def response(payload, status_code=200):
    mock = MagicMock()
    mock.status_code = status_code
    mock.json.return_value = payload
    return mock


@pytest.fixture
def shared_state():
    return {}


@pytest.fixture
def importer(shared_state):
    importer = GrafanaImporter(
        {
            "endpoint": "https://grafana.example.com/",
            "api_token": "token",
            "orgId": 1,
            "use_switch_org_api": False,
            "uid_filter_list": ["a", "b"],
        },
        shared_state,
    )
    importer.requests = MagicMock()
    return importer


def test_fetches_dashboards_by_uid(importer):
    pages = {
        "https://grafana.example.com/api/search?type=dash-db&limit=5000&orgId=1": response(
            [
                {"uid": "a", "type": "dash-db"},
                {"uid": "b", "type": "dash-db"},
                {"uid": "c", "type": "dash-db"},
                {"uid": "f", "type": "dash-folder"},
            ]
        ),
        "https://grafana.example.com/api/dashboards/uid/a?orgId=1": response(
            {"dashboard": {"uid": "a"}, "meta": {"folderTitle": "Ops"}}
        ),
        "https://grafana.example.com/api/dashboards/uid/b?orgId=1": response({}, 404),
    }
    importer.requests.get.side_effect = lambda url, **kwargs: pages[url]

    dashboards = importer.fetch_dashboards()

    assert dashboards == [{"dashboard": {"uid": "a"}, "meta": {"folderTitle": "Ops"}}]
    headers = importer.requests.get.call_args.kwargs["headers"]
    assert headers["Authorization"] == "Bearer token"


def test_publishes_origin_to_shared_state(importer, shared_state):
    assert shared_state == {
        "grafana_url": "https://grafana.example.com",
        "grafana_organization_id": 1,
    }


def test_switch_org_mismatch_fails(shared_state):
    importer = GrafanaImporter(
        {"endpoint": "https://grafana.example.com", "api_token": "t", "orgId": 2},
        shared_state,
    )
    importer.requests = MagicMock()
    importer.requests.get.return_value = response({"id": 1})

    with pytest.raises(RuntimeError):
        importer.fetch_dashboards()


def test_missing_configuration_is_rejected(shared_state):
    with pytest.raises(ValueError):
        GrafanaImporter({"endpoint": "https://grafana.example.com"}, shared_state)
