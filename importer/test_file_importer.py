import json

import pytest

from importer.file.file_importer import FileImporter


@pytest.fixture
def dashboards_dir(tmp_path):
    (tmp_path / "raw.json").write_text(json.dumps({"uid": "raw", "title": "Raw", "panels": []}))
    (tmp_path / "envelope.json").write_text(
        json.dumps(
            {
                "dashboard": {"uid": "env", "title": "Envelope", "panels": []},
                "meta": {"folderTitle": "Ops", "updatedBy": "admin"},
            }
        )
    )
    (tmp_path / "broken.json").write_text("{not json")
    (tmp_path / "notes.txt").write_text("ignored")
    return tmp_path


def test_loads_raw_and_wrapped_dashboards(dashboards_dir):
    importer = FileImporter({"path": str(dashboards_dir)}, {})

    dashboards = importer.fetch_dashboards()

    assert [d["dashboard"]["uid"] for d in dashboards] == ["env", "raw"]
    assert dashboards[0]["meta"]["folderTitle"] == "Ops"
    assert dashboards[1]["meta"]["folderTitle"] == "General"
    assert dashboards[1]["meta"]["source"].endswith("raw.json")


def test_uid_filter_list(dashboards_dir):
    importer = FileImporter({"path": str(dashboards_dir), "uid_filter_list": ["raw"]}, {})

    assert [d["dashboard"]["uid"] for d in importer.fetch_dashboards()] == ["raw"]


def test_single_file_path(dashboards_dir):
    importer = FileImporter({"path": str(dashboards_dir / "raw.json")}, {})

    assert len(importer.fetch_dashboards()) == 1


def test_missing_configuration_is_rejected():
    with pytest.raises(ValueError):
        FileImporter({}, {})


def test_missing_directory_is_rejected(tmp_path):
    importer = FileImporter({"path": str(tmp_path / "nope")}, {})

    with pytest.raises(ValueError):
        importer.fetch_dashboards()
