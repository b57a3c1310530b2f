import json
import logging
import re
from pathlib import Path

from ..exporter import Exporter


def dashboard_file_name(dashboard: dict) -> str:
    name = dashboard.get("uid") or dashboard.get("title") or "dashboard"
    return re.sub(r"[^A-Za-z0-9_.-]+", "-", str(name)).strip("-") + ".json"


class FileExporter(Exporter):
    def __init__(self, params, global_shared_state, log_level=logging.INFO):
        super().__init__(__name__, global_shared_state, log_level)
        try:
            self._path = Path(params["path"])
            self._indent = params.get("indent", 2)
            self._envelope = params.get("envelope", False)
        except KeyError as e:
            raise ValueError(str(e))

    def export_dashboards(self, dashboards):
        self._path.mkdir(parents=True, exist_ok=True)
        for envelope in dashboards:
            dashboard = envelope["dashboard"]
            target = self._path / dashboard_file_name(dashboard)
            with target.open("w") as stream:
                json.dump(envelope if self._envelope else dashboard, stream, indent=self._indent)
            self._logger.debug(f"Exported dashboard {dashboard.get('title')} to {target}")
