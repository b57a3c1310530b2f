import json
import logging
from pathlib import Path

from ..importer import Importer


class FileImporter(Importer):
    def __init__(self, params: dict, global_shared_state: dict, log_level=logging.INFO):
        super().__init__(__name__, global_shared_state, log_level)
        try:
            self._path = Path(params["path"])
            self._pattern = params.get("pattern", "*.json")
            self.uid_filter_list = params.get("uid_filter_list", set())
        except KeyError as e:
            raise ValueError(str(e))

    def should_be_filtered_out(self, uid):
        return self.uid_filter_list and uid not in self.uid_filter_list

    def _files(self):
        if self._path.is_file():
            return [self._path]
        if not self._path.is_dir():
            raise ValueError(f"Dashboard path {self._path} does not exist")
        return sorted(self._path.glob(self._pattern))

    def _envelope(self, data: dict, source: Path) -> dict:
        if "dashboard" in data:
            envelope = data
        else:
            envelope = {"dashboard": data}
        meta = envelope.setdefault("meta", {})
        meta.setdefault("folderTitle", "General")
        meta.setdefault("updatedBy", "")
        meta.setdefault("source", str(source))
        return envelope

    def fetch_dashboards(self):
        dashboards = []
        for path in self._files():
            with path.open("r") as stream:
                try:
                    data = json.load(stream)
                except json.JSONDecodeError as e:
                    self._logger.error(f"Skipping {path}, invalid JSON: {e}")
                    continue
            if not isinstance(data, dict):
                self._logger.error(f"Skipping {path}, not a dashboard object")
                continue
            envelope = self._envelope(data, path)
            if self.should_be_filtered_out(envelope["dashboard"].get("uid")):
                continue
            dashboards.append(envelope)
        self._logger.info(f"Loaded {len(dashboards)} dashboards from {self._path}")
        return dashboards
