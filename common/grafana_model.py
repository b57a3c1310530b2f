from dataclasses import dataclass, asdict

ROW_PANEL_TYPE = "row"
GRID_FIELDS = ("x", "y", "w", "h")


def is_row(panel: dict) -> bool:
    return panel.get("type") == ROW_PANEL_TYPE


@dataclass(frozen=True, repr=True)
class GrafanaDashboard:
    uid: str
    title: str
    folder: str
    updater: str

    def __eq__(self, other):
        return self.uid == other.uid

    @classmethod
    def from_envelope(cls, envelope: dict) -> "GrafanaDashboard":
        dashboard = envelope["dashboard"]
        meta = envelope.get("meta", {})
        return cls(
            uid=dashboard.get("uid", ""),
            title=dashboard.get("title", ""),
            folder=meta.get("folderTitle", "General"),
            updater=meta.get("updatedBy", ""),
        )


@dataclass(frozen=True, repr=True)
class GrafanaPanel:
    id: int
    title: str

    def __eq__(self, other):
        return self.id == other.id

    @classmethod
    def from_panel(cls, panel: dict) -> "GrafanaPanel":
        return cls(id=panel.get("id"), title=panel.get("title", ""))


@dataclass(frozen=True)
class GridPos:
    """Validated panel geometry in grid units (24 columns, rows grow downward)."""

    x: int
    y: int
    w: int
    h: int

    @classmethod
    def from_panel(cls, panel: dict) -> "GridPos":
        grid_pos = panel.get("gridPos")
        if not isinstance(grid_pos, dict):
            raise ValueError(f"Panel {panel.get('id')} has no gridPos")
        for field in GRID_FIELDS:
            value = grid_pos.get(field)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(
                    f"Panel {panel.get('id')} has malformed gridPos, {field}={value!r}"
                )
        if grid_pos["w"] <= 0 or grid_pos["h"] <= 0:
            raise ValueError(
                f"Panel {panel.get('id')} has empty gridPos {grid_pos['w']}x{grid_pos['h']}"
            )
        return cls(*(grid_pos[field] for field in GRID_FIELDS))

    @property
    def bottom(self) -> int:
        return self.y + self.h

    def to_dict(self) -> dict:
        return asdict(self)
