"""Grid geometry of repeated panels.

Positions are plain ``gridPos`` dicts in grid units: 24 columns, ``y``
growing downward in row-height units.
"""
from typing import Collection, Dict, Iterable, List, Optional

from common.grafana_model import GridPos, is_row

GRID_COLUMN_COUNT = 24


def layout_horizontal(
    grid_pos: GridPos, count: int, min_width: Optional[int] = None
) -> List[dict]:
    """Splits the grid width between ``count`` instances placed side by side.

    Widths are ``floor(24 / count)``; the remainder stays unused. Instances
    that would not fit on the template's line wrap to the next one.
    """
    if count <= 0:
        return []
    width = max(1, GRID_COLUMN_COUNT // count)
    if min_width:
        width = min(max(width, int(min_width)), GRID_COLUMN_COUNT)
    per_line = max(1, (GRID_COLUMN_COUNT - grid_pos.x) // width)
    return [
        {
            "x": grid_pos.x + (index % per_line) * width,
            "y": grid_pos.y + (index // per_line) * grid_pos.h,
            "w": width,
            "h": grid_pos.h,
        }
        for index in range(count)
    ]


def layout_vertical(grid_pos: GridPos, count: int) -> List[dict]:
    return [
        {
            "x": grid_pos.x,
            "y": grid_pos.y + index * grid_pos.h,
            "w": grid_pos.w,
            "h": grid_pos.h,
        }
        for index in range(count)
    ]


def layout_row_group(first_group_y: int, group_height: int, count: int) -> List[int]:
    return [first_group_y + index * group_height for index in range(count)]


def group_bottom(panels: Iterable[dict]) -> int:
    """Lowest edge (``y + h``) over the top-level geometry of ``panels``."""
    return max(GridPos.from_panel(panel).bottom for panel in panels)


def _positioned(panel: dict) -> bool:
    grid_pos = panel.get("gridPos")
    if not isinstance(grid_pos, dict):
        return False
    return all(
        isinstance(grid_pos.get(key), int) and not isinstance(grid_pos.get(key), bool)
        for key in ("y", "h")
    )


def _move(panel: dict, delta: int) -> None:
    panel["gridPos"]["y"] += delta
    if is_row(panel) and panel.get("collapsed"):
        for nested in panel.get("panels") or []:
            if isinstance(nested.get("gridPos", {}).get("y"), int):
                nested["gridPos"]["y"] += delta


class GridLine:
    """Repeat blocks rebuilt on one stretch of the grid, such as sources side by side.

    Content below the line moves by the growth of the whole line, not by the
    sum of its blocks. ``moved`` keeps how far each panel has been moved since
    the line started, so positions can be read in the line's own coordinates.
    Panels pushed down by an earlier block and later overlapped by a taller
    neighbour become part of the line and push further content with them.
    """

    def __init__(self) -> None:
        self.old_bottom: Optional[int] = None
        self.new_bottom: Optional[int] = None
        self.moved: Dict[int, int] = {}

    def origin_y(self, panel: dict) -> int:
        return panel["gridPos"]["y"] - self.moved.get(id(panel), 0)

    def origin_bottom(self, panels: Iterable[dict]) -> int:
        return max(self.origin_y(panel) + panel["gridPos"]["h"] for panel in panels)

    def holds(self, panel: dict) -> bool:
        return self.old_bottom is not None and self.origin_y(panel) < self.old_bottom

    def restart(self) -> None:
        self.old_bottom = None
        self.new_bottom = None
        self.moved.clear()

    def grow(self, old_bottom: int, new_bottom: int, panels: Collection[dict]) -> int:
        """Adds a rebuilt block spanning ``old_bottom`` -> ``new_bottom``.

        ``panels`` are the panels no block has placed yet; those at or below
        the line are moved, in place. Returns the number of moved panels.
        """
        panels = [panel for panel in panels if _positioned(panel)]
        if self.old_bottom is None:
            self.old_bottom, self.new_bottom = old_bottom, new_bottom
        else:
            self.old_bottom = max(self.old_bottom, old_bottom)
            self.new_bottom = max(self.new_bottom, new_bottom)

        pushed = True
        while pushed:
            pushed = False
            for panel in panels:
                if not self.moved.get(id(panel)) or self.origin_y(panel) >= self.old_bottom:
                    continue
                origin = self.origin_bottom([panel])
                current = panel["gridPos"]["y"] + panel["gridPos"]["h"]
                if origin > self.old_bottom or current > self.new_bottom:
                    self.old_bottom = max(self.old_bottom, origin)
                    self.new_bottom = max(self.new_bottom, current)
                    pushed = True

        offset = self.new_bottom - self.old_bottom
        moved = 0
        for panel in panels:
            if self.origin_y(panel) < self.old_bottom:
                continue
            step = offset - self.moved.get(id(panel), 0)
            if step:
                _move(panel, step)
                self.moved[id(panel)] = offset
                moved += 1
        return moved
