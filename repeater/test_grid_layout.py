import pytest

from common.grafana_model import GridPos
from repeater.grid_layout import (
    GridLine,
    group_bottom,
    layout_horizontal,
    layout_row_group,
    layout_vertical,
)


@pytest.mark.parametrize(
    "count,widths,xs",
    [
        (1, [24], [0]),
        (2, [12, 12], [0, 12]),
        (3, [8, 8, 8], [0, 8, 16]),
        (5, [4] * 5, [0, 4, 8, 12, 16]),
        (7, [3] * 7, [0, 3, 6, 9, 12, 15, 18]),
    ],
    ids=["one", "two", "three", "remainder-4", "remainder-3"],
)
def test_horizontal_splits_full_width(count, widths, xs):
    positions = layout_horizontal(GridPos(x=0, y=3, w=24, h=2), count)

    assert [p["w"] for p in positions] == widths
    assert [p["x"] for p in positions] == xs
    assert {p["y"] for p in positions} == {3}
    assert {p["h"] for p in positions} == {2}


def test_horizontal_wraps_when_min_width_does_not_fit():
    positions = layout_horizontal(GridPos(x=0, y=0, w=24, h=3), 4, min_width=10)

    assert [(p["x"], p["y"], p["w"]) for p in positions] == [
        (0, 0, 10),
        (10, 0, 10),
        (0, 3, 10),
        (10, 3, 10),
    ]


def test_horizontal_of_nothing_is_empty():
    assert layout_horizontal(GridPos(x=0, y=0, w=24, h=3), 0) == []


def test_vertical_keeps_column():
    positions = layout_vertical(GridPos(x=5, y=1, w=8, h=2), 3)

    assert positions == [
        {"x": 5, "y": 1, "w": 8, "h": 2},
        {"x": 5, "y": 3, "w": 8, "h": 2},
        {"x": 5, "y": 5, "w": 8, "h": 2},
    ]


def test_row_group_offsets():
    assert layout_row_group(4, 3, 3) == [4, 7, 10]


def test_group_bottom_is_lowest_edge():
    panels = [
        {"gridPos": {"x": 0, "y": 0, "w": 24, "h": 1}},
        {"gridPos": {"x": 0, "y": 1, "w": 12, "h": 4}},
        {"gridPos": {"x": 12, "y": 2, "w": 12, "h": 1}},
    ]
    assert group_bottom(panels) == 5


def test_grid_line_moves_panels_below_and_nested():
    above = {"id": 1, "gridPos": {"x": 0, "y": 0, "w": 24, "h": 2}}
    below = {"id": 2, "gridPos": {"x": 0, "y": 4, "w": 24, "h": 2}}
    collapsed = {
        "id": 3,
        "type": "row",
        "collapsed": True,
        "gridPos": {"x": 0, "y": 2, "w": 24, "h": 1},
        "panels": [{"id": 4, "gridPos": {"x": 0, "y": 3, "w": 6, "h": 2}}],
    }
    line = GridLine()

    moved = line.grow(2, 5, [above, below, collapsed])

    assert moved == 2
    assert above["gridPos"]["y"] == 0
    assert below["gridPos"]["y"] == 7
    assert collapsed["gridPos"]["y"] == 5
    assert collapsed["panels"][0]["gridPos"]["y"] == 6


def test_grid_line_moves_up():
    panel = {"gridPos": {"x": 0, "y": 6, "w": 24, "h": 2}}

    GridLine().grow(6, 4, [panel])

    assert panel["gridPos"]["y"] == 4


def test_grid_line_side_by_side_blocks_move_content_once():
    below = {"id": 3, "gridPos": {"x": 0, "y": 2, "w": 24, "h": 2}}
    neighbour = {"id": 2, "gridPos": {"x": 12, "y": 0, "w": 12, "h": 2}}
    line = GridLine()

    line.grow(2, 4, [neighbour, below])
    assert line.holds(neighbour)
    line.grow(2, 4, [below])

    assert neighbour["gridPos"]["y"] == 0
    assert below["gridPos"]["y"] == 4


def test_grid_line_taller_neighbour_takes_the_line_bottom():
    below = {"id": 3, "gridPos": {"x": 0, "y": 4, "w": 24, "h": 2}}
    line = GridLine()

    line.grow(2, 4, [below])
    assert below["gridPos"]["y"] == 6
    line.grow(4, 4, [below])

    assert below["gridPos"]["y"] == 4


def test_grid_line_pushed_panel_pushes_content_below_it():
    pushed = {"id": 3, "gridPos": {"x": 0, "y": 2, "w": 12, "h": 2}}
    below = {"id": 4, "gridPos": {"x": 0, "y": 4, "w": 24, "h": 2}}
    line = GridLine()

    line.grow(2, 4, [pushed, below])
    line.grow(4, 4, [pushed, below])

    assert pushed["gridPos"]["y"] == 4
    assert below["gridPos"]["y"] == 6


def test_grid_line_restart_forgets_moves():
    panel = {"gridPos": {"x": 0, "y": 2, "w": 24, "h": 2}}
    line = GridLine()
    line.grow(2, 4, [panel])

    line.restart()

    assert line.origin_y(panel) == 4
    assert not line.holds(panel)


def test_grid_line_skips_panels_without_position():
    panel = {"id": 1, "type": "text"}

    assert GridLine().grow(0, 2, [panel]) == 0
    assert "gridPos" not in panel


@pytest.mark.parametrize(
    "grid_pos",
    [None, {"x": 0, "y": 0, "h": 2}, {"x": 0, "y": 0, "w": "24", "h": 2}, {"x": 0, "y": 0, "w": 0, "h": 2}],
    ids=["missing", "no-width", "string-width", "empty"],
)
def test_grid_pos_fails_fast_on_malformed_geometry(grid_pos):
    with pytest.raises(ValueError):
        GridPos.from_panel({"id": 1, "gridPos": grid_pos})
