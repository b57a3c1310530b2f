from copy import deepcopy
from typing import List

from common.grafana_model import GridPos
from .grid_layout import group_bottom, layout_row_group
from .reconciliation import InstancePool, derive_instance, match_member


def row_members(row: dict, inline_members: List[dict]) -> List[dict]:
    if row.get("collapsed"):
        return row.get("panels") or []
    return inline_members


def row_group_height(row: dict, inline_members: List[dict]) -> int:
    """Span of the row and its inline members before repetition.

    Nested panels of a collapsed row take no room on the grid.
    """
    row_pos = GridPos.from_panel(row)
    if row.get("collapsed") or not inline_members:
        return row_pos.h
    return max(row_pos.bottom, group_bottom(inline_members)) - row_pos.y


def _bind(panels, variable_name, value):
    for panel in panels:
        panel["scopedVars"] = {variable_name: deepcopy(value)}


def repeat_row(
    row: dict,
    inline_members: List[dict],
    variable_name: str,
    values: List[dict],
    pool: InstancePool,
    allocator,
) -> List[dict]:
    """Expands a row and its members into one row group per selected value.

    Rows always repeat vertically, group after group. Returns the flat block:
    for a collapsed row only the row instances (each owning cloned nested
    panels), otherwise each row instance followed by its member instances.
    """
    collapsed = bool(row.get("collapsed"))
    members = row_members(row, inline_members)

    if not values:
        for panel in [row, *members]:
            panel.pop("scopedVars", None)
        return [row] if collapsed else [row, *members]

    row_y = GridPos.from_panel(row).y
    group_ys = layout_row_group(
        row_y, row_group_height(row, inline_members), len(values)
    )

    block = []
    for index, value in enumerate(values):
        if index == 0:
            row_instance, member_instances = row, list(members)
        else:
            group = pool.claim(row["id"], index)
            old_members = list(group.members) if group else []
            row_instance = derive_instance(
                row,
                group.panel if group else None,
                allocator.next_id,
                exclude=("panels",),
            )
            row_instance["gridPos"]["y"] = group_ys[index]

            offset = group_ys[index] - row_y
            member_instances = []
            for member in members:
                instance = derive_instance(
                    member,
                    match_member(old_members, member["id"]),
                    allocator.next_id,
                    by_row=True,
                )
                instance["gridPos"]["y"] += offset
                member_instances.append(instance)

            if collapsed:
                row_instance["panels"] = member_instances
            elif "panels" in row:
                row_instance["panels"] = []

        _bind([row_instance, *member_instances], variable_name, value)
        block.append(row_instance)
        if not collapsed:
            block.extend(member_instances)
    return block
