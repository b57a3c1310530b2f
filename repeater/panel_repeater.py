from copy import deepcopy
from typing import List

from common.grafana_model import GridPos
from .grid_layout import layout_horizontal, layout_vertical
from .reconciliation import InstancePool, derive_instance

REPEAT_DIRECTION_HORIZONTAL = "h"
REPEAT_DIRECTION_VERTICAL = "v"


def instance_positions(source: dict, count: int) -> List[dict]:
    grid_pos = GridPos.from_panel(source)
    if source.get("repeatDirection") == REPEAT_DIRECTION_VERTICAL:
        return layout_vertical(grid_pos, count)
    return layout_horizontal(grid_pos, count, source.get("minSpan"))


def repeat_panel(
    source: dict,
    variable_name: str,
    values: List[dict],
    pool: InstancePool,
    allocator,
) -> List[dict]:
    """Expands a leaf panel into one instance per selected value.

    Returns the contiguous block ``[source, instance 1, ...]``. The source is
    instance 0; existing instances are reused by position and re-derived
    from the source. Instances left unclaimed in ``pool`` are garbage.
    """
    if not values:
        source.pop("scopedVars", None)
        return [source]

    positions = instance_positions(source, len(values))
    block = []
    for index, value in enumerate(values):
        if index == 0:
            instance = source
        else:
            group = pool.claim(source["id"], index)
            instance = derive_instance(
                source, group.panel if group else None, allocator.next_id
            )
        instance["scopedVars"] = {variable_name: deepcopy(value)}
        instance["gridPos"] = {**instance.get("gridPos", {}), **positions[index]}
        block.append(instance)
    return block
