"""Positional reconciliation of repeat instances.

The instances a source produced on an earlier pass are matched to the
instances it needs now by position: the first existing instance is index 1,
the second index 2 and so on. Matched instances keep their ``id`` and are
overwritten from the source, missing ones are created, leftovers are garbage.
"""
from collections import defaultdict
from copy import deepcopy
from typing import Collection, Dict, List, Optional

# Never copied from a source onto its instances.
INSTANCE_OWNED_FIELDS = frozenset(("id", "repeat", "repeatPanelId", "scopedVars"))


class InstanceGroup:
    """An instance materialized by an earlier pass.

    For a row instance ``members`` holds the member instances that were
    generated with it (inline followers or nested panels).
    """

    def __init__(self, panel: dict, members: Optional[List[dict]] = None):
        self.panel = panel
        self.members = members if members is not None else []

    def __iter__(self):
        yield self.panel
        yield from self.members

    def __repr__(self):
        return f"InstanceGroup(id={self.panel.get('id')}, members={len(self.members)})"


class InstancePool:
    def __init__(self):
        self._groups: Dict[int, List[InstanceGroup]] = defaultdict(list)
        self._claimed: Dict[int, int] = defaultdict(int)

    def add(self, source_id: int, group: InstanceGroup) -> None:
        self._groups[source_id].append(group)

    def has_instances(self, source_id: int) -> bool:
        return bool(self._groups.get(source_id))

    def existing(self, source_id: int) -> List[InstanceGroup]:
        return list(self._groups.get(source_id, []))

    def claim(self, source_id: int, index: int) -> Optional[InstanceGroup]:
        """Existing instance for 1-based ``index`` of ``source_id``, if any."""
        groups = self._groups.get(source_id, [])
        if index < 1 or index > len(groups):
            return None
        self._claimed[source_id] = max(self._claimed[source_id], index)
        return groups[index - 1]

    def release(self, source_id: int) -> List[InstanceGroup]:
        """Drops the unclaimed instances of ``source_id`` and returns them."""
        groups = self._groups.get(source_id, [])
        claimed = self._claimed.get(source_id, 0)
        stale = groups[claimed:]
        del groups[claimed:]
        return stale

    def release_unclaimed(self) -> List[InstanceGroup]:
        stale = []
        for source_id in list(self._groups):
            stale.extend(self.release(source_id))
        return stale


def derive_instance(
    source: dict,
    existing: Optional[dict],
    new_id,
    exclude: Collection[str] = (),
    by_row: bool = False,
) -> dict:
    """Re-derives an instance payload from ``source``.

    ``existing`` is overwritten in place and keeps its ``id``; without one a
    fresh dict is built with ``new_id()``. Only ``id`` survives from the old
    payload; ``scopedVars`` and ``gridPos`` are assigned by the caller.
    """
    payload = {
        key: deepcopy(value)
        for key, value in source.items()
        if key not in INSTANCE_OWNED_FIELDS and key not in exclude
    }
    if existing is None:
        instance = {"id": new_id()}
    else:
        instance = existing
        panel_id = instance["id"]
        instance.clear()
        instance["id"] = panel_id
    instance.update(payload)
    instance["repeatPanelId"] = source["id"]
    if by_row:
        instance["repeatedByRow"] = True
    else:
        instance.pop("repeatedByRow", None)
    return instance


def match_member(old_members: List[dict], source_member_id) -> Optional[dict]:
    """Takes the first old member instance generated from ``source_member_id``."""
    for index, member in enumerate(old_members):
        if member.get("repeatPanelId") == source_member_id:
            return old_members.pop(index)
    return None
