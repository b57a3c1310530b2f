import logging
from functools import partial
from typing import Callable, Dict, List, Optional

from common.grafana_model import GridPos, is_row
from common.variables import VariableResolver
from .grid_layout import GridLine, group_bottom
from .id_allocator import IdAllocator, iter_panels
from .panel_repeater import repeat_panel
from .reconciliation import InstanceGroup, InstancePool
from .repeater import Repeater, RepeatError
from .row_repeater import repeat_row, row_members


class _Section:
    """A row of the flat panel list with the panels that follow it.

    ``members`` are the authored panels directly after the row, ``trailing``
    the authored panels found after a generated row instance of it. The
    section without a row holds the panels above the first row.
    """

    def __init__(self, row: Optional[dict] = None):
        self.row = row
        self.members: List[dict] = []
        self.trailing: List[dict] = []


class RepeatProcessor(Repeater):
    """Expands repeated panels and rows of a dashboard into concrete instances."""

    def __init__(
        self,
        *,
        error_manager=None,
        global_shared_state: Optional[dict] = None,
        log_level=logging.INFO,
    ) -> None:
        super().__init__(__name__, global_shared_state, log_level, error_manager)

    def process_repeats(self, dashboard: dict, id_allocator=None) -> dict:
        resolver = VariableResolver.from_dashboard(dashboard)
        return self._run(dashboard, resolver, id_allocator, report_unknown=True)

    def clean_up_repeats(self, dashboard: dict, id_allocator=None) -> dict:
        """Removes every generated instance, leaving the bare repeat sources."""
        return self._run(dashboard, VariableResolver([]), id_allocator)

    def _run(self, dashboard, resolver, id_allocator, report_unknown=False) -> dict:
        summary = {"sources": 0, "instances": 0, "created": 0, "removed": 0}
        if dashboard.get("snapshot"):
            self._logger.debug(f'Skipping snapshot dashboard {dashboard.get("title")}')
            return summary
        panels = dashboard.get("panels")
        if not panels:
            return summary

        before = {id(panel) for panel in iter_panels(panels)}
        sections, pool, orphans = self._parse(panels)
        plan = self._plan(sections, pool)
        try:
            self._validate(plan, pool)
        except ValueError as ex:
            raise RepeatError(ex) from ex

        for orphan in orphans:
            self._error_manager.add_error(
                f"Dropping panel {orphan.get('id')} generated by a row repeat it no longer belongs to",
                error_level="WARN",
                panel=orphan,
            )

        if id_allocator is None:
            id_allocator = IdAllocator.from_panels(panels)
        # panels not yet placed by a repeat block of this pass
        live = {id(panel): panel for panel in panels}
        for orphan in orphans:
            live.pop(id(orphan), None)
        line = GridLine()

        result = []
        for step, panel, inline in plan:
            if step == "keep":
                result.append(panel)
                continue
            summary["sources"] += 1 if panel.get("repeat") else 0
            values = self._selected_values(panel, resolver, report_unknown)
            if step == "row":
                build = partial(
                    repeat_row, panel, inline, panel.get("repeat"), values, pool, id_allocator
                )
            else:
                build = partial(
                    repeat_panel, panel, panel.get("repeat"), values, pool, id_allocator
                )
            result.extend(self._expand(panel, inline, pool, live, line, build))

        for group in pool.release_unclaimed():
            self._logger.debug(
                f"Removing panel {group.panel.get('id')}, its repeat source is gone"
            )

        panels[:] = result

        after = {id(panel) for panel in iter_panels(panels)}
        summary["created"] = len(after - before)
        summary["removed"] = len(before - after)
        summary["instances"] = sum(
            1 for panel in iter_panels(panels) if panel.get("repeatPanelId") is not None
        )
        self._logger.debug(f"Processed repeats: {summary}")
        return summary

    def _expand(
        self,
        source: dict,
        inline: List[dict],
        pool: InstancePool,
        live: Dict[int, dict],
        line: GridLine,
        build: Callable[[], List[dict]],
    ) -> List[dict]:
        old_block = [source, *inline]
        for group in pool.existing(source["id"]):
            old_block.append(group.panel)
            if not group.panel.get("collapsed"):
                old_block.extend(group.members)
        if not line.holds(source):
            line.restart()
        old_bottom = line.origin_bottom(old_block)

        block = build()
        pool.release(source["id"])

        for panel in old_block:
            live.pop(id(panel), None)

        new_bottom = group_bottom(block)
        moved = line.grow(old_bottom, new_bottom, list(live.values()))
        if moved:
            self._logger.debug(
                f"Repeat of panel {source.get('id')} moved {moved} panels below y={line.old_bottom}"
            )
        return block

    def _selected_values(self, source, resolver, report_unknown) -> List[dict]:
        name = source.get("repeat")
        if not name:
            return []
        if report_unknown and name not in resolver:
            self._error_manager.add_error(
                f"Repeat variable {name!r} not found, panel is not repeated",
                error_level="INFO",
                panel=source,
            )
        return resolver.selected_options(name)

    @staticmethod
    def _is_source(panel: dict, pool: InstancePool) -> bool:
        return bool(panel.get("repeat")) or pool.has_instances(panel.get("id"))

    def _parse(self, panels: List[dict]):
        pool = InstancePool()
        sections = [_Section()]
        orphans = []
        group = None
        for panel in panels:
            source_id = panel.get("repeatPanelId")
            if is_row(panel):
                if source_id is not None:
                    nested = list(panel.get("panels") or []) if panel.get("collapsed") else []
                    group = InstanceGroup(panel, nested)
                    pool.add(source_id, group)
                else:
                    sections.append(_Section(panel))
                    group = None
            elif panel.get("repeatedByRow"):
                if group is not None and not group.panel.get("collapsed"):
                    group.members.append(panel)
                else:
                    orphans.append(panel)
            elif source_id is not None:
                pool.add(source_id, InstanceGroup(panel))
            elif group is not None:
                sections[-1].trailing.append(panel)
            else:
                sections[-1].members.append(panel)
        return sections, pool, orphans

    def _plan(self, sections: List[_Section], pool: InstancePool) -> list:
        plan = []
        for section in sections:
            row = section.row
            loose = section.members + section.trailing
            if row is not None:
                if self._is_source(row, pool):
                    if row.get("collapsed"):
                        plan.append(("row", row, []))
                    else:
                        plan.append(("row", row, section.members))
                        loose = section.trailing
                else:
                    plan.append(("keep", row, None))
            for panel in loose:
                if self._is_source(panel, pool):
                    plan.append(("panel", panel, []))
                else:
                    plan.append(("keep", panel, None))
        return plan

    def _validate(self, plan: list, pool: InstancePool) -> None:
        for step, panel, inline in plan:
            if step == "keep":
                continue
            checked = [panel]
            if step == "row":
                checked.extend(inline)
                checked.extend(row_members(panel, inline))
            for group in pool.existing(panel.get("id")):
                checked.append(group.panel)
                if not group.panel.get("collapsed"):
                    checked.extend(group.members)
            for item in checked:
                if isinstance(item.get("id"), bool) or not isinstance(item.get("id"), int):
                    raise ValueError(
                        f"Panel {item.get('title', '')!r} taking part in a repeat has no integer id"
                    )
                GridPos.from_panel(item)
