from typing import Iterable, Iterator


def iter_panels(panels: Iterable[dict]) -> Iterator[dict]:
    """Yields every panel of the tree, descending into nested row panels."""
    for panel in panels:
        yield panel
        nested = panel.get("panels")
        if nested:
            yield from iter_panels(nested)


class IdAllocator:
    def __init__(self, next_id: int = 1):
        self._next_id = next_id

    @classmethod
    def from_panels(cls, panels: Iterable[dict]) -> "IdAllocator":
        highest = 0
        for panel in iter_panels(panels):
            panel_id = panel.get("id")
            if isinstance(panel_id, int) and panel_id > highest:
                highest = panel_id
        return cls(highest + 1)

    def next_id(self) -> int:
        panel_id = self._next_id
        self._next_id += 1
        return panel_id
