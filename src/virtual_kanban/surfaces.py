"""In-memory handle surface.

Stands in for a real UI layer: it keeps one :class:`VisualHandle` per
materialized row and a log of every call, which is enough for the console
renderer and for inspecting render behaviour.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .board.model import Item


@dataclass
class VisualHandle:
    list_id: str
    index: int
    top: float
    item_id: str
    label: str


def _label(payload: Any) -> str:
    if isinstance(payload, dict):
        for key in ("text", "title", "name"):
            if payload.get(key):
                return str(payload[key])
    if payload is None:
        return ""
    return str(payload)


class RecordingSurface:
    def __init__(self, list_id: str) -> None:
        self.list_id = list_id
        self.handles: dict[int, VisualHandle] = {}
        self.calls: list[tuple[str, int]] = []

    def acquire(self, index: int, top_offset: float, item: Item) -> VisualHandle:
        handle = VisualHandle(
            list_id=self.list_id,
            index=index,
            top=top_offset,
            item_id=item.id,
            label=_label(item.payload),
        )
        self.handles[index] = handle
        self.calls.append(("acquire", index))
        return handle

    def release(self, index: int) -> None:
        self.handles.pop(index, None)
        self.calls.append(("release", index))

    def visible(self) -> list[VisualHandle]:
        return [self.handles[i] for i in sorted(self.handles)]

    def handle(self, index: int) -> Optional[VisualHandle]:
        return self.handles.get(index)

    def reset_calls(self) -> None:
        self.calls.clear()
