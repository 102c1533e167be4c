"""Screen geometry of the droppable columns."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Rect:
    """Axis-aligned viewport rectangle in pointer coordinates."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x < self.right and self.top <= y < self.bottom


class DropZoneLayout:
    """Registry of column viewports, in column order, used for hit testing."""

    def __init__(self) -> None:
        self._zones: dict[str, Rect] = {}

    def place(self, list_id: str, rect: Rect) -> None:
        self._zones[list_id] = rect

    def remove(self, list_id: str) -> None:
        self._zones.pop(list_id, None)

    def clear(self) -> None:
        self._zones.clear()

    def rect(self, list_id: str) -> Optional[Rect]:
        return self._zones.get(list_id)

    def hit_test(self, x: float, y: float) -> Optional[str]:
        """Return the list id whose viewport contains the point, if any."""
        for list_id, rect in self._zones.items():
            if rect.contains(x, y):
                return list_id
        return None

    def __contains__(self, list_id: object) -> bool:
        return list_id in self._zones

    def __len__(self) -> int:
        return len(self._zones)
