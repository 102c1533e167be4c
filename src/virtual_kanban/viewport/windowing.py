"""Viewport windowing: map a scroll position to the rows worth materializing.

Only rows that intersect the viewport, plus a buffer on either side, are
ever materialized.  The buffer is at least one full viewport tall so the
first paint already covers the screen without waiting for a scroll event.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Optional

from loguru import logger

from ..constants import DEFAULT_BUFFER_ITEMS, DEFAULT_ITEM_HEIGHT, DEFAULT_VIEWPORT_HEIGHT


class GeometryError(ValueError):
    """Caller supplied geometry that would corrupt index math."""


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _check_number(name: str, value: float, *, positive: bool = False) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise GeometryError(f"{name} must be a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise GeometryError(f"{name} must be finite, got {value}")
    if positive and value <= 0:
        raise GeometryError(f"{name} must be positive, got {value}")
    if value < 0:
        raise GeometryError(f"{name} must be non-negative, got {value}")


def _check_count(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise GeometryError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise GeometryError(f"{name} must be non-negative, got {value}")


# ---------------------------------------------------------------------------
# Pure range math
# ---------------------------------------------------------------------------

def scroll_extent(item_count: int, item_height: float) -> float:
    """Total scrollable height reported to the host surface."""
    _check_count("item_count", item_count)
    _check_number("item_height", item_height, positive=True)
    return item_count * item_height


def compute_visible_range(
    item_count: int,
    scroll_offset: float,
    viewport_height: float,
    item_height: float,
    buffer_count: int,
) -> tuple[int, int]:
    """Return ``(start, end)`` (end exclusive) of rows to materialize.

    Args:
        item_count: Number of items in the list.
        scroll_offset: Distance scrolled from the top of the content.
        viewport_height: Visible height of the scroll container.
        item_height: Fixed height of one row.
        buffer_count: Extra rows to keep above and below the viewport.

    Returns:
        A range clamped to ``[0, item_count]``; ``(0, 0)`` for an empty list.

    Raises:
        GeometryError: If any argument is negative, non-finite, or fractional
            where a count is expected, or a height is not positive.
    """
    _check_count("item_count", item_count)
    _check_number("scroll_offset", scroll_offset)
    _check_number("viewport_height", viewport_height, positive=True)
    _check_number("item_height", item_height, positive=True)
    _check_count("buffer_count", buffer_count)

    if item_count == 0:
        return 0, 0

    raw_start = math.floor(scroll_offset / item_height)
    raw_visible = math.ceil(viewport_height / item_height)
    effective_buffer = max(buffer_count, raw_visible)

    start = max(0, raw_start - effective_buffer)
    end = min(item_count, math.ceil((scroll_offset + viewport_height) / item_height) + effective_buffer)
    return min(start, end), end


# ---------------------------------------------------------------------------
# Per-list window
# ---------------------------------------------------------------------------

@dataclass
class WindowState:
    """Snapshot of one list's viewport."""

    scroll_offset: float
    viewport_height: float
    item_height: float
    buffer_count: int
    item_count: int
    extent: float
    materialized_indices: frozenset[int] = field(default_factory=frozenset)


ExtentListener = Callable[[str, float], None]


class ViewportWindow:
    """Scroll position and extent bookkeeping for a single list.

    The extent is recomputed synchronously on :meth:`sync_item_count`, before
    the scroll offset is re-clamped and before any range is computed from it.
    """

    def __init__(
        self,
        list_id: str,
        *,
        item_count: int = 0,
        item_height: float = DEFAULT_ITEM_HEIGHT,
        viewport_height: float = DEFAULT_VIEWPORT_HEIGHT,
        buffer_count: int = DEFAULT_BUFFER_ITEMS,
        scroll_offset: float = 0,
        on_extent_change: Optional[ExtentListener] = None,
    ) -> None:
        _check_number("item_height", item_height, positive=True)
        _check_number("viewport_height", viewport_height, positive=True)
        _check_count("buffer_count", buffer_count)
        _check_number("scroll_offset", scroll_offset)
        self.list_id = list_id
        self.item_height = item_height
        self.viewport_height = viewport_height
        self.buffer_count = buffer_count
        self._on_extent_change = on_extent_change
        self.item_count = 0
        self.extent = 0.0
        self.scroll_offset = 0.0
        self.sync_item_count(item_count)
        self.set_scroll_offset(scroll_offset)

    # -- geometry -----------------------------------------------------------

    @property
    def max_scroll_offset(self) -> float:
        return max(0.0, self.extent - self.viewport_height)

    def sync_item_count(self, item_count: int) -> bool:
        """Record a new item count; return True if it differs from the last one."""
        extent = scroll_extent(item_count, self.item_height)
        changed = item_count != self.item_count
        self.item_count = item_count
        if extent != self.extent:
            self.extent = extent
            logger.debug("List {} extent -> {} ({} items)", self.list_id, extent, item_count)
            if self._on_extent_change is not None:
                self._on_extent_change(self.list_id, extent)
        # keep the current position unless the content got shorter than it
        self.scroll_offset = min(self.scroll_offset, self.max_scroll_offset)
        return changed

    def set_scroll_offset(self, offset: float) -> float:
        _check_number("scroll_offset", offset)
        self.scroll_offset = min(float(offset), self.max_scroll_offset)
        return self.scroll_offset

    def scroll_by(self, delta: float) -> float:
        """Scroll relatively, clamped to the content; return the applied delta."""
        if not math.isfinite(delta):
            raise GeometryError(f"scroll delta must be finite, got {delta}")
        before = self.scroll_offset
        self.scroll_offset = max(0.0, min(before + delta, self.max_scroll_offset))
        return self.scroll_offset - before

    def set_viewport_height(self, height: float) -> None:
        _check_number("viewport_height", height, positive=True)
        self.viewport_height = height
        self.scroll_offset = min(self.scroll_offset, self.max_scroll_offset)

    # -- ranges -------------------------------------------------------------

    def visible_range(self) -> tuple[int, int]:
        return compute_visible_range(
            self.item_count,
            self.scroll_offset,
            self.viewport_height,
            self.item_height,
            self.buffer_count,
        )

    def top_of(self, index: int) -> float:
        return index * self.item_height

    def index_at(self, content_y: float) -> int:
        """Row index under a content-relative y coordinate (unclamped)."""
        return math.floor(content_y / self.item_height)

    def state(self, materialized: frozenset[int] = frozenset()) -> WindowState:
        return WindowState(
            scroll_offset=self.scroll_offset,
            viewport_height=self.viewport_height,
            item_height=self.item_height,
            buffer_count=self.buffer_count,
            item_count=self.item_count,
            extent=self.extent,
            materialized_indices=materialized,
        )

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return (
            f"ViewportWindow(list_id={self.list_id!r}, items={self.item_count}, "
            f"offset={self.scroll_offset}, viewport={self.viewport_height})"
        )
