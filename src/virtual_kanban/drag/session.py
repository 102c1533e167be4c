"""Drag-reorder session engine.

One explicit state machine owns the only drag that can be open on the
board::

    IDLE -> ACTIVE -> (COMMITTING | CANCELLED) -> IDLE

Pointer input arrives as event dataclasses and is routed through
:meth:`DragSessionEngine.handle`.  The engine never mutates the board; it
only produces previews while ACTIVE and a :class:`DropRequest` on release,
which the move coordinator turns into an actual move.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from loguru import logger

from ..board.model import Board
from ..constants import AUTO_SCROLL_MARGIN, PRIMARY_BUTTON
from ..utils import _clamp
from ..viewport.windowing import ViewportWindow
from .layout import DropZoneLayout


class DragState(str, Enum):
    """Lifecycle state of the board-wide drag session."""

    IDLE = "idle"
    ACTIVE = "active"
    COMMITTING = "committing"
    CANCELLED = "cancelled"


# ---------------------------------------------------------------------------
# Input events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PointerSample:
    """One reading from the pointer stream."""

    x: float
    y: float
    buttons: int = PRIMARY_BUTTON
    timestamp: float = 0.0

    @property
    def primary_pressed(self) -> bool:
        return bool(self.buttons & PRIMARY_BUTTON)


@dataclass(frozen=True)
class PointerDown:
    sample: PointerSample


@dataclass(frozen=True)
class PointerMove:
    sample: PointerSample


@dataclass(frozen=True)
class PointerUp:
    sample: PointerSample


@dataclass(frozen=True)
class AbortDrag:
    reason: str = "aborted"


# ---------------------------------------------------------------------------
# Session and outputs
# ---------------------------------------------------------------------------

@dataclass
class DragSession:
    """Transient state of the drag in progress."""

    origin_list_id: str
    origin_index: int
    item_id: str
    pointer_x: float
    pointer_y: float
    grab_offset_x: float = 0.0
    grab_offset_y: float = 0.0
    target_list_id: Optional[str] = None
    insertion_index: Optional[int] = None
    auto_scroll: int = 0  # -1 up, 0 idle, 1 down
    started_at: float = 0.0
    samples: int = 0

    @property
    def clone_position(self) -> tuple[float, float]:
        """Top-left corner for a floating clone that follows the pointer."""
        return self.pointer_x - self.grab_offset_x, self.pointer_y - self.grab_offset_y


@dataclass(frozen=True)
class Preview:
    """Drop indicator request; ``target_list_id=None`` clears it."""

    target_list_id: Optional[str]
    insertion_index: Optional[int]


@dataclass(frozen=True)
class DropRequest:
    """Terminal output of a session that ended over a valid target."""

    origin_list_id: str
    origin_index: int
    item_id: str
    target_list_id: str
    insertion_index: int


@dataclass(frozen=True)
class DragResult:
    """What a single event did to the session."""

    state: DragState
    preview: Optional[Preview] = None
    drop: Optional[DropRequest] = None
    ignored: bool = False
    reason: Optional[str] = None


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class DragSessionEngine:
    """Track at most one drag across every list on the board.

    Parameters
    ----------
    board:
        Read-only view of the ordered lists; used for index math only.
    layout:
        Column viewports for resolving the list under the pointer.
    windows:
        Per-list :class:`ViewportWindow`, for scroll offsets and row height.
    auto_scroll_margin:
        Width of the band along a viewport's top and bottom edges that
        requests auto-scrolling.
    """

    def __init__(
        self,
        board: Board,
        layout: DropZoneLayout,
        windows: Mapping[str, ViewportWindow],
        *,
        auto_scroll_margin: float = AUTO_SCROLL_MARGIN,
    ) -> None:
        self.board = board
        self.layout = layout
        self.windows = windows
        self.auto_scroll_margin = auto_scroll_margin
        self.state = DragState.IDLE
        self.session: Optional[DragSession] = None
        self.last_outcome: Optional[DragState] = None
        self._last_sample: Optional[PointerSample] = None

    @property
    def is_active(self) -> bool:
        return self.state == DragState.ACTIVE

    # -- dispatch -----------------------------------------------------------

    def handle(self, event: Any) -> DragResult:
        if isinstance(event, PointerDown):
            return self.begin(event.sample)
        if isinstance(event, PointerMove):
            return self.move(event.sample)
        if isinstance(event, PointerUp):
            return self.release(event.sample)
        if isinstance(event, AbortDrag):
            return self.abort(event.reason)
        return DragResult(self.state, ignored=True, reason=f"unknown event {type(event).__name__}")

    # -- transitions --------------------------------------------------------

    def begin(self, sample: PointerSample) -> DragResult:
        """IDLE -> ACTIVE on a primary press over an item."""
        if self.state != DragState.IDLE:
            # drags are exclusive; a second press is dropped, not queued
            return DragResult(self.state, ignored=True, reason="drag already in progress")
        if not sample.primary_pressed:
            return DragResult(self.state, ignored=True, reason="not a primary press")

        list_id = self.layout.hit_test(sample.x, sample.y)
        if list_id is None or list_id not in self.windows or not self.board.has_list(list_id):
            return DragResult(self.state, ignored=True, reason="no list under pointer")
        window = self.windows[list_id]
        rect = self.layout.rect(list_id)
        if rect is None:
            return DragResult(self.state, ignored=True, reason="no list under pointer")
        content_y = sample.y - rect.top + window.scroll_offset
        index = window.index_at(content_y)
        item = self.board.item_at(list_id, index)
        if item is None:
            return DragResult(self.state, ignored=True, reason="no item under pointer")

        self.session = DragSession(
            origin_list_id=list_id,
            origin_index=index,
            item_id=item.id,
            pointer_x=sample.x,
            pointer_y=sample.y,
            grab_offset_x=sample.x - rect.left,
            grab_offset_y=content_y - window.top_of(index),
            started_at=sample.timestamp,
        )
        self.state = DragState.ACTIVE
        logger.debug("Drag started: {} from {}[{}]", item.id, list_id, index)
        return DragResult(self.state, preview=self._track(sample))

    def move(self, sample: PointerSample) -> DragResult:
        if self.state != DragState.ACTIVE or self.session is None:
            return DragResult(self.state, ignored=True, reason="no active drag")
        if not self._still_in_origin():
            return self.abort("dragged item left its origin list")
        return DragResult(self.state, preview=self._track(sample))

    def reevaluate(self) -> DragResult:
        """Recompute against the last sample, e.g. after the target scrolled."""
        if self._last_sample is None:
            return DragResult(self.state, ignored=True, reason="no sample yet")
        return self.move(self._last_sample)

    def release(self, sample: PointerSample) -> DragResult:
        """ACTIVE -> COMMITTING (valid target) or CANCELLED (none)."""
        if self.state != DragState.ACTIVE or self.session is None:
            return DragResult(self.state, ignored=True, reason="no active drag")
        if not self._still_in_origin():
            return self.abort("dragged item left its origin list")
        self._track(sample)
        session = self.session
        if session.target_list_id is None or session.insertion_index is None:
            return self._cancel("released outside any list")

        self.state = DragState.COMMITTING
        drop = DropRequest(
            origin_list_id=session.origin_list_id,
            origin_index=session.origin_index,
            item_id=session.item_id,
            target_list_id=session.target_list_id,
            insertion_index=session.insertion_index,
        )
        logger.debug(
            "Drag committing: {} {}[{}] -> {}[{}]",
            drop.item_id,
            drop.origin_list_id,
            drop.origin_index,
            drop.target_list_id,
            drop.insertion_index,
        )
        return DragResult(self.state, drop=drop)

    def complete(self, *, cancelled: bool = False) -> None:
        """COMMITTING -> IDLE once the coordinator is done with the drop.

        Pass ``cancelled=True`` when the coordinator refused a stale drop so
        :attr:`last_outcome` reads CANCELLED.
        """
        if self.state != DragState.COMMITTING:
            return
        self.last_outcome = DragState.CANCELLED if cancelled else DragState.COMMITTING
        self._reset()

    def abort(self, reason: str = "aborted") -> DragResult:
        if self.state != DragState.ACTIVE:
            return DragResult(self.state, ignored=True, reason="no active drag")
        return self._cancel(reason)

    # -- internals ----------------------------------------------------------

    def _cancel(self, reason: str) -> DragResult:
        item_id = self.session.item_id if self.session else None
        self.state = DragState.CANCELLED
        self.last_outcome = DragState.CANCELLED
        logger.debug("Drag cancelled ({}): {}", item_id, reason)
        self._reset()
        return DragResult(DragState.CANCELLED, reason=reason)

    def _reset(self) -> None:
        self.session = None
        self._last_sample = None
        self.state = DragState.IDLE

    def _still_in_origin(self) -> bool:
        session = self.session
        if session is None or not self.board.has_list(session.origin_list_id):
            return False
        return self.board.index_of(session.origin_list_id, session.item_id) is not None

    def _track(self, sample: PointerSample) -> Optional[Preview]:
        """Update pointer fields; return a preview only if target/index changed."""
        session = self.session
        if session is None:
            return None
        self._last_sample = sample
        session.pointer_x = sample.x
        session.pointer_y = sample.y
        session.samples += 1

        target = self.layout.hit_test(sample.x, sample.y)
        if target is not None and (target not in self.windows or not self.board.has_list(target)):
            target = None

        index: Optional[int] = None
        auto_scroll = 0
        if target is not None:
            index = self.insertion_index_for(target, sample.y)
            auto_scroll = self._auto_scroll_direction(target, sample.y)
        session.auto_scroll = auto_scroll

        if target == session.target_list_id and index == session.insertion_index:
            return None
        session.target_list_id = target
        session.insertion_index = index
        logger.trace("Drag preview: {}[{}]", target, index)
        return Preview(target, index)

    def insertion_index_for(self, list_id: str, pointer_y: float) -> int:
        """Insertion index under *pointer_y*, with the dragged item excluded.

        The dragged item does not count against its own list, so hovering
        over the slot it came from yields the index it started at.
        """
        session = self.session
        window = self.windows[list_id]
        rect = self.layout.rect(list_id)
        if rect is None:
            raise ValueError(f"List {list_id!r} has no placed viewport")
        content_top = rect.top - window.scroll_offset
        raw = math.floor((pointer_y - content_top) / window.item_height)
        length = len(self.board.get_list(list_id))
        if session is not None and list_id == session.origin_list_id:
            length -= 1
        return _clamp(raw, 0, max(0, length))

    def _auto_scroll_direction(self, list_id: str, pointer_y: float) -> int:
        rect = self.layout.rect(list_id)
        if rect is None:
            return 0
        if pointer_y < rect.top + self.auto_scroll_margin:
            return -1
        if pointer_y > rect.bottom - self.auto_scroll_margin:
            return 1
        return 0
