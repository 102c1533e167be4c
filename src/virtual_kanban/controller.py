"""Board controller: wires windowing, rendering and drag handling together.

The host application feeds it scroll/resize notifications, pointer samples
and one :meth:`BoardController.tick` per animation frame.  Every component
gets the :class:`Board` passed in explicitly; nothing looks up list
membership from ambient state.
"""

from __future__ import annotations

from typing import Callable, Optional

from loguru import logger

from .board.model import Board, Item
from .config import BoardSettings
from .coordinator import CommittedMove, MoveCoordinator, MoveOutcome
from .drag.layout import DropZoneLayout, Rect
from .drag.session import (
    AbortDrag,
    DragResult,
    DragSessionEngine,
    DragState,
    PointerDown,
    PointerMove,
    PointerSample,
    PointerUp,
    Preview,
)
from .events import MoveNotifier, MoveObserver
from .logging_utils import pretty, summarize_diff
from .surfaces import RecordingSurface
from .viewport.frame import FrameScheduler
from .viewport.render_diff import ApplyResult, HandleSurface, RenderDiffTracker
from .viewport.windowing import ViewportWindow, WindowState

SurfaceFactory = Callable[[str], HandleSurface]
PreviewListener = Callable[[Preview], None]
ExtentListener = Callable[[str, float], None]


class BoardController:
    """Drive one board on behalf of a host event loop.

    Parameters
    ----------
    board:
        The ordered collection to display and edit.
    settings:
        Geometry and behaviour; defaults to :class:`BoardSettings()`.
    surface_factory:
        Builds the :class:`HandleSurface` for a list id.  Defaults to an
        in-memory :class:`RecordingSurface`.
    notifier:
        Move notification fan-out; a fresh one is created if omitted.
    on_extent_change:
        Told the new scrollable height of a list whenever its length changes.
    """

    def __init__(
        self,
        board: Board,
        *,
        settings: Optional[BoardSettings] = None,
        surface_factory: Optional[SurfaceFactory] = None,
        notifier: Optional[MoveNotifier] = None,
        on_extent_change: Optional[ExtentListener] = None,
    ) -> None:
        self.settings = settings or BoardSettings()
        self.board = board
        self.layout = DropZoneLayout()
        self.notifier = notifier or MoveNotifier()
        self.surfaces: dict[str, HandleSurface] = {}
        self.windows: dict[str, ViewportWindow] = {}
        self.trackers: dict[str, RenderDiffTracker] = {}
        self._surface_factory: SurfaceFactory = surface_factory or RecordingSurface
        self._on_extent_change = on_extent_change
        self._preview_listeners: list[PreviewListener] = []

        self.scheduler = FrameScheduler(self.recompute, defer=self.settings.defer_to_frame)
        self.drag = DragSessionEngine(
            board,
            self.layout,
            self.windows,
            auto_scroll_margin=self.settings.auto_scroll_margin,
        )
        self.coordinator = MoveCoordinator(board, self.notifier, on_list_changed=self._after_commit)
        self._build()

    # -- setup --------------------------------------------------------------

    def _build(self) -> None:
        for ordered in self.board.lists():
            list_id = ordered.list_id
            self.windows[list_id] = ViewportWindow(
                list_id,
                item_count=len(ordered),
                item_height=self.settings.item_height,
                viewport_height=self.settings.viewport_height,
                buffer_count=self.settings.buffer_items,
                on_extent_change=self._on_extent_change,
            )
            surface = self._surface_factory(list_id)
            self.surfaces[list_id] = surface
            self.trackers[list_id] = RenderDiffTracker(list_id, surface, self.settings.item_height)
            # first paint happens straight away, not on the first scroll
            self.recompute(list_id)

    def _teardown(self) -> None:
        if self.drag.is_active:
            self.abort("board torn down")
        for tracker in self.trackers.values():
            tracker.release_all()
        self.scheduler.discard(list(self.windows))
        self.windows.clear()
        self.trackers.clear()
        self.surfaces.clear()

    def replace_board(self, board: Board) -> None:
        """Swap in new board data and rebuild every column from scratch."""
        self._teardown()
        for list_id in list(self.layout_ids()):
            if not board.has_list(list_id):
                self.layout.remove(list_id)
        self.board = board
        self.drag.board = board
        self.coordinator.board = board
        self._build()
        for list_id in self.layout_ids():
            rect = self.layout.rect(list_id)
            if rect is not None:
                self.windows[list_id].set_viewport_height(rect.height)
                self.recompute(list_id)
        logger.info("Board replaced: {} lists, {} items", len(self.board.list_ids()), len(self.board))

    def destroy(self) -> None:
        self._teardown()
        self.layout.clear()
        self._preview_listeners.clear()

    def layout_ids(self) -> list[str]:
        return [list_id for list_id in self.board.list_ids() if list_id in self.layout]

    # -- observers ----------------------------------------------------------

    def on_preview(self, listener: PreviewListener) -> Callable[[], None]:
        self._preview_listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._preview_listeners:
                self._preview_listeners.remove(listener)

        return _unsubscribe

    def on_move(self, observer: MoveObserver) -> Callable[[], None]:
        return self.notifier.subscribe(observer)

    def _emit_preview(self, preview: Optional[Preview]) -> None:
        if preview is None:
            return
        for listener in list(self._preview_listeners):
            try:
                listener(preview)
            except Exception:
                logger.exception("Preview listener failed for {}", preview)

    # -- geometry input -----------------------------------------------------

    def place_column(self, list_id: str, rect: Rect) -> None:
        """Register where a column's viewport sits in pointer coordinates."""
        window = self._window(list_id)
        self.layout.place(list_id, rect)
        window.set_viewport_height(rect.height)
        self.scheduler.request(list_id)

    def scroll(self, list_id: str, offset: float) -> float:
        applied = self._window(list_id).set_scroll_offset(offset)
        self.scheduler.request(list_id)
        return applied

    def resize(self, list_id: str, viewport_height: float) -> None:
        self._window(list_id).set_viewport_height(viewport_height)
        rect = self.layout.rect(list_id)
        if rect is not None:
            self.layout.place(list_id, Rect(rect.left, rect.top, rect.width, viewport_height))
        self.scheduler.request(list_id)

    def _window(self, list_id: str) -> ViewportWindow:
        window = self.windows.get(list_id)
        if window is None:
            # raises UnknownListError for ids the board does not know
            self.board.get_list(list_id)
            raise KeyError(list_id)
        return window

    # -- rendering ----------------------------------------------------------

    def recompute(self, list_id: str) -> ApplyResult:
        """Sync the extent, then diff the visible range onto the surface."""
        window = self.windows[list_id]
        ordered = self.board.get_list(list_id)
        window.sync_item_count(len(ordered))
        return self.trackers[list_id].apply(window.visible_range(), lambda i: self.board.item_at(list_id, i))

    def tick(self) -> list[str]:
        """Frame callback: advance auto-scroll, then flush deferred recomputes."""
        self._auto_scroll_step()
        return self.scheduler.flush()

    def _auto_scroll_step(self) -> None:
        session = self.drag.session
        if not self.drag.is_active or session is None:
            return
        if not session.auto_scroll or session.target_list_id is None:
            return
        window = self.windows.get(session.target_list_id)
        if window is None:
            return
        applied = window.scroll_by(session.auto_scroll * self.settings.auto_scroll_speed)
        if not applied:
            return
        self.scheduler.request(session.target_list_id)
        result = self.drag.reevaluate()
        if result.state == DragState.CANCELLED:
            self._emit_preview(Preview(None, None))
        else:
            self._emit_preview(result.preview)

    def _after_commit(self, list_id: str, start: int, end: Optional[int]) -> None:
        window = self.windows.get(list_id)
        tracker = self.trackers.get(list_id)
        if window is None or tracker is None:
            return
        window.sync_item_count(len(self.board.get_list(list_id)))
        stale = [i for i in tracker.materialized if i >= start and (end is None or i < end)]
        tracker.invalidate(stale)
        result = self.recompute(list_id)
        self.scheduler.discard([list_id])
        logger.debug("Re-rendered after move: {}", pretty(summarize_diff(list_id, result), indent=None))

    def materialized(self, list_id: str) -> frozenset[int]:
        return self.trackers[list_id].materialized

    def window_state(self, list_id: str) -> WindowState:
        return self._window(list_id).state(self.materialized(list_id))

    # -- pointer input ------------------------------------------------------

    def pointer_down(self, sample: PointerSample) -> DragResult:
        result = self.drag.handle(PointerDown(sample))
        self._emit_preview(result.preview)
        return result

    def pointer_move(self, sample: PointerSample) -> DragResult:
        result = self.drag.handle(PointerMove(sample))
        if result.state == DragState.CANCELLED:
            self._emit_preview(Preview(None, None))
        else:
            self._emit_preview(result.preview)
        return result

    def pointer_up(self, sample: PointerSample) -> Optional[CommittedMove]:
        """Finish the drag; returns the commit result, or None if cancelled."""
        result = self.drag.handle(PointerUp(sample))
        if result.ignored:
            return None
        if result.drop is None:
            self._emit_preview(Preview(None, None))
            return None
        move: Optional[CommittedMove] = None
        try:
            move = self.coordinator.commit_drop(result.drop)
        finally:
            self.drag.complete(cancelled=move is None or move.outcome == MoveOutcome.CANCELLED)
            self._emit_preview(Preview(None, None))
        return move

    def abort(self, reason: str = "aborted") -> DragResult:
        result = self.drag.handle(AbortDrag(reason))
        if not result.ignored:
            self._emit_preview(Preview(None, None))
        return result

    # -- item creation ------------------------------------------------------

    def add_task(self, list_id: str, text: str) -> Optional[Item]:
        """Append a task built from *text*; blank input is ignored."""
        text = (text or "").strip()
        if not text:
            return None
        item = self.board.append(list_id, {"text": text})
        self._window(list_id).sync_item_count(len(self.board.get_list(list_id)))
        self.scheduler.request(list_id)
        logger.debug("Added {} to {}", item.id, list_id)
        return item
