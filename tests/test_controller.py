"""End-to-end tests for BoardController."""

from __future__ import annotations

import pytest

from virtual_kanban.board.model import Board, Item, OrderedList, UnknownListError
from virtual_kanban.config import BoardSettings
from virtual_kanban.controller import BoardController
from virtual_kanban.coordinator import MoveOutcome
from virtual_kanban.drag.layout import Rect
from virtual_kanban.drag.session import DragState, PointerSample, Preview
from virtual_kanban.events import MoveEvent


def _board(todo: int = 30) -> Board:
    return Board(
        [
            OrderedList(list_id="todo", title="To Do", items=[Item(id=f"t{k}", payload={"text": f"Task {k}"}) for k in range(todo)]),
            OrderedList(list_id="done", title="Done", items=[]),
        ]
    )


@pytest.fixture
def controller() -> BoardController:
    ctl = BoardController(_board(), settings=BoardSettings(viewport_height=400))
    ctl.place_column("todo", Rect(0, 0, 200, 400))
    ctl.place_column("done", Rect(220, 0, 200, 400))
    ctl.tick()
    return ctl


class TestRendering:
    def test_first_paint(self, controller: BoardController) -> None:
        assert controller.materialized("todo") == frozenset(range(16))
        assert controller.materialized("done") == frozenset()
        assert controller.surfaces["todo"].handle(0).label == "Task 0"

    def test_scroll_waits_for_frame(self, controller: BoardController) -> None:
        controller.scroll("todo", 500)
        assert controller.materialized("todo") == frozenset(range(16))

        assert controller.tick() == ["todo"]
        assert controller.materialized("todo") == frozenset(range(2, 26))

    def test_repeated_scrolls_recompute_once(self, controller: BoardController) -> None:
        calls: list[str] = []
        real = controller.recompute

        def counting(list_id: str):
            calls.append(list_id)
            return real(list_id)

        controller.scheduler._recompute = counting
        controller.scroll("todo", 100)
        controller.scroll("todo", 200)
        controller.scroll("todo", 300)
        controller.tick()
        assert calls == ["todo"]

    def test_immediate_mode(self) -> None:
        ctl = BoardController(_board(), settings=BoardSettings(defer_to_frame=False))
        ctl.scroll("todo", 500)
        assert ctl.materialized("todo") == frozenset(range(2, 26))

    def test_unknown_list(self, controller: BoardController) -> None:
        with pytest.raises(UnknownListError):
            controller.scroll("archive", 0)

    def test_extent_listener(self) -> None:
        extents: list[tuple[str, float]] = []
        BoardController(_board(todo=4), on_extent_change=lambda lid, ext: extents.append((lid, ext)))
        assert ("todo", 200) in extents


class TestDragFlow:
    def test_cross_list_drop(self, controller: BoardController) -> None:
        previews: list[Preview] = []
        moves: list[MoveEvent] = []
        controller.on_preview(previews.append)
        controller.on_move(moves.append)

        controller.pointer_down(PointerSample(10, 75))
        controller.pointer_move(PointerSample(300, 100))
        move = controller.pointer_up(PointerSample(300, 100))

        assert move is not None and move.outcome == MoveOutcome.MOVED
        assert controller.board.get_list("done").ids() == ["t1"]
        assert len(controller.board.get_list("todo")) == 29
        assert moves == [MoveEvent("t1", "todo", 1, "done", 0)]
        assert previews[0] == Preview("todo", 1)
        assert Preview("done", 0) in previews
        assert previews[-1] == Preview(None, None)
        assert controller.drag.state == DragState.IDLE

    def test_drop_refreshes_both_lists_synchronously(self, controller: BoardController) -> None:
        controller.pointer_down(PointerSample(10, 75))
        controller.pointer_up(PointerSample(300, 100))

        assert controller.window_state("todo").extent == 29 * 50
        assert controller.window_state("done").extent == 50
        assert controller.materialized("done") == frozenset({0})
        assert controller.surfaces["done"].handle(0).item_id == "t1"
        assert controller.surfaces["todo"].handle(1).item_id == "t2"
        assert controller.scheduler.pending == []

    def test_reorder_only_rebuilds_changed_rows(self, controller: BoardController) -> None:
        surface = controller.surfaces["todo"]
        surface.reset_calls()

        controller.pointer_down(PointerSample(10, 75))
        move = controller.pointer_up(PointerSample(10, 125))

        assert move is not None and move.target_index == 2
        assert controller.board.get_list("todo").ids()[:4] == ["t0", "t2", "t1", "t3"]
        touched = {index for _, index in surface.calls}
        assert touched == {1, 2}

    def test_noop_drop(self, controller: BoardController) -> None:
        moves: list[MoveEvent] = []
        controller.on_move(moves.append)
        controller.surfaces["todo"].reset_calls()

        controller.pointer_down(PointerSample(10, 75))
        move = controller.pointer_up(PointerSample(12, 80))

        assert move is not None and move.outcome == MoveOutcome.NOOP
        assert moves == []
        assert controller.surfaces["todo"].calls == []

    def test_release_outside_cancels(self, controller: BoardController) -> None:
        previews: list[Preview] = []
        controller.on_preview(previews.append)
        before = controller.board.snapshot()

        controller.pointer_down(PointerSample(10, 75))
        assert controller.pointer_up(PointerSample(900, 900)) is None

        assert controller.board.snapshot() == before
        assert previews[-1] == Preview(None, None)
        assert controller.drag.last_outcome == DragState.CANCELLED

    def test_refused_drop_records_cancel(self, controller: BoardController) -> None:
        controller.pointer_down(PointerSample(10, 75))
        controller.coordinator.board = Board([])

        move = controller.pointer_up(PointerSample(300, 100))

        assert move is not None and move.outcome == MoveOutcome.CANCELLED
        assert controller.drag.state == DragState.IDLE
        assert controller.drag.last_outcome == DragState.CANCELLED

    def test_abort(self, controller: BoardController) -> None:
        controller.pointer_down(PointerSample(10, 75))
        result = controller.abort("escape")
        assert result.state == DragState.CANCELLED
        assert controller.drag.state == DragState.IDLE

    def test_unsubscribed_preview_listener(self, controller: BoardController) -> None:
        previews: list[Preview] = []
        unsubscribe = controller.on_preview(previews.append)
        unsubscribe()
        controller.pointer_down(PointerSample(10, 75))
        assert previews == []


class TestAutoScroll:
    def test_tick_scrolls_near_bottom_edge(self, controller: BoardController) -> None:
        previews: list[Preview] = []
        controller.on_preview(previews.append)
        controller.pointer_down(PointerSample(10, 75))
        controller.pointer_move(PointerSample(10, 390))
        assert previews[-1] == Preview("todo", 7)

        controller.tick()
        assert controller.window_state("todo").scroll_offset == 10
        assert previews[-1] == Preview("todo", 8)

        controller.tick()
        assert controller.window_state("todo").scroll_offset == 20
        assert previews[-1] == Preview("todo", 8)

    def test_tick_clears_preview_when_item_leaves_origin(self, controller: BoardController) -> None:
        previews: list[Preview] = []
        controller.on_preview(previews.append)
        controller.pointer_down(PointerSample(10, 75))
        controller.pointer_move(PointerSample(10, 390))
        controller.board.remove("t1")

        controller.tick()

        assert previews[-1] == Preview(None, None)
        assert controller.drag.state == DragState.IDLE
        assert controller.drag.last_outcome == DragState.CANCELLED

    def test_tick_at_top_does_nothing(self, controller: BoardController) -> None:
        controller.pointer_down(PointerSample(10, 25))
        controller.pointer_move(PointerSample(10, 10))
        controller.tick()
        assert controller.window_state("todo").scroll_offset == 0

    def test_no_scroll_without_drag(self, controller: BoardController) -> None:
        controller.tick()
        assert controller.window_state("todo").scroll_offset == 0


class TestLifecycle:
    def test_add_task(self, controller: BoardController) -> None:
        assert controller.add_task("done", "   ") is None
        item = controller.add_task("done", "  Write docs ")

        assert item is not None
        assert item.payload == {"text": "Write docs"}
        assert controller.window_state("done").extent == 50
        controller.tick()
        assert controller.surfaces["done"].handle(0).label == "Write docs"

    def test_replace_board(self, controller: BoardController) -> None:
        old_surface = controller.surfaces["todo"]
        controller.replace_board(Board([OrderedList(list_id="todo", items=[Item(id="n1")])]))

        assert old_surface.visible() == []
        assert controller.board.list_ids() == ["todo"]
        assert "done" not in controller.layout
        assert controller.materialized("todo") == frozenset({0})
        assert controller.surfaces["todo"].handle(0).item_id == "n1"

    def test_replace_board_cancels_active_drag(self, controller: BoardController) -> None:
        controller.pointer_down(PointerSample(10, 75))
        controller.replace_board(_board(todo=3))
        assert controller.drag.state == DragState.IDLE
        assert controller.drag.board is controller.board

    def test_destroy(self, controller: BoardController) -> None:
        surface = controller.surfaces["todo"]
        controller.destroy()
        assert surface.visible() == []
        assert len(controller.layout) == 0
