"""Tests for the ordered collection model (board/model.py)."""

from __future__ import annotations

import pytest

from virtual_kanban.board.model import (
    Board,
    BoardError,
    DuplicateItemError,
    Item,
    OrderedList,
    UnknownListError,
)


def _board(**lists: list[str]) -> Board:
    return Board([OrderedList(list_id=name, items=[Item(id=i, payload={"text": i}) for i in ids]) for name, ids in lists.items()])


class TestItem:
    def test_generated_id(self) -> None:
        item = Item()
        assert item.id.startswith("item-")
        assert len(item.id) == 13

    def test_from_dict_with_payload(self) -> None:
        item = Item.from_dict({"id": "a", "payload": {"text": "Alpha"}})
        assert item.id == "a"
        assert item.payload == {"text": "Alpha"}

    def test_from_dict_flat_shape(self) -> None:
        item = Item.from_dict({"id": 1, "text": "Task 1"})
        assert item.id == "1"
        assert item.payload == {"text": "Task 1"}


class TestBoardStructure:
    def test_duplicate_id_across_lists_rejected(self) -> None:
        board = _board(todo=["a", "b"])
        with pytest.raises(DuplicateItemError):
            board.add_list(OrderedList(list_id="done", items=[Item(id="a")]))

    def test_duplicate_id_within_list_rejected(self) -> None:
        with pytest.raises(DuplicateItemError):
            _board(todo=["a", "a"])

    def test_duplicate_list_rejected(self) -> None:
        board = _board(todo=[])
        with pytest.raises(BoardError):
            board.add_list(OrderedList(list_id="todo"))

    def test_unknown_list(self) -> None:
        board = _board(todo=[])
        with pytest.raises(UnknownListError):
            board.get_list("nope")
        with pytest.raises(KeyError):
            board.get_list("nope")

    def test_locate_and_item_at(self) -> None:
        board = _board(todo=["a", "b"], done=["c"])
        assert board.locate("c") == ("done", 0)
        assert board.locate("zzz") is None
        assert board.item_at("todo", 1).id == "b"
        assert board.item_at("todo", 2) is None
        assert board.item_at("todo", -1) is None
        assert "a" in board
        assert len(board) == 3


class TestBoardMutations:
    def test_append_generates_unique_id(self) -> None:
        board = _board(todo=["a"])
        item = board.append("todo", {"text": "new"})
        assert board.get_list("todo").ids() == ["a", item.id]
        assert board.locate(item.id) == ("todo", 1)

    def test_append_duplicate_id_rejected(self) -> None:
        board = _board(todo=["a"], done=[])
        with pytest.raises(DuplicateItemError):
            board.append("done", {}, item_id="a")
        assert board.get_list("done").ids() == []

    def test_remove(self) -> None:
        board = _board(todo=["a", "b"])
        removed = board.remove("a")
        assert removed is not None and removed.id == "a"
        assert board.get_list("todo").ids() == ["b"]
        assert "a" not in board
        assert board.remove("a") is None

    def test_relocate_same_list_forward(self) -> None:
        board = _board(todo=["A", "B", "C", "D"])
        assert board.relocate("B", "todo", "todo", 2) == 2
        assert board.get_list("todo").ids() == ["A", "C", "B", "D"]

    def test_relocate_same_list_clamps_after_removal(self) -> None:
        board = _board(todo=["A", "B", "C"])
        assert board.relocate("A", "todo", "todo", 99) == 2
        assert board.get_list("todo").ids() == ["B", "C", "A"]

    def test_relocate_cross_list(self) -> None:
        board = _board(x=["p", "q", "r", "s"], y=[])
        assert board.relocate("p", "x", "y", 0) == 0
        assert board.snapshot() == {"x": ["q", "r", "s"], "y": ["p"]}
        assert board.locate("p") == ("y", 0)

    def test_relocate_cross_list_clamps_to_target(self) -> None:
        board = _board(x=["p"], y=["a", "b"])
        assert board.relocate("p", "x", "y", 10) == 2
        assert board.get_list("y").ids() == ["a", "b", "p"]

    def test_relocate_missing_item(self) -> None:
        board = _board(x=["p"], y=[])
        assert board.relocate("zzz", "x", "y", 0) is None
        assert board.snapshot() == {"x": ["p"], "y": []}

    def test_relocate_preserves_identity(self) -> None:
        board = _board(x=["p"], y=[])
        before = board.item_at("x", 0)
        board.relocate("p", "x", "y", 0)
        assert board.item_at("y", 0) is before


class TestBoardSerialization:
    def test_from_dict_lists(self) -> None:
        board = Board.from_dict(
            {
                "lists": [
                    {"id": "todo", "title": "To Do", "items": [{"id": "a", "payload": {"text": "A"}}]},
                    {"id": "done", "items": []},
                ]
            }
        )
        assert board.list_ids() == ["todo", "done"]
        assert board.get_list("todo").title == "To Do"
        assert board.get_list("done").title == "done"

    def test_from_dict_columns_alias(self) -> None:
        board = Board.from_dict({"columns": [{"id": "todo", "items": [{"id": 1, "text": "Task 1"}]}]})
        assert board.item_at("todo", 0).payload == {"text": "Task 1"}

    def test_from_dict_rejects_bad_shape(self) -> None:
        with pytest.raises(BoardError):
            Board.from_dict({"lists": {"todo": []}})
        with pytest.raises(BoardError):
            Board.from_dict({"lists": [{"title": "no id"}]})

    def test_from_dict_rejects_non_object_items(self) -> None:
        with pytest.raises(BoardError, match="Each item must be an object"):
            Board.from_dict({"lists": [{"id": "todo", "items": ["A", {"id": "c"}]}]})

    def test_to_dict_round_trip(self) -> None:
        board = _board(todo=["a", "b"], done=["c"])
        again = Board.from_dict(board.to_dict())
        assert again.snapshot() == board.snapshot()
