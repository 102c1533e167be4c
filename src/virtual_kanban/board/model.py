"""Ordered collection model for the virtualized board.

A :class:`Board` holds named :class:`OrderedList` columns, each an ordered
sequence of uniquely identified :class:`Item` objects.  An item id may appear
in at most one list across the whole board; :meth:`Board.relocate` moves an
item between (or within) lists as a single step so readers never observe a
half-applied move.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from ..utils import _clamp, _generate_id


class BoardError(ValueError):
    """Base class for model invariant violations."""


class DuplicateItemError(BoardError):
    """An item id would appear twice on the board."""


class UnknownListError(BoardError, KeyError):
    """A list id that is not part of the board."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


# ---------------------------------------------------------------------------
# Items and lists
# ---------------------------------------------------------------------------

@dataclass
class Item:
    """A single board entry.

    ``id`` is the immutable identity; ``payload`` is arbitrary display data
    and may be replaced at any time.
    """

    id: str = field(default_factory=_generate_id)
    payload: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "payload": self.payload}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Item":
        raw_id = data.get("id")
        if "payload" in data:
            payload = data.get("payload")
        else:
            # Flat legacy shape: {"id": 1, "text": "..."}
            payload = {k: v for k, v in data.items() if k != "id"}
        return cls(id=str(raw_id) if raw_id is not None else _generate_id(), payload=payload)


@dataclass
class OrderedList:
    """One column: an ordered sequence of items with unique ids."""

    list_id: str
    title: str = ""
    items: list[Item] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)

    def ids(self) -> list[str]:
        return [item.id for item in self.items]

    def index_of(self, item_id: str) -> Optional[int]:
        for idx, item in enumerate(self.items):
            if item.id == item_id:
                return idx
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.list_id,
            "title": self.title,
            "items": [item.to_dict() for item in self.items],
        }


# ---------------------------------------------------------------------------
# Board
# ---------------------------------------------------------------------------

class Board:
    """Mapping of list id to :class:`OrderedList`, in column order.

    The board keeps an ``item id -> list id`` ownership index so that
    board-wide uniqueness can be checked on every insertion.
    """

    def __init__(self, lists: Optional[list[OrderedList]] = None) -> None:
        self._lists: dict[str, OrderedList] = {}
        self._owner: dict[str, str] = {}
        for ordered in lists or []:
            self.add_list(ordered)

    # -- structure ----------------------------------------------------------

    def add_list(self, ordered: OrderedList) -> OrderedList:
        if ordered.list_id in self._lists:
            raise BoardError(f"List {ordered.list_id} already exists")
        seen: set[str] = set()
        for item in ordered.items:
            if item.id in seen or item.id in self._owner:
                raise DuplicateItemError(f"Item {item.id} already exists on the board")
            seen.add(item.id)
        self._lists[ordered.list_id] = ordered
        for item_id in seen:
            self._owner[item_id] = ordered.list_id
        return ordered

    def list_ids(self) -> list[str]:
        return list(self._lists)

    def lists(self) -> list[OrderedList]:
        return list(self._lists.values())

    def get_list(self, list_id: str) -> OrderedList:
        ordered = self._lists.get(list_id)
        if ordered is None:
            raise UnknownListError(f"Unknown list {list_id}")
        return ordered

    def has_list(self, list_id: str) -> bool:
        return list_id in self._lists

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._owner

    def __len__(self) -> int:
        return len(self._owner)

    # -- lookups ------------------------------------------------------------

    def locate(self, item_id: str) -> Optional[tuple[str, int]]:
        """Return ``(list_id, index)`` for *item_id*, or None."""
        list_id = self._owner.get(item_id)
        if list_id is None:
            return None
        idx = self._lists[list_id].index_of(item_id)
        if idx is None:
            return None
        return list_id, idx

    def index_of(self, list_id: str, item_id: str) -> Optional[int]:
        return self.get_list(list_id).index_of(item_id)

    def item_at(self, list_id: str, index: int) -> Optional[Item]:
        items = self.get_list(list_id).items
        if 0 <= index < len(items):
            return items[index]
        return None

    # -- mutations ----------------------------------------------------------

    def append(self, list_id: str, payload: Any, item_id: Optional[str] = None) -> Item:
        """Create a new item at the end of *list_id* and return it."""
        ordered = self.get_list(list_id)
        item = Item(id=item_id or _generate_id(), payload=payload)
        if item.id in self._owner:
            raise DuplicateItemError(f"Item {item.id} already exists on the board")
        ordered.items = ordered.items + [item]
        self._owner[item.id] = list_id
        return item

    def remove(self, item_id: str) -> Optional[Item]:
        """Physically remove an item from whichever list holds it."""
        found = self.locate(item_id)
        if found is None:
            return None
        list_id, idx = found
        ordered = self._lists[list_id]
        item = ordered.items[idx]
        ordered.items = ordered.items[:idx] + ordered.items[idx + 1:]
        del self._owner[item_id]
        return item

    def relocate(self, item_id: str, origin_list_id: str, target_list_id: str, index: int) -> Optional[int]:
        """Move *item_id* from its origin list to *index* in the target list.

        The target length used for clamping is measured after the removal,
        so for a same-list move it is one shorter than before.  New
        sequences are built first and swapped in together.  Returns the
        final index, or None if the item is not in the origin list.
        """
        origin = self.get_list(origin_list_id)
        target = self.get_list(target_list_id)
        origin_index = origin.index_of(item_id)
        if origin_index is None:
            return None
        item = origin.items[origin_index]
        remaining = origin.items[:origin_index] + origin.items[origin_index + 1:]
        if origin is target:
            final_index = _clamp(index, 0, len(remaining))
            origin.items = remaining[:final_index] + [item] + remaining[final_index:]
            return final_index
        final_index = _clamp(index, 0, len(target.items))
        inserted = target.items[:final_index] + [item] + target.items[final_index:]
        origin.items, target.items = remaining, inserted
        self._owner[item_id] = target_list_id
        return final_index

    # -- serialization ------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {"lists": [ordered.to_dict() for ordered in self._lists.values()]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Board":
        """Build a board from ``{"lists": [...]}`` (or ``{"columns": [...]}``)."""
        raw_lists = data.get("lists")
        if raw_lists is None:
            raw_lists = data.get("columns", [])
        if not isinstance(raw_lists, list):
            raise BoardError("'lists' must be an array")
        board = cls()
        for raw in raw_lists:
            if not isinstance(raw, dict):
                raise BoardError("Each list must be an object")
            list_id = raw.get("id")
            if list_id is None:
                raise BoardError("Each list needs an 'id'")
            items = []
            for entry in list(raw.get("items") or []):
                if not isinstance(entry, dict):
                    raise BoardError("Each item must be an object")
                items.append(Item.from_dict(entry))
            board.add_list(OrderedList(list_id=str(list_id), title=str(raw.get("title") or list_id), items=items))
        return board

    def snapshot(self) -> dict[str, list[str]]:
        """Return ``list id -> item ids`` for comparisons and logging."""
        return {list_id: ordered.ids() for list_id, ordered in self._lists.items()}
