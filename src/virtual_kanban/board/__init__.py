"""Ordered collection model: items, columns and the board that owns them."""

from .model import Board, BoardError, DuplicateItemError, Item, OrderedList, UnknownListError

__all__ = ["Board", "BoardError", "DuplicateItemError", "Item", "OrderedList", "UnknownListError"]
