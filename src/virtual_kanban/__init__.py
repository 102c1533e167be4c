"""Provide the public `virtual_kanban` package exports."""

from __future__ import annotations

from .board import Board, Item, OrderedList
from .config import BoardSettings, load_board_config
from .controller import BoardController
from .coordinator import CommittedMove, MoveCoordinator, MoveOutcome
from .events import MoveEvent, MoveJournal, MoveNotifier

__all__ = [
    "Board",
    "BoardController",
    "BoardSettings",
    "CommittedMove",
    "Item",
    "MoveCoordinator",
    "MoveEvent",
    "MoveJournal",
    "MoveNotifier",
    "MoveOutcome",
    "OrderedList",
    "load_board_config",
]
