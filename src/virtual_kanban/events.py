"""Move notifications for the host application.

Observers receive a :class:`MoveEvent` after every committed move.  They may
persist, log, or ignore it; a failing observer is logged and skipped so it
cannot affect the commit or the other observers.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable

from loguru import logger

from .io_utils import _append_event, _read_events


@dataclass(frozen=True)
class MoveEvent:
    """Payload of a move notification."""

    item_id: str
    origin_list_id: str
    origin_index: int
    target_list_id: str
    target_index: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


MoveObserver = Callable[[MoveEvent], None]


class MoveNotifier:
    def __init__(self) -> None:
        self._observers: list[MoveObserver] = []
        self.delivered = 0

    def subscribe(self, observer: MoveObserver) -> Callable[[], None]:
        """Register *observer*; the returned callable unsubscribes it."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def emit(self, event: MoveEvent) -> None:
        self.delivered += 1
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:
                logger.exception("Move observer {} failed for {}", getattr(observer, "__name__", observer), event.item_id)


class MoveJournal:
    """Observer that appends every move to a JSONL file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def __call__(self, event: MoveEvent) -> None:
        _append_event(self.path, {"type": "item_moved", **event.to_dict()})

    def recent(self, limit: int = 100) -> list[dict[str, Any]]:
        return _read_events(self.path, limit=limit)
