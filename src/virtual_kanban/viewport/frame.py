"""Coalesce recomputation requests to one pass per animation frame."""

from __future__ import annotations

from typing import Callable, Iterable

from loguru import logger


class FrameScheduler:
    """Collect dirty list ids between frames and recompute each once.

    With ``defer=False`` every request runs straight away, which is what
    tests and the CLI want.
    """

    def __init__(self, recompute: Callable[[str], object], *, defer: bool = True) -> None:
        self._recompute = recompute
        self.defer = defer
        self._dirty: dict[str, None] = {}
        self.frames = 0

    @property
    def pending(self) -> list[str]:
        return list(self._dirty)

    def request(self, list_id: str) -> None:
        if not self.defer:
            self._recompute(list_id)
            return
        self._dirty[list_id] = None

    def discard(self, list_ids: Iterable[str]) -> None:
        """Forget requests for lists that were just recomputed synchronously."""
        for list_id in list_ids:
            self._dirty.pop(list_id, None)

    def flush(self) -> list[str]:
        """Run at a frame boundary; returns the lists that were recomputed."""
        self.frames += 1
        if not self._dirty:
            return []
        batch = list(self._dirty)
        self._dirty.clear()
        for list_id in batch:
            self._recompute(list_id)
        logger.trace("Frame {} recomputed {}", self.frames, batch)
        return batch
