"""Track which rows of a list hold live visual handles.

Every row index has an explicit status owned by the tracker.  The visual
surface only ever sees ``acquire``/``release`` calls and may animate them
however it likes; it is never consulted to find out what is on screen.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Protocol

from loguru import logger

from ..board.model import Item


class HandleStatus(str, Enum):
    """Lifecycle of a single row's visual handle."""

    PENDING_ADD = "pending_add"
    MATERIALIZED = "materialized"
    PENDING_REMOVE = "pending_remove"


class HandleSurface(Protocol):
    """Rendering collaborator that owns visual objects."""

    def acquire(self, index: int, top_offset: float, item: Item) -> Any:
        """Create (or reuse) a visual for *item* placed at *top_offset*."""

    def release(self, index: int) -> None:
        """Drop the visual previously acquired for *index*."""


@dataclass(frozen=True)
class RenderDiff:
    to_add: frozenset[int] = frozenset()
    to_remove: frozenset[int] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


def diff(previous: Iterable[int], new_range: tuple[int, int]) -> RenderDiff:
    """Return the add/remove sets that turn *previous* into ``range(*new_range)``.

    Indices present in both are left alone so a row that stays visible is
    never rebuilt just because its neighbours changed.
    """
    start, end = new_range
    prev = frozenset(previous)
    new = frozenset(range(start, end))
    return RenderDiff(to_add=new - prev, to_remove=prev - new)


@dataclass
class ApplyResult:
    """Outcome of one :meth:`RenderDiffTracker.apply` pass."""

    added: list[int] = field(default_factory=list)
    removed: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


ItemLookup = Callable[[int], Optional[Item]]


class RenderDiffTracker:
    """Materialized-row bookkeeping for one list.

    Parameters
    ----------
    list_id:
        List the tracker renders, used for log context only.
    surface:
        The :class:`HandleSurface` that creates and removes visuals.
    item_height:
        Row height; every handle is placed at ``index * item_height``.
    """

    def __init__(self, list_id: str, surface: HandleSurface, item_height: float) -> None:
        self.list_id = list_id
        self.surface = surface
        self.item_height = item_height
        self._status: dict[int, HandleStatus] = {}
        self._handles: dict[int, Any] = {}
        self._tops: dict[int, float] = {}

    # -- queries ------------------------------------------------------------

    @property
    def materialized(self) -> frozenset[int]:
        return frozenset(i for i, s in self._status.items() if s == HandleStatus.MATERIALIZED)

    def status_of(self, index: int) -> Optional[HandleStatus]:
        return self._status.get(index)

    def handle_of(self, index: int) -> Any:
        return self._handles.get(index)

    def claimed_top(self, index: int) -> Optional[float]:
        return self._tops.get(index)

    # -- passes -------------------------------------------------------------

    def apply(self, new_range: tuple[int, int], item_for: ItemLookup) -> ApplyResult:
        """Bring the materialized set in line with *new_range*.

        A row whose ``acquire`` fails stays unmaterialized and is picked up
        again on the next pass; it never disturbs the other rows.
        """
        pending = diff(self.materialized, new_range)
        result = ApplyResult()
        if pending.is_empty:
            return result

        for index in sorted(pending.to_remove):
            self._status[index] = HandleStatus.PENDING_REMOVE
        for index in sorted(pending.to_remove):
            self._release(index)
            result.removed.append(index)

        for index in sorted(pending.to_add):
            self._status[index] = HandleStatus.PENDING_ADD
        for index in sorted(pending.to_add):
            if self._acquire(index, item_for):
                result.added.append(index)
            else:
                result.failed.append(index)

        logger.debug(
            "List {} range {}..{}: +{} -{} failed={}",
            self.list_id,
            new_range[0],
            new_range[1],
            len(result.added),
            len(result.removed),
            result.failed,
        )
        return result

    def invalidate(self, indices: Iterable[int]) -> list[int]:
        """Release the handles of rows whose bound item changed.

        The next :meth:`apply` rebuilds exactly these rows if they are
        still in range.
        """
        dropped: list[int] = []
        for index in sorted(set(indices)):
            if self._status.get(index) != HandleStatus.MATERIALIZED:
                continue
            self._status[index] = HandleStatus.PENDING_REMOVE
            self._release(index)
            dropped.append(index)
        return dropped

    def release_all(self) -> list[int]:
        return self.invalidate(list(self._status))

    # -- surface calls ------------------------------------------------------

    def _acquire(self, index: int, item_for: ItemLookup) -> bool:
        item = item_for(index)
        if item is None:
            self._forget(index)
            logger.warning("List {} has no item at index {}; skipping handle", self.list_id, index)
            return False
        top = index * self.item_height
        try:
            handle = self.surface.acquire(index, top, item)
        except Exception as exc:
            self._forget(index)
            logger.warning(
                "Failed to acquire handle for {}[{}] ({}); will retry next pass",
                self.list_id,
                index,
                exc,
            )
            return False
        self._status[index] = HandleStatus.MATERIALIZED
        self._handles[index] = handle
        self._tops[index] = top
        return True

    def _release(self, index: int) -> None:
        try:
            self.surface.release(index)
        except Exception as exc:
            logger.warning("Failed to release handle for {}[{}]: {}", self.list_id, index, exc)
        finally:
            self._forget(index)

    def _forget(self, index: int) -> None:
        self._status.pop(index, None)
        self._handles.pop(index, None)
        self._tops.pop(index, None)
