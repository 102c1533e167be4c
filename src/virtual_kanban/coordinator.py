"""Commit a finished drag to the board.

The coordinator is the only place that mutates list membership in response
to a drag.  A commit either moves the item completely or does nothing at
all; removal without insertion can never be observed.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, Optional

from loguru import logger

from .board.model import Board
from .drag.session import DropRequest
from .events import MoveEvent, MoveNotifier
from .utils import _clamp


class MoveOutcome(str, Enum):
    MOVED = "moved"
    NOOP = "noop"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class CommittedMove:
    """Result of :meth:`MoveCoordinator.commit`."""

    outcome: MoveOutcome
    item_id: Optional[str]
    origin_list_id: str
    origin_index: int
    target_list_id: str
    target_index: Optional[int]
    reason: Optional[str] = None

    @property
    def moved(self) -> bool:
        return self.outcome == MoveOutcome.MOVED

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["outcome"] = self.outcome.value
        return data


# list_id, first changed index, end of changed span (None = to the end)
ListChanged = Callable[[str, int, Optional[int]], None]


class MoveCoordinator:
    """Apply drops to the :class:`Board` and report them.

    Parameters
    ----------
    board:
        The model being edited.
    notifier:
        Receives a :class:`MoveEvent` for every real move.
    on_list_changed:
        Called once per affected list after the board has been updated, with
        the span of indices whose item changed.  The controller uses it to
        refresh extents and materialized rows before any other event for
        that list is handled.
    """

    def __init__(
        self,
        board: Board,
        notifier: Optional[MoveNotifier] = None,
        on_list_changed: Optional[ListChanged] = None,
    ) -> None:
        self.board = board
        self.notifier = notifier or MoveNotifier()
        self.on_list_changed = on_list_changed

    def commit_drop(self, drop: DropRequest) -> CommittedMove:
        return self.commit(
            drop.origin_list_id,
            drop.origin_index,
            drop.target_list_id,
            drop.insertion_index,
            item_id=drop.item_id,
        )

    def commit(
        self,
        origin_list_id: str,
        origin_index: int,
        target_list_id: str,
        insertion_index: int,
        *,
        item_id: Optional[str] = None,
    ) -> CommittedMove:
        """Move one item from the origin list into the target list.

        Args:
            origin_list_id: List the drag started in.
            origin_index: Index of the item when the drag started.
            target_list_id: List the item was dropped on.
            insertion_index: Index in the target, counted with the dragged
                item excluded; clamped to the target length.
            item_id: Identity of the dragged item.  When given, the item is
                re-located by id in case the list changed during the drag.

        Returns:
            A :class:`CommittedMove`; ``CANCELLED`` if the item or a list can
            no longer be found, ``NOOP`` if it was dropped onto its own slot.
        """
        def _cancelled(reason: str) -> CommittedMove:
            logger.warning("Move of {} cancelled: {}", item_id, reason)
            return CommittedMove(
                outcome=MoveOutcome.CANCELLED,
                item_id=item_id,
                origin_list_id=origin_list_id,
                origin_index=origin_index,
                target_list_id=target_list_id,
                target_index=None,
                reason=reason,
            )

        if not self.board.has_list(origin_list_id):
            return _cancelled(f"unknown origin list {origin_list_id}")
        if not self.board.has_list(target_list_id):
            return _cancelled(f"unknown target list {target_list_id}")

        origin = self.board.get_list(origin_list_id)
        current_index = self._resolve_origin(origin_list_id, origin_index, item_id)
        if current_index is None:
            return _cancelled(f"item no longer in {origin_list_id}")
        item_id = origin.items[current_index].id

        same_list = origin_list_id == target_list_id
        target_len = len(origin) - 1 if same_list else len(self.board.get_list(target_list_id))
        target_index = _clamp(insertion_index, 0, target_len)

        if same_list and target_index == current_index:
            logger.debug("Drop of {} onto its own slot {}[{}]", item_id, origin_list_id, current_index)
            return CommittedMove(
                outcome=MoveOutcome.NOOP,
                item_id=item_id,
                origin_list_id=origin_list_id,
                origin_index=current_index,
                target_list_id=target_list_id,
                target_index=target_index,
            )

        final_index = self.board.relocate(item_id, origin_list_id, target_list_id, target_index)
        if final_index is None:  # pragma: no cover - located above
            return _cancelled("relocation failed")

        if self.on_list_changed is not None:
            if same_list:
                low, high = sorted((current_index, final_index))
                self.on_list_changed(origin_list_id, low, high + 1)
            else:
                self.on_list_changed(origin_list_id, current_index, None)
                self.on_list_changed(target_list_id, final_index, None)

        move = CommittedMove(
            outcome=MoveOutcome.MOVED,
            item_id=item_id,
            origin_list_id=origin_list_id,
            origin_index=current_index,
            target_list_id=target_list_id,
            target_index=final_index,
        )
        logger.info(
            "Moved {} {}[{}] -> {}[{}]",
            item_id,
            origin_list_id,
            current_index,
            target_list_id,
            final_index,
        )
        self.notifier.emit(
            MoveEvent(
                item_id=item_id,
                origin_list_id=origin_list_id,
                origin_index=current_index,
                target_list_id=target_list_id,
                target_index=final_index,
            )
        )
        return move

    def _resolve_origin(self, list_id: str, index: int, item_id: Optional[str]) -> Optional[int]:
        items = self.board.get_list(list_id).items
        if item_id is None:
            return index if 0 <= index < len(items) else None
        if 0 <= index < len(items) and items[index].id == item_id:
            return index
        # the list changed under the drag; find the item again by identity
        relocated = self.board.index_of(list_id, item_id)
        if relocated is not None:
            logger.debug("Item {} re-located in {}: {} -> {}", item_id, list_id, index, relocated)
        return relocated
