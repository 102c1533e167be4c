"""Scripted pointer sessions.

A replay script lays out the columns and lists pointer and scroll steps;
:func:`run_script` feeds them to a :class:`BoardController` exactly as a
host event loop would.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

from loguru import logger
from pydantic import BaseModel, Field, model_validator

from .constants import PRIMARY_BUTTON
from .controller import BoardController
from .coordinator import CommittedMove
from .drag.layout import Rect
from .drag.session import PointerSample, Preview

StepAction = Literal["down", "move", "up", "abort", "tick", "scroll", "resize", "add"]

_NEEDS_LIST = {"scroll", "resize", "add"}


class ColumnGeometry(BaseModel):
    left: float
    top: float = 0
    width: float = Field(gt=0)
    height: float = Field(gt=0)

    def to_rect(self) -> Rect:
        return Rect(self.left, self.top, self.width, self.height)


class ReplayStep(BaseModel):
    action: StepAction
    x: float = 0
    y: float = 0
    buttons: int = PRIMARY_BUTTON
    list_id: Optional[str] = None
    offset: float = Field(default=0, ge=0)
    height: Optional[float] = None
    text: str = ""
    reason: str = "aborted"
    repeat: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _list_required(self) -> "ReplayStep":
        if self.action in _NEEDS_LIST and not self.list_id:
            raise ValueError(f"'{self.action}' step needs a list_id")
        if self.action == "resize" and (self.height is None or self.height <= 0):
            raise ValueError("'resize' step needs a positive height")
        return self

    def sample(self, timestamp: float = 0.0) -> PointerSample:
        return PointerSample(self.x, self.y, buttons=self.buttons, timestamp=timestamp)


class ReplayScript(BaseModel):
    """Column placement plus the ordered steps to feed the controller.

    Columns without explicit geometry are laid out left to right,
    ``column_width`` wide and ``column_gap`` apart.
    """

    columns: dict[str, ColumnGeometry] = Field(default_factory=dict)
    column_width: float = Field(default=200, gt=0)
    column_gap: float = Field(default=20, ge=0)
    steps: list[ReplayStep] = Field(default_factory=list)


@dataclass
class ReplayReport:
    moves: list[CommittedMove] = field(default_factory=list)
    previews: list[Preview] = field(default_factory=list)
    ignored: int = 0
    frames: int = 0


def layout_columns(controller: BoardController, script: ReplayScript) -> None:
    left = 0.0
    height = controller.settings.viewport_height
    for list_id in controller.board.list_ids():
        geometry = script.columns.get(list_id)
        if geometry is not None:
            rect = geometry.to_rect()
        else:
            rect = Rect(left, 0, script.column_width, height)
        controller.place_column(list_id, rect)
        left = max(left, rect.right) + script.column_gap


def run_script(controller: BoardController, script: ReplayScript) -> ReplayReport:
    """Place the columns, then run every step in order."""
    report = ReplayReport()
    unsubscribe = controller.on_preview(report.previews.append)
    try:
        layout_columns(controller, script)
        controller.tick()
        clock = 0.0
        for step in script.steps:
            for _ in range(step.repeat):
                clock += 1.0
                _run_step(controller, step, clock, report)
    finally:
        unsubscribe()
    logger.info(
        "Replayed {} steps: {} moves, {} previews, {} ignored",
        len(script.steps),
        len(report.moves),
        len(report.previews),
        report.ignored,
    )
    return report


def _run_step(controller: BoardController, step: ReplayStep, clock: float, report: ReplayReport) -> None:
    if step.action == "down":
        report.ignored += int(controller.pointer_down(step.sample(clock)).ignored)
    elif step.action == "move":
        report.ignored += int(controller.pointer_move(step.sample(clock)).ignored)
    elif step.action == "up":
        move = controller.pointer_up(step.sample(clock))
        if move is not None:
            report.moves.append(move)
    elif step.action == "abort":
        report.ignored += int(controller.abort(step.reason).ignored)
    elif step.action == "tick":
        controller.tick()
        report.frames += 1
    elif step.action == "scroll":
        controller.scroll(step.list_id, step.offset)
    elif step.action == "resize":
        controller.resize(step.list_id, step.height)
    elif step.action == "add":
        if controller.add_task(step.list_id, step.text) is None:
            report.ignored += 1
