"""Tests for logging_utils module."""

from __future__ import annotations

import json

from loguru import logger

from virtual_kanban.coordinator import CommittedMove, MoveOutcome
from virtual_kanban.events import MoveEvent
from virtual_kanban.logging_utils import configure_logging, pretty, summarize_diff, summarize_move
from virtual_kanban.viewport.render_diff import ApplyResult


class TestSummarizeMove:
    def test_none(self):
        assert summarize_move(None) == {"move": None}

    def test_committed_same_list(self):
        move = CommittedMove(MoveOutcome.MOVED, "b", "todo", 1, "todo", 3)
        result = summarize_move(move)

        assert result["move"] == "CommittedMove"
        assert result["outcome"] == "moved"
        assert result["same_list"] is True
        assert result["shift"] == 2
        assert "reason" not in result

    def test_cancelled_reason_truncated(self):
        move = CommittedMove(MoveOutcome.CANCELLED, "b", "todo", 1, "done", None, reason="x" * 500)
        result = summarize_move(move)

        assert result["outcome"] == "cancelled"
        assert "shift" not in result
        assert len(result["reason"]) == 241

    def test_move_event(self):
        result = summarize_move(MoveEvent("a", "x", 0, "y", 0))
        assert result["move"] == "MoveEvent"
        assert "outcome" not in result
        assert result["same_list"] is False


class TestSummarizeDiff:
    def test_spans(self):
        result = summarize_diff("todo", ApplyResult(added=[4, 5, 6], removed=[0, 1], failed=[]))
        assert result == {
            "list_id": "todo",
            "added_n": 3,
            "removed_n": 2,
            "added_span": [4, 6],
            "removed_span": [0, 1],
        }

    def test_empty(self):
        result = summarize_diff("done", ApplyResult())
        assert result == {"list_id": "done", "added_n": 0, "removed_n": 0}

    def test_failed_listed(self):
        result = summarize_diff("todo", ApplyResult(added=[], removed=[], failed=[7]))
        assert result["failed"] == [7]


class TestPretty:
    def test_dict(self):
        out = pretty({"a": 1})
        assert json.loads(out) == {"a": 1}

    def test_non_serializable_falls_back_to_str(self):
        out = pretty({"obj": object()})
        assert "object" in out


class TestConfigureLogging:
    def test_level_filters_messages(self, capsys):
        configure_logging("warning")
        logger.info("hidden message")
        logger.warning("visible message")

        err = capsys.readouterr().err
        assert "visible message" in err
        assert "hidden message" not in err
