"""Configure loguru and summarize board activity for log lines."""

from __future__ import annotations

import json
import sys
from typing import Any

from loguru import logger

from .constants import DEFAULT_LOG_LEVEL


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure loguru logger with the specified level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{module}</cyan>:<cyan>{line}</cyan>\n"
            "{message}"
        ),
    )


def summarize_move(move: Any) -> dict[str, Any]:
    """Render a compact, JSON-friendly summary of a committed move.

    Args:
        move: A ``CommittedMove`` or ``MoveEvent`` (or None).

    Returns:
        A dictionary suitable for logging or serialization.
    """
    if move is None:
        return {"move": None}
    d: dict[str, Any] = {"move": move.__class__.__name__}
    outcome = getattr(move, "outcome", None)
    if outcome is not None:
        d["outcome"] = getattr(outcome, "value", str(outcome))
    for key in ("item_id", "origin_list_id", "origin_index", "target_list_id", "target_index"):
        d[key] = getattr(move, key, None)
    same = d["origin_list_id"] == d["target_list_id"]
    d["same_list"] = same
    if same and d["target_index"] is not None and d["origin_index"] is not None:
        d["shift"] = d["target_index"] - d["origin_index"]
    reason = getattr(move, "reason", None)
    if reason:
        d["reason"] = (reason[:240] + "…") if len(reason) > 240 else reason
    return d


def summarize_diff(list_id: str, result: Any) -> dict[str, Any]:
    """Summarize a render pass (``ApplyResult``) without dumping every index."""
    added = list(getattr(result, "added", []) or [])
    removed = list(getattr(result, "removed", []) or [])
    failed = list(getattr(result, "failed", []) or [])
    d: dict[str, Any] = {
        "list_id": list_id,
        "added_n": len(added),
        "removed_n": len(removed),
    }
    if added:
        d["added_span"] = [min(added), max(added)]
    if removed:
        d["removed_span"] = [min(removed), max(removed)]
    if failed:
        d["failed"] = failed[:10]
    return d


def pretty(obj: Any, *, indent: int | None = 2) -> str:
    """Serialize an object as JSON for readable logs.

    Args:
        obj: Object to serialize.
        indent: Indentation level for JSON output.

    Returns:
        A JSON string when possible; otherwise `str(obj)`.
    """
    try:
        return json.dumps(obj, indent=indent, default=str)
    except Exception:
        return str(obj)
