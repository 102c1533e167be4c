from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from .board.model import Board, BoardError
from .config import BoardSettings, load_board_config
from .constants import JOURNAL_FILE, STATE_DIR_NAME
from .console import format_board
from .controller import BoardController
from .events import MoveJournal
from .io_utils import _load_data_with_error, _save_data
from .logging_utils import configure_logging, summarize_move
from .replay import ReplayScript, run_script
from .viewport.windowing import GeometryError, compute_visible_range, scroll_extent


def _resolve_project_dir(project_dir: Optional[str]) -> Path:
    return Path(project_dir).expanduser().resolve() if project_dir else Path.cwd().resolve()


def _settings(args: argparse.Namespace, **overrides: object) -> BoardSettings:
    settings, err = load_board_config(_resolve_project_dir(args.project_dir))
    configure_logging(args.log_level or settings.log_level)
    if err:
        logger.warning("Ignoring board config: {}", err)
    # the CLI has no frame loop, so every request recomputes immediately
    updates = {"defer_to_frame": False}
    updates.update({key: value for key, value in overrides.items() if value is not None})
    return settings.model_copy(update=updates)


def _load_board(path_arg: str) -> tuple[Optional[Board], Optional[Path]]:
    path = Path(path_arg).expanduser().resolve()
    if not path.exists():
        sys.stderr.write(f"Board file not found: {path}\n")
        return None, path
    data, err = _load_data_with_error(path, {})
    if err:
        sys.stderr.write(f"Invalid board file: {err}\n")
        return None, path
    try:
        return Board.from_dict(data), path
    except BoardError as exc:
        sys.stderr.write(f"Invalid board file: {path.name}: {exc}\n")
        return None, path


def _show(args: argparse.Namespace) -> int:
    settings = _settings(args, viewport_height=args.viewport)
    board, _ = _load_board(args.board)
    if board is None:
        return 1
    try:
        controller = BoardController(board, settings=settings)
        if args.offset:
            for list_id in board.list_ids():
                controller.scroll(list_id, args.offset)
    except GeometryError as exc:
        sys.stderr.write(f"Invalid geometry: {exc}\n")
        return 1
    sys.stdout.write(format_board(controller))
    controller.destroy()
    return 0


def _window(args: argparse.Namespace) -> int:
    _settings(args)
    try:
        start, end = compute_visible_range(args.count, args.offset, args.viewport, args.item_height, args.buffer)
        extent = scroll_extent(args.count, args.item_height)
    except GeometryError as exc:
        sys.stderr.write(f"Invalid geometry: {exc}\n")
        return 1
    payload = {"start": start, "end": end, "materialized": end - start, "extent": extent}
    sys.stdout.write(json.dumps(payload, indent=2) + "\n")
    return 0


def _replay(args: argparse.Namespace) -> int:
    settings = _settings(args)
    board, board_path = _load_board(args.board)
    if board is None:
        return 1
    script_path = Path(args.script).expanduser().resolve()
    raw, err = _load_data_with_error(script_path, {})
    if err or not script_path.exists():
        sys.stderr.write(f"Invalid replay script: {err or script_path}\n")
        return 1
    try:
        script = ReplayScript.model_validate(raw)
    except ValidationError as exc:
        sys.stderr.write(f"Invalid replay script: {exc}\n")
        return 1

    controller = BoardController(board, settings=settings)
    if args.journal:
        if args.journal == "-":
            journal_path = _resolve_project_dir(args.project_dir) / STATE_DIR_NAME / JOURNAL_FILE
        else:
            journal_path = Path(args.journal).expanduser().resolve()
        controller.on_move(MoveJournal(journal_path))
    try:
        report = run_script(controller, script)
    except (BoardError, GeometryError) as exc:
        sys.stderr.write(f"Invalid replay script: {exc}\n")
        return 1
    finally:
        controller.destroy()

    if args.write and board_path is not None:
        _save_data(board_path, board.to_dict())
    payload = {
        "moves": [summarize_move(move) for move in report.moves],
        "ignored": report.ignored,
        "board": board.snapshot(),
    }
    sys.stdout.write(json.dumps(payload, indent=2) + "\n")
    return 0


def _add(args: argparse.Namespace) -> int:
    settings = _settings(args)
    board, board_path = _load_board(args.board)
    if board is None or board_path is None:
        return 1
    if not board.has_list(args.list_id):
        sys.stderr.write(f"Unknown list: {args.list_id}\n")
        return 1
    controller = BoardController(board, settings=settings)
    item = controller.add_task(args.list_id, args.text)
    controller.destroy()
    if item is None:
        sys.stderr.write("Task text must not be blank\n")
        return 1
    _save_data(board_path, board.to_dict())
    sys.stdout.write(json.dumps({"item": item.to_dict(), "board": board.snapshot()}, indent=2) + "\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Virtualized kanban board with drag-and-drop reordering")
    parser.add_argument("--project-dir", default=None, help="Directory holding .virtual_kanban/ (default: current working directory)")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Render the materialized rows of every column")
    show.add_argument("board")
    show.add_argument("--viewport", default=None, type=float)
    show.add_argument("--offset", default=0, type=float)
    show.set_defaults(func=_show)

    window = subparsers.add_parser("window", help="Print the visible range for a scroll position")
    window.add_argument("--count", required=True, type=int)
    window.add_argument("--offset", default=0, type=float)
    window.add_argument("--viewport", required=True, type=float)
    window.add_argument("--item-height", default=50, type=float)
    window.add_argument("--buffer", default=5, type=int)
    window.set_defaults(func=_window)

    replay = subparsers.add_parser("replay", help="Replay a scripted drag session against a board")
    replay.add_argument("board")
    replay.add_argument("script")
    replay.add_argument(
        "--journal",
        nargs="?",
        const="-",
        default=None,
        help="Append committed moves to this JSONL file (default: .virtual_kanban/moves.jsonl)",
    )
    replay.add_argument("--write", action="store_true", help="Save the resulting board back to BOARD")
    replay.set_defaults(func=_replay)

    add = subparsers.add_parser("add", help="Append a task to a list")
    add.add_argument("board")
    add.add_argument("list_id")
    add.add_argument("text")
    add.set_defaults(func=_add)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "func", None)
    if handler is None:
        parser.print_help()
        return 1
    return int(handler(args) or 0)


if __name__ == "__main__":
    raise SystemExit(main())
