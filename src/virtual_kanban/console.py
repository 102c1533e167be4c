"""Render the materialized part of a board as rich text."""

from __future__ import annotations

import io
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .controller import BoardController
from .surfaces import RecordingSurface


def format_column(controller: BoardController, list_id: str) -> Table:
    ordered = controller.board.get_list(list_id)
    state = controller.window_state(list_id)
    table = Table(
        title=escape(f"{ordered.title} ({len(ordered)})"),
        caption=f"offset {state.scroll_offset:g} / extent {state.extent:g}",
        show_header=True,
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("top", justify="right")
    table.add_column("id", style="cyan")
    table.add_column("text")

    surface = controller.surfaces.get(list_id)
    if isinstance(surface, RecordingSurface):
        for handle in surface.visible():
            table.add_row(str(handle.index), f"{handle.top:g}", escape(handle.item_id), escape(handle.label))
    else:
        for index in sorted(state.materialized_indices):
            item = controller.board.item_at(list_id, index)
            if item is None:
                continue
            table.add_row(str(index), f"{controller.trackers[list_id].claimed_top(index):g}", escape(item.id), escape(str(item.payload)))
    return table


def format_board(controller: BoardController, *, width: Optional[int] = 120) -> str:
    """Render every column's materialized rows and return the plain text."""
    console = Console(record=True, width=width, file=io.StringIO())
    console.print()
    console.print(f"[bold]Board: {len(controller.board.list_ids())} lists, {len(controller.board)} items[/bold]")
    console.print("━" * 80)
    for list_id in controller.board.list_ids():
        console.print(format_column(controller, list_id))
    if controller.drag.session is not None:
        session = controller.drag.session
        detail = (
            f"{session.item_id} from {session.origin_list_id}[{session.origin_index}] "
            f"-> {session.target_list_id}[{session.insertion_index}]"
        )
        console.print(f"\n[bold yellow]Dragging:[/bold yellow] {escape(detail)}")
    return console.export_text()
