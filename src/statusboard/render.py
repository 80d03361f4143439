"""Rich renderables for row views, shared by the CLI and the TUI."""

from __future__ import annotations

from typing import List

from rich.console import RenderableType
from rich.spinner import Spinner
from rich.table import Table
from rich.text import Text

from statusboard.dashboard.row import Glyph, RowView

_GLYPHS = {
    Glyph.CHECKMARK: ("✓", "green"),
    Glyph.WARNING: ("!", "red"),
}


def accessory(view: RowView) -> RenderableType:
    """The status accessory of a row: spinner, glyph and optional message."""
    if view.glyph is None:
        return Text("")
    if view.glyph is Glyph.SPINNER:
        return Spinner("dots", style="cyan")
    symbol, style = _GLYPHS[view.glyph]
    text = Text(symbol, style=f"bold {style}")
    if view.message:
        text.append(f" {view.message}", style="dim" if view.glyph is Glyph.CHECKMARK else style)
    return text


def identity(view: RowView) -> Text:
    text = Text()
    if view.image:
        text.append(f"{view.image} ")
    text.append(view.name, style="bold")
    return text


def status_table(views: List[RowView], title: str = "Service Status") -> Table:
    table = Table(title=title)
    table.add_column("Service")
    table.add_column("Status", justify="center", min_width=12)
    for view in views:
        table.add_row(identity(view), accessory(view))
    return table
