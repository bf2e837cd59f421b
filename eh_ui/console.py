"""Rich-based console used for all user-facing output."""

from __future__ import annotations

import sys
from typing import IO

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from eh_ui.models import TableModel

THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "red",
        "success": "green",
        "accent": "#3ea6ff",
    }
)


class ConsoleUI:
    """ANSI-friendly output with Rich tables."""

    def __init__(self, stream: IO[str] | None = None, err_stream: IO[str] | None = None):
        self.console = Console(
            theme=THEME,
            file=stream or sys.stdout,
            highlight=False,
            soft_wrap=True,
        )
        self.err_console = Console(
            theme=THEME,
            file=err_stream or sys.stderr,
            highlight=False,
            soft_wrap=True,
        )

    def show_info(self, message: str) -> None:
        self.console.print(message, style="info", markup=False)

    def show_plain(self, message: str = "") -> None:
        self.console.print(message, markup=False)

    def show_success(self, message: str) -> None:
        self.console.print(message, style="success", markup=False)

    def show_failure(self, message: str) -> None:
        self.console.print(message, style="error", markup=False)

    def show_error(self, message: str) -> None:
        self.err_console.print(message, style="error", markup=False)

    def show_table(self, model: TableModel) -> None:
        table = Table(
            title=f"[b]{model.title}[/b]",
            border_style="accent",
            header_style="bold",
            row_styles=("", "dim"),
        )
        for column in model.columns:
            table.add_column(column, overflow="fold")
        for row in model.rows:
            table.add_row(*[str(cell) for cell in row])
        self.console.print(table)
