"""
Rich terminal output utilities for the layerdoc CLI.

Provides tables, panels, markdown and highlighted JSON, with a plain
text mode for pipes and ``--no-rich``.
"""

import json
from typing import Any, List, Optional, Union

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table


class PlainTable:
    """Table rendered as pipe-separated text in plain mode."""

    def __init__(self, title: str, columns: List[str]):
        self.title = title
        self.columns = columns
        self.rows: List[List[str]] = []

    def add_row(self, *values: Any) -> None:
        self.rows.append([str(v) for v in values])


class RichOutputManager:
    """Manages rich terminal output with a plain-text mode."""

    def __init__(self, use_rich: bool = True):
        self.use_rich = use_rich
        if use_rich:
            self.console = Console()
        else:
            self.console = Console(no_color=True, highlight=False, markup=False, emoji=False, soft_wrap=True)

    def print_header(self, title: str, subtitle: Optional[str] = None) -> None:
        """Print a formatted header."""
        if self.use_rich:
            if subtitle:
                header_text = f"[bold blue]{title}[/bold blue]\n[dim]{subtitle}[/dim]"
            else:
                header_text = f"[bold blue]{title}[/bold blue]"

            self.console.print(Panel(header_text, border_style="blue", padding=(1, 2)))
        else:
            self.console.print(f"\n=== {title} ===")
            if subtitle:
                self.console.print(subtitle)
            self.console.print()

    def print_section(self, title: str) -> None:
        """Print a section separator."""
        if self.use_rich:
            self.console.rule(f"[bold]{title}[/bold]", style="blue")
        else:
            self.console.print(f"\n--- {title} ---")

    def print_success(self, message: str) -> None:
        if self.use_rich:
            self.console.print(f"[green]✓[/green] {escape(message)}")
        else:
            self.console.print(f"OK {message}")

    def print_warning(self, message: str) -> None:
        if self.use_rich:
            self.console.print(f"[yellow]⚠[/yellow] {escape(message)}")
        else:
            self.console.print(f"WARNING {message}")

    def print_error(self, message: str) -> None:
        if self.use_rich:
            self.console.print(f"[red]✗[/red] {escape(message)}")
        else:
            self.console.print(f"ERROR {message}")

    def print_info(self, message: str) -> None:
        if self.use_rich:
            self.console.print(f"[blue]ℹ[/blue] {escape(message)}")
        else:
            self.console.print(f"INFO {message}")

    def create_table(self, title: str, columns: List[str]) -> Union[Table, PlainTable]:
        """Create a table for the current mode."""
        if self.use_rich:
            table = Table(title=title, show_header=True, header_style="bold blue")
            for column in columns:
                table.add_column(column)
            return table
        return PlainTable(title, columns)

    def add_table_row(self, table: Union[Table, PlainTable], *values: Any) -> None:
        table.add_row(*[str(v) for v in values])

    def print_table(self, table: Union[Table, PlainTable]) -> None:
        if isinstance(table, PlainTable):
            self.console.print(f"\n{table.title}")
            self.console.print("-" * len(table.title))

            header = " | ".join(table.columns)
            self.console.print(header)
            self.console.print("-" * len(header))

            for row in table.rows:
                self.console.print(" | ".join(row))
            self.console.print()
        else:
            self.console.print(table)

    def print_json(self, data: Any, title: Optional[str] = None) -> None:
        """Print JSON data with syntax highlighting."""
        if title:
            self.print_section(title)

        json_str = json.dumps(data, indent=2, default=str)
        if self.use_rich:
            self.console.print(Syntax(json_str, "json", theme="monokai", line_numbers=False))
        else:
            self.console.print(json_str)

    def print_markdown(self, markdown_text: str) -> None:
        if self.use_rich:
            self.console.print(Markdown(markdown_text))
        else:
            self.console.print(markdown_text)


# Global instance
rich_output = RichOutputManager()


def set_rich_enabled(enabled: bool) -> None:
    """Enable or disable rich output globally."""
    global rich_output
    rich_output = RichOutputManager(use_rich=enabled)


def get_rich_output() -> RichOutputManager:
    """Get the global rich output manager."""
    return rich_output
