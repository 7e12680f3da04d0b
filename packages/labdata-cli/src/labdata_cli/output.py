"""Rich console output utilities for labdata-cli.

This module provides formatted console output with Rich,
supporting colored success/error/warning messages and
respecting NO_COLOR environment variable.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping, Sequence
from typing import Any

from rich.console import Console
from rich.table import Table

# Rich automatically respects NO_COLOR, but we also support --no-color flag
_force_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False) -> Console:
    """Create a Rich Console instance with appropriate color settings.

    Args:
        no_color: If True, disable colored output. Also respects NO_COLOR env var.

    Returns:
        Configured Console instance.
    """
    force_terminal = None
    if no_color or _force_no_color:
        force_terminal = False
    return Console(force_terminal=force_terminal, no_color=no_color or _force_no_color)


# Default console instance
console = create_console()


def success(message: str, **kwargs: Any) -> None:
    """Print a success message with green checkmark.

    Example:
        >>> success("Wrote 11 tables")
        ✓ Wrote 11 tables
    """
    console.print(f"[green]✓[/green] {message}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print an error message with red X.

    Example:
        >>> error("Invalid catalog 'segments': catalog is empty")
        ✗ Invalid catalog 'segments': catalog is empty
    """
    console.print(f"[red]✗[/red] {message}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a warning message with yellow triangle."""
    console.print(f"[yellow]⚠[/yellow] {message}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    """Print an informational message."""
    console.print(message, **kwargs)


def print_json(data: Any, **kwargs: Any) -> None:
    """Print JSON data with syntax highlighting.

    Args:
        data: JSON-serializable data.
        **kwargs: Additional arguments passed to console.print_json().
    """
    console.print_json(json.dumps(data, default=str), **kwargs)


def print_row_counts(counts: Mapping[str, int], *, title: str = "Generated rows") -> None:
    """Print entity row counts as a table with a total row.

    Example:
        >>> print_row_counts({"customers": 10, "users": 64})
    """
    table = Table(title=title)
    table.add_column("Entity", style="cyan")
    table.add_column("Rows", justify="right")
    for entity, count in counts.items():
        table.add_row(entity, f"{count:,}")
    table.add_section()
    table.add_row("total", f"{sum(counts.values()):,}", style="bold")
    console.print(table)


def print_records(
    records: Sequence[Mapping[str, Any]],
    *,
    columns: Sequence[str],
    title: str | None = None,
) -> None:
    """Print a list of row dicts as a table."""
    table = Table(title=title)
    for column in columns:
        table.add_column(column)
    for record in records:
        table.add_row(*("" if record.get(c) is None else str(record.get(c)) for c in columns))
    console.print(table)


def print_record_cards(
    records: Sequence[Mapping[str, Any]],
    *,
    columns: Sequence[str],
    title: str | None = None,
) -> None:
    """Print each row dict as its own two-column field/value table.

    Used for views too wide to read as one table.
    """
    if title:
        console.print(title, style="bold")
    for record in records:
        table = Table(show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        for column in columns:
            value = record.get(column)
            table.add_row(column, "" if value is None else str(value))
        console.print(table)


def set_no_color(no_color: bool) -> None:
    """Update the global console to enable/disable colors.

    Note:
        This updates the module-level console instance.
    """
    global console
    console = create_console(no_color=no_color)
