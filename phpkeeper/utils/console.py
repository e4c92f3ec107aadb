"""
Console output utilities for phpkeeper using Rich.

This module provides user-facing output helpers for CLI commands.
For diagnostic or debug output, use :mod:`phpkeeper.utils.logger`.

Guidelines:
- print_* functions: user-facing status messages
- print_table / confirm: structured or interactive CLI output
- colorize_* / format_*: Rich markup for update reports
- Logging should never go through this module
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Callable, Dict, List, Optional

from rich.table import Table
from rich.theme import Theme
from rich.console import Console

from phpkeeper.models.update import PackageUpdate

# ---------------------------------------------------------------------------
# Theme configuration
# ---------------------------------------------------------------------------

PHPKEEPER_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "highlight": "bold magenta",
        "diff.major": "red",
        "diff.minor": "cyan",
        "diff.patch": "green",
    }
)

#: Marker and style per diff type, as shown in reports.
DIFF_LABELS: Dict[str, str] = {
    "major": "! major",
    "minor": "~ minor",
    "patch": ". patch",
}

# ---------------------------------------------------------------------------
# Console lifecycle management
# ---------------------------------------------------------------------------

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    """Return True if colored output should be enabled."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    """Return a singleton Rich Console instance."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                use_color = _should_use_color()
                _console = Console(
                    theme=PHPKEEPER_THEME,
                    no_color=not use_color,
                    highlight=False,
                )
    return _console


def reconfigure_console() -> None:
    """Drop the global console so the next call rebuilds it.

    Needed when ``NO_COLOR`` or the output stream changes at runtime.
    """
    global _console
    with _console_lock:
        _console = None


def get_raw_console() -> Console:
    """Return the underlying Rich Console instance."""
    return _get_console()


# ---------------------------------------------------------------------------
# Status message helpers
# ---------------------------------------------------------------------------


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    """Print a success message."""
    _get_console().print(f"{prefix} {message}", style="success", markup=False)


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    """Print an error message."""
    _get_console().print(f"{prefix} {message}", style="error", markup=False)


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    """Print a warning message."""
    _get_console().print(f"{prefix} {message}", style="warning", markup=False)


# ---------------------------------------------------------------------------
# Structured output
# ---------------------------------------------------------------------------


def print_table(
    data: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    caption: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
    row_styler: Optional[Callable[[Dict[str, Any]], Optional[str]]] = None,
) -> None:
    """Render rows of Rich markup as a table.

    Args:
        data: List of row dictionaries.
        headers: Column order. Defaults to keys of the first row.
        title: Optional table title.
        caption: Optional table caption.
        column_styles: Per-column ``style``/``justify``/``no_wrap`` options.
        row_styler: Optional callback returning a row style.
    """
    if not data:
        return

    if headers is None:
        headers = list(data[0].keys())

    table = Table(title=title, caption=caption, show_header=True, header_style="bold")

    column_styles = column_styles or {}
    for header in headers:
        config = column_styles.get(header, {})
        table.add_column(
            header,
            style=config.get("style"),
            justify=config.get("justify", "default"),
            no_wrap=config.get("no_wrap", False),
        )

    for row in data:
        values = [str(row.get(h, "")) for h in headers]
        style = row_styler(row) if row_styler else None
        table.add_row(*values, style=style)

    _get_console().print(table)


# ---------------------------------------------------------------------------
# User interaction
# ---------------------------------------------------------------------------


def confirm(message: str, *, default: bool = False) -> bool:
    """Ask a yes/no question.

    ``y``/``yes`` and ``n``/``no`` answer it; empty or unrecognized input
    returns *default*; Ctrl+C or EOF returns ``False``.
    """
    console = _get_console()
    suffix = " [Y/n]: " if default else " [y/N]: "
    console.print(f"{message}{suffix}", end="", style="info", markup=False)

    try:
        response = input().strip().lower()
    except (KeyboardInterrupt, EOFError):
        console.print()
        return False

    if response in ("y", "yes"):
        return True
    if response in ("n", "no"):
        return False
    return default


# ---------------------------------------------------------------------------
# Report markup
# ---------------------------------------------------------------------------


def colorize_diff_type(diff_type: str) -> str:
    """Return the Rich-markup label for a diff type.

    Example::

        >>> colorize_diff_type("major")
        '[diff.major]! major[/diff.major]'
    """
    key = diff_type.lower()
    label = DIFF_LABELS.get(key)
    if label is None:
        return diff_type
    return f"[diff.{key}]{label}[/diff.{key}]"


def colorize_version(version: str, diff_type: str) -> str:
    """Color *version* like its diff type."""
    key = diff_type.lower()
    if key not in DIFF_LABELS:
        return version
    return f"[diff.{key}]{version}[/diff.{key}]"


def colorize_age(age: str, months: int) -> str:
    """Color a release age by staleness.

    Releases two years or older are red, one year or older yellow, anything
    newer dim.
    """
    if not age:
        return "[dim]-[/dim]"
    if months >= 24:
        return f"[red]{age}[/red]"
    if months >= 12:
        return f"[yellow]{age}[/yellow]"
    return f"[dim]{age}[/dim]"


def format_package_choice(update: PackageUpdate) -> str:
    """One-line Rich markup summary of an update, used by interactive mode.

    Example::

        >>> format_package_choice(update)
        '[bold]vendor/package[/bold] ^1.0 -> [diff.minor]1.5.0[/diff.minor] ...'
    """
    parts = [
        f"[bold]{update.name}[/bold]",
        update.current_version,
        "->",
        colorize_version(update.latest_version, update.diff_type),
        colorize_diff_type(update.diff_type),
        colorize_age(update.age, update.age_months),
    ]
    if update.major_available:
        parts.append(f"[magenta]({update.major_available} available)[/magenta]")
    if update.php_requirement:
        parts.append(f"[dim](php {update.php_requirement})[/dim]")
    if update.deprecated:
        note = "deprecated"
        if update.replacement:
            note += f", use {update.replacement}"
        parts.append(f"[yellow]({note})[/yellow]")
    return " ".join(parts)
