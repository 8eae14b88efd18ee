"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from ucdstore.bridge.base import DirectoryEntry
from ucdstore.core.theme import get_theme

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ucdstore.bridge.base import FSEntry
    from ucdstore.store.models import VersionAnalysis


def _detect_color_system() -> str | None:
    """Use truecolor on interactive terminals, otherwise let Rich decide."""
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def create_analysis_table(title: str = "Store Analysis") -> Table:
    """Create a pre-configured table for drift reports.

    Args:
        title: Table title.

    Returns:
        Rich Table with one column per drift count.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("", width=2, justify="center")
    table.add_column("Version", no_wrap=True)
    table.add_column("Present", style="info", justify="right")
    table.add_column("Expected", style="muted", justify="right")
    table.add_column("Missing", style="missing", justify="right")
    table.add_column("Orphaned", style="removed", justify="right")
    return table


def format_analysis_row(analysis: VersionAnalysis) -> tuple[str, str, str, str, str, str]:
    """Format a drift report as a table row.

    Args:
        analysis: Drift report of one version.

    Returns:
        Tuple of (icon, version, present, expected, missing, orphaned).
    """
    icon = "[success]●[/]" if analysis.is_complete else "[warning]○[/]"
    return (
        icon,
        f"[text]{analysis.version}[/]",
        str(analysis.file_count),
        str(analysis.expected_file_count),
        str(len(analysis.missing_files)),
        str(len(analysis.orphaned_files)),
    )


def build_file_tree(label: str, entries: Iterable[FSEntry]) -> Tree:
    """Render a listing as a Rich tree.

    Args:
        label: Root label.
        entries: Listing as returned by the store.

    Returns:
        Rich Tree mirroring the listing.
    """
    tree = Tree(f"[bold_header]{label}[/]", guide_style="border")
    _add_entries(tree, entries)
    return tree


def _add_entries(node: Tree, entries: Iterable[FSEntry]) -> None:
    for entry in entries:
        if isinstance(entry, DirectoryEntry):
            _add_entries(node.add(f"[info]{entry.name}/[/]"), entry.children)
        else:
            node.add(f"[text]{entry.name}[/]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
