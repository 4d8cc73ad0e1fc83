"""Plain-text formatting of display rows."""

from __future__ import annotations

from .types import DisplayRow, PlaceholderRow

INDENT = "  "
PLACEHOLDER_TEXT = "..."


def format_display_row(row: DisplayRow, is_indexed: bool = False) -> str:
    """Format one row as an indented line.

    Folders end with ``/``; indexed nodes get a trailing `` *`` marker.
    """
    prefix = INDENT * row.depth
    if isinstance(row, PlaceholderRow):
        return f"{prefix}{PLACEHOLDER_TEXT}"
    node = row.node
    label = f"{node.name}/" if node.is_folder else node.name
    marker = " *" if is_indexed else ""
    return f"{prefix}{label}{marker}"


__all__ = ["format_display_row"]
