"""Flatten the visible part of the folder tree into display rows."""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence

from .sorting import sort_nodes
from .types import DisplayRow, FileNode, NodeRow, PlaceholderRow, SortOrder

PLACEHOLDER_ROWS_PER_FOLDER = 3


def build_display_rows(
    nodes: Sequence[FileNode],
    depth: int,
    expanded_ids: Collection[str],
    children_by_id: Mapping[str, Sequence[FileNode]],
    order: SortOrder,
) -> list[DisplayRow]:
    """Build rows depth-first honoring expansion state.

    ``nodes`` are emitted in the given order. Loaded children of expanded
    folders are sorted with ``order`` and recursed into at ``depth + 1``;
    expanded folders without loaded children get placeholder rows instead.
    """
    rows: list[DisplayRow] = []

    def walk(level: Sequence[FileNode], level_depth: int) -> None:
        for node in level:
            rows.append(NodeRow(node=node, depth=level_depth))
            if not node.is_folder or node.id not in expanded_ids:
                continue
            children = children_by_id.get(node.id)
            if children is None:
                for slot in range(PLACEHOLDER_ROWS_PER_FOLDER):
                    rows.append(PlaceholderRow(folder_id=node.id, depth=level_depth + 1, slot=slot))
                continue
            walk(sort_nodes(children, order), level_depth + 1)

    walk(nodes, depth)
    return rows


def row_key(row: DisplayRow) -> str:
    """Stable identity for a row, suitable for view diffing."""
    if isinstance(row, PlaceholderRow):
        return f"placeholder:{row.folder_id}:{row.slot}"
    return f"node:{row.node.id}"


__all__ = ["PLACEHOLDER_ROWS_PER_FOLDER", "build_display_rows", "row_key"]
