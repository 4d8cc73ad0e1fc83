"""Pure tree-model layer: node types, filtering, sorting, and row building.

Nothing here performs I/O or holds state; the runtime package owns state and
recomputes rows through these helpers on every change.
"""

from __future__ import annotations

from .filtering import (
    VALID_SORT_ORDER,
    VALID_STATUS,
    VALID_TYPE,
    apply_filters,
    file_extension,
    filter_by_name,
    filter_by_status,
    filter_by_type,
    has_active_filters,
    parse_sort_order,
    parse_status,
    parse_type,
    process_nodes,
)
from .rendering import format_display_row
from .rows import PLACEHOLDER_ROWS_PER_FOLDER, build_display_rows, row_key
from .sorting import name_sort_key, sort_nodes
from .types import (
    BreadcrumbSegment,
    DescendantPath,
    DisplayRow,
    FileNode,
    FilterParams,
    FolderLoadState,
    NodeKind,
    NodeRow,
    PaginatedNodeList,
    PlaceholderRow,
    SortOrder,
    StatusFilter,
    TypeFilter,
)

__all__ = [
    "FileNode",
    "NodeKind",
    "PaginatedNodeList",
    "DescendantPath",
    "BreadcrumbSegment",
    "FilterParams",
    "FolderLoadState",
    "SortOrder",
    "StatusFilter",
    "TypeFilter",
    "NodeRow",
    "PlaceholderRow",
    "DisplayRow",
    "VALID_STATUS",
    "VALID_TYPE",
    "VALID_SORT_ORDER",
    "file_extension",
    "filter_by_name",
    "filter_by_status",
    "filter_by_type",
    "apply_filters",
    "process_nodes",
    "has_active_filters",
    "parse_status",
    "parse_type",
    "parse_sort_order",
    "name_sort_key",
    "sort_nodes",
    "PLACEHOLDER_ROWS_PER_FOLDER",
    "build_display_rows",
    "row_key",
    "format_display_row",
]
