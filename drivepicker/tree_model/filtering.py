"""Name, status, and type filters for top-level picker listings.

Filters run in a fixed order (name, then status, then type) and each one
narrows the previous result. All helpers are pure and never mutate input.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable

from .sorting import sort_nodes
from .types import FileNode, FilterParams, SortOrder, StatusFilter

VALID_STATUS: tuple[str, ...] = ("all", "indexed", "not-indexed")
VALID_TYPE: tuple[str, ...] = ("all", "folder", "file", "pdf", "csv", "txt")
VALID_SORT_ORDER: tuple[str, ...] = ("asc", "desc")


def file_extension(name: str) -> str:
    """Return the lowercase last dot-segment of ``name`` (whole name when dotless)."""
    return name.rsplit(".", 1)[-1].lower()


def filter_by_name(nodes: list[FileNode], query: str) -> list[FileNode]:
    trimmed = query.strip()
    if not trimmed:
        return nodes
    needle = trimmed.lower()
    return [node for node in nodes if needle in node.name.lower()]


def filter_by_status(
    nodes: list[FileNode],
    status: StatusFilter,
    indexed_ids: Collection[str],
) -> list[FileNode]:
    """Keep nodes whose server or optimistic index status matches ``status``."""
    if status == "all":
        return nodes
    want_indexed = status == "indexed"
    return [node for node in nodes if (node.is_indexed or node.id in indexed_ids) == want_indexed]


def filter_by_type(nodes: list[FileNode], type_filter: str) -> list[FileNode]:
    """Keep folders, files, or files with a given extension."""
    if type_filter == "all":
        return nodes
    if type_filter in ("folder", "file"):
        return [node for node in nodes if node.kind == type_filter]
    return [node for node in nodes if node.kind == "file" and file_extension(node.name) == type_filter]


def apply_filters(
    nodes: Iterable[FileNode],
    query: str = "",
    status: StatusFilter = "all",
    type: str = "all",
    indexed_ids: Collection[str] = frozenset(),
) -> list[FileNode]:
    """Apply name, status, and type filters in order (AND semantics)."""
    after_name = filter_by_name(list(nodes), query)
    after_status = filter_by_status(after_name, status, indexed_ids)
    return filter_by_type(after_status, type)


def process_nodes(
    nodes: Iterable[FileNode],
    params: FilterParams,
    indexed_ids: Collection[str],
    order: SortOrder,
) -> list[FileNode]:
    """Filter then sort a top-level listing."""
    filtered = apply_filters(
        nodes,
        query=params.query,
        status=params.status,
        type=params.type,
        indexed_ids=indexed_ids,
    )
    return sort_nodes(filtered, order)


def has_active_filters(params: FilterParams) -> bool:
    return params.status != "all" or params.type != "all" or params.query.strip() != ""


def parse_status(value: object) -> StatusFilter:
    """Coerce untrusted input to a status filter, defaulting to ``"all"``."""
    if isinstance(value, str) and value in VALID_STATUS:
        return value  # type: ignore[return-value]
    return "all"


def parse_type(value: object) -> str:
    """Coerce untrusted input to a type filter, defaulting to ``"all"``."""
    if isinstance(value, str) and value in VALID_TYPE:
        return value
    return "all"


def parse_sort_order(value: object) -> SortOrder:
    """Coerce untrusted input to a sort order, defaulting to ``"asc"``."""
    if isinstance(value, str) and value in VALID_SORT_ORDER:
        return value  # type: ignore[return-value]
    return "asc"


__all__ = [
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
]
