"""Node, page, and display-row datatypes used across the picker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

NodeKind = Literal["file", "folder"]
SortOrder = Literal["asc", "desc"]
StatusFilter = Literal["all", "indexed", "not-indexed"]
TypeFilter = Literal["all", "folder", "file", "pdf", "csv", "txt"]
FolderLoadState = Literal["unknown", "loading", "loaded", "failed"]


@dataclass(frozen=True)
class FileNode:
    """One file or folder in the remote Drive tree.

    ``is_indexed`` is the server-known status at fetch time; optimistic status
    lives in the index tracker. ``resource_path`` is required to de-index.
    """

    id: str
    name: str
    kind: NodeKind
    updated_at: str = ""
    is_indexed: bool = False
    parent_id: str | None = None
    resource_path: str | None = None
    mime_type: str | None = None
    size: int | None = None

    @property
    def is_folder(self) -> bool:
        return self.kind == "folder"


@dataclass(frozen=True)
class PaginatedNodeList:
    """One listing page. Only the first page is consumed; cursors are reserved."""

    items: tuple[FileNode, ...]
    next_cursor: str | None = None
    current_cursor: str | None = None


@dataclass(frozen=True)
class DescendantPath:
    """Resource id plus canonical path, as needed by de-index calls."""

    id: str
    path: str


@dataclass(frozen=True)
class BreadcrumbSegment:
    id: str
    name: str


@dataclass(frozen=True)
class FilterParams:
    """User-selected filters applied to the top-level listing."""

    query: str = ""
    status: StatusFilter = "all"
    type: str = "all"


@dataclass(frozen=True)
class NodeRow:
    """Display row for a real node."""

    node: FileNode
    depth: int
    kind: str = "node"


@dataclass(frozen=True)
class PlaceholderRow:
    """Loading stand-in row for a folder whose children are not loaded yet."""

    folder_id: str
    depth: int
    slot: int
    kind: str = "placeholder"


DisplayRow = NodeRow | PlaceholderRow


__all__ = [
    "NodeKind",
    "SortOrder",
    "StatusFilter",
    "TypeFilter",
    "FolderLoadState",
    "FileNode",
    "PaginatedNodeList",
    "DescendantPath",
    "BreadcrumbSegment",
    "FilterParams",
    "NodeRow",
    "PlaceholderRow",
    "DisplayRow",
]
