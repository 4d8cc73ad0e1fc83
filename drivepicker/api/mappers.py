"""Map transport payloads (snake_case API resources) to picker nodes."""

from __future__ import annotations

from collections.abc import Mapping

from ..tree_model import FileNode, PaginatedNodeList


def display_name(resource: Mapping[str, object]) -> str:
    """Last path segment of ``inode_path.path``, falling back to the resource id."""
    path = _inode_path(resource) or ""
    return path.rsplit("/", 1)[-1] or str(resource.get("resource_id", ""))


def _inode_path(resource: Mapping[str, object]) -> str | None:
    inode = resource.get("inode_path")
    if not isinstance(inode, Mapping):
        return None
    path = inode.get("path")
    return path if isinstance(path, str) else None


def _optional_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def map_resource(resource: Mapping[str, object], parent_id: str | None = None) -> FileNode:
    """Convert one API resource to a :class:`FileNode` fetched under ``parent_id``."""
    updated_at = resource.get("updated_at") or resource.get("created_at") or ""
    mime_type = resource.get("mime_type")
    return FileNode(
        id=str(resource["resource_id"]),
        name=display_name(resource),
        kind="folder" if resource.get("inode_type") == "directory" else "file",
        updated_at=str(updated_at),
        is_indexed=resource.get("status") == "indexed",
        parent_id=parent_id,
        resource_path=_inode_path(resource),
        mime_type=mime_type if isinstance(mime_type, str) else None,
        size=_optional_int(resource.get("size")),
    )


def map_page(payload: object, parent_id: str | None = None) -> PaginatedNodeList:
    """Convert a paginated ``{data, next_cursor, current_cursor}`` payload.

    Entries that are not objects or lack a ``resource_id`` are skipped.
    """
    if not isinstance(payload, Mapping):
        return PaginatedNodeList(items=())
    raw_items = payload.get("data")
    items: list[FileNode] = []
    if isinstance(raw_items, list):
        for raw in raw_items:
            if isinstance(raw, Mapping) and raw.get("resource_id"):
                items.append(map_resource(raw, parent_id))
    next_cursor = payload.get("next_cursor")
    current_cursor = payload.get("current_cursor")
    return PaginatedNodeList(
        items=tuple(items),
        next_cursor=next_cursor if isinstance(next_cursor, str) else None,
        current_cursor=current_cursor if isinstance(current_cursor, str) else None,
    )


__all__ = ["display_name", "map_resource", "map_page"]
