"""Dependency container for the remote collaborators the picker core calls."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ..tree_model import DescendantPath, PaginatedNodeList


@dataclass(frozen=True)
class PickerDeps:
    """Async collaborators required by :class:`~drivepicker.runtime.session.PickerSession`.

    ``fetch_folder_contents`` lists one page (``None`` is the root).
    ``resolve_descendant_ids`` includes the resource itself.
    ``resolve_descendant_paths`` starts with the root and ``root_path``.
    ``index_resources`` returns the knowledge-base id.
    """

    fetch_folder_contents: Callable[[str | None], Awaitable[PaginatedNodeList]]
    resolve_descendant_ids: Callable[[str], Awaitable[list[str]]]
    resolve_descendant_paths: Callable[[str, str], Awaitable[list[DescendantPath]]]
    index_resources: Callable[[list[str]], Awaitable[str]]
    deindex_resource: Callable[[str, str], Awaitable[None]]


__all__ = ["PickerDeps"]
