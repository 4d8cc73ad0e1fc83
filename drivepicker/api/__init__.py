"""HTTP adapters implementing the picker's remote collaborators."""

from __future__ import annotations

from ..config import Settings
from ..runtime.deps import PickerDeps
from .http_client import REQUEST_TIMEOUT_SECONDS, HttpClient
from .mappers import display_name, map_page, map_resource
from .repositories import (
    NO_CONNECTION_MESSAGE,
    ConnectionRepository,
    FileResourceRepository,
    KnowledgeBaseRepository,
)


def build_picker_deps(settings: Settings, client: HttpClient) -> PickerDeps:
    """Wire repositories over ``client`` into the collaborator deps of a session."""
    connections = ConnectionRepository(client, settings.backend_url)
    files = FileResourceRepository(client, settings.backend_url, connections)
    knowledge_bases = KnowledgeBaseRepository(
        client,
        settings.backend_url,
        connections,
        indexing_params=settings.indexing_params,
    )
    return PickerDeps(
        fetch_folder_contents=files.fetch_contents,
        resolve_descendant_ids=files.get_descendant_ids,
        resolve_descendant_paths=files.get_descendant_paths,
        index_resources=knowledge_bases.sync,
        deindex_resource=knowledge_bases.delete,
    )


__all__ = [
    "REQUEST_TIMEOUT_SECONDS",
    "HttpClient",
    "display_name",
    "map_page",
    "map_resource",
    "NO_CONNECTION_MESSAGE",
    "ConnectionRepository",
    "FileResourceRepository",
    "KnowledgeBaseRepository",
    "build_picker_deps",
]
