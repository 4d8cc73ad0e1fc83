"""Repositories for Drive connections, folder listings, and knowledge bases."""

from __future__ import annotations

from collections.abc import Sequence

import loguru

from ..errors import ConnectionNotFoundError, PickerError
from ..tree_model import DescendantPath, PaginatedNodeList
from .http_client import HttpClient
from .mappers import map_page

CONNECTION_LIST_LIMIT = "10"
NO_CONNECTION_MESSAGE = (
    "No Google Drive connection found. Create one in the Workflow builder "
    "(Connections -> New connection -> Google Drive)."
)


class ConnectionRepository:
    """Discover the Google Drive connection id, memoized per instance."""

    def __init__(self, client: HttpClient, backend_url: str) -> None:
        self.client = client
        self.backend_url = backend_url
        self._connection_id: str | None = None

    async def get_connection_id(self) -> str:
        if self._connection_id is not None:
            return self._connection_id
        payload = await self.client.request(
            "GET",
            f"{self.backend_url}/v1/connections",
            params={"limit": CONNECTION_LIST_LIMIT},
        )
        connections: object = payload
        if isinstance(payload, dict):
            connections = payload.get("data") or payload.get("results") or payload.get("items") or []
        if not isinstance(connections, list) or not connections:
            raise ConnectionNotFoundError(NO_CONNECTION_MESSAGE)
        first = connections[0]
        if not isinstance(first, dict) or not first.get("connection_id"):
            raise ConnectionNotFoundError(NO_CONNECTION_MESSAGE)
        self._connection_id = str(first["connection_id"])
        return self._connection_id

    async def get_organization_id(self) -> str:
        payload = await self.client.request("GET", f"{self.backend_url}/organizations/me/current")
        if not isinstance(payload, dict) or not payload.get("org_id"):
            raise PickerError("Organization id missing from API response")
        return str(payload["org_id"])


class FileResourceRepository:
    """List folder contents and walk folder subtrees."""

    def __init__(self, client: HttpClient, backend_url: str, connections: ConnectionRepository) -> None:
        self.client = client
        self.backend_url = backend_url
        self.connections = connections

    async def fetch_contents(self, folder_id: str | None = None) -> PaginatedNodeList:
        connection_id = await self.connections.get_connection_id()
        params = {"resource_id": folder_id} if folder_id else None
        payload = await self.client.request(
            "GET",
            f"{self.backend_url}/v1/connections/{connection_id}/resources/children",
            params=params,
        )
        return map_page(payload, folder_id)

    async def get_descendant_ids(self, resource_id: str) -> list[str]:
        """Return ``resource_id`` plus every nested id below it.

        A failed listing counts as "no children": files cannot be listed, and
        an outage below a folder silently truncates the result.
        """
        ids: dict[str, None] = {resource_id: None}
        try:
            page = await self.fetch_contents(resource_id)
        except Exception as exc:
            loguru.logger.debug(f"Treating {resource_id} as a leaf: {exc}")
            return list(ids)
        for child in page.items:
            ids[child.id] = None
            if child.is_folder:
                for nested in await self.get_descendant_ids(child.id):
                    ids[nested] = None
        return list(ids)

    async def get_descendant_paths(self, resource_id: str, root_path: str) -> list[DescendantPath]:
        """Return ``(id, path)`` for the root and every descendant with a path."""
        result = [DescendantPath(id=resource_id, path=root_path)]
        try:
            page = await self.fetch_contents(resource_id)
        except Exception as exc:
            loguru.logger.debug(f"Treating {resource_id} as a leaf: {exc}")
            return result
        for child in page.items:
            if not child.resource_path:
                continue
            result.append(DescendantPath(id=child.id, path=child.resource_path))
            if child.is_folder:
                nested = await self.get_descendant_paths(child.id, child.resource_path)
                result.extend(nested[1:])
        return result


class KnowledgeBaseRepository:
    """Create/sync knowledge bases and remove resources from them."""

    def __init__(
        self,
        client: HttpClient,
        backend_url: str,
        connections: ConnectionRepository,
        indexing_params: dict[str, object] | None = None,
    ) -> None:
        self.client = client
        self.backend_url = backend_url
        self.connections = connections
        self.indexing_params = indexing_params

    async def sync(self, resource_ids: Sequence[str]) -> str:
        """Create a knowledge base over ``resource_ids``, trigger its sync, return its id."""
        connection_id = await self.connections.get_connection_id()
        org_id = await self.connections.get_organization_id()
        body: dict[str, object] = {
            "connection_id": connection_id,
            "connection_source_ids": list(resource_ids),
            "org_level_role": None,
            "cron_job_id": None,
        }
        if self.indexing_params is not None:
            body["indexing_params"] = self.indexing_params

        created = await self.client.request("POST", f"{self.backend_url}/knowledge_bases", json=body)
        if not isinstance(created, dict) or not created.get("knowledge_base_id"):
            raise PickerError("Knowledge base id missing from API response")
        knowledge_base_id = str(created["knowledge_base_id"])

        await self.client.request(
            "GET",
            f"{self.backend_url}/knowledge_bases/sync/trigger/{knowledge_base_id}/{org_id}",
        )
        return knowledge_base_id

    async def delete(self, knowledge_base_id: str, resource_path: str) -> None:
        await self.client.request(
            "DELETE",
            f"{self.backend_url}/knowledge_bases/{knowledge_base_id}/resources",
            params={"resource_path": resource_path},
        )


__all__ = [
    "NO_CONNECTION_MESSAGE",
    "ConnectionRepository",
    "FileResourceRepository",
    "KnowledgeBaseRepository",
]
