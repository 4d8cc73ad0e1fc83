"""Tests for the HTTP repositories against a mocked transport."""

from __future__ import annotations

import json
import unittest

import httpx

from drivepicker.api import (
    ConnectionRepository,
    FileResourceRepository,
    HttpClient,
    KnowledgeBaseRepository,
    build_picker_deps,
)
from drivepicker.config import Settings
from drivepicker.errors import ApiError, ConnectionNotFoundError, PickerError

BACKEND = "https://api.example.test"


def _resource(resource_id: str, path: str, *, directory: bool = False) -> dict[str, object]:
    return {
        "resource_id": resource_id,
        "inode_type": "directory" if directory else "file",
        "inode_path": {"path": path},
    }


class _FakeApi:
    """Route table for ``httpx.MockTransport`` that records every request."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.connections: object = [{"connection_id": "conn-1"}]
        self.children: dict[str | None, list[dict[str, object]]] = {
            None: [_resource("d1", "Docs", directory=True), _resource("f1", "a.txt")],
            "d1": [_resource("d2", "Docs/Sub", directory=True), _resource("f2", "Docs/b.pdf")],
            "d2": [_resource("f3", "Docs/Sub/c.csv")],
        }
        self.failing_children: set[str] = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/v1/connections":
            return httpx.Response(200, json=self.connections)
        if path == "/v1/connections/conn-1/resources/children":
            folder_id = request.url.params.get("resource_id")
            if folder_id in self.failing_children:
                return httpx.Response(500, text="listing failed")
            items = self.children.get(folder_id, [])
            return httpx.Response(200, json={"data": items, "next_cursor": None, "current_cursor": None})
        if path == "/organizations/me/current":
            return httpx.Response(200, json={"org_id": "org-7"})
        if path == "/knowledge_bases" and request.method == "POST":
            return httpx.Response(200, json={"knowledge_base_id": "kb-42"})
        if path.startswith("/knowledge_bases/sync/trigger/"):
            return httpx.Response(200, text="ok", headers={"content-type": "text/plain"})
        if path == "/knowledge_bases/kb-42/resources" and request.method == "DELETE":
            return httpx.Response(204)
        return httpx.Response(404, text="not found")

    def client(self) -> HttpClient:
        return HttpClient("token-abc", transport=httpx.MockTransport(self.handler))


class HttpClientTests(unittest.IsolatedAsyncioTestCase):
    async def test_sends_bearer_token_and_maps_errors(self) -> None:
        api = _FakeApi()
        async with api.client() as client:
            with self.assertRaises(ApiError) as caught:
                await client.request("GET", f"{BACKEND}/missing")

        self.assertEqual(caught.exception.status_code, 404)
        self.assertEqual(api.requests[0].headers["Authorization"], "Bearer token-abc")

    async def test_non_json_and_no_content_return_none(self) -> None:
        api = _FakeApi()
        async with api.client() as client:
            self.assertIsNone(await client.request("GET", f"{BACKEND}/knowledge_bases/sync/trigger/kb/org"))
            self.assertIsNone(
                await client.request("DELETE", f"{BACKEND}/knowledge_bases/kb-42/resources")
            )


class ConnectionRepositoryTests(unittest.IsolatedAsyncioTestCase):
    async def test_connection_id_is_memoized(self) -> None:
        api = _FakeApi()
        async with api.client() as client:
            repo = ConnectionRepository(client, BACKEND)
            self.assertEqual(await repo.get_connection_id(), "conn-1")
            self.assertEqual(await repo.get_connection_id(), "conn-1")

        self.assertEqual(len(api.requests), 1)
        self.assertEqual(api.requests[0].url.params["limit"], "10")

    async def test_wrapped_connection_list_is_accepted(self) -> None:
        api = _FakeApi()
        api.connections = {"data": [{"connection_id": "conn-1"}]}
        async with api.client() as client:
            self.assertEqual(await ConnectionRepository(client, BACKEND).get_connection_id(), "conn-1")

    async def test_no_connection_raises(self) -> None:
        api = _FakeApi()
        api.connections = []
        async with api.client() as client:
            with self.assertRaises(ConnectionNotFoundError):
                await ConnectionRepository(client, BACKEND).get_connection_id()


class FileResourceRepositoryTests(unittest.IsolatedAsyncioTestCase):
    async def test_root_listing_omits_resource_id(self) -> None:
        api = _FakeApi()
        async with api.client() as client:
            repo = FileResourceRepository(client, BACKEND, ConnectionRepository(client, BACKEND))
            page = await repo.fetch_contents()

        self.assertEqual([node.id for node in page.items], ["d1", "f1"])
        self.assertNotIn("resource_id", api.requests[-1].url.params)

    async def test_descendant_ids_walk_the_subtree(self) -> None:
        api = _FakeApi()
        async with api.client() as client:
            repo = FileResourceRepository(client, BACKEND, ConnectionRepository(client, BACKEND))
            ids = await repo.get_descendant_ids("d1")

        self.assertEqual(ids, ["d1", "d2", "f3", "f2"])

    async def test_failed_listing_counts_as_leaf(self) -> None:
        api = _FakeApi()
        api.failing_children.add("d2")
        async with api.client() as client:
            repo = FileResourceRepository(client, BACKEND, ConnectionRepository(client, BACKEND))
            ids = await repo.get_descendant_ids("d1")

        self.assertEqual(ids, ["d1", "d2", "f2"])

    async def test_descendant_paths_start_with_root(self) -> None:
        api = _FakeApi()
        async with api.client() as client:
            repo = FileResourceRepository(client, BACKEND, ConnectionRepository(client, BACKEND))
            paths = await repo.get_descendant_paths("d1", "Docs")

        self.assertEqual(
            [(item.id, item.path) for item in paths],
            [("d1", "Docs"), ("d2", "Docs/Sub"), ("f3", "Docs/Sub/c.csv"), ("f2", "Docs/b.pdf")],
        )


class KnowledgeBaseRepositoryTests(unittest.IsolatedAsyncioTestCase):
    async def test_sync_creates_then_triggers(self) -> None:
        api = _FakeApi()
        async with api.client() as client:
            repo = KnowledgeBaseRepository(
                client, BACKEND, ConnectionRepository(client, BACKEND), indexing_params={"chunk_size": 1500}
            )
            knowledge_base_id = await repo.sync(["f1", "f2"])

        self.assertEqual(knowledge_base_id, "kb-42")
        create = next(request for request in api.requests if request.method == "POST")
        body = json.loads(create.content)
        self.assertEqual(body["connection_id"], "conn-1")
        self.assertEqual(body["connection_source_ids"], ["f1", "f2"])
        self.assertEqual(body["indexing_params"], {"chunk_size": 1500})
        self.assertEqual(api.requests[-1].url.path, "/knowledge_bases/sync/trigger/kb-42/org-7")

    async def test_missing_knowledge_base_id_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/v1/connections":
                return httpx.Response(200, json=[{"connection_id": "conn-1"}])
            if request.url.path == "/organizations/me/current":
                return httpx.Response(200, json={"org_id": "org-7"})
            return httpx.Response(200, json={})

        async with HttpClient("t", transport=httpx.MockTransport(handler)) as client:
            repo = KnowledgeBaseRepository(client, BACKEND, ConnectionRepository(client, BACKEND))
            with self.assertRaises(PickerError):
                await repo.sync(["f1"])

    async def test_delete_sends_resource_path(self) -> None:
        api = _FakeApi()
        async with api.client() as client:
            repo = KnowledgeBaseRepository(client, BACKEND, ConnectionRepository(client, BACKEND))
            await repo.delete("kb-42", "Docs/b.pdf")

        self.assertEqual(api.requests[-1].method, "DELETE")
        self.assertEqual(api.requests[-1].url.params["resource_path"], "Docs/b.pdf")


class BuildPickerDepsTests(unittest.IsolatedAsyncioTestCase):
    async def test_deps_route_to_repositories(self) -> None:
        api = _FakeApi()
        async with api.client() as client:
            deps = build_picker_deps(Settings(backend_url=BACKEND, access_token="token-abc"), client)
            page = await deps.fetch_folder_contents("d1")
            knowledge_base_id = await deps.index_resources(["f2"])

        self.assertEqual([node.id for node in page.items], ["d2", "f2"])
        self.assertEqual(knowledge_base_id, "kb-42")


if __name__ == "__main__":
    unittest.main()
