"""Tests for the shared folder-content cache."""

from __future__ import annotations

import asyncio
import unittest

from drivepicker.runtime import FolderContentCache
from drivepicker.tree_model import FileNode, PaginatedNodeList


class _GatedFetcher:
    """Fetcher whose calls block until the test releases them."""

    def __init__(self) -> None:
        self.calls: list[str | None] = []
        self.gates: dict[str | None, asyncio.Event] = {}

    async def __call__(self, folder_id: str | None) -> PaginatedNodeList:
        self.calls.append(folder_id)
        gate = self.gates.setdefault(folder_id, asyncio.Event())
        await gate.wait()
        if folder_id == "broken":
            raise RuntimeError("boom")
        child = FileNode(id=f"{folder_id}-child", name="child.txt", kind="file", parent_id=folder_id)
        return PaginatedNodeList(items=(child,))

    def release(self, folder_id: str | None) -> None:
        self.gates.setdefault(folder_id, asyncio.Event()).set()


class FolderContentCacheTests(unittest.IsolatedAsyncioTestCase):
    async def test_concurrent_fetches_share_one_request(self) -> None:
        fetcher = _GatedFetcher()
        cache = FolderContentCache(fetcher)

        first = asyncio.ensure_future(cache.fetch("a"))
        second = asyncio.ensure_future(cache.fetch("a"))
        await asyncio.sleep(0)
        self.assertTrue(cache.is_fetching("a"))
        fetcher.release("a")

        self.assertEqual(await first, await second)
        self.assertEqual(fetcher.calls, ["a"])
        self.assertEqual(cache.fetch_count, 1)
        self.assertIn("a", cache)
        self.assertFalse(cache.is_fetching("a"))

    async def test_cached_folder_is_not_refetched(self) -> None:
        fetcher = _GatedFetcher()
        fetcher.release(None)
        cache = FolderContentCache(fetcher)

        await cache.fetch(None)
        await cache.fetch(None)
        cache.prefetch(None)

        self.assertEqual(fetcher.calls, [None])
        self.assertEqual(cache.get(None)[0].id, "None-child")

    async def test_prefetch_warms_cache_for_later_fetch(self) -> None:
        fetcher = _GatedFetcher()
        cache = FolderContentCache(fetcher)

        cache.prefetch("a")
        await asyncio.sleep(0)
        fetcher.release("a")
        children = await cache.fetch("a")

        self.assertEqual([node.id for node in children], ["a-child"])
        self.assertEqual(cache.fetch_count, 1)

    async def test_cancel_drops_in_flight_fetch_without_caching(self) -> None:
        fetcher = _GatedFetcher()
        cache = FolderContentCache(fetcher)

        cache.prefetch("a")
        await asyncio.sleep(0)
        self.assertTrue(cache.cancel("a"))
        await asyncio.sleep(0)

        self.assertNotIn("a", cache)
        self.assertFalse(cache.is_fetching("a"))
        self.assertFalse(cache.cancel("a"))

    async def test_failed_fetch_propagates_and_is_not_cached(self) -> None:
        fetcher = _GatedFetcher()
        fetcher.release("broken")
        cache = FolderContentCache(fetcher)

        with self.assertRaises(RuntimeError):
            await cache.fetch("broken")
        self.assertIsNone(cache.get("broken"))

    async def test_invalidate_during_fetch_does_not_cache_stale_result(self) -> None:
        fetcher = _GatedFetcher()
        cache = FolderContentCache(fetcher)

        stale = asyncio.ensure_future(cache.fetch("a"))
        await asyncio.sleep(0)
        cache.invalidate(everything=True)
        self.assertFalse(cache.is_fetching("a"))
        fetcher.release("a")

        self.assertEqual([node.id for node in await stale], ["a-child"])
        self.assertNotIn("a", cache)

        await cache.fetch("a")
        self.assertEqual(fetcher.calls, ["a", "a"])
        self.assertIn("a", cache)

    async def test_invalidate_one_or_everything(self) -> None:
        fetcher = _GatedFetcher()
        for folder_id in ("a", "b"):
            fetcher.release(folder_id)
        cache = FolderContentCache(fetcher)
        await cache.fetch("a")
        await cache.fetch("b")

        cache.invalidate("a")
        self.assertNotIn("a", cache)
        self.assertIn("b", cache)

        cache.invalidate(everything=True)
        self.assertNotIn("b", cache)


if __name__ == "__main__":
    unittest.main()
