"""Shared folder-content cache fed by both expansion loads and hover prefetch."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import loguru

from ..tree_model import FileNode, PaginatedNodeList

FolderKey = str | None


class FolderContentCache:
    """Cache first-page listings by folder id with in-flight deduplication.

    Concurrent requests for the same folder share one task. Cancellation is
    advisory: the task is cancelled and its result is never cached, but the
    underlying network transfer may still complete.
    """

    def __init__(self, fetch_folder_contents: Callable[[FolderKey], Awaitable[PaginatedNodeList]]) -> None:
        self._fetch_folder_contents = fetch_folder_contents
        self._entries: dict[FolderKey, tuple[FileNode, ...]] = {}
        self._inflight: dict[FolderKey, asyncio.Task[tuple[FileNode, ...]]] = {}
        self.fetch_count = 0
        self._generation = 0

    def get(self, folder_id: FolderKey) -> tuple[FileNode, ...] | None:
        """Return cached children for ``folder_id`` or ``None`` on a miss."""
        return self._entries.get(folder_id)

    def __contains__(self, folder_id: object) -> bool:
        return folder_id in self._entries

    def is_fetching(self, folder_id: FolderKey) -> bool:
        task = self._inflight.get(folder_id)
        return task is not None and not task.done()

    async def _load(self, folder_id: FolderKey, generation: int) -> tuple[FileNode, ...]:
        self.fetch_count += 1
        loguru.logger.debug(f"Fetching folder contents for {folder_id or '<root>'}")
        page = await self._fetch_folder_contents(folder_id)
        items = tuple(page.items)
        if generation != self._generation:
            # Invalidated mid-flight; the caller still gets the result.
            loguru.logger.debug(f"Not caching stale listing for {folder_id or '<root>'}")
            return items
        self._entries[folder_id] = items
        loguru.logger.debug(f"Loaded {len(items)} children for {folder_id or '<root>'}")
        return items

    def _start(self, folder_id: FolderKey) -> asyncio.Task[tuple[FileNode, ...]]:
        task = self._inflight.get(folder_id)
        if task is not None and not task.done():
            return task
        task = asyncio.ensure_future(self._load(folder_id, self._generation))

        def _forget(done: asyncio.Task[tuple[FileNode, ...]]) -> None:
            if self._inflight.get(folder_id) is done:
                del self._inflight[folder_id]
            if not done.cancelled():
                # Retrieve so unobserved prefetch failures are not reported as never-retrieved.
                done.exception()

        task.add_done_callback(_forget)
        self._inflight[folder_id] = task
        return task

    async def fetch(self, folder_id: FolderKey) -> tuple[FileNode, ...]:
        """Return children, from cache when present, otherwise via one shared fetch."""
        cached = self._entries.get(folder_id)
        if cached is not None:
            return cached
        return await asyncio.shield(self._start(folder_id))

    def prefetch(self, folder_id: FolderKey) -> None:
        """Start a background fetch unless the folder is cached or already loading."""
        if folder_id in self._entries:
            return
        self._start(folder_id)

    def cancel(self, folder_id: FolderKey) -> bool:
        """Cancel the in-flight fetch for ``folder_id``; return whether one was cancelled."""
        task = self._inflight.get(folder_id)
        if task is None or task.done():
            return False
        loguru.logger.debug(f"Cancelling in-flight fetch for {folder_id or '<root>'}")
        task.cancel()
        return True

    def invalidate(self, folder_id: FolderKey = None, *, everything: bool = False) -> None:
        """Drop one cached listing, or all of them with ``everything=True``.

        Fetches already in flight keep running for their awaiters, but their
        results are not cached and later requests start a fresh fetch.
        """
        self._generation += 1
        if everything:
            self._entries.clear()
            self._inflight.clear()
            return
        self._entries.pop(folder_id, None)
        self._inflight.pop(folder_id, None)


__all__ = ["FolderContentCache", "FolderKey"]
