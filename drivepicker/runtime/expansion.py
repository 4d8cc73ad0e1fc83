"""Folder expansion state, lazy child loading, and hover prefetch timers."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping

import loguru

from ..tree_model import FileNode, FolderLoadState
from .folder_cache import FolderContentCache

PREFETCH_DELAY_SECONDS = 0.150
PREFETCH_CANCEL_DEBOUNCE_SECONDS = 0.080


class ExpansionCache:
    """Own expanded folder ids and their loaded children.

    Every change to the expanded set starts a load pass for expanded folders
    without children. A pass captures the current generation; results that
    arrive after a newer pass or a reset are discarded.
    ``refresh`` refetches folders that already have children; only a reset
    discards its results.

    Hover prefetch uses two timer slots: one arms a prefetch after
    ``prefetch_delay``, the other cancels an unused in-flight fetch after
    ``cancel_debounce`` so brief pointer jitter does not abort it.
    """

    def __init__(
        self,
        folder_cache: FolderContentCache,
        *,
        prefetch_delay: float = PREFETCH_DELAY_SECONDS,
        cancel_debounce: float = PREFETCH_CANCEL_DEBOUNCE_SECONDS,
        on_change: Callable[[], None] | None = None,
        keep_fetch: Callable[[str], bool] | None = None,
    ) -> None:
        self.folder_cache = folder_cache
        self.prefetch_delay = prefetch_delay
        self.cancel_debounce = cancel_debounce
        self.on_change = on_change
        self.keep_fetch = keep_fetch
        self.expanded_ids: set[str] = set()
        self._children_by_id: dict[str, tuple[FileNode, ...]] = {}
        self._failed: set[str] = set()
        self._generation = 0
        self._epoch = 0
        self._passes: set[asyncio.Task[None]] = set()
        self._hovered_id: str | None = None
        self._prefetch_timer: asyncio.TimerHandle | None = None
        self._cancel_timer: asyncio.TimerHandle | None = None

    @property
    def children_by_id(self) -> Mapping[str, tuple[FileNode, ...]]:
        return self._children_by_id

    @property
    def failed_ids(self) -> frozenset[str]:
        return frozenset(self._failed)

    @property
    def generation(self) -> int:
        return self._generation

    def load_state(self, folder_id: str) -> FolderLoadState:
        if folder_id in self._children_by_id:
            return "loaded"
        if folder_id in self._failed:
            return "failed"
        if self.folder_cache.is_fetching(folder_id):
            return "loading"
        return "unknown"

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def toggle(self, folder_id: str) -> None:
        """Open or close ``folder_id`` and start loading whatever is now missing."""
        if folder_id in self.expanded_ids:
            self.expanded_ids.discard(folder_id)
        else:
            self.expanded_ids.add(folder_id)
            self._failed.discard(folder_id)
        self._generation += 1
        self._notify()
        self._start_pass()

    def reset(self) -> None:
        """Forget expansion and loaded children; in-flight passes become stale."""
        self._generation += 1
        self._epoch += 1
        self.expanded_ids.clear()
        self._children_by_id.clear()
        self._failed.clear()
        self._hovered_id = None
        self._clear_prefetch_timer()
        self._clear_cancel_timer()

    def _start_pass(self) -> None:
        missing = [folder_id for folder_id in sorted(self.expanded_ids) if folder_id not in self._children_by_id]
        if not missing:
            return

        hits: dict[str, tuple[FileNode, ...]] = {}
        to_fetch: list[str] = []
        for folder_id in missing:
            cached = self.folder_cache.get(folder_id)
            if cached is not None:
                hits[folder_id] = cached
            else:
                to_fetch.append(folder_id)

        if hits:
            loguru.logger.debug(f"Applying {len(hits)} cached folder listing(s)")
            self._children_by_id.update(hits)
            self._failed.difference_update(hits)
            self._notify()

        if not to_fetch:
            return
        self._failed.difference_update(to_fetch)
        self._spawn_pass(to_fetch)

    def refresh(self) -> None:
        """Refetch children of expanded folders, keeping the current ones on screen.

        Children kept for collapsed folders are dropped so reopening them loads
        fresh data. A failed refetch keeps the old children.
        """
        for folder_id in [key for key in self._children_by_id if key not in self.expanded_ids]:
            del self._children_by_id[folder_id]
        folder_ids = sorted(self._children_by_id)
        if folder_ids:
            loguru.logger.debug(f"Refreshing {len(folder_ids)} expanded folder(s)")
            self._spawn_pass(folder_ids, refresh=True)

    def _spawn_pass(self, folder_ids: list[str], *, refresh: bool = False) -> None:
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._load_pass(self._generation, self._epoch, folder_ids, refresh=refresh))
        self._passes.add(task)
        task.add_done_callback(self._passes.discard)

    async def _load_pass(self, generation: int, epoch: int, folder_ids: list[str], *, refresh: bool = False) -> None:
        results = await asyncio.gather(
            *(self.folder_cache.fetch(folder_id) for folder_id in folder_ids),
            return_exceptions=True,
        )
        # Refreshes survive toggles, only a reset makes them stale.
        if epoch != self._epoch or (not refresh and generation != self._generation):
            loguru.logger.debug(f"Discarding stale load pass for {len(folder_ids)} folder(s)")
            return

        loaded: dict[str, tuple[FileNode, ...]] = {}
        for folder_id, result in zip(folder_ids, results):
            if isinstance(result, asyncio.CancelledError):
                continue
            if isinstance(result, BaseException):
                loguru.logger.warning(f"Failed to load folder {folder_id}: {result}")
                if not refresh:
                    self._failed.add(folder_id)
                continue
            loaded[folder_id] = result

        if loaded:
            self._children_by_id.update(loaded)
        if loaded or self._failed.intersection(folder_ids):
            self._notify()

    async def wait_idle(self) -> None:
        """Wait until all running load passes finish."""
        while self._passes:
            await asyncio.gather(*list(self._passes), return_exceptions=True)

    def prefetch(self, folder_id: str) -> None:
        """Arm a delayed prefetch for a hovered folder, replacing any armed one."""
        self._hovered_id = folder_id
        self._clear_cancel_timer()
        self._clear_prefetch_timer()
        loop = asyncio.get_running_loop()
        self._prefetch_timer = loop.call_later(self.prefetch_delay, self._fire_prefetch, folder_id)

    def _fire_prefetch(self, folder_id: str) -> None:
        self._prefetch_timer = None
        if self._hovered_id != folder_id:
            return
        loguru.logger.debug(f"Prefetching folder {folder_id}")
        self.folder_cache.prefetch(folder_id)

    def cancel_prefetch(self, folder_id: str) -> None:
        """Drop a pending prefetch and, after a debounce, its unused in-flight fetch."""
        self._hovered_id = None
        self._clear_prefetch_timer()
        self._clear_cancel_timer()
        loop = asyncio.get_running_loop()
        self._cancel_timer = loop.call_later(self.cancel_debounce, self._fire_cancel, folder_id)

    def _fire_cancel(self, folder_id: str) -> None:
        self._cancel_timer = None
        if folder_id in self.expanded_ids:
            return
        if self.keep_fetch is not None and self.keep_fetch(folder_id):
            return
        self.folder_cache.cancel(folder_id)

    @property
    def has_pending_prefetch(self) -> bool:
        return self._prefetch_timer is not None

    @property
    def has_pending_cancel(self) -> bool:
        return self._cancel_timer is not None

    def _clear_prefetch_timer(self) -> None:
        if self._prefetch_timer is not None:
            self._prefetch_timer.cancel()
            self._prefetch_timer = None

    def _clear_cancel_timer(self) -> None:
        if self._cancel_timer is not None:
            self._cancel_timer.cancel()
            self._cancel_timer = None

    def close(self) -> None:
        """Cancel both timer slots."""
        self._hovered_id = None
        self._clear_prefetch_timer()
        self._clear_cancel_timer()


__all__ = [
    "PREFETCH_DELAY_SECONDS",
    "PREFETCH_CANCEL_DEBOUNCE_SECONDS",
    "ExpansionCache",
]
