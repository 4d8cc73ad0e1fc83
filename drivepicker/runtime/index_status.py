"""Optimistic index/de-index status with snapshot rollback.

Each mutation follows one transaction shape: validate, snapshot the indexed
id set, apply the delta, call the remote side, then either keep the delta or
restore the snapshot and re-raise. Pending queries are derived from the id
lists of operations still in flight.

Concurrent operations on overlapping ids are last-write-wins, and a rollback
restores its own snapshot even if that undoes a sibling's optimistic change.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass

import loguru

from ..errors import ValidationError
from ..tree_model import DescendantPath, FileNode

INVALID_RESOURCE_MESSAGE = "Invalid resource"
NO_KNOWLEDGE_BASE_MESSAGE = "Index a file first to enable remove"
MISSING_RESOURCE_PATH_MESSAGE = "Cannot remove: missing resource path"


@dataclass(frozen=True)
class DeindexBatchResult:
    success_count: int
    error_count: int


def validate_index(node: FileNode | None) -> None:
    """Raise :class:`ValidationError` when ``node`` cannot be indexed."""
    if node is None or not node.id:
        raise ValidationError(INVALID_RESOURCE_MESSAGE)


def validate_deindex(node: FileNode, knowledge_base_id: str | None) -> None:
    """Raise :class:`ValidationError` when ``node`` cannot be de-indexed yet."""
    if knowledge_base_id is None:
        raise ValidationError(NO_KNOWLEDGE_BASE_MESSAGE)
    if not node.resource_path:
        raise ValidationError(MISSING_RESOURCE_PATH_MESSAGE)


class IndexStatusTracker:
    """Own the session's indexed id set and active knowledge-base id."""

    def __init__(
        self,
        *,
        index_resources: Callable[[list[str]], Awaitable[str]],
        deindex_resource: Callable[[str, str], Awaitable[None]],
        resolve_descendant_ids: Callable[[str], Awaitable[list[str]]],
        resolve_descendant_paths: Callable[[str, str], Awaitable[list[DescendantPath]]],
        on_change: Callable[[], None] | None = None,
        on_settled: Callable[[], None] | None = None,
    ) -> None:
        self._index_resources = index_resources
        self._deindex_resource = deindex_resource
        self._resolve_descendant_ids = resolve_descendant_ids
        self._resolve_descendant_paths = resolve_descendant_paths
        self.on_change = on_change
        self.on_settled = on_settled
        self._indexed_ids: set[str] = set()
        self._active_knowledge_base_id: str | None = None
        self._pending_index: list[tuple[str, ...]] = []
        self._pending_deindex: list[tuple[str, ...]] = []

    @property
    def indexed_ids(self) -> frozenset[str]:
        return frozenset(self._indexed_ids)

    @property
    def active_knowledge_base_id(self) -> str | None:
        return self._active_knowledge_base_id

    def is_indexed(self, node: FileNode) -> bool:
        return node.is_indexed or node.id in self._indexed_ids

    def is_index_pending(self, resource_id: str) -> bool:
        return any(resource_id in ids for ids in self._pending_index)

    def is_deindex_pending(self, resource_id: str) -> bool:
        return any(resource_id in ids for ids in self._pending_deindex)

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def _settled(self) -> None:
        if self.on_settled is not None:
            self.on_settled()

    def _rollback(self, snapshot: set[str]) -> None:
        self._indexed_ids = snapshot
        self._notify()

    async def index_node(self, node: FileNode) -> str:
        """Index ``node``; folders cascade to every resolved descendant."""
        validate_index(node)
        if node.is_folder:
            resource_ids = await self._resolve_descendant_ids(node.id)
        else:
            resource_ids = [node.id]
        return await self.index_many(resource_ids)

    async def index_many(self, resource_ids: Iterable[str]) -> str:
        """Index an explicit selection as one transaction; return the knowledge-base id."""
        ids = tuple(dict.fromkeys(resource_ids))
        snapshot = set(self._indexed_ids)
        self._indexed_ids.update(ids)
        self._notify()

        self._pending_index.append(ids)
        try:
            knowledge_base_id = await self._index_resources(list(ids))
        except (Exception, asyncio.CancelledError):
            loguru.logger.warning(f"Indexing {len(ids)} resource(s) failed; rolling back")
            self._rollback(snapshot)
            raise
        finally:
            self._pending_index.remove(ids)
            self._settled()

        self._active_knowledge_base_id = knowledge_base_id
        loguru.logger.info(f"Indexed {len(ids)} resource(s) into knowledge base {knowledge_base_id}")
        self._notify()
        return knowledge_base_id

    async def deindex_node(self, node: FileNode) -> DeindexBatchResult:
        """Remove ``node`` from the knowledge base; folders cascade to descendants."""
        knowledge_base_id = self._active_knowledge_base_id
        validate_deindex(node, knowledge_base_id)
        assert knowledge_base_id is not None and node.resource_path
        if node.is_folder:
            items = await self._resolve_descendant_paths(node.id, node.resource_path)
            return await self.deindex_batch(knowledge_base_id, items)
        await self.deindex_one(knowledge_base_id, node.id, node.resource_path)
        return DeindexBatchResult(success_count=1, error_count=0)

    async def deindex_one(self, knowledge_base_id: str, resource_id: str, resource_path: str) -> None:
        snapshot = set(self._indexed_ids)
        self._indexed_ids.discard(resource_id)
        self._notify()

        pending = (resource_id,)
        self._pending_deindex.append(pending)
        try:
            await self._deindex_resource(knowledge_base_id, resource_path)
        except (Exception, asyncio.CancelledError):
            loguru.logger.warning(f"De-indexing {resource_path} failed; rolling back")
            self._rollback(snapshot)
            raise
        finally:
            self._pending_deindex.remove(pending)
            self._settled()
        loguru.logger.info(f"Removed {resource_path} from knowledge base {knowledge_base_id}")

    async def deindex_batch(self, knowledge_base_id: str, items: Iterable[DescendantPath]) -> DeindexBatchResult:
        """Delete each item independently and tally the outcome.

        All ids leave the indexed set up front. Items whose delete fails are
        restored if they were indexed before. Cancelling the batch restores
        the whole snapshot.
        """
        batch = list(items)
        ids = tuple(item.id for item in batch)
        snapshot = set(self._indexed_ids)
        self._indexed_ids.difference_update(ids)
        self._notify()

        self._pending_deindex.append(ids)
        failed: list[str] = []
        try:
            for item in batch:
                try:
                    await self._deindex_resource(knowledge_base_id, item.path)
                except Exception as exc:
                    loguru.logger.warning(f"De-indexing {item.path} failed: {exc}")
                    failed.append(item.id)
        except asyncio.CancelledError:
            self._rollback(snapshot)
            raise
        finally:
            self._pending_deindex.remove(ids)
            self._settled()

        if failed:
            self._indexed_ids.update(resource_id for resource_id in failed if resource_id in snapshot)
            self._notify()
        result = DeindexBatchResult(success_count=len(batch) - len(failed), error_count=len(failed))
        loguru.logger.info(
            f"Batch de-index finished: {result.success_count} removed, {result.error_count} failed"
        )
        return result


__all__ = [
    "INVALID_RESOURCE_MESSAGE",
    "NO_KNOWLEDGE_BASE_MESSAGE",
    "MISSING_RESOURCE_PATH_MESSAGE",
    "DeindexBatchResult",
    "validate_index",
    "validate_deindex",
    "IndexStatusTracker",
]
