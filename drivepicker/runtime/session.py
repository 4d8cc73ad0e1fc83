"""Picker session: the view-model that wires the core components together.

The session owns the current top-level listing, filters, and sort order, and
recomputes display rows whenever any input changes. Views read its
properties and call its handles; they never touch the components directly.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import loguru

from ..errors import FolderFetchError, is_missing_env_error
from ..tree_model import (
    BreadcrumbSegment,
    DisplayRow,
    FileNode,
    FilterParams,
    FolderLoadState,
    SortOrder,
    build_display_rows,
    has_active_filters,
    parse_sort_order,
    parse_status,
    parse_type,
    process_nodes,
)
from .deps import PickerDeps
from .expansion import PREFETCH_CANCEL_DEBOUNCE_SECONDS, PREFETCH_DELAY_SECONDS, ExpansionCache
from .folder_cache import FolderContentCache
from .index_status import DeindexBatchResult, IndexStatusTracker, validate_deindex, validate_index
from .navigation import BreadcrumbTracker


class PickerSession:
    """State and imperative handles for one file-picker session."""

    def __init__(
        self,
        deps: PickerDeps,
        *,
        sort_order: SortOrder = "asc",
        filters: FilterParams | None = None,
        prefetch_delay: float = PREFETCH_DELAY_SECONDS,
        cancel_debounce: float = PREFETCH_CANCEL_DEBOUNCE_SECONDS,
    ) -> None:
        self.deps = deps
        self.folder_cache = FolderContentCache(deps.fetch_folder_contents)
        self.expansion = ExpansionCache(
            self.folder_cache,
            prefetch_delay=prefetch_delay,
            cancel_debounce=cancel_debounce,
            on_change=self._refresh_rows,
            keep_fetch=lambda folder_id: folder_id == self.current_folder_id,
        )
        self.navigation = BreadcrumbTracker(
            reset_expansion=self.expansion.reset,
            on_navigate_start=self._on_navigate_start,
            on_current_folder_change=self._on_current_folder_change,
        )
        self.index_status = IndexStatusTracker(
            index_resources=deps.index_resources,
            deindex_resource=deps.deindex_resource,
            resolve_descendant_ids=deps.resolve_descendant_ids,
            resolve_descendant_paths=deps.resolve_descendant_paths,
            on_change=self._refresh_rows,
            on_settled=self._on_mutation_settled,
        )
        self._filters = filters or FilterParams()
        self._sort_order: SortOrder = sort_order
        self._items: tuple[FileNode, ...] = ()
        self._error: FolderFetchError | None = None
        self._loading = False
        self._listing_generation = 0
        self._listing_task: asyncio.Task[None] | None = None
        self._rows: list[DisplayRow] = []
        self._nodes_by_id: dict[str, FileNode] = {}
        self._listeners: list[Callable[[], None]] = []

    # -- observable state -------------------------------------------------

    @property
    def breadcrumb_path(self) -> tuple[BreadcrumbSegment, ...]:
        return self.navigation.path

    @property
    def current_folder_id(self) -> str | None:
        return self.navigation.current_folder_id

    @property
    def rows(self) -> list[DisplayRow]:
        return list(self._rows)

    @property
    def items(self) -> tuple[FileNode, ...]:
        """Unfiltered top-level listing of the current folder."""
        return self._items

    @property
    def expanded_ids(self) -> frozenset[str]:
        return frozenset(self.expansion.expanded_ids)

    @property
    def indexed_ids(self) -> frozenset[str]:
        return self.index_status.indexed_ids

    @property
    def active_knowledge_base_id(self) -> str | None:
        return self.index_status.active_knowledge_base_id

    @property
    def filters(self) -> FilterParams:
        return self._filters

    @property
    def sort_order(self) -> SortOrder:
        return self._sort_order

    @property
    def has_active_filters(self) -> bool:
        return has_active_filters(self._filters)

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> FolderFetchError | None:
        """Page-level error of the current folder listing, if it failed."""
        return self._error

    @property
    def is_missing_env(self) -> bool:
        return self._error is not None and is_missing_env_error(self._error.cause)

    def find_node(self, resource_id: str) -> FileNode | None:
        """Return a node from the current listing or any loaded children."""
        return self._nodes_by_id.get(resource_id)

    def load_state(self, folder_id: str) -> FolderLoadState:
        return self.expansion.load_state(folder_id)

    def is_indexed(self, node: FileNode) -> bool:
        return self.index_status.is_indexed(node)

    def is_index_pending(self, resource_id: str) -> bool:
        return self.index_status.is_index_pending(resource_id)

    def is_deindex_pending(self, resource_id: str) -> bool:
        return self.index_status.is_deindex_pending(resource_id)

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Call ``listener`` after every row recompute; return an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- handles ----------------------------------------------------------

    def start(self) -> None:
        """Load the root listing."""
        self._start_listing(None)

    def navigate(self, folder_id: str | None = None, display_name: str | None = None) -> None:
        self.navigation.navigate_to(folder_id, display_name)

    def retry(self) -> None:
        """Reload the current folder listing after a page-level error."""
        self._start_listing(self.current_folder_id)

    def toggle_folder(self, folder_id: str) -> None:
        """Open or close a folder; only folders present in the tree can be opened."""
        node = self._nodes_by_id.get(folder_id)
        closing = folder_id in self.expansion.expanded_ids
        if not closing and (node is None or not node.is_folder):
            loguru.logger.debug(f"Ignoring toggle of {folder_id}: not a visible folder")
            return
        self.expansion.toggle(folder_id)

    def hover_folder(self, folder_id: str) -> None:
        self.expansion.prefetch(folder_id)

    def unhover_folder(self, folder_id: str) -> None:
        self.expansion.cancel_prefetch(folder_id)

    def set_filters(
        self,
        query: str | None = None,
        status: str | None = None,
        type: str | None = None,
    ) -> None:
        """Replace any given filter field; unknown status/type values become ``"all"``."""
        current = self._filters
        self._filters = FilterParams(
            query=current.query if query is None else query,
            status=current.status if status is None else parse_status(status),
            type=current.type if type is None else parse_type(type),
        )
        self._refresh_rows()

    def clear_filters(self) -> None:
        self._filters = FilterParams()
        self._refresh_rows()

    def set_sort_order(self, order: str) -> None:
        self._sort_order = parse_sort_order(order)
        self._refresh_rows()

    def toggle_sort_order(self) -> None:
        self.set_sort_order("desc" if self._sort_order == "asc" else "asc")

    async def request_index(self, node: FileNode) -> str:
        """Index ``node`` (cascading for folders); return the knowledge-base id."""
        validate_index(node)
        return await self.index_status.index_node(node)

    async def request_deindex(self, node: FileNode) -> DeindexBatchResult:
        """De-index ``node`` (cascading for folders) and report per-item outcome."""
        validate_deindex(node, self.active_knowledge_base_id)
        return await self.index_status.deindex_node(node)

    async def wait_idle(self) -> None:
        """Wait for the current listing load and all expansion passes."""
        while True:
            task = self._listing_task
            if task is not None and not task.done():
                await asyncio.gather(task, return_exceptions=True)
                continue
            await self.expansion.wait_idle()
            if self._listing_task is task:
                return

    def close(self) -> None:
        self.expansion.close()
        if self._listing_task is not None and not self._listing_task.done():
            self._listing_task.cancel()

    # -- internals --------------------------------------------------------

    def _on_navigate_start(self) -> None:
        if self._filters.query:
            self._filters = FilterParams(status=self._filters.status, type=self._filters.type)

    def _on_current_folder_change(self, folder_id: str | None) -> None:
        self._start_listing(folder_id)

    def _on_mutation_settled(self) -> None:
        # Server-side index flags changed: refetch what is on screen without blanking it.
        self.folder_cache.invalidate(everything=True)
        self._start_listing(self.current_folder_id, keep_rows=True)
        self.expansion.refresh()

    def _start_listing(self, folder_id: str | None, *, keep_rows: bool = False) -> None:
        """Load ``folder_id`` as the top-level listing.

        With ``keep_rows`` the current rows stay visible until the new listing
        arrives, and a failure keeps them instead of raising a page error.
        """
        self._listing_generation += 1
        if not keep_rows:
            self._items = ()
            self._error = None
            self._loading = True
            self._refresh_rows()
        loop = asyncio.get_running_loop()
        self._listing_task = loop.create_task(self._load_listing(self._listing_generation, folder_id, keep_rows))

    async def _load_listing(self, generation: int, folder_id: str | None, keep_rows: bool = False) -> None:
        try:
            items = await self.folder_cache.fetch(folder_id)
        except Exception as exc:
            if generation != self._listing_generation:
                return
            if keep_rows and self._items:
                loguru.logger.warning(f"Reloading {folder_id or '<root>'} failed, keeping current rows: {exc}")
                return
            loguru.logger.warning(f"Listing {folder_id or '<root>'} failed: {exc}")
            self._error = FolderFetchError(folder_id, exc)
            self._loading = False
            self._refresh_rows()
            return
        if generation != self._listing_generation:
            return
        self._items = items
        self._error = None
        self._loading = False
        self._refresh_rows()

    def _refresh_rows(self) -> None:
        processed = process_nodes(
            self._items,
            self._filters,
            self.index_status.indexed_ids,
            self._sort_order,
        )
        self._rows = build_display_rows(
            processed,
            0,
            self.expansion.expanded_ids,
            self.expansion.children_by_id,
            self._sort_order,
        )
        nodes_by_id = {node.id: node for node in self._items}
        for children in self.expansion.children_by_id.values():
            for child in children:
                nodes_by_id[child.id] = child
        self._nodes_by_id = nodes_by_id
        for listener in list(self._listeners):
            listener()


__all__ = ["PickerSession"]
