"""Stateful picker runtime: caches, expansion, navigation, and index status.

All components run on one asyncio event loop. ``PickerSession`` composes
them behind the handles a view layer calls.
"""

from __future__ import annotations

from .deps import PickerDeps
from .expansion import PREFETCH_CANCEL_DEBOUNCE_SECONDS, PREFETCH_DELAY_SECONDS, ExpansionCache
from .folder_cache import FolderContentCache
from .index_status import (
    INVALID_RESOURCE_MESSAGE,
    MISSING_RESOURCE_PATH_MESSAGE,
    NO_KNOWLEDGE_BASE_MESSAGE,
    DeindexBatchResult,
    IndexStatusTracker,
    validate_deindex,
    validate_index,
)
from .navigation import BreadcrumbTracker
from .session import PickerSession

__all__ = [
    "PickerDeps",
    "FolderContentCache",
    "ExpansionCache",
    "PREFETCH_DELAY_SECONDS",
    "PREFETCH_CANCEL_DEBOUNCE_SECONDS",
    "BreadcrumbTracker",
    "IndexStatusTracker",
    "DeindexBatchResult",
    "INVALID_RESOURCE_MESSAGE",
    "NO_KNOWLEDGE_BASE_MESSAGE",
    "MISSING_RESOURCE_PATH_MESSAGE",
    "validate_index",
    "validate_deindex",
    "PickerSession",
]
