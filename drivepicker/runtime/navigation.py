"""Breadcrumb navigation between folders.

Navigation is a pure state transition: it rewrites the breadcrumb path,
resets expansion, and tells listeners which folder is now current. Loading
the new folder is up to whoever observes the current-folder change.
"""

from __future__ import annotations

from collections.abc import Callable

import loguru

from ..tree_model import BreadcrumbSegment


class BreadcrumbTracker:
    """Ordered path of segments from root (exclusive) to the current folder."""

    def __init__(
        self,
        *,
        reset_expansion: Callable[[], None],
        on_navigate_start: Callable[[], None] | None = None,
        on_current_folder_change: Callable[[str | None], None] | None = None,
    ) -> None:
        self.reset_expansion = reset_expansion
        self.on_navigate_start = on_navigate_start
        self.on_current_folder_change = on_current_folder_change
        self._path: list[BreadcrumbSegment] = []

    @property
    def path(self) -> tuple[BreadcrumbSegment, ...]:
        return tuple(self._path)

    @property
    def current_folder_id(self) -> str | None:
        return self._path[-1].id if self._path else None

    def navigate_to(self, folder_id: str | None, display_name: str | None = None) -> None:
        """Move to ``folder_id``; ``None`` returns to the root.

        An id already on the path truncates back to that segment instead of
        appending a duplicate.
        """
        if self.on_navigate_start is not None:
            self.on_navigate_start()
        self.reset_expansion()

        if folder_id is None:
            self._path.clear()
        else:
            existing = next((idx for idx, segment in enumerate(self._path) if segment.id == folder_id), None)
            if existing is not None:
                del self._path[existing + 1 :]
            else:
                name = display_name if display_name is not None else folder_id
                self._path.append(BreadcrumbSegment(id=folder_id, name=name))

        loguru.logger.info(f"Navigated to {folder_id or '<root>'}")
        if self.on_current_folder_change is not None:
            self.on_current_folder_change(folder_id)

    def go_up(self) -> None:
        """Navigate to the parent segment, or to the root from depth one."""
        if len(self._path) <= 1:
            self.navigate_to(None)
            return
        parent = self._path[-2]
        self.navigate_to(parent.id, parent.name)


__all__ = ["BreadcrumbTracker"]
