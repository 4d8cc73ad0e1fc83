"""Folders-first natural name ordering for picker nodes."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable

from .types import FileNode, SortOrder

_DIGIT_RUN_RE = re.compile(r"(\d+)")


def _fold(text: str) -> str:
    """Case- and accent-insensitive form of ``text``."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def name_sort_key(name: str) -> tuple[tuple[int, int, str], ...]:
    """Return a natural-order key for ``name``.

    Digit runs compare numerically (``file2`` before ``file10``) and sort
    before text at the same position. Text compares without case or accents.
    """
    parts: list[tuple[int, int, str]] = []
    for chunk in _DIGIT_RUN_RE.split(_fold(name)):
        if not chunk:
            continue
        if chunk.isdigit():
            parts.append((0, int(chunk), ""))
        else:
            parts.append((1, 0, chunk))
    return tuple(parts)


def sort_nodes(nodes: Iterable[FileNode], order: SortOrder = "asc") -> list[FileNode]:
    """Return a new list with folders first, then names in ``order``.

    Stable: nodes with equal keys keep their input order in both directions.
    ``desc`` reverses only the name comparison; folders still lead.
    """
    by_name = sorted(nodes, key=lambda node: name_sort_key(node.name), reverse=order == "desc")
    by_name.sort(key=lambda node: not node.is_folder)
    return by_name


__all__ = ["name_sort_key", "sort_nodes"]
