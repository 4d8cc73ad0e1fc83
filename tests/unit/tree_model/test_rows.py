"""Tests for display-row flattening and row formatting."""

from __future__ import annotations

import unittest

from drivepicker.tree_model import (
    PLACEHOLDER_ROWS_PER_FOLDER,
    FileNode,
    NodeRow,
    PlaceholderRow,
    build_display_rows,
    format_display_row,
    row_key,
)


def _folder(node_id: str, name: str) -> FileNode:
    return FileNode(id=node_id, name=name, kind="folder")


def _file(node_id: str, name: str) -> FileNode:
    return FileNode(id=node_id, name=name, kind="file")


def _labels(rows) -> list[tuple[str, int]]:
    out = []
    for row in rows:
        if isinstance(row, PlaceholderRow):
            out.append((f"~{row.folder_id}#{row.slot}", row.depth))
        else:
            out.append((row.node.id, row.depth))
    return out


class BuildDisplayRowsTests(unittest.TestCase):
    def test_collapsed_folders_emit_only_their_own_rows(self) -> None:
        nodes = [_folder("d", "Docs"), _file("r", "readme.pdf")]
        rows = build_display_rows(nodes, 0, set(), {}, "asc")
        self.assertEqual(rows, [NodeRow(nodes[0], 0), NodeRow(nodes[1], 0)])

    def test_expanded_folder_without_children_emits_placeholders(self) -> None:
        folder = _folder("d", "Docs")
        rows = build_display_rows([folder], 2, {"d"}, {}, "asc")
        self.assertEqual(len(rows), 1 + PLACEHOLDER_ROWS_PER_FOLDER)
        self.assertEqual(rows[0], NodeRow(folder, 2))
        self.assertEqual(
            rows[1:],
            [PlaceholderRow(folder_id="d", depth=3, slot=slot) for slot in range(3)],
        )

    def test_loaded_children_are_sorted_and_recursed(self) -> None:
        nodes = [_folder("root-a", "A"), _file("root-f", "z.txt")]
        children = {
            "root-a": (_file("a2", "file10.txt"), _folder("a-sub", "Sub"), _file("a1", "file2.txt")),
            "a-sub": (_file("s1", "deep.csv"),),
        }
        rows = build_display_rows(nodes, 0, {"root-a", "a-sub"}, children, "asc")
        self.assertEqual(
            _labels(rows),
            [("root-a", 0), ("a-sub", 1), ("s1", 2), ("a1", 1), ("a2", 1), ("root-f", 0)],
        )

    def test_children_follow_current_sort_order(self) -> None:
        nodes = [_folder("p", "Parent")]
        children = {"p": (_file("c1", "a.txt"), _file("c2", "b.txt"))}
        rows = build_display_rows(nodes, 0, {"p"}, children, "desc")
        self.assertEqual(_labels(rows), [("p", 0), ("c2", 1), ("c1", 1)])

    def test_expanded_file_ids_are_ignored(self) -> None:
        nodes = [_file("f", "notes.txt")]
        rows = build_display_rows(nodes, 0, {"f"}, {"f": (_file("x", "x"),)}, "asc")
        self.assertEqual(_labels(rows), [("f", 0)])

    def test_same_inputs_give_same_rows(self) -> None:
        nodes = [_folder("p", "Parent"), _folder("q", "Other")]
        children = {"p": (_file("c", "c.txt"),)}
        first = build_display_rows(nodes, 0, {"p", "q"}, children, "asc")
        second = build_display_rows(nodes, 0, {"p", "q"}, children, "asc")
        self.assertEqual(first, second)


class RowFormattingTests(unittest.TestCase):
    def test_format_display_row(self) -> None:
        self.assertEqual(format_display_row(NodeRow(_folder("d", "Docs"), 0)), "Docs/")
        self.assertEqual(format_display_row(NodeRow(_file("f", "a.pdf"), 2), True), "    a.pdf *")
        self.assertEqual(format_display_row(PlaceholderRow("d", 1, 0)), "  ...")

    def test_row_key_is_stable(self) -> None:
        self.assertEqual(row_key(NodeRow(_file("f", "a.pdf"), 3)), "node:f")
        self.assertEqual(row_key(PlaceholderRow("d", 1, 2)), "placeholder:d:2")


if __name__ == "__main__":
    unittest.main()
