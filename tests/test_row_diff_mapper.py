"""Tests for mapping diff lines onto table rows"""

import pytest

from tablediff.domain.mappers.row_diff_mapper import dedupe_row_diffs, map_row_diffs, row_index_for_line
from tablediff.domain.models.line_change import ChangeStatus, LineChange
from tablediff.domain.models.row_diff import RowDiff, RowDiffStatus
from tablediff.infrastructure.diff_parser import parse_unified_diff

TABLE_START = 1  # 0-based header line; separator on file line 3, row 0 on file line 4
ROW_COUNT = 3


def summarize(row_diffs):
    return [(d.row, d.status, d.old_content, d.new_content, d.is_deleted_row) for d in row_diffs]


class TestRowIndexForLine:
    """Tests for row_index_for_line"""

    def test_header_and_separator(self):
        """Test header maps to -2 and separator to -1"""
        assert row_index_for_line(2, TABLE_START) == -2
        assert row_index_for_line(3, TABLE_START) == -1
        assert row_index_for_line(4, TABLE_START) == 0

    @pytest.mark.parametrize("start", [0, 1, 7, 120])
    def test_stable_for_any_position(self, start):
        """Test header and separator mapping regardless of table position"""
        assert row_index_for_line(start + 1, start) == -2
        assert row_index_for_line(start + 2, start) == -1


class TestMapRowDiffs:
    """Tests for map_row_diffs"""

    def test_two_deletions_two_additions(self):
        """Test modifications pair in order on the added line's row without ghost rows"""
        changes = parse_unified_diff("@@ -4,2 +4,2 @@\n-| a |\n-| b |\n+| a2 |\n+| b2 |\n")
        result = map_row_diffs(changes, TABLE_START, ROW_COUNT)

        assert summarize(result) == [
            (0, RowDiffStatus.DELETED, "| a |", None, False),
            (0, RowDiffStatus.ADDED, None, "| a2 |", False),
            (1, RowDiffStatus.DELETED, "| b |", None, False),
            (1, RowDiffStatus.ADDED, None, "| b2 |", False),
        ]

    def test_extra_deletion_kept_as_deleted(self):
        """Test leftover deletion uses its old line position"""
        changes = parse_unified_diff("@@ -4,3 +4,2 @@\n-| a |\n-| b |\n-| c |\n+| a2 |\n+| b2 |\n")
        result = map_row_diffs(changes, TABLE_START, ROW_COUNT)

        assert summarize(result)[-1] == (2, RowDiffStatus.DELETED, "| c |", None, True)
        assert len(result) == 5

    def test_extra_addition_kept_as_added(self):
        """Test leftover addition is appended as ADDED"""
        changes = parse_unified_diff("@@ -4,2 +4,3 @@\n-| a |\n-| b |\n+| a2 |\n+| b2 |\n+| c3 |\n")
        result = map_row_diffs(changes, TABLE_START, ROW_COUNT + 1)

        assert summarize(result)[-1] == (2, RowDiffStatus.ADDED, None, "| c3 |", False)
        assert len(result) == 5

    def test_hunks_do_not_mix(self):
        """Test pairing stays within each hunk"""
        changes = parse_unified_diff(
            "@@ -4,1 +4,1 @@\n-| r0 |\n+| r0a |\n@@ -6,1 +6,2 @@\n-| r2 |\n+| r2a |\n+| r2b |\n"
        )
        result = map_row_diffs(changes, TABLE_START, ROW_COUNT + 1)

        assert summarize(result) == [
            (0, RowDiffStatus.DELETED, "| r0 |", None, False),
            (0, RowDiffStatus.ADDED, None, "| r0a |", False),
            (2, RowDiffStatus.DELETED, "| r2 |", None, False),
            (2, RowDiffStatus.ADDED, None, "| r2a |", False),
            (3, RowDiffStatus.ADDED, None, "| r2b |", False),
        ]

    def test_header_change(self):
        """Test header modification maps to row -2"""
        changes = parse_unified_diff("@@ -2,1 +2,1 @@\n-| H1 | H2 |\n+| H1 | H2 new |\n")
        result = map_row_diffs(changes, TABLE_START, ROW_COUNT)

        assert summarize(result) == [
            (-2, RowDiffStatus.DELETED, "| H1 | H2 |", None, False),
            (-2, RowDiffStatus.ADDED, None, "| H1 | H2 new |", False),
        ]

    def test_changes_outside_table_dropped(self):
        """Test lines before the header and past the last row are discarded"""
        changes = parse_unified_diff("@@ -1 +1 @@\n-intro\n+Intro\n@@ -20 +20 @@\n-tail\n+Tail\n")
        assert map_row_diffs(changes, TABLE_START, ROW_COUNT) == []

    @pytest.mark.parametrize("deleted, added", [(0, 1), (1, 0), (1, 1), (2, 3), (3, 1), (0, 3), (3, 0)])
    def test_pair_count_matches_hunk_shape(self, deleted, added):
        """Test pairs equal min(deleted, added) with leftovers keeping their status"""
        changes = [LineChange(4 + i, ChangeStatus.DELETED, f"old{i}", 1) for i in range(deleted)]
        changes += [LineChange(4 + i, ChangeStatus.ADDED, f"new{i}", 1) for i in range(added)]
        result = map_row_diffs(changes, TABLE_START, 10)

        pairs = sum(
            1
            for first, second in zip(result, result[1:])
            if first.status == RowDiffStatus.DELETED
            and second.status == RowDiffStatus.ADDED
            and first.row == second.row
        )
        assert pairs == min(deleted, added)
        assert sum(1 for d in result if d.status == RowDiffStatus.DELETED) == deleted
        assert sum(1 for d in result if d.status == RowDiffStatus.ADDED) == added
        assert sum(1 for d in result if d.is_deleted_row) == max(deleted - added, 0)

    def test_empty_input(self):
        """Test no changes produce no row diffs"""
        assert map_row_diffs([], TABLE_START, ROW_COUNT) == []
        assert map_row_diffs(None, TABLE_START, ROW_COUNT) == []
        assert map_row_diffs(parse_unified_diff(""), TABLE_START, ROW_COUNT) == []

    def test_empty_table_keeps_header(self):
        """Test table without data rows still reports header changes"""
        changes = parse_unified_diff("@@ -1 +1 @@\n-| A |\n+| B |\n")
        result = map_row_diffs(changes, 0, 0)
        assert [d.row for d in result] == [-2, -2]

    def test_negative_arguments_raise(self):
        """Test programmer errors are rejected"""
        with pytest.raises(ValueError, match="row_count"):
            map_row_diffs([], TABLE_START, -1)
        with pytest.raises(ValueError, match="table_start_line"):
            map_row_diffs([], -1, ROW_COUNT)


class TestDedupeRowDiffs:
    """Tests for dedupe_row_diffs"""

    def test_first_occurrence_wins(self):
        """Test duplicate (row, status) entries collapse"""
        first = RowDiff(0, RowDiffStatus.ADDED, new_content="x")
        second = RowDiff(0, RowDiffStatus.ADDED, new_content="y")
        assert dedupe_row_diffs([first, second]) == [first]

    def test_deleted_rows_keyed_by_content(self):
        """Test distinct deleted contents on the same row are kept"""
        a = RowDiff(1, RowDiffStatus.DELETED, old_content="a", is_deleted_row=True)
        b = RowDiff(1, RowDiffStatus.DELETED, old_content="b", is_deleted_row=True)
        a_again = RowDiff(1, RowDiffStatus.DELETED, old_content="a", is_deleted_row=True)
        assert dedupe_row_diffs([a, b, a_again]) == [a, b]
