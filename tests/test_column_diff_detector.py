"""Tests for column diff detection"""

import pytest

from tablediff.domain.detectors import (
    ColumnDiffDetector,
    ColumnMatchContext,
    detect_column_diff,
    detect_column_diff_with_positions,
)
from tablediff.domain.detectors.column_strategies import fuzzy_match, lcs_match, sampling_correction
from tablediff.domain.models.column_diff import ColumnChangeType, ColumnPositionType
from tablediff.domain.models.row_diff import RowDiff, RowDiffStatus


def assert_consistent(result):
    """Mapping, positions and deleted columns must agree"""
    assert len(result.mapping) == result.old_column_count
    by_index = {}
    for position in result.positions:
        if position.type != ColumnPositionType.REMOVED:
            by_index[position.index] = position
    for old_index, new_index in enumerate(result.mapping):
        if new_index >= 0:
            assert by_index[new_index].type in (ColumnPositionType.UNCHANGED, ColumnPositionType.RENAMED)
        else:
            assert old_index in result.deleted_columns
    for position in result.positions:
        assert 0.0 <= position.confidence <= 1.0


class TestDetectWithPositions:
    """Tests for header-based detection"""

    def test_identical_headers(self):
        """Test unchanged headers"""
        result = detect_column_diff_with_positions(["A", "B"], ["A", "B"])

        assert result.change_type == ColumnChangeType.NONE
        assert result.mapping == [0, 1]
        assert result.heuristics == ["exact_match"]
        assert_consistent(result)

    def test_middle_insertion(self):
        """Test column inserted between existing columns"""
        result = detect_column_diff_with_positions(["A", "B", "C"], ["A", "B", "X", "C"])

        assert result.change_type == ColumnChangeType.ADDED
        assert result.added_columns == [2]
        assert result.mapping == [0, 1, 3]
        assert [p.type for p in result.positions] == [
            ColumnPositionType.UNCHANGED,
            ColumnPositionType.UNCHANGED,
            ColumnPositionType.ADDED,
            ColumnPositionType.UNCHANGED,
        ]
        assert result.positions[2].confidence == pytest.approx(0.95)
        assert_consistent(result)

    def test_middle_deletion(self):
        """Test column removed from the middle"""
        result = detect_column_diff_with_positions(["A", "B", "C"], ["A", "C"])

        assert result.change_type == ColumnChangeType.REMOVED
        assert result.deleted_columns == [1]
        assert result.mapping == [0, -1, 1]
        assert_consistent(result)

    def test_removed_column_position_order(self):
        """Test removed column is listed before the next surviving column"""
        result = detect_column_diff_with_positions(["A", "B", "C", "D"], ["A", "B", "D"])

        assert result.deleted_columns == [2]
        assert result.mapping == [0, 1, -1, 2]
        assert [(p.index, p.header, p.type) for p in result.positions] == [
            (0, "A", ColumnPositionType.UNCHANGED),
            (1, "B", ColumnPositionType.UNCHANGED),
            (2, "C", ColumnPositionType.REMOVED),
            (2, "D", ColumnPositionType.UNCHANGED),
        ]
        assert result.old_headers == ["A", "B", "C", "D"]

    def test_first_column_deleted(self):
        """Test deletion of the leading column"""
        result = detect_column_diff_with_positions(["A", "B", "C"], ["B", "C"])

        assert result.mapping == [-1, 0, 1]
        assert result.positions[0].type == ColumnPositionType.REMOVED
        assert_consistent(result)

    def test_last_column_deleted(self):
        """Test trailing removal is emitted after surviving columns"""
        result = detect_column_diff_with_positions(["A", "B", "C"], ["A", "B"])

        assert result.mapping == [0, 1, -1]
        assert result.positions[-1].type == ColumnPositionType.REMOVED
        assert result.positions[-1].index == 2

    def test_consecutive_deletions(self):
        """Test adjacent columns removed together"""
        result = detect_column_diff_with_positions(["A", "B", "C", "D"], ["A", "D"])

        assert result.deleted_columns == [1, 2]
        assert result.mapping == [0, -1, -1, 1]

    def test_single_column_append(self):
        """Test column appended to a single-column table"""
        result = detect_column_diff_with_positions(["A"], ["A", "B"])

        assert result.added_columns == [1]
        assert result.change_type == ColumnChangeType.ADDED

    def test_case_and_spacing_only(self):
        """Test header differences in case and spacing are not changes"""
        result = detect_column_diff_with_positions(["Name", "First  Name"], ["name", "First Name"])

        assert result.change_type == ColumnChangeType.NONE
        assert result.mapping == [0, 1]

    def test_rename_detected_by_similarity(self):
        """Test similar header in the same slot is a rename"""
        result = detect_column_diff_with_positions(["ID", "Name", "Price"], ["ID", "Names", "Price"])

        assert result.change_type == ColumnChangeType.RENAMED
        assert result.mapping == [0, 1, 2]
        assert result.renamed_columns == [1]
        assert "fuzzy_match" in result.heuristics
        assert result.positions[1].confidence == pytest.approx(0.8)
        assert_consistent(result)

    def test_replacement_is_add_and_delete(self):
        """Test dissimilar header replacement plus insertion is mixed"""
        result = detect_column_diff_with_positions(["A", "B", "C"], ["A", "NewB", "X", "C"])

        assert result.change_type == ColumnChangeType.MIXED
        assert 2 in result.added_columns
        removed = [p for p in result.positions if p.type == ColumnPositionType.REMOVED]
        assert [(p.index, p.header) for p in removed] == [(1, "B")]
        assert removed[0].confidence == pytest.approx(0.8)
        assert_consistent(result)

    def test_reorder_reports_none(self):
        """Test moved columns keep their identity"""
        result = detect_column_diff_with_positions(["A", "B", "C"], ["C", "A", "B"])

        assert result.change_type == ColumnChangeType.NONE
        assert result.mapping == [1, 2, 0]
        assert "reorder_match" in result.heuristics
        assert result.positions[0].confidence == pytest.approx(0.9)
        assert_consistent(result)

    def test_no_anchor_confidence(self):
        """Test unmatched columns without any anchor get low confidence"""
        result = detect_column_diff_with_positions(["Alpha"], ["Zulu", "Yankee"])

        assert result.change_type == ColumnChangeType.MIXED
        assert all(p.confidence == pytest.approx(0.6) for p in result.positions)

    @pytest.mark.parametrize(
        "old, new, expected",
        [
            ([], [], ColumnChangeType.NONE),
            ([], ["A"], ColumnChangeType.ADDED),
            (["A"], [], ColumnChangeType.REMOVED),
        ],
    )
    def test_empty_header_lists(self, old, new, expected):
        """Test empty header lists are valid input"""
        result = detect_column_diff_with_positions(old, new)

        assert result.change_type == expected
        assert_consistent(result)

    def test_sampling_detects_rename(self):
        """Test dissimilar rename recognized from matching cell values"""
        old_rows = [["1", "apple"], ["2", "pear"], ["3", ""], ["4", "plum"]]
        new_rows = [["1", "apple"], ["2", "pear"], ["3", ""], ["4", "plum"]]
        result = detect_column_diff_with_positions(["ID", "Fruit"], ["ID", "Produce"], old_rows, new_rows)

        assert result.change_type == ColumnChangeType.RENAMED
        assert result.mapping == [0, 1]
        assert "sampling_correction" in result.heuristics
        assert result.positions[1].confidence == pytest.approx(0.75)

    def test_sampling_below_threshold(self):
        """Test disagreeing cells keep the columns unmatched"""
        old_rows = [["1", "a"], ["2", "b"]]
        new_rows = [["1", "x"], ["2", "b"]]
        result = detect_column_diff_with_positions(["ID", "Fruit"], ["ID", "Produce"], old_rows, new_rows)

        assert result.change_type == ColumnChangeType.MIXED
        assert result.mapping == [0, -1]

    def test_custom_thresholds(self):
        """Test stricter fuzzy threshold rejects the rename"""
        detector = ColumnDiffDetector(fuzzy_threshold=0.95)
        result = detector.detect(["ID", "Name"], ["ID", "Names"])

        assert result.change_type == ColumnChangeType.MIXED

    @pytest.mark.parametrize("kwargs", [{"fuzzy_threshold": 1.5}, {"sampling_threshold": -0.1}, {"max_sample_rows": 0}])
    def test_invalid_thresholds(self, kwargs):
        """Test detector rejects out-of-range settings"""
        with pytest.raises(ValueError):
            ColumnDiffDetector(**kwargs)


class TestStrategies:
    """Tests for individual matching strategies"""

    def test_lcs_records_anchors(self):
        """Test LCS strategy anchors ordered columns"""
        ctx = ColumnMatchContext(["A", "B", "C"], ["A", "X", "C"])
        assert lcs_match(ctx)
        assert [(a.i1, a.i2) for a in ctx.anchors] == [(0, 0), (2, 2)]
        assert ctx.unmatched_old() == [1]
        assert ctx.old_gap(1) == ctx.new_gap(1) == 1

    def test_fuzzy_prefers_same_gap(self):
        """Test equal scores favour the pair inside the same gap"""
        ctx = ColumnMatchContext(["K", "abcd", "M", "abcd"], ["K", "abce", "M", "abcf"])
        lcs_match(ctx)
        assert fuzzy_match(ctx)
        assert ctx.matches[1].new_index == 1
        assert ctx.matches[3].new_index == 3

    def test_sampling_requires_rows(self):
        """Test sampling does nothing without rows on both sides"""
        ctx = ColumnMatchContext(["A"], ["B"], old_rows=[["1"]], new_rows=None)
        lcs_match(ctx)
        assert not sampling_correction(ctx)


class TestDetectColumnDiffFromRows:
    """Tests for detection informed by row diffs"""

    def test_no_row_diffs(self):
        """Test missing diff yields NONE with identity mapping"""
        result = detect_column_diff([], 3, ["A", "B", "C"])

        assert result.change_type == ColumnChangeType.NONE
        assert result.mapping == [0, 1, 2]
        assert result.heuristics == ["no_diff"]

    def test_header_change_detects_insertion(self):
        """Test old header recovered from the deleted header line"""
        row_diffs = [
            RowDiff(-2, RowDiffStatus.DELETED, old_content="| A | B | C |", is_deleted_row=True),
            RowDiff(-2, RowDiffStatus.ADDED, new_content="| A | B | X | C |"),
        ]
        result = detect_column_diff(row_diffs, 4, ["A", "B", "X", "C"])

        assert result.change_type == ColumnChangeType.ADDED
        assert result.added_columns == [2]
        assert result.mapping == [0, 1, 3]
        assert result.old_headers == ["A", "B", "C"]

    def test_new_header_from_added_line(self):
        """Test new header taken from the diff when current headers are unknown"""
        row_diffs = [
            RowDiff(-2, RowDiffStatus.DELETED, old_content="| A | B | C |", is_deleted_row=True),
            RowDiff(-2, RowDiffStatus.ADDED, new_content="| A | C |"),
        ]
        result = detect_column_diff(row_diffs, 2)

        assert result.change_type == ColumnChangeType.REMOVED
        assert result.mapping == [0, -1, 1]

    def test_separator_is_not_old_header(self):
        """Test a deleted separator line is not mistaken for the header"""
        row_diffs = [
            RowDiff(-2, RowDiffStatus.DELETED, old_content="| --- | --- |", is_deleted_row=True),
            RowDiff(0, RowDiffStatus.DELETED, old_content="| 1 | 2 |", is_deleted_row=True),
            RowDiff(0, RowDiffStatus.ADDED, new_content="| 1 | 2 |"),
        ]
        result = detect_column_diff(row_diffs, 2, ["A", "B"])

        assert result.change_type == ColumnChangeType.NONE
        assert result.heuristics == ["exact_match"]

    def test_case_only_header_edit(self):
        """Test header edit that only changes case is NONE"""
        row_diffs = [
            RowDiff(-2, RowDiffStatus.DELETED, old_content="| Name | First  Name |", is_deleted_row=True),
            RowDiff(-2, RowDiffStatus.ADDED, new_content="| name | First Name |"),
        ]
        result = detect_column_diff(row_diffs, 2, ["name", "First Name"])

        assert result.change_type == ColumnChangeType.NONE

    def test_fallback_without_headers(self):
        """Test count-only fallback when header identity is unknown"""
        row_diffs = [
            RowDiff(0, RowDiffStatus.DELETED, old_content="| 1 | 2 |", is_deleted_row=True),
            RowDiff(0, RowDiffStatus.ADDED, new_content="| 1 | 2 | 3 |"),
        ]
        result = detect_column_diff(row_diffs, 3)

        assert result.change_type == ColumnChangeType.ADDED
        assert result.added_columns == [2]
        assert result.mapping == [0, 1]
        assert result.heuristics == ["fallback_end_columns"]
        assert all(p.confidence == pytest.approx(0.5) for p in result.positions)

    def test_fallback_truncation(self):
        """Test fallback reports trailing removals"""
        row_diffs = [
            RowDiff(1, RowDiffStatus.DELETED, old_content="| 1 | 2 | 3 |", is_deleted_row=True),
        ]
        result = detect_column_diff(row_diffs, 1)

        assert result.change_type == ColumnChangeType.REMOVED
        assert result.deleted_columns == [1, 2]
        assert result.mapping == [0, -1, -1]

    def test_row_samples_detect_rename(self):
        """Test modified data rows act as samples for a dissimilar rename"""
        row_diffs = [
            RowDiff(-2, RowDiffStatus.DELETED, old_content="| ID | Fruit |", is_deleted_row=True),
            RowDiff(-2, RowDiffStatus.ADDED, new_content="| ID | Produce |"),
        ]
        current_rows = [["1", "apple"], ["2", "pear"]]
        result = detect_column_diff(row_diffs, 2, ["ID", "Produce"], current_rows)

        assert result.change_type == ColumnChangeType.RENAMED
        assert result.mapping == [0, 1]
