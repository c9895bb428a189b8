"""Column diff detection coordinator"""

import logging
from typing import Dict, List, Optional, Tuple

from tablediff.domain.detectors.column_strategies import (
    DEFAULT_STRATEGIES,
    FALLBACK_END_COLUMNS,
    NO_DIFF,
    ColumnMatchContext,
    Strategy,
)
from tablediff.domain.matching.row_tokenizer import is_separator_row, tokenize_row
from tablediff.domain.models.column_diff import (
    ColumnChangeType,
    ColumnDiffResult,
    ColumnPosition,
    ColumnPositionType,
)
from tablediff.domain.models.row_diff import HEADER_ROW, RowDiff, RowDiffStatus

logger = logging.getLogger(__name__)

CLEAN_GAP_CONFIDENCE = 0.95
MIXED_GAP_CONFIDENCE = 0.8
NO_ANCHOR_CONFIDENCE = 0.6
FALLBACK_CONFIDENCE = 0.5


class ColumnDiffDetector:
    """Detects inserted, deleted, renamed and moved columns between two header lists

    Runs matching strategies in order (exact, LCS, reorder, fuzzy, sampling)
    and stops as soon as no column is left unmatched on both sides.
    Whatever remains unmatched is reported as added (new side) or removed
    (old side).
    """

    def __init__(
        self,
        fuzzy_threshold: float = 0.6,
        sampling_threshold: float = 0.8,
        max_sample_rows: int = 50,
        strategies: Optional[List[Tuple[str, Strategy]]] = None,
    ):
        if not 0.0 <= fuzzy_threshold <= 1.0:
            raise ValueError(f"fuzzy_threshold must be within [0, 1], got {fuzzy_threshold}")
        if not 0.0 <= sampling_threshold <= 1.0:
            raise ValueError(f"sampling_threshold must be within [0, 1], got {sampling_threshold}")
        if max_sample_rows <= 0:
            raise ValueError(f"max_sample_rows must be > 0, got {max_sample_rows}")
        self.fuzzy_threshold = fuzzy_threshold
        self.sampling_threshold = sampling_threshold
        self.max_sample_rows = max_sample_rows
        self.strategies = strategies if strategies is not None else DEFAULT_STRATEGIES

    def detect(
        self,
        old_headers: List[str],
        new_headers: List[str],
        old_rows: Optional[List[List[str]]] = None,
        new_rows: Optional[List[List[str]]] = None,
    ) -> ColumnDiffResult:
        """Compare two header lists

        Args:
            old_headers: Headers before the edit
            new_headers: Headers after the edit
            old_rows: Optional data rows before the edit, aligned by row index with new_rows
            new_rows: Optional data rows after the edit

        Returns:
            ColumnDiffResult with mapping, positions and the strategies that fired
        """
        ctx = ColumnMatchContext(
            old_headers=list(old_headers or []),
            new_headers=list(new_headers or []),
            old_rows=old_rows,
            new_rows=new_rows,
            fuzzy_threshold=self.fuzzy_threshold,
            sampling_threshold=self.sampling_threshold,
            max_sample_rows=self.max_sample_rows,
        )
        heuristics: List[str] = []

        for name, strategy in self.strategies:
            if strategy(ctx):
                heuristics.append(name)
                logger.debug(f"Strategy {name} matched {len(ctx.matches)}/{ctx.old_count} old columns")
            if ctx.is_resolved:
                break

        return self._build_result(ctx, heuristics)

    def _build_result(self, ctx: ColumnMatchContext, heuristics: List[str]) -> ColumnDiffResult:
        mapping = [ctx.matches[i].new_index if i in ctx.matches else -1 for i in range(ctx.old_count)]
        deleted = ctx.unmatched_old()
        added = ctx.unmatched_new()
        renamed = [m for m in ctx.matches.values() if m.type == ColumnPositionType.RENAMED]

        confidence_of_old, confidence_of_new = self._gap_confidences(ctx, deleted, added)

        # Removed columns are drawn just before the next surviving old column
        removed_before: Dict[int, List[int]] = {}
        trailing_removed: List[int] = []
        for i in deleted:
            following = next((k for k in range(i + 1, ctx.old_count) if k in ctx.matches), None)
            if following is None:
                trailing_removed.append(i)
            else:
                removed_before.setdefault(ctx.matches[following].new_index, []).append(i)

        old_by_new = {m.new_index: i for i, m in ctx.matches.items()}
        positions: List[ColumnPosition] = []
        for j in range(ctx.new_count):
            for i in removed_before.get(j, []):
                positions.append(self._removed_position(ctx, i, confidence_of_old[i]))
            if j in old_by_new:
                match = ctx.matches[old_by_new[j]]
                positions.append(ColumnPosition(j, ctx.new_headers[j], match.type, match.confidence))
            else:
                positions.append(
                    ColumnPosition(j, ctx.new_headers[j], ColumnPositionType.ADDED, confidence_of_new[j])
                )
        for i in trailing_removed:
            positions.append(self._removed_position(ctx, i, confidence_of_old[i]))

        change_type = _classify(bool(added), bool(deleted), bool(renamed))
        logger.debug(
            f"Column diff: {change_type.value} (added={added}, deleted={deleted}, "
            f"renamed={len(renamed)}, heuristics={heuristics})"
        )

        return ColumnDiffResult(
            old_column_count=ctx.old_count,
            new_column_count=ctx.new_count,
            change_type=change_type,
            added_columns=added,
            deleted_columns=deleted,
            mapping=mapping,
            positions=positions,
            heuristics=heuristics,
            old_headers=list(ctx.old_headers),
        )

    @staticmethod
    def _removed_position(ctx: ColumnMatchContext, old_index: int, confidence: float) -> ColumnPosition:
        return ColumnPosition(old_index, ctx.old_headers[old_index], ColumnPositionType.REMOVED, confidence)

    @staticmethod
    def _gap_confidences(
        ctx: ColumnMatchContext, deleted: List[int], added: List[int]
    ) -> Tuple[Dict[int, float], Dict[int, float]]:
        """Confidence of each unmatched column based on the gap it sits in"""
        if not ctx.anchors:
            return (
                {i: NO_ANCHOR_CONFIDENCE for i in deleted},
                {j: NO_ANCHOR_CONFIDENCE for j in added},
            )

        old_gaps = {i: ctx.old_gap(i) for i in deleted}
        new_gaps = {j: ctx.new_gap(j) for j in added}
        mixed = set(old_gaps.values()) & set(new_gaps.values())

        def confidence(gap: int) -> float:
            return MIXED_GAP_CONFIDENCE if gap in mixed else CLEAN_GAP_CONFIDENCE

        return (
            {i: confidence(gap) for i, gap in old_gaps.items()},
            {j: confidence(gap) for j, gap in new_gaps.items()},
        )

    def detect_fallback(
        self,
        old_column_count: int,
        new_column_count: int,
        old_headers: Optional[List[str]] = None,
        new_headers: Optional[List[str]] = None,
    ) -> ColumnDiffResult:
        """Count-only detection: assume columns were appended or truncated at the end"""
        old_headers = list(old_headers or [])
        new_headers = list(new_headers or [])
        kept = min(old_column_count, new_column_count)

        def header(headers: List[str], index: int) -> str:
            return headers[index] if index < len(headers) else ""

        positions = [
            ColumnPosition(j, header(new_headers, j), ColumnPositionType.UNCHANGED, FALLBACK_CONFIDENCE)
            for j in range(kept)
        ]
        added = list(range(kept, new_column_count))
        deleted = list(range(kept, old_column_count))
        positions += [
            ColumnPosition(j, header(new_headers, j), ColumnPositionType.ADDED, FALLBACK_CONFIDENCE) for j in added
        ]
        positions += [
            ColumnPosition(i, header(old_headers, i), ColumnPositionType.REMOVED, FALLBACK_CONFIDENCE)
            for i in deleted
        ]

        return ColumnDiffResult(
            old_column_count=old_column_count,
            new_column_count=new_column_count,
            change_type=_classify(bool(added), bool(deleted), False),
            added_columns=added,
            deleted_columns=deleted,
            mapping=[i if i < kept else -1 for i in range(old_column_count)],
            positions=positions,
            heuristics=[FALLBACK_END_COLUMNS],
            old_headers=old_headers,
        )

    def detect_from_row_diffs(
        self,
        row_diffs: List[RowDiff],
        current_column_count: int,
        current_headers: Optional[List[str]] = None,
        current_rows: Optional[List[List[str]]] = None,
    ) -> ColumnDiffResult:
        """Detect column changes of a table from its row diffs

        The old header is recovered from the deleted header line; when the
        header was not touched the current headers stand in for it. Deleted
        and added versions of the same data row serve as cell samples.

        Args:
            row_diffs: Output of map_row_diffs for the table
            current_column_count: Column count of the current table
            current_headers: Headers of the current table, if known
            current_rows: Data rows of the current table, if known

        Returns:
            ColumnDiffResult; NONE with an identity mapping when there is no diff
        """
        if not row_diffs:
            return ColumnDiffResult.unchanged(current_column_count, current_headers, heuristic=NO_DIFF)

        deleted_header = next(
            (
                d
                for d in row_diffs
                if d.row == HEADER_ROW
                and d.status == RowDiffStatus.DELETED
                and d.old_content is not None
                and not is_separator_row(d.old_content)
            ),
            None,
        )
        added_header = next(
            (d for d in row_diffs if d.row == HEADER_ROW and d.status == RowDiffStatus.ADDED and d.new_content),
            None,
        )

        if deleted_header is not None:
            old_headers: Optional[List[str]] = tokenize_row(deleted_header.old_content)
        elif current_headers is not None:
            old_headers = list(current_headers)
        else:
            old_headers = None

        if current_headers is not None:
            new_headers: Optional[List[str]] = list(current_headers)
        elif added_header is not None:
            new_headers = tokenize_row(added_header.new_content)
        else:
            new_headers = None

        if old_headers is not None and new_headers is not None:
            old_rows, new_rows = _collect_samples(row_diffs, current_rows, len(old_headers), len(new_headers))
            return self.detect(old_headers, new_headers, old_rows, new_rows)

        if old_headers is not None:
            old_count = len(old_headers)
        else:
            first_deleted_row = next(
                (d for d in row_diffs if d.is_data_row and d.status == RowDiffStatus.DELETED and d.old_content),
                None,
            )
            old_count = len(tokenize_row(first_deleted_row.old_content)) if first_deleted_row else current_column_count
        new_count = len(new_headers) if new_headers is not None else current_column_count

        logger.debug(f"Header identity unavailable, falling back to counts ({old_count} -> {new_count})")
        return self.detect_fallback(old_count, new_count, old_headers, new_headers)


def _collect_samples(
    row_diffs: List[RowDiff],
    current_rows: Optional[List[List[str]]],
    old_column_count: int,
    new_column_count: int,
) -> Tuple[List[List[str]], List[List[str]]]:
    """Build aligned old/new data row samples

    Modified rows contribute their deleted and added versions. Untouched
    current rows contribute themselves to both sides when the column count is
    unchanged and no row was inserted or removed outright.
    """
    deleted: Dict[int, str] = {}
    added: Dict[int, str] = {}
    for diff in row_diffs:
        if not diff.is_data_row:
            continue
        if diff.status == RowDiffStatus.DELETED and diff.old_content is not None:
            deleted.setdefault(diff.row, diff.old_content)
        elif diff.status == RowDiffStatus.ADDED and diff.new_content is not None:
            added.setdefault(diff.row, diff.new_content)

    paired_rows = sorted(set(deleted) & set(added))
    old_rows = [tokenize_row(deleted[r]) for r in paired_rows]
    new_rows = [tokenize_row(added[r]) for r in paired_rows]

    rows_shifted = set(deleted) != set(added)
    if current_rows and old_column_count == new_column_count and not rows_shifted:
        for r, row in enumerate(current_rows):
            if r not in added:
                old_rows.append(list(row))
                new_rows.append(list(row))

    return old_rows, new_rows


def _classify(has_added: bool, has_deleted: bool, has_renamed: bool) -> ColumnChangeType:
    kinds = [
        kind
        for kind, present in (
            (ColumnChangeType.ADDED, has_added),
            (ColumnChangeType.REMOVED, has_deleted),
            (ColumnChangeType.RENAMED, has_renamed),
        )
        if present
    ]
    if not kinds:
        return ColumnChangeType.NONE
    if len(kinds) == 1:
        return kinds[0]
    return ColumnChangeType.MIXED


_default_detector = ColumnDiffDetector()


def detect_column_diff_with_positions(
    old_headers: List[str],
    new_headers: List[str],
    old_rows: Optional[List[List[str]]] = None,
    new_rows: Optional[List[List[str]]] = None,
) -> ColumnDiffResult:
    """Detect column changes between two header lists using default thresholds"""
    return _default_detector.detect(old_headers, new_headers, old_rows, new_rows)


def detect_column_diff(
    row_diffs: List[RowDiff],
    current_column_count: int,
    current_headers: Optional[List[str]] = None,
    current_rows: Optional[List[List[str]]] = None,
) -> ColumnDiffResult:
    """Detect column changes of a table from its row diffs using default thresholds"""
    return _default_detector.detect_from_row_diffs(row_diffs, current_column_count, current_headers, current_rows)
