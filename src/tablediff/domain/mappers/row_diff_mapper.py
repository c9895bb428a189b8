"""Map line-level diff changes onto table row indices"""

import logging
from typing import List, Optional, Set, Tuple

from tablediff.domain.models.line_change import LineChange
from tablediff.domain.models.row_diff import HEADER_ROW, RowDiff, RowDiffStatus
from tablediff.infrastructure.diff_parser import group_by_hunk

logger = logging.getLogger(__name__)

# Lines between the header line and the first data row (header + separator)
_HEADER_OFFSET = 2


def row_index_for_line(line_number: int, table_start_line: int) -> int:
    """Convert a 1-based file line into a table row index

    Args:
        line_number: 1-based line number from the diff
        table_start_line: 0-based line of the table header

    Returns:
        -2 for the header, -1 for the separator, >= 0 for data rows
    """
    return line_number - table_start_line - 1 - _HEADER_OFFSET


def map_row_diffs(
    line_changes: Optional[List[LineChange]],
    table_start_line: int,
    row_count: int,
) -> List[RowDiff]:
    """Translate line changes into row diffs for the current table

    Within each hunk deletions and additions pair up in order as
    modifications: a DELETED entry immediately followed by an ADDED entry on
    the row of the added line. Unpaired additions and deletions keep their
    own status and line-derived row. Entries outside the table are dropped.

    Args:
        line_changes: Parsed diff lines (None or empty means no diff)
        table_start_line: 0-based line of the table header
        row_count: Number of data rows in the current table

    Returns:
        Deduplicated RowDiff list in emission order

    Raises:
        ValueError: If row_count or table_start_line is negative
    """
    if row_count < 0:
        raise ValueError(f"row_count must be >= 0, got {row_count}")
    if table_start_line < 0:
        raise ValueError(f"table_start_line must be >= 0, got {table_start_line}")
    if not line_changes:
        return []

    candidates: List[RowDiff] = []

    for hunk in group_by_hunk(line_changes):
        pair_count = hunk.pair_count

        for deleted, added in zip(hunk.deleted[:pair_count], hunk.added[:pair_count]):
            row = row_index_for_line(added.line_number, table_start_line)
            candidates.append(_deleted_row(row, deleted, ghost=False))
            candidates.append(_added_row(row, added))

        for added in hunk.added[pair_count:]:
            candidates.append(_added_row(row_index_for_line(added.line_number, table_start_line), added))

        for deleted in hunk.deleted[pair_count:]:
            row = row_index_for_line(deleted.line_number, table_start_line)
            candidates.append(_deleted_row(row, deleted, ghost=True))

    in_range = [diff for diff in candidates if HEADER_ROW <= diff.row < row_count]
    dropped = len(candidates) - len(in_range)
    if dropped:
        logger.debug(f"Dropped {dropped} changes outside the table (rows: {row_count})")

    return dedupe_row_diffs(in_range)


def dedupe_row_diffs(row_diffs: List[RowDiff]) -> List[RowDiff]:
    """Drop repeated entries, keeping the first occurrence

    Entries are identified by (row, status); DELETED entries additionally by
    their old content so that several removed rows may share a row index.
    """
    seen: Set[Tuple] = set()
    result: List[RowDiff] = []
    for diff in row_diffs:
        if diff.status == RowDiffStatus.DELETED:
            key: Tuple = (diff.row, diff.status, diff.old_content)
        else:
            key = (diff.row, diff.status)
        if key in seen:
            continue
        seen.add(key)
        result.append(diff)
    return result


def _deleted_row(row: int, change: LineChange, ghost: bool) -> RowDiff:
    # Only unpaired deletions lack a live row to draw on
    return RowDiff(row=row, status=RowDiffStatus.DELETED, old_content=change.content, is_deleted_row=ghost)


def _added_row(row: int, change: LineChange) -> RowDiff:
    return RowDiff(row=row, status=RowDiffStatus.ADDED, new_content=change.content)
