"""Table diff service - orchestrates diff retrieval, row mapping and column detection"""

from __future__ import annotations

import logging
from typing import List, Optional

from tablediff.domain.detectors.column_diff_detector import ColumnDiffDetector
from tablediff.domain.mappers.row_diff_mapper import map_row_diffs
from tablediff.domain.models.column_diff import ColumnDiffResult
from tablediff.domain.models.line_change import LineChange
from tablediff.domain.models.row_diff import RowDiff
from tablediff.domain.models.table import TableDiff, TableSnapshot
from tablediff.infrastructure.diff_cache import DiffCache, DiffCacheKey
from tablediff.infrastructure.diff_parser import parse_unified_diff
from tablediff.infrastructure.diff_source.base import DiffSource

logger = logging.getLogger(__name__)


class TableDiffService:
    """Service for computing row and column diffs of Markdown tables"""

    def __init__(
        self,
        diff_source: DiffSource,
        cache: Optional[DiffCache] = None,
        detector: Optional[ColumnDiffDetector] = None,
    ):
        """Initialize table diff service

        Args:
            diff_source: Provider of unified diff text
            cache: Line change cache (a 5 second TTL cache if None)
            detector: Column diff detector (default thresholds if None)
        """
        self.diff_source = diff_source
        self.cache = cache if cache is not None else DiffCache()
        self.detector = detector or ColumnDiffDetector()

    def get_line_changes(
        self,
        file_path: str,
        table: TableSnapshot,
        revision_range: Optional[str] = None,
    ) -> List[LineChange]:
        """Get parsed diff lines for the file of a table

        Failures of the diff source are logged and reported as no changes;
        such results are not cached.
        """
        key = DiffCacheKey(file_path, table.start_line, table.end_line, revision_range)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            diff_text = self.diff_source.get_unified_diff(file_path, revision_range)
        except Exception as e:
            logger.error(f"Error fetching diff for {file_path}: {e}", exc_info=True)
            return []

        if diff_text is None:
            logger.debug(f"No diff available for {file_path}")
            return []

        changes = parse_unified_diff(diff_text)
        self.cache.put(key, changes)
        return changes

    def get_row_diffs(
        self,
        file_path: str,
        table: TableSnapshot,
        revision_range: Optional[str] = None,
    ) -> List[RowDiff]:
        changes = self.get_line_changes(file_path, table, revision_range)
        return map_row_diffs(changes, table.start_line, table.row_count)

    def get_column_diff(self, table: TableSnapshot, row_diffs: List[RowDiff]) -> ColumnDiffResult:
        return self.detector.detect_from_row_diffs(
            row_diffs,
            table.column_count,
            current_headers=table.headers,
            current_rows=table.rows,
        )

    def diff_table(
        self,
        file_path: str,
        table: TableSnapshot,
        table_index: int = 0,
        revision_range: Optional[str] = None,
    ) -> TableDiff:
        """Compute the row and column diff of one table

        Args:
            file_path: File containing the table
            table: Current table snapshot
            table_index: Position of the table in the document
            revision_range: Revision or range passed to the diff source

        Returns:
            TableDiff for the table
        """
        row_diffs = self.get_row_diffs(file_path, table, revision_range)
        column_diff = self.get_column_diff(table, row_diffs)
        logger.info(
            f"Table {table_index} in {file_path}: {len(row_diffs)} row changes, "
            f"columns {column_diff.change_type.value}"
        )
        return TableDiff(table_index=table_index, row_diffs=row_diffs, column_diff=column_diff)

    def diff_tables(
        self,
        file_path: str,
        tables: List[TableSnapshot],
        revision_range: Optional[str] = None,
    ) -> List[TableDiff]:
        return [
            self.diff_table(file_path, table, table_index=index, revision_range=revision_range)
            for index, table in enumerate(tables)
        ]

    def invalidate(self, file_path: Optional[str] = None) -> None:
        """Forget cached diffs, for one file or all files"""
        if file_path is None:
            self.cache.invalidate()
        else:
            self.cache.invalidate_file(file_path)
