"""Table models - typed table snapshot and per-table diff payload"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from tablediff.domain.models.column_diff import ColumnDiffResult
from tablediff.domain.models.row_diff import RowDiff


@dataclass(frozen=True)
class TableSnapshot:
    """A Markdown table as delivered by the table parser"""

    headers: List[str]
    rows: List[List[str]]
    start_line: int  # 0-based line of the header row
    end_line: int  # 0-based line of the last table row

    def __post_init__(self):
        if self.start_line < 0:
            raise ValueError("start_line must be >= 0")
        if self.end_line < self.start_line:
            raise ValueError("end_line must be >= start_line")

    @property
    def row_count(self) -> int:
        """Number of data rows (header and separator excluded)"""
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.headers)


@dataclass(frozen=True)
class TableDiff:
    """Row and column diff for one table"""

    table_index: int
    row_diffs: List[RowDiff] = field(default_factory=list)
    column_diff: Optional[ColumnDiffResult] = None

    @property
    def has_changes(self) -> bool:
        return bool(self.row_diffs) or (self.column_diff is not None and self.column_diff.has_changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table_index": self.table_index,
            "row_diffs": [d.to_dict() for d in self.row_diffs],
            "column_diff": self.column_diff.to_dict() if self.column_diff else None,
        }
