"""ColumnDiffResult model - structural column changes between two table versions"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class ColumnChangeType(str, Enum):
    """Overall classification of the column changes"""

    NONE = "none"
    ADDED = "added"
    REMOVED = "removed"
    RENAMED = "renamed"
    MIXED = "mixed"


class ColumnPositionType(str, Enum):
    """Classification of a single column"""

    ADDED = "added"
    REMOVED = "removed"
    RENAMED = "renamed"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class ColumnPosition:
    """One column event used for UI decoration"""

    index: int  # New-side index, or old-side index for removed columns
    header: str
    type: ColumnPositionType
    confidence: float  # 0.0 - 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "header": self.header,
            "type": self.type.value,
            "confidence": round(self.confidence, 4),
        }


@dataclass(frozen=True)
class ColumnDiffResult:
    """Result of column diff detection"""

    old_column_count: int
    new_column_count: int
    change_type: ColumnChangeType = ColumnChangeType.NONE
    added_columns: List[int] = field(default_factory=list)  # New-side indices
    deleted_columns: List[int] = field(default_factory=list)  # Old-side indices
    mapping: List[int] = field(default_factory=list)  # old index -> new index or -1
    positions: List[ColumnPosition] = field(default_factory=list)
    heuristics: List[str] = field(default_factory=list)
    old_headers: List[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return self.change_type != ColumnChangeType.NONE

    @property
    def renamed_columns(self) -> List[int]:
        """New-side indices of columns detected as renamed"""
        return [p.index for p in self.positions if p.type == ColumnPositionType.RENAMED]

    @classmethod
    def unchanged(cls, column_count: int, headers: List[str] = None, heuristic: str = None) -> "ColumnDiffResult":
        """Build a NONE result with an identity mapping"""
        headers = list(headers or [])
        positions = [
            ColumnPosition(
                index=i,
                header=headers[i] if i < len(headers) else "",
                type=ColumnPositionType.UNCHANGED,
                confidence=1.0,
            )
            for i in range(column_count)
        ]
        return cls(
            old_column_count=column_count,
            new_column_count=column_count,
            change_type=ColumnChangeType.NONE,
            mapping=list(range(column_count)),
            positions=positions,
            heuristics=[heuristic] if heuristic else [],
            old_headers=headers,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for JSON output"""
        return {
            "old_column_count": self.old_column_count,
            "new_column_count": self.new_column_count,
            "change_type": self.change_type.value,
            "added_columns": list(self.added_columns),
            "deleted_columns": list(self.deleted_columns),
            "mapping": list(self.mapping),
            "positions": [p.to_dict() for p in self.positions],
            "heuristics": list(self.heuristics),
            "old_headers": list(self.old_headers),
        }
