"""Column diff detection."""

from tablediff.domain.detectors.column_diff_detector import (
    ColumnDiffDetector,
    detect_column_diff,
    detect_column_diff_with_positions,
)
from tablediff.domain.detectors.column_strategies import ColumnMatchContext

__all__ = [
    "ColumnDiffDetector",
    "ColumnMatchContext",
    "detect_column_diff",
    "detect_column_diff_with_positions",
]
