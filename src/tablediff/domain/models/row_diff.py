"""RowDiff model - change status of a single table row"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

HEADER_ROW = -2
SEPARATOR_ROW = -1


class RowDiffStatus(str, Enum):
    """Row status shown by renderers

    A modified row is reported as a DELETED entry immediately followed by an
    ADDED entry for the same row index.
    """

    UNCHANGED = "unchanged"
    ADDED = "added"
    DELETED = "deleted"


@dataclass(frozen=True)
class RowDiff:
    """Represents the diff status of one table row"""

    row: int  # -2 = header, -1 = separator, >= 0 = data row in the current table
    status: RowDiffStatus
    old_content: Optional[str] = None  # Raw line text for DELETED entries
    new_content: Optional[str] = None  # Raw line text for ADDED entries
    is_deleted_row: bool = False  # Ghost row that only displays removed content

    @property
    def is_header(self) -> bool:
        return self.row == HEADER_ROW

    @property
    def is_separator(self) -> bool:
        return self.row == SEPARATOR_ROW

    @property
    def is_data_row(self) -> bool:
        return self.row >= 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for JSON output"""
        data: Dict[str, Any] = {"row": self.row, "status": self.status.value}
        if self.old_content is not None:
            data["old_content"] = self.old_content
        if self.new_content is not None:
            data["new_content"] = self.new_content
        if self.is_deleted_row:
            data["is_deleted_row"] = True
        return data
