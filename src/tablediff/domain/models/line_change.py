"""LineChange model - a single added or deleted line taken from a unified diff"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class ChangeStatus(str, Enum):
    """Kind of line-level change"""

    ADDED = "added"
    DELETED = "deleted"


@dataclass(frozen=True)
class LineChange:
    """Represents one changed line of a diff hunk"""

    line_number: int  # 1-based; old-file line for deletions, new-file line for additions
    status: ChangeStatus
    content: str  # Line text without the leading +/- marker
    hunk_id: int  # Increases by one for every hunk header encountered

    @property
    def is_added(self) -> bool:
        return self.status == ChangeStatus.ADDED

    @property
    def is_deleted(self) -> bool:
        return self.status == ChangeStatus.DELETED


@dataclass
class HunkChanges:
    """Changed lines of one hunk, split by status in diff order"""

    hunk_id: int
    deleted: List[LineChange] = field(default_factory=list)
    added: List[LineChange] = field(default_factory=list)

    @property
    def pair_count(self) -> int:
        """Number of deleted/added lines that pair up as modifications"""
        return min(len(self.deleted), len(self.added))
