"""Unified diff parser producing line-level changes"""

import logging
import re
from typing import Dict, List, Optional

from tablediff.domain.models.line_change import ChangeStatus, HunkChanges, LineChange

logger = logging.getLogger(__name__)

HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


def parse_unified_diff(diff_content: Optional[str]) -> List[LineChange]:
    """Parse unified diff text into a flat list of line changes

    Supports the format produced by `git diff`:
    diff --git a/file.md b/file.md
    --- a/file.md
    +++ b/file.md
    @@ -start,count +start,count @@
    -old line
    +new line

    Lines outside a hunk are ignored. A malformed hunk header closes the
    current hunk; later well-formed hunks are still parsed.

    Args:
        diff_content: Diff content as string (None is treated as empty)

    Returns:
        LineChange records in diff order; deletions carry old-file line
        numbers and additions new-file line numbers
    """
    if not diff_content:
        return []

    changes: List[LineChange] = []
    hunk_id = 0
    in_hunk = False
    old_line = 0
    new_line = 0

    for line in diff_content.splitlines():
        if line.startswith("diff --git"):
            in_hunk = False
            continue

        if line.startswith("@@"):
            match = HUNK_HEADER.match(line)
            if not match:
                logger.debug(f"Skipping malformed hunk header: {line!r}")
                in_hunk = False
                continue
            old_line = int(match.group(1))
            new_line = int(match.group(3))
            hunk_id += 1
            in_hunk = True
            continue

        if not in_hunk or not line or line.startswith("\\"):
            continue

        if line.startswith("-") and not line.startswith("---"):
            changes.append(LineChange(old_line, ChangeStatus.DELETED, line[1:], hunk_id))
            old_line += 1
        elif line.startswith("+") and not line.startswith("+++"):
            changes.append(LineChange(new_line, ChangeStatus.ADDED, line[1:], hunk_id))
            new_line += 1
        else:
            # Context line
            old_line += 1
            new_line += 1

    logger.debug(f"Parsed {len(changes)} line changes in {hunk_id} hunks")
    return changes


def group_by_hunk(changes: List[LineChange]) -> List[HunkChanges]:
    """Group line changes by hunk, preserving diff order

    Args:
        changes: Output of parse_unified_diff

    Returns:
        One HunkChanges per hunk id, ordered by first appearance
    """
    groups: Dict[int, HunkChanges] = {}
    for change in changes:
        group = groups.get(change.hunk_id)
        if group is None:
            group = groups[change.hunk_id] = HunkChanges(hunk_id=change.hunk_id)
        if change.is_deleted:
            group.deleted.append(change)
        else:
            group.added.append(change)
    return list(groups.values())
