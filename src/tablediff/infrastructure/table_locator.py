"""Line-based locator for Markdown pipe tables"""

import logging
from typing import List, Optional

from tablediff.domain.matching.row_tokenizer import is_separator_row, tokenize_row
from tablediff.domain.models.table import TableSnapshot

logger = logging.getLogger(__name__)

FENCE_MARKERS = ("```", "~~~")


def find_tables(text: Optional[str]) -> List[TableSnapshot]:
    """Find pipe tables in Markdown text

    A table is a line containing "|", directly followed by a separator row,
    followed by consecutive non-blank lines containing "|". Tables inside
    fenced code blocks are ignored.

    Args:
        text: Markdown document

    Returns:
        TableSnapshot per table, in document order, with 0-based line numbers
    """
    if not text:
        return []

    lines = text.splitlines()
    tables: List[TableSnapshot] = []
    in_fence = False
    i = 0

    while i < len(lines):
        stripped = lines[i].strip()
        if stripped.startswith(FENCE_MARKERS):
            in_fence = not in_fence
            i += 1
            continue

        if in_fence or "|" not in stripped or i + 1 >= len(lines) or not is_separator_row(lines[i + 1]):
            i += 1
            continue

        headers = tokenize_row(lines[i])
        start = i
        end = i + 1
        rows: List[List[str]] = []
        j = i + 2
        while j < len(lines) and lines[j].strip() and "|" in lines[j]:
            rows.append(tokenize_row(lines[j]))
            end = j
            j += 1

        tables.append(TableSnapshot(headers=headers, rows=rows, start_line=start, end_line=end))
        logger.debug(f"Found table at lines {start}-{end} ({len(headers)} columns, {len(rows)} rows)")
        i = j

    return tables


def find_table_at_line(tables: List[TableSnapshot], line: int) -> Optional[TableSnapshot]:
    """Return the table spanning a 0-based line, if any"""
    for table in tables:
        if table.start_line <= line <= table.end_line:
            return table
    return None
