"""Markdown table row tokenizer"""

import re
from typing import Any, List

DELIMITER = "|"
ESCAPE = "\\"
BACKTICK = "`"

_SEPARATOR_CELL = re.compile(r"^:?-+:?$")


def _strip_outer_delimiters(line: str) -> str:
    """Remove one leading and one unescaped trailing delimiter"""
    text = line.strip()
    if text.startswith(DELIMITER):
        text = text[1:]
    if text.endswith(DELIMITER) and not _is_escaped(text, len(text) - 1):
        text = text[:-1]
    return text


def _is_escaped(text: str, index: int) -> bool:
    """Check whether the character at index is preceded by an odd number of backslashes"""
    backslashes = 0
    i = index - 1
    while i >= 0 and text[i] == ESCAPE:
        backslashes += 1
        i -= 1
    return backslashes % 2 == 1


def _backtick_run_length(text: str, start: int) -> int:
    end = start
    while end < len(text) and text[end] == BACKTICK:
        end += 1
    return end - start


def _has_closing_run(text: str, start: int, length: int) -> bool:
    """Check whether a run of exactly `length` backticks occurs at or after start"""
    i = start
    while i < len(text):
        if text[i] == BACKTICK:
            run = _backtick_run_length(text, i)
            if run == length:
                return True
            i += run
        else:
            i += 1
    return False


def tokenize_row(line: Any) -> List[str]:
    """Split a Markdown table row into cell strings

    Pipes inside inline code spans and backslash-escaped pipes do not split
    cells. Escape sequences and code spans are kept verbatim. A code span
    opened by N backticks is closed only by another run of exactly N; an
    opening run without a matching close is treated as literal text.

    Args:
        line: Row text, e.g. "| a | b |" or "a | b"

    Returns:
        List of trimmed cells; empty list when the row holds no content
    """
    if not isinstance(line, str):
        return []

    text = _strip_outer_delimiters(line)
    if not text.strip():
        return []

    cells: List[str] = []
    current: List[str] = []
    code_run = 0  # Length of the backtick run that opened the current code span
    escaped = False
    i = 0

    while i < len(text):
        ch = text[i]

        if ch == BACKTICK and not escaped:
            run = _backtick_run_length(text, i)
            if code_run == 0:
                if _has_closing_run(text, i + run, run):
                    code_run = run
            elif run == code_run:
                code_run = 0
            current.append(text[i:i + run])
            i += run
            continue

        if ch == DELIMITER and not escaped and code_run == 0:
            cells.append("".join(current).strip())
            current = []
            i += 1
            continue

        escaped = ch == ESCAPE and not escaped
        current.append(ch)
        i += 1

    cells.append("".join(current).strip())

    if not any(cells):
        return []
    return cells


def count_table_cells(line: Any) -> int:
    """Count the cells of a table row"""
    return len(tokenize_row(line))


def is_separator_row(line: Any) -> bool:
    """Check if a row is a header separator such as "| --- | :---: |"

    Args:
        line: Row text

    Returns:
        True if every cell is a dash run with optional alignment colons
    """
    cells = tokenize_row(line)
    if not cells:
        return False
    return all(_SEPARATOR_CELL.match(cell) for cell in cells)


def join_row(cells: List[str]) -> str:
    """Render cells back into a pipe-delimited row"""
    return "| " + " | ".join(cells) + " |"
