"""Header normalization for equality comparisons"""

import re
from typing import Any

_WHITESPACE = re.compile(r"\s+")


def normalize_header(header: Any) -> str:
    """Canonicalize a header for comparison (never for display)

    Lowercases, collapses whitespace runs to a single space and trims.
    Non-string input yields an empty string.
    """
    if not isinstance(header, str):
        return ""
    return _WHITESPACE.sub(" ", header.lower()).strip()


def headers_equal(header1: Any, header2: Any) -> bool:
    """Compare two headers after normalization"""
    return normalize_header(header1) == normalize_header(header2)
