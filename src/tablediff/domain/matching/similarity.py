"""Edit-distance based string similarity"""

from typing import Any

from rapidfuzz.distance import Levenshtein


def calculate_similarity(a: Any, b: Any) -> float:
    """Normalized Levenshtein similarity in [0, 1]

    Two empty strings are identical (1.0); one empty string against a
    non-empty one scores 0.0. Non-string input scores 0.0.
    """
    if not isinstance(a, str) or not isinstance(b, str):
        return 0.0
    if a == b:
        return 1.0
    max_len = max(len(a), len(b))
    if min(len(a), len(b)) == 0:
        return 0.0
    return 1.0 - Levenshtein.distance(a, b) / max_len
