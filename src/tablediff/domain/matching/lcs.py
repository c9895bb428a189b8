"""Longest common subsequence alignment"""

from typing import Hashable, List, NamedTuple, Sequence


class LcsPair(NamedTuple):
    """Matched positions: seq1[i1] == seq2[i2]"""

    i1: int
    i2: int


def compute_lcs(seq1: Sequence[Hashable], seq2: Sequence[Hashable]) -> List[LcsPair]:
    """Compute the longest common subsequence of two token sequences

    Tie-break: a match is taken as soon as the current tokens are equal; on a
    mismatch the first sequence is advanced whenever that keeps the remaining
    LCS length, otherwise the second. With duplicate tokens the earliest
    occurrences are paired.

    Args:
        seq1: First sequence (old side)
        seq2: Second sequence (new side)

    Returns:
        Index pairs, strictly increasing on both sides
    """
    n, m = len(seq1), len(seq2)
    if n == 0 or m == 0:
        return []

    # suffix[i][j] = LCS length of seq1[i:] and seq2[j:]
    suffix = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        row, below = suffix[i], suffix[i + 1]
        for j in range(m - 1, -1, -1):
            if seq1[i] == seq2[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])

    pairs: List[LcsPair] = []
    i = j = 0
    while i < n and j < m:
        if seq1[i] == seq2[j]:
            pairs.append(LcsPair(i, j))
            i += 1
            j += 1
        elif suffix[i + 1][j] >= suffix[i][j + 1]:
            i += 1
        else:
            j += 1
    return pairs
