"""Column matching strategies

Each strategy inspects a shared ColumnMatchContext, accepts the old/new
column pairs it is confident about and returns True if it matched anything.
Strategies never revisit pairs accepted by an earlier strategy.
"""

import logging
from bisect import bisect_left
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from tablediff.domain.matching.header_normalizer import normalize_header
from tablediff.domain.matching.lcs import LcsPair, compute_lcs
from tablediff.domain.matching.similarity import calculate_similarity
from tablediff.domain.models.column_diff import ColumnPositionType

logger = logging.getLogger(__name__)

EXACT_MATCH = "exact_match"
LCS_MATCH = "lcs_match"
REORDER_MATCH = "reorder_match"
FUZZY_MATCH = "fuzzy_match"
SAMPLING_CORRECTION = "sampling_correction"
FALLBACK_END_COLUMNS = "fallback_end_columns"
NO_DIFF = "no_diff"

REORDER_CONFIDENCE = 0.9
SAMPLING_CONFIDENCE_FACTOR = 0.75


@dataclass
class ColumnMatch:
    """An accepted old -> new column pairing"""

    new_index: int
    type: ColumnPositionType  # UNCHANGED or RENAMED
    confidence: float


@dataclass
class ColumnMatchContext:
    """Mutable matching state shared by the strategies of one detection run"""

    old_headers: List[str]
    new_headers: List[str]
    old_rows: Optional[List[List[str]]] = None
    new_rows: Optional[List[List[str]]] = None
    fuzzy_threshold: float = 0.6
    sampling_threshold: float = 0.8
    max_sample_rows: int = 50
    matches: Dict[int, ColumnMatch] = field(default_factory=dict)  # old index -> match
    anchors: List[LcsPair] = field(default_factory=list)
    aligned: bool = False  # Set once exact or LCS alignment has run

    def __post_init__(self):
        self.old_normalized = [normalize_header(h) for h in self.old_headers]
        self.new_normalized = [normalize_header(h) for h in self.new_headers]
        self._matched_new: Dict[int, int] = {}

    @property
    def old_count(self) -> int:
        return len(self.old_headers)

    @property
    def new_count(self) -> int:
        return len(self.new_headers)

    def unmatched_old(self) -> List[int]:
        return [i for i in range(self.old_count) if i not in self.matches]

    def unmatched_new(self) -> List[int]:
        return [j for j in range(self.new_count) if j not in self._matched_new]

    def is_new_matched(self, new_index: int) -> bool:
        return new_index in self._matched_new

    @property
    def is_resolved(self) -> bool:
        """No column is left unmatched on both sides at once"""
        if not self.aligned:
            return False
        return not (self.unmatched_old() and self.unmatched_new())

    def accept(self, old_index: int, new_index: int, match_type: ColumnPositionType, confidence: float) -> None:
        if old_index in self.matches or new_index in self._matched_new:
            raise ValueError(f"Column already matched: old={old_index}, new={new_index}")
        self.matches[old_index] = ColumnMatch(new_index, match_type, confidence)
        self._matched_new[new_index] = old_index

    def old_gap(self, old_index: int) -> int:
        """Index of the gap between LCS anchors holding an old column"""
        return bisect_left([a.i1 for a in self.anchors], old_index)

    def new_gap(self, new_index: int) -> int:
        return bisect_left([a.i2 for a in self.anchors], new_index)


Strategy = Callable[[ColumnMatchContext], bool]


def exact_match(ctx: ColumnMatchContext) -> bool:
    """Identity mapping when normalized headers are identical"""
    if ctx.old_normalized != ctx.new_normalized:
        return False
    for i in range(ctx.old_count):
        ctx.accept(i, i, ColumnPositionType.UNCHANGED, 1.0)
    ctx.aligned = True
    return True


def lcs_match(ctx: ColumnMatchContext) -> bool:
    """Anchor columns that keep their relative order"""
    ctx.anchors = compute_lcs(ctx.old_normalized, ctx.new_normalized)
    for pair in ctx.anchors:
        ctx.accept(pair.i1, pair.i2, ColumnPositionType.UNCHANGED, 1.0)
    ctx.aligned = True
    logger.debug(f"LCS anchored {len(ctx.anchors)} of {ctx.old_count} -> {ctx.new_count} columns")
    return True


def reorder_match(ctx: ColumnMatchContext) -> bool:
    """Pair moved columns whose normalized headers are still equal"""
    found = False
    for i in ctx.unmatched_old():
        for j in ctx.unmatched_new():
            if ctx.old_normalized[i] == ctx.new_normalized[j]:
                ctx.accept(i, j, ColumnPositionType.UNCHANGED, REORDER_CONFIDENCE)
                found = True
                break
    return found


def _rank_key(ctx: ColumnMatchContext, score: float, old_index: int, new_index: int) -> Tuple:
    same_gap = ctx.old_gap(old_index) == ctx.new_gap(new_index)
    return (-score, not same_gap, abs(old_index - new_index), old_index, new_index)


def _accept_greedy(
    ctx: ColumnMatchContext,
    scored: List[Tuple[float, int, int]],
    confidence: Callable[[float], float],
) -> bool:
    """Accept candidate pairs from best to worst, skipping used columns"""
    scored.sort(key=lambda c: _rank_key(ctx, *c))
    found = False
    for score, i, j in scored:
        if i in ctx.matches or ctx.is_new_matched(j):
            continue
        ctx.accept(i, j, ColumnPositionType.RENAMED, confidence(score))
        found = True
    return found


def fuzzy_match(ctx: ColumnMatchContext) -> bool:
    """Pair leftover columns whose headers are similar enough to be renames"""
    scored = []
    for i in ctx.unmatched_old():
        for j in ctx.unmatched_new():
            score = calculate_similarity(ctx.old_normalized[i], ctx.new_normalized[j])
            if score >= ctx.fuzzy_threshold:
                scored.append((score, i, j))
    return _accept_greedy(ctx, scored, lambda score: score)


def _cell(row: Sequence[str], index: int) -> str:
    if index < len(row) and isinstance(row[index], str):
        return row[index].strip()
    return ""


def _agreement_ratio(ctx: ColumnMatchContext, old_index: int, new_index: int) -> float:
    sample_count = min(len(ctx.old_rows), len(ctx.new_rows), ctx.max_sample_rows)
    compared = agreed = 0
    for r in range(sample_count):
        old_value = _cell(ctx.old_rows[r], old_index)
        new_value = _cell(ctx.new_rows[r], new_index)
        if not old_value and not new_value:
            continue
        compared += 1
        if old_value == new_value:
            agreed += 1
    return agreed / compared if compared else 0.0


def sampling_correction(ctx: ColumnMatchContext) -> bool:
    """Pair leftover columns whose data cells agree row by row"""
    if not ctx.old_rows or not ctx.new_rows:
        return False
    scored = []
    for i in ctx.unmatched_old():
        for j in ctx.unmatched_new():
            ratio = _agreement_ratio(ctx, i, j)
            if ratio >= ctx.sampling_threshold:
                scored.append((ratio, i, j))
    return _accept_greedy(ctx, scored, lambda ratio: SAMPLING_CONFIDENCE_FACTOR * ratio)


DEFAULT_STRATEGIES: List[Tuple[str, Strategy]] = [
    (EXACT_MATCH, exact_match),
    (LCS_MATCH, lcs_match),
    (REORDER_MATCH, reorder_match),
    (FUZZY_MATCH, fuzzy_match),
    (SAMPLING_CORRECTION, sampling_correction),
]
