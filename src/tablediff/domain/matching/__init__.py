"""Text matching utilities shared by the row and column detectors"""

from tablediff.domain.matching.header_normalizer import headers_equal, normalize_header
from tablediff.domain.matching.lcs import LcsPair, compute_lcs
from tablediff.domain.matching.row_tokenizer import (
    count_table_cells,
    is_separator_row,
    join_row,
    tokenize_row,
)
from tablediff.domain.matching.similarity import calculate_similarity

__all__ = [
    "LcsPair",
    "calculate_similarity",
    "compute_lcs",
    "count_table_cells",
    "headers_equal",
    "is_separator_row",
    "join_row",
    "normalize_header",
    "tokenize_row",
]
