"""
Scoring package: word-count formulas, content scorers and their aggregator.
"""

from .formulas import (
    CommentScore,
    count_words,
    original,
    log_adjusted,
    exponential,
    calculate_all_scores,
    calculate_group_aware_scores,
)

__all__ = [
    "CommentScore",
    "count_words",
    "original",
    "log_adjusted",
    "exponential",
    "calculate_all_scores",
    "calculate_group_aware_scores",
]
