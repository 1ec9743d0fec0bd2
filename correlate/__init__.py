"""
Correlate package: group consecutive comments and roll scores up per contributor.
"""

from .grouping import detect_groups, sort_comments, source_key
from .models import CommentGroup, ContributorSummary
from .summary import aggregate_scores_by_contributor, merge_summaries

__all__ = [
    "detect_groups",
    "sort_comments",
    "source_key",
    "CommentGroup",
    "ContributorSummary",
    "aggregate_scores_by_contributor",
    "merge_summaries",
]
