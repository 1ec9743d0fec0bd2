"""
Per-contributor rollups of comment scores.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional

from correlate.models import ContributorSummary
from normalize.models import Comment
from scoring.formulas import CommentScore
from stages.policy import ContributorPolicy


def aggregate_scores_by_contributor(comments: Iterable[Comment], scores: Mapping[Any, CommentScore],
                                    policy: Optional[ContributorPolicy] = None) -> List[ContributorSummary]:
    """
    Sum the scores of each author's comments.

    Unscored group members add their words and count but no score. When a
    *policy* is given, bot authors are left out of the rollup. The result is
    sorted by exponential total, highest first.
    """
    by_author: Dict[str, ContributorSummary] = {}

    for comment in comments:
        if not comment.author:
            continue
        if policy is not None and policy.is_bot(comment.author, comment.account_type):
            continue
        score = scores.get(comment.id)
        if score is None:
            continue

        summary = by_author.setdefault(comment.author, ContributorSummary(author=comment.author))
        summary.comment_count += 1
        summary.word_count += score.word_count
        if score.is_grouped:
            summary.grouped_count += 1
        if score.is_scored:
            summary.scored_count += 1
            summary.original += score.original
            summary.log_adjusted += score.log_adjusted
            summary.exponential += score.exponential

    return sort_summaries(by_author.values())


def sort_summaries(summaries: Iterable[ContributorSummary]) -> List[ContributorSummary]:
    return sorted(summaries, key=lambda s: (-s.exponential, s.author))


def merge_summaries(*rollups: Iterable[ContributorSummary]) -> List[ContributorSummary]:
    """
    Combine rollups from several contexts (e.g. an issue and its linked pull request).

    Quality is averaged over the rollups that carry one, weighted by their
    comment counts; rollups without a quality do not dilute it.
    """
    merged: Dict[str, ContributorSummary] = {}
    quality_weight: Dict[str, int] = {}
    for rollup in rollups:
        for s in rollup:
            m = merged.setdefault(s.author, ContributorSummary(author=s.author))
            if s.quality is not None:
                seen = quality_weight.get(s.author, 0)
                total = seen + s.comment_count
                if m.quality is None or not total:
                    m.quality = s.quality
                else:
                    m.quality = (m.quality * seen + s.quality * s.comment_count) / total
                quality_weight[s.author] = total
            m.original += s.original
            m.log_adjusted += s.log_adjusted
            m.exponential += s.exponential
            m.word_count += s.word_count
            m.comment_count += s.comment_count
            m.scored_count += s.scored_count
            m.grouped_count += s.grouped_count
    return sort_summaries(merged.values())
