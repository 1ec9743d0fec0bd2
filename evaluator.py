"""
Evaluator logic for grouping and scoring the comments of one discussion.

Each analysis owns its score lookup through an AnalysisRun. Runs can be kept
in a ScoreArena keyed by run id, so concurrent analyses never share state.
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from common.logger import get_logger
from core.chain import StageChain
from correlate.grouping import detect_groups, sort_comments
from correlate.models import CommentGroup, ContributorSummary
from correlate.summary import aggregate_scores_by_contributor
from ingest.comments import comment_event
from normalize.models import Comment
from scoring.formulas import CommentScore, calculate_group_aware_scores
from stages.policy import ContributorPolicy, DEFAULT_POLICY

logger = get_logger("evaluator")


@dataclass
class AnalysisRun:
    """Scores and groups produced by one analysis of one context."""
    context_scope: str
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    comments: List[Comment] = field(default_factory=list)
    scores: Dict[Any, CommentScore] = field(default_factory=dict)
    groups: Dict[Any, CommentGroup] = field(default_factory=dict)

    def score_for(self, comment_id: Any) -> Optional[CommentScore]:
        return self.scores.get(comment_id)

    def summary(self, policy: Optional[ContributorPolicy] = None) -> List[ContributorSummary]:
        return aggregate_scores_by_contributor(self.comments, self.scores, policy)


class ScoreArena:
    """Holds analysis runs by run id."""

    def __init__(self):
        self._runs: Dict[str, AnalysisRun] = {}

    def begin_run(self, context_scope: str) -> AnalysisRun:
        run = AnalysisRun(context_scope=context_scope)
        self._runs[run.run_id] = run
        return run

    def get(self, run_id: str) -> Optional[AnalysisRun]:
        return self._runs.get(run_id)

    def discard(self, run_id: str) -> None:
        """Drop a finished run. No-op if not found."""
        self._runs.pop(run_id, None)

    def __len__(self) -> int:
        return len(self._runs)

    def __contains__(self, run_id: str) -> bool:
        return run_id in self._runs


def analyze_comments(comments: Iterable[Comment], context_scope: str,
                     policy: Optional[ContributorPolicy] = None, grouping: bool = True,
                     arena: Optional[ScoreArena] = None) -> AnalysisRun:
    """
    Group and score *comments* for one discussion context.

    Bot comments and slash commands are scored as zero words. Within a group
    only the last member carries a score, computed on the group's total words.
    """
    policy = policy or DEFAULT_POLICY
    run = arena.begin_run(context_scope) if arena is not None else AnalysisRun(context_scope=context_scope)

    ordered = sort_comments(comments)
    run.comments = ordered
    run.groups = detect_groups(ordered, context_scope, policy) if grouping else {}

    for comment in ordered:
        run.scores[comment.id] = calculate_group_aware_scores(
            comment.body,
            comment.id,
            run.groups,
            is_slash_command=policy.is_slash_command(comment.body),
            is_bot=policy.is_bot(comment.author, comment.account_type),
        )

    logger.info("run %s: scored %d comment(s) in %s (%d grouped)",
                run.run_id, len(run.scores), context_scope, len(run.groups))
    return run


async def assess_quality(comments: Iterable[Comment], chain: StageChain,
                         source: str) -> Dict[Any, Dict[str, Any]]:
    """Run each comment through *chain* one at a time and collect the results by comment id."""
    results: Dict[Any, Dict[str, Any]] = {}
    for comment in comments:
        event = comment_event(comment, source)
        if not chain.accepts(event):
            continue
        results[comment.id] = await chain.execute(event)
    return results


def attach_quality(summaries: List[ContributorSummary], comments: Iterable[Comment],
                   results: Dict[Any, Dict[str, Any]]) -> List[ContributorSummary]:
    """Set each summary's quality to the mean aggregated score of its author's comments."""
    per_author: Dict[str, List[float]] = {}
    for comment in comments:
        result = results.get(comment.id) or {}
        aggregated = result.get('aggregated_score')
        if not aggregated or result.get('filtered') or result.get('is_bot') or result.get('is_slash_command'):
            continue
        per_author.setdefault(comment.author, []).append(aggregated['normalized'])

    for s in summaries:
        values = per_author.get(s.author)
        if values:
            s.quality = sum(values) / len(values)
    return summaries
