"""
Temporal grouping of consecutive comments.

Consecutive comments by the same author within the same context are merged
into one group so that the scoring formulas see the combined length. Bot
comments and slash commands never take part in a group.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional

from common.logger import get_logger
from correlate.models import CommentGroup
from normalize.models import Comment, OPENING_TEXT_IDS
from normalize.util import parse_timestamp
from scoring.formulas import count_words
from stages.policy import ContributorPolicy, DEFAULT_POLICY

logger = get_logger("grouping")

TEXT_SEPARATOR = '\n\n'


def _sort_key(indexed):
    index, comment = indexed
    reserved = 0 if comment.id in OPENING_TEXT_IDS else 1
    ts = parse_timestamp(comment.created_at)
    # undated comments go ahead of dated ones
    dated = 0 if ts is None else 1
    stamp = ts.timestamp() if ts is not None else 0.0
    return reserved, dated, stamp, index


def sort_comments(comments: Iterable[Comment]) -> List[Comment]:
    """Opening texts first, then ascending creation time; ties keep input order."""
    return [c for _, c in sorted(enumerate(comments), key=_sort_key)]


def source_key(context_scope: str, context_hints: Optional[Mapping[str, Any]] = None) -> str:
    """Return *context_scope* refined by the non-empty hints as sorted ``key=value`` pairs."""
    parts = [f"{k}={v}" for k, v in sorted((context_hints or {}).items()) if v not in (None, '')]
    if not parts:
        return context_scope
    return context_scope + '|' + '|'.join(parts)


def _is_groupable(comment: Comment, policy: ContributorPolicy) -> bool:
    if not comment.author:
        return False
    return not policy.is_excluded_from_scoring(comment.author, comment.body, comment.account_type)


def detect_groups(comments: Iterable[Comment], context_scope: str,
                  policy: Optional[ContributorPolicy] = None) -> Dict[Any, CommentGroup]:
    """
    Detect runs of consecutive same-author, same-context comments.

    Returns a mapping from member id to its group; every member of one group
    maps to the same object. Runs with a single comment are not returned.
    """
    policy = policy or DEFAULT_POLICY
    groups: List[CommentGroup] = []
    current: Optional[CommentGroup] = None

    for comment in sort_comments(comments):
        if not _is_groupable(comment, policy):
            # bots, slash commands and anonymous comments break a run
            current = None
            continue

        key = source_key(context_scope, comment.context_hints)
        words = count_words(comment.body)

        if current is not None and current.author == comment.author and current.context_key == key:
            current.member_ids.append(comment.id)
            current.concatenated_text += TEXT_SEPARATOR + (comment.body or '')
            current.total_word_count += words
            continue

        current = CommentGroup(
            author=comment.author,
            context_key=key,
            member_ids=[comment.id],
            concatenated_text=comment.body or '',
            total_word_count=words,
        )
        groups.append(current)

    result: Dict[Any, CommentGroup] = {}
    for group in groups:
        if group.size < 2:
            continue
        for member_id in group.member_ids:
            result[member_id] = group

    logger.debug("scope %s: %d group(s) covering %d comment(s)",
                 context_scope, len({id(g) for g in result.values()}), len(result))
    return result
