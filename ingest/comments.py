"""
Conversion of already-fetched GitHub discussion dumps into Comment records.

A dump is either a bare list of comments or a mapping with ``details`` (the
issue or pull request itself), ``comments`` and optionally ``linked``, a
nested dump for a linked pull request.
"""
from typing import Any, Dict, Iterable, List, Optional, Tuple

from common.logger import get_logger
from normalize.models import Comment, Event, LINKED_OPENING_TEXT_ID, OPENING_TEXT_ID, create_event
from normalize.util import context_hints_for, normalize_user

logger = get_logger("ingest")

COMMENT_EVENT_TYPE = 'com.github.issue_comment.created'


def comment_from_github(raw: Dict[str, Any]) -> Optional[Comment]:
    """Build a Comment from an issue comment, review comment or review payload."""
    if not isinstance(raw, dict) or raw.get('id') is None:
        return None
    login, account_type = normalize_user(raw.get('user'))
    return Comment(
        id=raw['id'],
        body=raw.get('body') or '',
        author=login,
        created_at=raw.get('created_at') or raw.get('submitted_at'),
        context_hints=context_hints_for(raw),
        account_type=account_type,
    )


def opening_text_comment(details: Dict[str, Any], comment_id: int = OPENING_TEXT_ID) -> Optional[Comment]:
    """The issue or pull request body as a comment under a reserved id."""
    if not isinstance(details, dict) or not details.get('body'):
        return None
    login, account_type = normalize_user(details.get('user'))
    return Comment(
        id=comment_id,
        body=details['body'],
        author=login,
        created_at=details.get('created_at'),
        context_hints={'kind': 'conversation'},
        account_type=account_type,
    )


def comments_from_github(raw_comments: Iterable[Dict[str, Any]],
                         details: Optional[Dict[str, Any]] = None,
                         opening_id: int = OPENING_TEXT_ID) -> List[Comment]:
    comments: List[Comment] = []
    opening = opening_text_comment(details, opening_id) if details else None
    if opening is not None:
        comments.append(opening)
    skipped = 0
    for raw in raw_comments or []:
        comment = comment_from_github(raw)
        if comment is None:
            skipped += 1
            continue
        comments.append(comment)
    if skipped:
        logger.warning("skipped %d comment(s) without an id", skipped)
    return comments


def load_discussion(doc: Any) -> Tuple[List[Comment], List[Comment]]:
    """
    Return (comments, linked_comments) for a dump.

    The linked pull request's opening text uses its own reserved id so both
    can be summarized together without colliding.
    """
    if isinstance(doc, list):
        return comments_from_github(doc), []
    if not isinstance(doc, dict):
        raise ValueError("discussion dump must be a list or a mapping")

    comments = comments_from_github(doc.get('comments') or [], doc.get('details'))
    linked = doc.get('linked') or {}
    linked_comments: List[Comment] = []
    if linked:
        linked_comments = comments_from_github(linked.get('comments') or [], linked.get('details'),
                                               opening_id=LINKED_OPENING_TEXT_ID)
    return comments, linked_comments


def comment_event(comment: Comment, source: str) -> Event:
    """Wrap a Comment as an issue-comment event so it can run through a stage chain."""
    user = {'login': comment.author, 'type': comment.account_type} if comment.author else None
    return create_event(
        type=COMMENT_EVENT_TYPE,
        source=source,
        data={'comment': {
            'id': comment.id,
            'body': comment.body,
            'user': user,
            'created_at': comment.created_at,
        }},
        id=str(comment.id),
        time=comment.created_at,
    )
