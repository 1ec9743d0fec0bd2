"""
Content filter stage: extracts text and author from heterogeneous payloads and
decides whether the content should be excluded from scoring.
"""
import re
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from common.logger import get_logger
from core.errors import ConfigurationError
from core.stage import Stage
from normalize.models import Event
from normalize.util import normalize_user
from stages.policy import ContributorPolicy, DEFAULT_POLICY

logger = get_logger("content_filter")

# (content, author, account_type)
Extracted = Tuple[Optional[str], Optional[str], Optional[str]]


def _get(data: Any, *path: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing."""
    cur = data
    for key in path:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


def _from_user_object(data: Any, container: str, text_field: str) -> Extracted:
    obj = _get(data, container) or {}
    login, account_type = normalize_user(obj.get('user') if isinstance(obj, dict) else None)
    return _get(data, container, text_field), login, account_type


def _generic(data: Any) -> Extracted:
    if not isinstance(data, dict):
        return None, None, None
    content = data.get('content') or data.get('body') or data.get('text')
    author = data.get('author') if isinstance(data.get('author'), str) else None
    account_type = None
    if not author:
        author, account_type = normalize_user(data.get('user'))
    if not author:
        author, account_type = normalize_user(data.get('sender'))
    return content, author, account_type


# Order matters: more specific fragments must come before their prefixes.
EXTRACTORS: Tuple[Tuple[str, Callable[[Any], Extracted]], ...] = (
    ('github.issue_comment', lambda d: _from_user_object(d, 'comment', 'body')),
    ('github.pull_request_review_comment', lambda d: _from_user_object(d, 'comment', 'body')),
    ('github.pull_request_review', lambda d: _from_user_object(d, 'review', 'body')),
    ('github.pull_request', lambda d: _from_user_object(d, 'pull_request', 'body')),
    ('github.issues', lambda d: _from_user_object(d, 'issue', 'body')),
    ('google-docs.document', lambda d: (_get(d, 'document', 'content'), _get(d, 'document', 'author'), None)),
    ('telegram.message', lambda d: (_get(d, 'message', 'text'), _get(d, 'message', 'from', 'username'), None)),
)


def extract_content_and_author(event: Event) -> Extracted:
    """Return (content, author, account_type) for *event* using its namespaced type."""
    for fragment, extractor in EXTRACTORS:
        if fragment in event.type:
            return extractor(event.data)
    return _generic(event.data)


# Event types of the platforms whose payloads the extractors understand.
PLATFORM_EVENT_TYPES = re.compile(r'^(com\.)?(github|google-docs|telegram)\.')


class ContentFilter(Stage):
    """Filters content based on configurable rules.

    Rules are checked in order and the first match wins: bot author, excluded
    user, minimum length, regular expression patterns.
    """

    name = 'content-filter'
    supported_event_types = PLATFORM_EVENT_TYPES

    def __init__(self, exclude_bots: bool = True, min_length: int = 10,
                 exclude_users: Iterable[str] = (), filter_patterns: Iterable[str] = (),
                 policy: Optional[ContributorPolicy] = None):
        if min_length is None or int(min_length) < 0:
            raise ConfigurationError('content_filter.min_length', 'must be a non-negative integer')
        self.exclude_bots = bool(exclude_bots)
        self.min_length = int(min_length)
        self.exclude_users = frozenset(exclude_users or ())
        self.policy = policy or DEFAULT_POLICY
        self._patterns = []
        for pattern in filter_patterns or ():
            try:
                self._patterns.append(re.compile(pattern, re.IGNORECASE))
            except re.error as ex:
                raise ConfigurationError('content_filter.filter_patterns', f"invalid pattern {pattern!r}: {ex}")

    async def transform(self, event: Event, result: Mapping[str, Any]) -> Dict[str, Any]:
        if result.get('filtered') is True:
            return dict(result)

        content, author, account_type = extract_content_and_author(event)

        if not content:
            return {**result, 'filtered': False, 'reason': 'no-content'}

        reason = self.check_rules(content, author, account_type)
        if reason:
            logger.debug("filtered event %s from %s: %s", event.id, author, reason)
            return {**result, 'filtered': True, 'reason': reason}

        return {**result, 'filtered': False, 'content': content, 'author': author}

    def check_rules(self, content: str, author: Optional[str] = None,
                    account_type: Optional[str] = None) -> Optional[str]:
        """Return the reason tag of the first rule that fires, or None."""
        if self.exclude_bots and author and self.policy.is_bot(author, account_type):
            return 'bot-author'
        if author and author in self.exclude_users:
            return 'excluded-user'
        if self.min_length and len(content) < self.min_length:
            return 'too-short'
        for pattern in self._patterns:
            if pattern.search(content):
                return 'matched-pattern'
        return None
