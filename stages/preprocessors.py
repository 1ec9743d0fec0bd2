"""
Preprocessor stages that flag bot-authored comments and slash commands so that
later stages (and word counting) can exclude them from scoring.
"""
from typing import Any, Dict, Mapping, Optional

from core.stage import Stage
from normalize.models import Event
from stages.content_filter import PLATFORM_EVENT_TYPES, extract_content_and_author
from stages.policy import ContributorPolicy, DEFAULT_POLICY


def _account_type_signals(event: Event) -> Optional[str]:
    """Return 'Bot' when any user object in a GitHub payload says so."""
    if 'github' not in event.type or not isinstance(event.data, dict):
        return None
    for container in ('comment', 'review', 'issue', 'pull_request'):
        obj = event.data.get(container)
        user = obj.get('user') if isinstance(obj, dict) else None
        if isinstance(user, dict) and (user.get('type') == 'Bot' or user.get('bot') is True):
            return 'Bot'
    return None


class BotCommentPreprocessor(Stage):
    """Sets ``is_bot`` on the result for comments authored by machine accounts."""

    name = 'bot-comment-preprocessor'
    supported_event_types = PLATFORM_EVENT_TYPES

    def __init__(self, policy: Optional[ContributorPolicy] = None):
        self.policy = policy or DEFAULT_POLICY

    async def transform(self, event: Event, result: Mapping[str, Any]) -> Dict[str, Any]:
        if result.get('filtered') is True:
            return dict(result)

        author = result.get('author')
        account_type = None
        if not author:
            _, author, account_type = extract_content_and_author(event)
        if not author:
            return {**result, 'is_bot': False}

        account_type = account_type or _account_type_signals(event)
        return {**result, 'is_bot': self.policy.is_bot(author, account_type), 'author': author}


class SlashCommandPreprocessor(Stage):
    """Sets ``is_slash_command`` on the result for bodies that start with ``/``."""

    name = 'slash-command-preprocessor'
    supported_event_types = PLATFORM_EVENT_TYPES

    def __init__(self, policy: Optional[ContributorPolicy] = None):
        self.policy = policy or DEFAULT_POLICY

    async def transform(self, event: Event, result: Mapping[str, Any]) -> Dict[str, Any]:
        if result.get('filtered') is True:
            return dict(result)

        content = result.get('content')
        if not content:
            content, _, _ = extract_content_and_author(event)
        if not content:
            return {**result, 'is_slash_command': False}

        return {**result, 'is_slash_command': self.policy.is_slash_command(content), 'content': content}
