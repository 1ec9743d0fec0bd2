"""
Contributor policy: the single place that decides whether an author is a bot
and whether a comment body is a slash command. Shared by the content filter,
the preprocessor stages and the grouping engine.
"""

import re
from typing import Iterable, Optional

DEFAULT_BOT_SUFFIXES = ('[bot]', '-bot')
DEFAULT_BOT_NAMES = ('dependabot', 'renovate', 'github-actions', 'codecov', 'greenkeeper')

_COMMAND_RE = re.compile(r'^/(\w+)')


class ContributorPolicy:
    """
    Bot and slash-command detection.

    Args:
        bot_suffixes: Login suffixes that mark machine accounts.
        bot_names: Case-insensitive substrings that mark machine accounts.
        exempt_bots: Logins that are never treated as bots.
        excluded_commands: Slash commands that are scored like normal comments.
        ignore_leading_whitespace: Treat "  /cmd" as a slash command.
        check_account_type: Use platform account-type metadata ("Bot") as an
            additional positive signal.
    """

    def __init__(
        self,
        bot_suffixes: Iterable[str] = DEFAULT_BOT_SUFFIXES,
        bot_names: Iterable[str] = DEFAULT_BOT_NAMES,
        exempt_bots: Iterable[str] = (),
        excluded_commands: Iterable[str] = (),
        ignore_leading_whitespace: bool = True,
        check_account_type: bool = True,
    ):
        self.bot_suffixes = tuple(s.lower() for s in bot_suffixes)
        self.bot_names = tuple(n.lower() for n in bot_names)
        self.exempt_bots = frozenset(b.lower() for b in exempt_bots)
        self.excluded_commands = frozenset(excluded_commands)
        self.ignore_leading_whitespace = ignore_leading_whitespace
        self.check_account_type = check_account_type

    def is_bot(self, author: Optional[str], account_type: Optional[str] = None) -> bool:
        if not author:
            return False
        login = author.lower()
        if login in self.exempt_bots:
            return False
        if login.endswith(self.bot_suffixes):
            return True
        if any(name in login for name in self.bot_names):
            return True
        if self.check_account_type and (account_type or '').lower() == 'bot':
            return True
        return False

    def is_slash_command(self, body: Optional[str]) -> bool:
        if not body:
            return False
        text = body.lstrip() if self.ignore_leading_whitespace else body
        if not text.startswith('/'):
            return False
        match = _COMMAND_RE.match(text)
        if match and match.group(1) in self.excluded_commands:
            return False
        # a bare slash with no command word still counts
        return True

    def is_excluded_from_scoring(self, author: Optional[str], body: Optional[str],
                                 account_type: Optional[str] = None) -> bool:
        return self.is_bot(author, account_type) or self.is_slash_command(body)


DEFAULT_POLICY = ContributorPolicy()
