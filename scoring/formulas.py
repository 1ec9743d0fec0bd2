"""
Word counting and the three length-based scoring formulas.
Grouped comments are scored on the group's total word count so that splitting
a long comment into several short ones does not change the result.
"""
import math
import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

EXPONENT = 0.85
DECAY = 100.0

_QUOTE_LINES = re.compile(r'^>.*(?:\r?\n|$)', re.MULTILINE)
_FENCED_CODE = re.compile(r'```[\s\S]*?```')
_INLINE_CODE = re.compile(r'`[^`]+`')
_URLS = re.compile(r'https?://\S+')


@dataclass(frozen=True)
class CommentScore:
    word_count: int
    original: Optional[float]
    log_adjusted: Optional[float]
    exponential: Optional[float]
    is_grouped: bool = False
    group_word_count: Optional[int] = None

    @property
    def is_scored(self) -> bool:
        return self.original is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def count_words(text: Optional[str], is_slash_command: bool = False, is_bot: bool = False) -> int:
    """
    Count conversational words in *text*.

    Block-quote lines, fenced code, inline code spans and bare URLs are removed
    before splitting on whitespace. Slash commands and bot comments count as 0.
    """
    if not text or not isinstance(text, str):
        return 0
    if is_slash_command or is_bot:
        return 0

    cleaned = _QUOTE_LINES.sub('', text)
    cleaned = _FENCED_CODE.sub('', cleaned)
    cleaned = _INLINE_CODE.sub('', cleaned)
    cleaned = _URLS.sub('', cleaned)
    return len(cleaned.split())


def _check(word_count: float) -> float:
    if word_count < 0:
        raise ValueError(f"word count must be non-negative, got {word_count}")
    return float(word_count)


def original(word_count: float) -> float:
    """Power-law score: ``w ** 0.85``."""
    w = _check(word_count)
    return w ** EXPONENT


def log_adjusted(word_count: float) -> float:
    """Power-law score damped by ``log2(w + 2)``."""
    w = _check(word_count)
    return w ** EXPONENT / math.log2(w + 2)


def exponential(word_count: float) -> float:
    """Power-law score with exponential decay that penalizes verbosity."""
    w = _check(word_count)
    return w ** EXPONENT * math.exp(-w / DECAY)


def score_word_count(word_count: int) -> CommentScore:
    return CommentScore(
        word_count=word_count,
        original=original(word_count),
        log_adjusted=log_adjusted(word_count),
        exponential=exponential(word_count),
    )


def calculate_all_scores(text: Optional[str], group: Any = None,
                         is_slash_command: bool = False, is_bot: bool = False) -> CommentScore:
    """
    Score *text* on its own, or on *group*'s total word count when a group with
    two or more members is given. ``word_count`` always reports this text's own
    count.
    """
    individual = count_words(text, is_slash_command, is_bot)

    if group is None or len(group.member_ids) <= 1:
        return score_word_count(individual)

    total = group.total_word_count
    return CommentScore(
        word_count=individual,
        original=original(total),
        log_adjusted=log_adjusted(total),
        exponential=exponential(total),
        is_grouped=True,
        group_word_count=total,
    )


def calculate_group_aware_scores(text: Optional[str], comment_id: Any, groups: Mapping[Any, Any],
                                 is_slash_command: bool = False, is_bot: bool = False) -> CommentScore:
    """
    Score a comment that may belong to a group.

    Only the last member of a group carries a score; earlier members are
    returned with ``is_grouped=True`` and no scores.
    """
    group = groups.get(comment_id)
    if group is None:
        return calculate_all_scores(text, None, is_slash_command, is_bot)

    if comment_id != group.member_ids[-1]:
        return CommentScore(
            word_count=count_words(text, is_slash_command, is_bot),
            original=None,
            log_adjusted=None,
            exponential=None,
            is_grouped=True,
            group_word_count=group.total_word_count,
        )
    return calculate_all_scores(text, group, is_slash_command, is_bot)
