"""
Data models for comment groups and per-contributor rollups.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class CommentGroup:
    """
    A run of consecutive comments by one author within one context.

    Groups are rebuilt on every analysis run. ``member_ids`` keeps walk order,
    so the last id is the member that carries the group's score.
    """
    author: str
    context_key: str
    member_ids: List[Any] = field(default_factory=list)
    concatenated_text: str = ''
    total_word_count: int = 0

    @property
    def size(self) -> int:
        return len(self.member_ids)

    @property
    def terminal_id(self) -> Any:
        return self.member_ids[-1] if self.member_ids else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'author': self.author,
            'context_key': self.context_key,
            'member_ids': list(self.member_ids),
            'concatenated_text': self.concatenated_text,
            'total_word_count': self.total_word_count,
        }


@dataclass
class ContributorSummary:
    """
    Represents the scoring summary for a contributor.
    """
    author: str
    original: float = 0.0
    log_adjusted: float = 0.0
    exponential: float = 0.0
    word_count: int = 0
    comment_count: int = 0
    scored_count: int = 0
    grouped_count: int = 0
    quality: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'author': self.author,
            'original': self.original,
            'log_adjusted': self.log_adjusted,
            'exponential': self.exponential,
            'word_count': self.word_count,
            'comment_count': self.comment_count,
            'scored_count': self.scored_count,
            'grouped_count': self.grouped_count,
            'quality': self.quality,
        }

    def __str__(self):
        return (
            f"Author: {self.author}\n"
            f"Original: {self.original:.2f}\n"
            f"Log Adjusted: {self.log_adjusted:.2f}\n"
            f"Exponential: {self.exponential:.2f}\n"
            f"Words: {self.word_count}\n"
            f"Comments: {self.comment_count} ({self.scored_count} scored)"
            + (f"\nQuality: {self.quality:.2f}" if self.quality is not None else "")
        )
