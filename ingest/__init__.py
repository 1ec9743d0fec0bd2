"""
Ingest package: platform adapters and discussion dump conversion.
"""

from .github import GitHubAdapter, extract_subject
from .comments import comment_event, comment_from_github, comments_from_github, load_discussion, opening_text_comment

__all__ = [
    "GitHubAdapter",
    "extract_subject",
    "comment_event",
    "comment_from_github",
    "comments_from_github",
    "load_discussion",
    "opening_text_comment",
]
