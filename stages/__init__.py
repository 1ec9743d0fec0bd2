"""
Pipeline stages and the contributor policy they share.
"""

from .policy import ContributorPolicy, DEFAULT_POLICY
from .content_filter import ContentFilter, extract_content_and_author
from .preprocessors import BotCommentPreprocessor, SlashCommandPreprocessor
from .scoring_pipeline import ScoringPipeline

__all__ = [
    "ContributorPolicy",
    "DEFAULT_POLICY",
    "ContentFilter",
    "extract_content_and_author",
    "BotCommentPreprocessor",
    "SlashCommandPreprocessor",
    "ScoringPipeline",
]
