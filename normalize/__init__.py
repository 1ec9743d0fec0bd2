"""
Normalize package: event envelope, comment records and payload helpers.
"""

from .models import Event, Comment, create_event, OPENING_TEXT_ID, LINKED_OPENING_TEXT_ID, OPENING_TEXT_IDS

__all__ = ["Event", "Comment", "create_event", "OPENING_TEXT_ID", "LINKED_OPENING_TEXT_ID", "OPENING_TEXT_IDS"]
