"""
Unified data models for normalized events and discussion comments.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Union

CommentId = Union[int, str]

# Reserved ids for the opening text of a discussion and of a linked pull request.
# They always sort ahead of regular comments.
OPENING_TEXT_ID = 0
LINKED_OPENING_TEXT_ID = -3
OPENING_TEXT_IDS = frozenset({OPENING_TEXT_ID, LINKED_OPENING_TEXT_ID})


@dataclass(frozen=True)
class Event:
    """
    Normalized cross-platform event envelope (CloudEvents shaped).

    ``type`` is dot-namespaced, e.g. ``com.github.issue_comment.created``;
    ``data`` is the platform-shaped payload and is treated as opaque.
    """
    id: str
    source: str
    type: str
    time: str
    data: Any = None
    subject: Optional[str] = None
    datacontenttype: str = "application/json"
    specversion: str = "1.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'specversion': self.specversion,
            'id': self.id,
            'source': self.source,
            'type': self.type,
            'time': self.time,
            'subject': self.subject,
            'datacontenttype': self.datacontenttype,
            'data': self.data,
        }


def create_event(type: str, source: str, data: Any = None, id: Optional[str] = None,
                 time: Optional[str] = None, subject: Optional[str] = None,
                 datacontenttype: str = "application/json") -> Event:
    """Build an Event, filling a random id and the current UTC time when omitted."""
    return Event(
        id=id or str(uuid.uuid4()),
        source=source,
        type=type,
        time=time or datetime.now(timezone.utc).isoformat(),
        data=data,
        subject=subject,
        datacontenttype=datacontenttype,
    )


@dataclass(frozen=True)
class Comment:
    """
    A single contribution to a discussion.

    ``context_hints`` separates sub-threads of one discussion, e.g.
    ``{'kind': 'review', 'path': 'src/app.py'}`` for an inline review comment.
    ``account_type`` carries platform account metadata ("Bot", "User") when known.
    """
    id: CommentId
    body: str
    author: Optional[str]
    created_at: Optional[str] = None
    context_hints: Mapping[str, Any] = field(default_factory=dict)
    account_type: Optional[str] = None

    @property
    def is_opening_text(self) -> bool:
        return self.id in OPENING_TEXT_IDS

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'body': self.body,
            'author': self.author,
            'created_at': self.created_at,
            'context_hints': dict(self.context_hints),
            'account_type': self.account_type,
        }
