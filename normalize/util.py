"""
Normalization utility helpers.
Small helpers to pull authors, timestamps and context hints out of raw payloads.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple


def normalize_user(raw: Optional[Dict[str, Any]]) -> Tuple[Optional[str], Optional[str]]:
    """Return (login, account_type) from a raw provider user dict.
    Expected keys vary by provider; the function extracts common fields.
    """
    if not isinstance(raw, dict):
        return None, None
    login = raw.get('login') or raw.get('username') or raw.get('name') or None
    account_type = raw.get('type')
    if not account_type and raw.get('bot') is True:
        account_type = 'Bot'
    return login, account_type


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (accepting a trailing 'Z') into an aware datetime.
    Returns None for empty or unparsable values.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def context_hints_for(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Derive grouping context hints from a raw GitHub comment payload.

    Inline review comments are scoped to their file path, commit comments to
    their commit, review bodies to the review, everything else is the
    top-level conversation.
    """
    if not isinstance(raw, dict):
        return {'kind': 'conversation'}
    if raw.get('path'):
        return {'kind': 'review-thread', 'path': raw.get('path')}
    if raw.get('state') and raw.get('submitted_at'):
        return {'kind': 'review'}
    if raw.get('commit_id') and not raw.get('pull_request_url'):
        return {'kind': 'commit', 'commit': raw.get('commit_id')}
    return {'kind': 'conversation'}
