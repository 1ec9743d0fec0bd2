"""
GitHub adapter: turns webhook deliveries into normalized events and checks
their signatures. No network access happens here.
"""
import hashlib
import hmac
import json
from typing import Any, Dict, Mapping, Optional, Union

from common.logger import get_logger
from normalize.models import Event, create_event

logger = get_logger("github_adapter")

PLATFORM = 'github'
DEFAULT_SOURCE = 'https://github.com'
SIGNATURE_HEADER = 'x-hub-signature-256'

GITHUB_EVENT_TYPES = (
    'issue_comment.created',
    'issue_comment.edited',
    'issues.opened',
    'issues.closed',
    'pull_request.opened',
    'pull_request.closed',
    'pull_request_review.submitted',
    'pull_request_review_comment.created',
    'pull_request_review_comment.edited',
)


class GitHubAdapter:
    """Normalizes GitHub webhook payloads to ``com.github.<event>.<action>`` events."""

    platform_name = PLATFORM
    supported_event_types = GITHUB_EVENT_TYPES

    def __init__(self, webhook_secret: Optional[str] = None):
        self.webhook_secret = webhook_secret

    @staticmethod
    def standardize_event_type(event_name: str, payload: Optional[Dict[str, Any]] = None) -> str:
        name = '.'.join((event_name or '').lower().split())
        action = (payload or {}).get('action')
        if action and '.' not in name:
            name = f"{name}.{action}"
        return f"com.{PLATFORM}.{name}"

    def supports(self, event_name: str, payload: Optional[Dict[str, Any]] = None) -> bool:
        full = self.standardize_event_type(event_name, payload)
        return full[len(f"com.{PLATFORM}."):] in self.supported_event_types

    def normalize_event(self, event_name: str, payload: Dict[str, Any],
                        delivery_id: Optional[str] = None) -> Event:
        """Wrap a webhook *payload* for the X-GitHub-Event *event_name* in an Event."""
        payload = payload or {}
        repository = payload.get('repository') or {}
        data = {
            'sender': payload.get('sender'),
            'repository': payload.get('repository'),
            'issue': payload.get('issue'),
            'comment': payload.get('comment'),
            'pull_request': payload.get('pull_request'),
            'review': payload.get('review'),
            'original': payload,
        }
        return create_event(
            type=self.standardize_event_type(event_name, payload),
            source=repository.get('html_url') or DEFAULT_SOURCE,
            data=data,
            id=delivery_id or payload.get('delivery_id'),
            subject=extract_subject(event_name, payload) or None,
        )

    def validate_webhook(self, headers: Mapping[str, str], body: Union[bytes, str, Dict[str, Any]]) -> bool:
        """
        Check the X-Hub-Signature-256 header against the body.

        Always valid when no secret is configured. Pass the raw request body
        where possible; a dict is re-serialized and may not match byte for byte.
        """
        if not self.webhook_secret:
            return True

        signature = None
        for key, value in (headers or {}).items():
            if key.lower() == SIGNATURE_HEADER:
                signature = value
                break
        if not signature:
            logger.warning("webhook rejected: missing %s header", SIGNATURE_HEADER)
            return False

        if isinstance(body, dict):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode('utf-8')

        digest = 'sha256=' + hmac.new(self.webhook_secret.encode('utf-8'), body, hashlib.sha256).hexdigest()
        valid = hmac.compare_digest(digest, signature)
        if not valid:
            logger.warning("webhook rejected: signature mismatch")
        return valid


def extract_subject(event_name: str, payload: Dict[str, Any]) -> str:
    """Return a short subject such as ``issue/12/comment/345`` for the event."""
    issue = payload.get('issue') or {}
    pull = payload.get('pull_request') or {}
    name = event_name or ''
    if name.startswith('issue_comment'):
        return f"issue/{issue.get('number')}/comment/{(payload.get('comment') or {}).get('id')}"
    if name.startswith('issues'):
        return f"issue/{issue.get('number')}"
    if name.startswith('pull_request_review_comment'):
        return f"pull/{pull.get('number')}/comment/{(payload.get('comment') or {}).get('id')}"
    if name.startswith('pull_request_review'):
        return f"pull/{pull.get('number')}/review/{(payload.get('review') or {}).get('id')}"
    if name.startswith('pull_request'):
        return f"pull/{pull.get('number')}"
    return ''
