import hashlib
import hmac
import json
import unittest

from ingest.comments import comment_event, comment_from_github, load_discussion
from ingest.github import GitHubAdapter, extract_subject
from normalize.models import LINKED_OPENING_TEXT_ID, OPENING_TEXT_ID
from normalize.util import context_hints_for, normalize_user, parse_timestamp
from stages.content_filter import extract_content_and_author

PAYLOAD = {
    'action': 'created',
    'issue': {'number': 12},
    'comment': {'id': 345, 'body': 'Thanks, this fixes it.', 'user': {'login': 'alice', 'type': 'User'}},
    'repository': {'html_url': 'https://github.com/o/r'},
    'sender': {'login': 'alice'},
}


class TestGitHubAdapter(unittest.TestCase):
    def test_normalize_event(self):
        event = GitHubAdapter().normalize_event('issue_comment', PAYLOAD, delivery_id='d-1')
        self.assertEqual(event.type, 'com.github.issue_comment.created')
        self.assertEqual(event.source, 'https://github.com/o/r')
        self.assertEqual(event.id, 'd-1')
        self.assertEqual(event.subject, 'issue/12/comment/345')
        self.assertEqual(event.specversion, '1.0')
        self.assertIs(event.data['original'], PAYLOAD)
        self.assertEqual(extract_content_and_author(event), ('Thanks, this fixes it.', 'alice', 'User'))

    def test_supported_types(self):
        adapter = GitHubAdapter()
        self.assertTrue(adapter.supports('pull_request_review', {'action': 'submitted'}))
        self.assertFalse(adapter.supports('star', {'action': 'created'}))

    def test_subjects(self):
        self.assertEqual(extract_subject('issues', {'issue': {'number': 3}}), 'issue/3')
        self.assertEqual(extract_subject('pull_request_review', {'pull_request': {'number': 5}, 'review': {'id': 9}}),
                         'pull/5/review/9')
        self.assertEqual(extract_subject('pull_request', {'pull_request': {'number': 5}}), 'pull/5')
        self.assertEqual(extract_subject('push', {}), '')

    def test_signature_validation(self):
        body = json.dumps(PAYLOAD).encode('utf-8')
        secret = 's3cret'
        good = 'sha256=' + hmac.new(secret.encode('utf-8'), body, hashlib.sha256).hexdigest()
        adapter = GitHubAdapter(secret)
        self.assertTrue(adapter.validate_webhook({'X-Hub-Signature-256': good}, body))
        self.assertFalse(adapter.validate_webhook({'X-Hub-Signature-256': 'sha256=00'}, body))
        self.assertFalse(adapter.validate_webhook({}, body))
        self.assertTrue(GitHubAdapter().validate_webhook({}, body))


class TestNormalizeUtil(unittest.TestCase):
    def test_normalize_user(self):
        self.assertEqual(normalize_user({'login': 'alice', 'type': 'User'}), ('alice', 'User'))
        self.assertEqual(normalize_user({'username': 'bot', 'bot': True}), ('bot', 'Bot'))
        self.assertEqual(normalize_user(None), (None, None))

    def test_parse_timestamp(self):
        ts = parse_timestamp('2024-05-01T10:00:00Z')
        self.assertEqual(ts.utcoffset().total_seconds(), 0)
        self.assertIsNone(parse_timestamp('yesterday'))
        self.assertIsNone(parse_timestamp(None))

    def test_context_hints(self):
        self.assertEqual(context_hints_for({'path': 'a.py', 'commit_id': 'abc'}),
                         {'kind': 'review-thread', 'path': 'a.py'})
        self.assertEqual(context_hints_for({'state': 'APPROVED', 'submitted_at': 'x'}), {'kind': 'review'})
        self.assertEqual(context_hints_for({'commit_id': 'abc'}), {'kind': 'commit', 'commit': 'abc'})
        self.assertEqual(context_hints_for({'body': 'hi'}), {'kind': 'conversation'})


class TestDiscussionDump(unittest.TestCase):
    def test_load_with_details_and_linked(self):
        doc = {
            'details': {'body': 'Issue body text', 'user': {'login': 'alice'}, 'created_at': '2024-05-01T09:00:00Z'},
            'comments': [
                {'id': 1, 'body': 'first', 'user': {'login': 'bob'}, 'created_at': '2024-05-01T10:00:00Z'},
                {'body': 'no id'},
            ],
            'linked': {
                'details': {'body': 'PR body', 'user': {'login': 'carol'}},
                'comments': [{'id': 7, 'body': 'review note', 'user': {'login': 'dave'}, 'path': 'x.py'}],
            },
        }
        comments, linked = load_discussion(doc)
        self.assertEqual([c.id for c in comments], [OPENING_TEXT_ID, 1])
        self.assertTrue(comments[0].is_opening_text)
        self.assertEqual([c.id for c in linked], [LINKED_OPENING_TEXT_ID, 7])
        self.assertEqual(linked[1].context_hints, {'kind': 'review-thread', 'path': 'x.py'})

    def test_bare_list(self):
        comments, linked = load_discussion([{'id': 2, 'body': 'x', 'user': {'login': 'a'}}])
        self.assertEqual(len(comments), 1)
        self.assertEqual(linked, [])

    def test_invalid_dump(self):
        with self.assertRaises(ValueError):
            load_discussion('nope')

    def test_review_uses_submitted_at(self):
        comment = comment_from_github({'id': 3, 'body': 'LGTM overall', 'user': {'login': 'x', 'type': 'Bot'},
                                       'state': 'APPROVED', 'submitted_at': '2024-05-01T11:00:00Z'})
        self.assertEqual(comment.created_at, '2024-05-01T11:00:00Z')
        self.assertEqual(comment.account_type, 'Bot')

    def test_comment_event_round_trips_through_extraction(self):
        comment = comment_from_github({'id': 4, 'body': 'Some text', 'user': {'login': 'erin', 'type': 'User'}})
        event = comment_event(comment, 'issue')
        self.assertEqual(event.id, '4')
        self.assertEqual(extract_content_and_author(event), ('Some text', 'erin', 'User'))


if __name__ == '__main__':
    unittest.main()
