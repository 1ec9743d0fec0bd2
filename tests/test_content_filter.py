import unittest

import pytest

from core.errors import ConfigurationError
from normalize.models import create_event
from stages.content_filter import ContentFilter, extract_content_and_author
from stages.policy import ContributorPolicy
from stages.preprocessors import BotCommentPreprocessor, SlashCommandPreprocessor


def comment_event(body, login='alice', user_type='User'):
    return create_event(
        type='com.github.issue_comment.created',
        source='https://github.com/o/r',
        data={'comment': {'id': 1, 'body': body, 'user': {'login': login, 'type': user_type}}},
    )


class TestExtraction(unittest.TestCase):
    def test_github_review_comment(self):
        event = create_event(
            type='com.github.pull_request_review_comment.created',
            source='s',
            data={'comment': {'body': 'inline note', 'user': {'login': 'bob', 'type': 'User'}}},
        )
        self.assertEqual(extract_content_and_author(event), ('inline note', 'bob', 'User'))

    def test_github_review_body(self):
        event = create_event(
            type='com.github.pull_request_review.submitted',
            source='s',
            data={'review': {'body': 'looks fine overall', 'user': {'login': 'carol'}}},
        )
        self.assertEqual(extract_content_and_author(event)[:2], ('looks fine overall', 'carol'))

    def test_google_docs_and_telegram(self):
        doc = create_event(type='com.google-docs.document.updated', source='s',
                           data={'document': {'content': 'doc text', 'author': 'dave'}})
        msg = create_event(type='com.telegram.message.created', source='s',
                           data={'message': {'text': 'hi there', 'from': {'username': 'erin'}}})
        self.assertEqual(extract_content_and_author(doc), ('doc text', 'dave', None))
        self.assertEqual(extract_content_and_author(msg), ('hi there', 'erin', None))

    def test_generic_fallback(self):
        event = create_event(type='com.example.note', source='s',
                             data={'text': 'plain', 'sender': {'login': 'frank'}})
        self.assertEqual(extract_content_and_author(event)[:2], ('plain', 'frank'))


class TestContentFilter(unittest.IsolatedAsyncioTestCase):
    async def test_already_filtered_passes_through(self):
        f = ContentFilter()
        result = await f.transform(comment_event('whatever text here'), {'filtered': True, 'reason': 'x'})
        self.assertEqual(result, {'filtered': True, 'reason': 'x'})

    async def test_no_content(self):
        result = await ContentFilter().transform(comment_event(''), {})
        self.assertEqual(result, {'filtered': False, 'reason': 'no-content'})

    async def test_bot_author_wins_over_length(self):
        result = await ContentFilter().transform(comment_event('ok', login='renovate[bot]'), {})
        self.assertEqual(result['reason'], 'bot-author')
        self.assertTrue(result['filtered'])

    async def test_bot_account_type(self):
        result = await ContentFilter().transform(comment_event('a perfectly long message', 'helper', 'Bot'), {})
        self.assertEqual(result['reason'], 'bot-author')

    async def test_excluded_user(self):
        f = ContentFilter(exclude_users=['mallory'])
        result = await f.transform(comment_event('a perfectly long message', 'mallory'), {})
        self.assertEqual(result['reason'], 'excluded-user')

    async def test_too_short(self):
        result = await ContentFilter(min_length=20).transform(comment_event('short text'), {})
        self.assertEqual(result['reason'], 'too-short')

    async def test_pattern_is_case_insensitive(self):
        f = ContentFilter(filter_patterns=[r'^\s*lgtm'])
        result = await f.transform(comment_event('LGTM, ship it please'), {})
        self.assertEqual(result['reason'], 'matched-pattern')

    async def test_passing_content(self):
        result = await ContentFilter().transform(comment_event('This explains the change well.'), {'seed': 1})
        self.assertEqual(result, {'seed': 1, 'filtered': False,
                                  'content': 'This explains the change well.', 'author': 'alice'})

    async def test_bots_allowed_when_disabled(self):
        f = ContentFilter(exclude_bots=False)
        result = await f.transform(comment_event('dependency bump details', 'dependabot[bot]'), {})
        self.assertFalse(result['filtered'])


def test_invalid_pattern_is_configuration_error():
    with pytest.raises(ConfigurationError) as exc:
        ContentFilter(filter_patterns=['('])
    assert exc.value.key == 'content_filter.filter_patterns'


def test_negative_min_length_rejected():
    with pytest.raises(ConfigurationError):
        ContentFilter(min_length=-1)


def test_policy_bot_detection():
    policy = ContributorPolicy(exempt_bots=['friendly-bot'])
    assert policy.is_bot('dependabot[bot]')
    assert policy.is_bot('ci-bot')
    assert policy.is_bot('Codecov-Commenter')
    assert policy.is_bot('someone', 'Bot')
    assert not policy.is_bot('friendly-bot')
    assert not policy.is_bot('alice', 'User')
    assert not policy.is_bot(None)


def test_policy_slash_commands():
    policy = ContributorPolicy(excluded_commands=['explain'])
    assert policy.is_slash_command('/approve')
    assert policy.is_slash_command('   /lgtm')
    assert policy.is_slash_command('/')
    assert not policy.is_slash_command('/explain why this matters')
    assert not policy.is_slash_command('please /approve')
    strict = ContributorPolicy(ignore_leading_whitespace=False)
    assert not strict.is_slash_command('  /approve')


class TestPreprocessors(unittest.IsolatedAsyncioTestCase):
    async def test_bot_flag(self):
        stage = BotCommentPreprocessor()
        result = await stage.transform(comment_event('bump lodash', 'dependabot[bot]'), {})
        self.assertTrue(result['is_bot'])
        result = await stage.transform(comment_event('real words', 'alice'), {})
        self.assertFalse(result['is_bot'])

    async def test_slash_flag(self):
        stage = SlashCommandPreprocessor()
        result = await stage.transform(comment_event('/approve'), {})
        self.assertTrue(result['is_slash_command'])
        self.assertEqual(result['content'], '/approve')

    async def test_filtered_passthrough(self):
        stage = SlashCommandPreprocessor()
        result = await stage.transform(comment_event('/approve'), {'filtered': True})
        self.assertEqual(result, {'filtered': True})


if __name__ == '__main__':
    unittest.main()
