import re
import unittest

import pytest

from core.chain import StageChain
from core.errors import ConfigurationError
from normalize.models import create_event
from scoring.aggregator import ScoreAggregator
from scoring.formulas import original
from scoring.scorers import SCORER_FACTORIES, create_scorer
from scoring.scorers.base import BaseScorer, ScorerResult
from scoring.scorers.readability import ReadabilityScorer, estimate_syllables, text_statistics
from scoring.scorers.technical import TechnicalScorer
from stages.content_filter import ContentFilter
from stages.preprocessors import BotCommentPreprocessor, SlashCommandPreprocessor
from stages.scoring_pipeline import ScoringPipeline


class FixedScorer(BaseScorer):
    def __init__(self, id, value):
        super().__init__()
        self.id = id
        self.value = value

    async def score(self, content):
        return ScorerResult(raw_score=self.value * 100, normalized_score=self.value)


def comment_event(body, login='alice'):
    return create_event(
        type='com.github.issue_comment.created',
        source='https://github.com/o/r',
        data={'comment': {'id': 1, 'body': body, 'user': {'login': login, 'type': 'User'}}},
    )


class TestAggregator(unittest.IsolatedAsyncioTestCase):
    async def test_weighted_average(self):
        agg = ScoreAggregator([(FixedScorer('a', 0.2), 1.0), (FixedScorer('b', 0.8), 3.0)])
        result = await agg.score('text')
        self.assertAlmostEqual(result.normalized_score, (0.2 + 2.4) / 4)
        self.assertAlmostEqual(result.raw_score, 65.0)
        self.assertEqual(set(result.breakdown), {'a', 'b'})
        self.assertEqual(result.weights, {'a': 1.0, 'b': 3.0})

    async def test_min_and_max_ignore_weights(self):
        scorers = [(FixedScorer('a', 0.2), 10.0), (FixedScorer('b', 0.8), 0.0)]
        low = await ScoreAggregator(scorers, strategy='minimum').score('x')
        high = await ScoreAggregator(scorers, strategy='maximum').score('x')
        self.assertAlmostEqual(low.normalized_score, 0.2)
        self.assertAlmostEqual(high.normalized_score, 0.8)
        self.assertEqual(len(high.breakdown), 2)

    async def test_aggregator_weight_scales_normalized_only(self):
        agg = ScoreAggregator([(FixedScorer('a', 0.5), 1.0)], weight=0.5)
        result = await agg.score('x')
        self.assertAlmostEqual(result.normalized_score, 0.25)
        self.assertAlmostEqual(result.raw_score, 50.0)

    async def test_out_of_range_scorer_values_are_clamped(self):
        scorers = [(FixedScorer('a', 1.7), 3.0), (FixedScorer('b', -0.2), 1.0)]
        high = await ScoreAggregator(scorers, strategy='maximum').score('x')
        low = await ScoreAggregator(scorers, strategy='minimum').score('x')
        avg = await ScoreAggregator(scorers).score('x')
        self.assertEqual(high.normalized_score, 1.0)
        self.assertEqual(low.normalized_score, 0.0)
        self.assertAlmostEqual(avg.normalized_score, 0.75)


@pytest.mark.parametrize('kwargs', [
    {'scorers': []},
    {'scorers': [(FixedScorer('a', 0.5), 1.0)], 'strategy': 'median'},
    {'scorers': [(FixedScorer('a', 0.5), -1.0)]},
    {'scorers': [(FixedScorer('a', 0.5), 0.0)]},
    {'scorers': [(FixedScorer('a', 0.5), 1.0)], 'weight': 1.5},
    {'scorers': [(FixedScorer('a', 0.5), 1.0)], 'weight': 0},
])
def test_aggregator_configuration_errors(kwargs):
    with pytest.raises(ConfigurationError):
        ScoreAggregator(**kwargs)


def test_syllable_estimates():
    assert estimate_syllables('cat') == 1
    assert estimate_syllables('table') == 2
    assert estimate_syllables('readability') >= 4


def test_text_statistics():
    stats = text_statistics("The cat sat. The dog ran!")
    assert stats['sentences'] == 2
    assert stats['words'] == 6
    assert stats['words_per_sentence'] == 3


class TestScorers(unittest.IsolatedAsyncioTestCase):
    async def test_readability_is_bounded(self):
        scorer = ReadabilityScorer(include_all_metrics=True)
        result = await scorer.score("This change fixes the cache. It also adds a test for the retry path.")
        self.assertGreaterEqual(result.normalized_score, 0.0)
        self.assertLessEqual(result.normalized_score, 1.0)
        for key in ('flesch_kincaid_grade', 'gunning_fog_index', 'coleman_liau_index',
                    'smog_index', 'automated_readability_index', 'text_stats'):
            self.assertIn(key, result.metrics)

    async def test_scores_stay_in_unit_range_with_custom_weights(self):
        text = (
            "## Why\n- the async function returns a promise\n"
            "For example the callback error is caught.\n\n"
            "```python\ndef retry_call():\n    # wrap the api call\n    return fetchValue()\n```"
        )
        heavy = TechnicalScorer(weights={'code_block_quality': 1, 'technical_terms': 1, 'explanation_quality': 1})
        self.assertAlmostEqual(sum(heavy.weights.values()), 1.0)
        result = await heavy.score(text)
        self.assertGreaterEqual(result.normalized_score, 0.0)
        self.assertLessEqual(result.normalized_score, 1.0)

        agg = ScoreAggregator([(ReadabilityScorer(), 3.0), (heavy, 1.0)], strategy='maximum')
        combined = await agg.score(text)
        self.assertLessEqual(combined.normalized_score, 1.0)

    def test_technical_weight_validation(self):
        with self.assertRaises(ConfigurationError):
            TechnicalScorer(weights={'technical_terms': -0.5})
        with self.assertRaises(ConfigurationError):
            TechnicalScorer(weights={'code_block_quality': 0, 'technical_terms': 0, 'explanation_quality': 0})
        scaled = TechnicalScorer(weights={'code_block_quality': 2, 'technical_terms': 1, 'explanation_quality': 1})
        self.assertAlmostEqual(scaled.weights['code_block_quality'], 0.5)

    def test_scorers_take_no_weight_of_their_own(self):
        with self.assertRaises(ConfigurationError):
            create_scorer('readability', weight=3)

    async def test_technical_rewards_code_and_terms(self):
        plain = await TechnicalScorer().score("nice work")
        rich = await TechnicalScorer().score(
            "## Why\n- the async function returns a promise\n"
            "For example the callback error is caught.\n\n"
            "```python\ndef retry_call():\n    # wrap the api call\n    return fetchValue()\n```"
        )
        self.assertGreater(rich.normalized_score, plain.normalized_score)
        self.assertEqual(rich.metrics['code_block_count'], 1)
        self.assertGreater(rich.metrics['technical_term_count'], 0)

    def test_factories(self):
        self.assertEqual(set(SCORER_FACTORIES), {'readability', 'technical'})
        self.assertIsInstance(create_scorer('technical', weights={'technical_terms': 0.5}), TechnicalScorer)
        with self.assertRaises(ConfigurationError):
            create_scorer('sentiment')
        with self.assertRaises(ConfigurationError):
            create_scorer('readability', bogus=1)


class TestScoringPipelineStage(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.stage = ScoringPipeline(ScoreAggregator([(FixedScorer('a', 0.4), 1.0)]))

    async def test_adds_scores(self):
        result = await self.stage.transform(comment_event(' '.join(['word'] * 12)), {})
        self.assertEqual(result['scores'], {'a': 0.4})
        self.assertAlmostEqual(result['aggregated_score']['normalized'], 0.4)
        self.assertEqual(result['aggregated_score']['strategy'], 'weighted-average')
        self.assertIn('a', result['score_breakdown'])
        self.assertEqual(result['word_score']['word_count'], 12)
        self.assertAlmostEqual(result['word_score']['original'], original(12))

    async def test_filtered_and_empty_pass_through(self):
        self.assertEqual(await self.stage.transform(comment_event('x'), {'filtered': True}), {'filtered': True})
        empty = create_event(type='com.github.issue_comment.created', source='s', data={})
        self.assertEqual(await self.stage.transform(empty, {'k': 1}), {'k': 1})

    async def test_payload_text_fallback(self):
        event = create_event(type='com.example.note', source='s', data={'text': 'hello there friend'})
        result = await self.stage.transform(event, {})
        self.assertEqual(result['word_score']['word_count'], 3)

    async def test_no_content_result_is_not_scored(self):
        event = create_event(type='com.example.note', source='s', data={'text': 'hello there friend'})
        upstream = {'filtered': False, 'reason': 'no-content'}
        self.assertEqual(await self.stage.transform(event, upstream), upstream)

    async def test_upstream_flags_zero_the_word_score(self):
        result = await self.stage.transform(comment_event('/approve'), {'is_slash_command': True})
        self.assertEqual(result['word_score']['word_count'], 0)
        self.assertEqual(result['word_score']['original'], 0.0)

    def test_matches_every_event_type(self):
        self.assertIsInstance(self.stage.supported_event_types, re.Pattern)
        self.assertTrue(self.stage.can_process(create_event(type='anything', source='s')))


class TestFullChain(unittest.IsolatedAsyncioTestCase):
    async def test_bot_comment_filtered_before_scoring(self):
        chain = (StageChain('quality')
                 .add_stage(BotCommentPreprocessor())
                 .add_stage(SlashCommandPreprocessor())
                 .add_stage(ContentFilter())
                 .add_stage(ScoringPipeline(ScoreAggregator([(FixedScorer('a', 0.9), 1.0)]))))
        result = await chain.execute(comment_event('Bumps lodash from 4.17.20 to 4.17.21.', 'dependabot[bot]'))
        self.assertTrue(result['filtered'])
        self.assertEqual(result['reason'], 'bot-author')
        self.assertNotIn('scores', result)

        result = await chain.execute(comment_event('The retry loop now backs off correctly.'))
        self.assertFalse(result['filtered'])
        self.assertFalse(result['is_bot'])
        self.assertFalse(result['is_slash_command'])
        self.assertEqual(result['scores'], {'a': 0.9})

    async def test_extraction_miss_skips_scoring(self):
        chain = (StageChain('quality')
                 .add_stage(ContentFilter())
                 .add_stage(ScoringPipeline(ScoreAggregator([(FixedScorer('a', 0.9), 1.0)]))))
        event = create_event(type='com.github.issue_comment.created', source='https://github.com/o/r',
                             data={'body': 'this text sits outside the comment object so nothing extracts it'})
        result = await chain.execute(event)
        self.assertEqual(result['reason'], 'no-content')
        self.assertFalse(result['filtered'])
        for key in ('scores', 'aggregated_score', 'word_score'):
            self.assertNotIn(key, result)

    def test_stages_share_platform_event_types(self):
        self.assertIs(BotCommentPreprocessor.supported_event_types, ContentFilter.supported_event_types)
        self.assertIs(SlashCommandPreprocessor.supported_event_types, ContentFilter.supported_event_types)


if __name__ == '__main__':
    unittest.main()
