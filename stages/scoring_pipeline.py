"""
Scoring pipeline stage: runs the extracted content through a score aggregator
and the word-count formulas.
"""
import re
from typing import Any, Dict, Mapping, Optional

from common.logger import get_logger
from core.stage import Stage
from normalize.models import Event
from scoring.aggregator import ScoreAggregator
from scoring.formulas import calculate_all_scores

logger = get_logger("scoring_pipeline")


def content_for(event: Event, result: Mapping[str, Any]) -> Optional[str]:
    """
    Return the content extracted upstream. The payload's own text fields are
    only read when no content filter has run on *result*.
    """
    content = result.get('content')
    if isinstance(content, str) and content:
        return content
    if 'filtered' in result:
        return None
    data = event.data if isinstance(event.data, dict) else {}
    for key in ('content', 'body', 'text'):
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return None


class ScoringPipeline(Stage):
    name = 'scoring-pipeline'
    supported_event_types = re.compile(r'.*')

    def __init__(self, aggregator: ScoreAggregator):
        self.aggregator = aggregator

    async def transform(self, event: Event, result: Mapping[str, Any]) -> Dict[str, Any]:
        if result.get('filtered') is True or result.get('reason') == 'no-content':
            return dict(result)

        content = content_for(event, result)
        if not content:
            return dict(result)

        aggregated = await self.aggregator.score(content)
        word_score = calculate_all_scores(
            content,
            is_slash_command=bool(result.get('is_slash_command')),
            is_bot=bool(result.get('is_bot')),
        )

        return {
            **result,
            'scores': {sid: r.normalized_score for sid, r in aggregated.breakdown.items()},
            'aggregated_score': {
                'raw': aggregated.raw_score,
                'normalized': aggregated.normalized_score,
                'strategy': aggregated.strategy,
                'weights': dict(aggregated.weights),
            },
            'score_breakdown': {sid: r.to_dict() for sid, r in aggregated.breakdown.items()},
            'word_score': word_score.to_dict(),
        }
