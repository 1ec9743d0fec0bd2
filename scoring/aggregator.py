"""
Weighted ensemble of content scorers.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

from common.logger import get_logger
from core.errors import ConfigurationError
from scoring.scorers.base import BaseScorer, ScorerResult

logger = get_logger("aggregator")

WEIGHTED_AVERAGE = 'weighted-average'
MINIMUM = 'minimum'
MAXIMUM = 'maximum'
STRATEGIES = (WEIGHTED_AVERAGE, MINIMUM, MAXIMUM)


@dataclass
class AggregatedResult:
    raw_score: float
    normalized_score: float
    breakdown: Dict[str, ScorerResult] = field(default_factory=dict)
    strategy: str = WEIGHTED_AVERAGE
    weights: Dict[str, float] = field(default_factory=dict)


class ScoreAggregator:
    """
    Runs every configured scorer over the same content and combines their
    normalized scores.

    Args:
        scorers: ``(scorer, weight)`` pairs, in evaluation order.
        strategy: ``weighted-average`` (default), ``minimum`` or ``maximum``.
            Weights only matter for the weighted average.
        weight: Multiplier in (0, 1] applied to the combined score.
    """

    def __init__(self, scorers: Iterable[Tuple[BaseScorer, float]], strategy: str = WEIGHTED_AVERAGE,
                 weight: float = 1.0):
        self.scorers: List[Tuple[BaseScorer, float]] = [
            (scorer, 1.0 if w is None else float(w)) for scorer, w in scorers
        ]
        if not self.scorers:
            raise ConfigurationError('scoring.scorers', 'at least one scorer is required')
        if strategy not in STRATEGIES:
            raise ConfigurationError('scoring.strategy', f"unknown strategy {strategy!r}")
        if any(w < 0 for _, w in self.scorers):
            raise ConfigurationError('scoring.weights', 'weights must be non-negative')
        if strategy == WEIGHTED_AVERAGE and sum(w for _, w in self.scorers) == 0:
            raise ConfigurationError('scoring.weights', 'total weight must be greater than zero')
        if weight is None or not 0 < float(weight) <= 1:
            raise ConfigurationError('scoring.weight', 'must be greater than 0 and at most 1')
        self.strategy = strategy
        self.weight = float(weight)

    @property
    def weights(self) -> Dict[str, float]:
        return {scorer.id: w for scorer, w in self.scorers}

    async def score(self, content: str) -> AggregatedResult:
        results: List[Tuple[str, float, ScorerResult]] = []
        for scorer, w in self.scorers:
            results.append((scorer.id, w, await scorer.score(content)))

        combined = self._combine(results)
        logger.debug("aggregated %d scorer(s) with %s: %.4f", len(results), self.strategy, combined)

        return AggregatedResult(
            raw_score=combined * 100,
            normalized_score=combined * self.weight,
            breakdown={sid: r for sid, _, r in results},
            strategy=self.strategy,
            weights={sid: w for sid, w, _ in results},
        )

    def _combine(self, results: Sequence[Tuple[str, float, ScorerResult]]) -> float:
        values = [BaseScorer.clamp(r.normalized_score) for _, _, r in results]
        if self.strategy == MINIMUM:
            return min(values)
        if self.strategy == MAXIMUM:
            return max(values)
        total_weight = sum(w for _, w, _ in results)
        return sum(w * v for (_, w, _), v in zip(results, values)) / total_weight
