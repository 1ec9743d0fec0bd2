"""
Pluggable content scorers.
"""
from typing import Any, Callable, Dict

from core.errors import ConfigurationError

from .base import BaseScorer, ScorerResult
from .readability import ReadabilityScorer
from .technical import TechnicalScorer

SCORER_FACTORIES: Dict[str, Callable[..., BaseScorer]] = {
    ReadabilityScorer.id: ReadabilityScorer,
    TechnicalScorer.id: TechnicalScorer,
}


def create_scorer(scorer_id: str, **options: Any) -> BaseScorer:
    factory = SCORER_FACTORIES.get(scorer_id)
    if factory is None:
        raise ConfigurationError(f'scorers.{scorer_id}', f"unknown scorer; expected one of {sorted(SCORER_FACTORIES)}")
    try:
        return factory(**options)
    except TypeError as ex:
        raise ConfigurationError(f'scorers.{scorer_id}', str(ex))


__all__ = ["BaseScorer", "ScorerResult", "ReadabilityScorer", "TechnicalScorer", "SCORER_FACTORIES", "create_scorer"]
