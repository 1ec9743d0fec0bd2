"""
Base class and result type shared by all content scorers.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class ScorerResult:
    """raw_score is on the scorer's own scale; normalized_score is in [0, 1]."""
    raw_score: float
    normalized_score: float
    metrics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'raw_score': self.raw_score,
            'normalized_score': self.normalized_score,
            'metrics': dict(self.metrics),
        }


class BaseScorer(ABC):
    """
    A content scorer. Scorers are unweighted: the aggregator owns the weight
    of each scorer.
    """
    id: str = 'base'

    def __init__(self, debug: bool = False):
        self.debug = debug

    @abstractmethod
    async def score(self, content: str) -> ScorerResult:
        ...

    @staticmethod
    def clamp(value: float) -> float:
        return min(1.0, max(0.0, value))

    @staticmethod
    def normalize(raw: float, low: float = 0.0, high: float = 100.0) -> float:
        """Clamp *raw* into [low, high] and rescale it to [0, 1]."""
        if raw >= high:
            return 1.0
        if raw <= low:
            return 0.0
        return (raw - low) / (high - low)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r}>"
