"""
Core package: stage abstraction, stage chains, the chain registry and routing.
"""

from .errors import PipelineError, ConfigurationError, StageError
from .stage import Stage
from .chain import StageChain, ChainRegistry
from .router import EventRouter

__all__ = ["PipelineError", "ConfigurationError", "StageError", "Stage", "StageChain", "ChainRegistry", "EventRouter"]
