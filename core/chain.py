"""
Stage chains: an ordered list of stages folded over one event, plus a registry
of chains keyed by chain id.
"""

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence

from common.logger import get_logger
from core.errors import StageError
from core.stage import Stage
from normalize.models import Event

logger = get_logger("chain")


class StageChain:
    """
    A chain of stages executed in sequence for each event.

    Args:
        chain_id: Identifier used by the registry and in log messages.
        matchers: Optional event matchers (objects with ``matches(event)``);
            when given, the router only sends events that at least one accepts.
    """

    def __init__(self, chain_id: str, matchers: Optional[Sequence[Any]] = None):
        self._id = chain_id
        self._stages: List[Stage] = []
        self.matchers = list(matchers or [])

    def add_stage(self, stage: Stage) -> "StageChain":
        """Append a stage and return the chain for builder-style use."""
        self._stages.append(stage)
        return self

    def accepts(self, event: Event) -> bool:
        if not self.matchers:
            return True
        return any(m.matches(event) for m in self.matchers)

    async def execute(self, event: Event, initial_result: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Fold *event* through every applicable stage and return the final result.

        A stage that raises, or returns something other than a mapping, is
        logged and skipped; the result accumulated so far is kept as is.
        """
        result: Dict[str, Any] = dict(initial_result or {})

        for stage in self._stages:
            if not stage.can_process(event):
                logger.debug("chain %s: stage %s skipped for %s", self._id, stage.name, event.type)
                continue

            try:
                updated = await stage.transform(event, MappingProxyType(result))
                if not isinstance(updated, Mapping):
                    raise StageError(stage.name, f"returned {type(updated).__name__}, expected a mapping")
            except Exception:
                logger.exception("chain %s: stage %s failed for event %s", self._id, stage.name, event.id)
                continue

            result = dict(updated)

        return result

    @property
    def stages(self) -> List[Stage]:
        return list(self._stages)

    @property
    def chain_id(self) -> str:
        return self._id

    def __len__(self) -> int:
        return len(self._stages)

    def __repr__(self) -> str:
        return f"<StageChain {self._id!r} stages={[s.name for s in self._stages]}>"


class ChainRegistry:
    """Registry of stage chains: register, unregister, lookup by id."""

    def __init__(self):
        self._chains: Dict[str, StageChain] = {}

    def register_chain(self, chain: StageChain) -> None:
        """Register a chain (replaces an existing chain with the same id)."""
        self._chains[chain.chain_id] = chain

    def unregister_chain(self, chain_id: str) -> None:
        """Remove a chain by id. No-op if not found."""
        self._chains.pop(chain_id, None)

    def get_chain(self, chain_id: str) -> Optional[StageChain]:
        return self._chains.get(chain_id)

    def all_chains(self) -> List[StageChain]:
        """All registered chains in registration order."""
        return list(self._chains.values())

    def __len__(self) -> int:
        return len(self._chains)

    def __contains__(self, chain_id: str) -> bool:
        return chain_id in self._chains
