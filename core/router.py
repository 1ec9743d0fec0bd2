"""Event router: sends an event to every registered chain that accepts it."""

from typing import Any, Dict, List

from common.logger import get_logger
from core.chain import ChainRegistry, StageChain
from normalize.models import Event

logger = get_logger("router")


class EventRouter:
    def __init__(self, registry: ChainRegistry):
        self.registry = registry

    def find_matching_chains(self, event: Event) -> List[StageChain]:
        return [c for c in self.registry.all_chains() if c.accepts(event)]

    async def route_event(self, event: Event) -> Dict[str, Dict[str, Any]]:
        """Execute each matching chain for *event*, one after another.

        Returns a mapping of chain id to that chain's final result.
        """
        chains = self.find_matching_chains(event)
        if not chains:
            logger.warning("No matching chains found for event type: %s", event.type)
            return {}

        results: Dict[str, Dict[str, Any]] = {}
        for chain in chains:
            results[chain.chain_id] = await chain.execute(event)
        return results
