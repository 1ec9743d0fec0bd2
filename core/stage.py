"""Abstract base class for pipeline stages."""

import re
from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, Mapping, Pattern, Union

from normalize.models import Event

EventTypes = Union[FrozenSet[str], Pattern[str]]


class Stage(ABC):
    """
    A named, independently testable transform over one event.

    Subclasses declare ``name`` and ``supported_event_types`` (a set of exact
    type strings or a compiled regular expression) and implement
    ``transform``. ``transform`` receives a read-only snapshot of the
    accumulated result and must return a new mapping.
    """

    name: str = "stage"
    supported_event_types: EventTypes = frozenset()

    def can_process(self, event: Event) -> bool:
        types = self.supported_event_types
        if isinstance(types, re.Pattern):
            return types.search(event.type) is not None
        return event.type in types

    @abstractmethod
    async def transform(self, event: Event, result: Mapping[str, Any]) -> Dict[str, Any]:
        """Return the updated result for *event*."""
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
