"""In-memory reference datasets queries are evaluated against.

The expected side of every assertion runs the query over plain Python lists
held here instead of a database.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Mapping


class ExpectedData(ABC):
    @abstractmethod
    def set(self, entity_type: type) -> list:
        """Return the reference rows for ``entity_type``."""


class InMemoryExpectedData(ExpectedData):
    """Reference rows keyed by entity type.

    ``set`` hands out a new list each call so a query that sorts or mutates
    its input cannot change what the next assertion sees.
    """

    def __init__(self, sets: Mapping[type, Iterable]) -> None:
        self._sets: Dict[type, List] = {t: list(rows) for t, rows in sets.items()}

    def set(self, entity_type: type) -> list:
        try:
            return list(self._sets[entity_type])
        except KeyError:
            raise KeyError(f"No expected data registered for {entity_type.__name__}") from None

    def entity_types(self) -> List[type]:
        return list(self._sets)


__all__ = ["ExpectedData", "InMemoryExpectedData"]
