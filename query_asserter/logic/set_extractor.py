"""Live queryable sources for the actual side of an assertion."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy.orm import Session


class SetExtractor(ABC):
    @abstractmethod
    def set(self, session: Session, entity_type: type) -> Any:
        ...


class DefaultSetExtractor(SetExtractor):
    """Return ``session.query(entity_type)``; nothing executes until iterated."""

    def set(self, session: Session, entity_type: type) -> Any:
        return session.query(entity_type)


__all__ = ["SetExtractor", "DefaultSetExtractor"]
