"""Capture of SQL statements executed by an Engine.

Attach a SqlCapture to a test store's engine to inspect what the ORM sent to
the database for a query under test.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Deque, List, Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine

from query_asserter.errors import SqlNotCapturedError

logger = logging.getLogger(__name__)


class SqlCapture:
    """Records statements via the ``before_cursor_execute`` engine event."""

    def __init__(self, max_statements: int = 1000) -> None:
        if max_statements <= 0:
            raise ValueError("max_statements must be positive")
        self._entries: Deque[tuple[str, Any]] = deque(maxlen=max_statements)
        self._engine: Optional[Engine] = None

    def attach(self, engine: Engine) -> "SqlCapture":
        if self._engine is engine:
            return self
        if self._engine is not None:
            self.detach()
        event.listen(engine, "before_cursor_execute", self._on_execute)
        self._engine = engine
        return self

    def detach(self) -> None:
        if self._engine is None:
            return
        if event.contains(self._engine, "before_cursor_execute", self._on_execute):
            event.remove(self._engine, "before_cursor_execute", self._on_execute)
        self._engine = None

    @property
    def attached(self) -> bool:
        return self._engine is not None

    def _on_execute(self, conn, cursor, statement, parameters, context, executemany) -> None:
        self._entries.append((statement, parameters))

    @property
    def statements(self) -> List[str]:
        return [s for s, _p in self._entries]

    @property
    def parameters(self) -> List[Any]:
        return [p for _s, p in self._entries]

    @property
    def sql(self) -> str:
        return "\n\n".join(self.statements)

    def clear(self) -> None:
        self._entries.clear()

    def assert_sql_contains(self, fragment: str) -> None:
        """Fail unless some captured statement contains ``fragment``."""
        if any(fragment in s for s in self.statements):
            return
        logger.debug("sql_fragment_missing fragment=%r captured=%d", fragment, len(self._entries))
        raise SqlNotCapturedError(
            "No captured SQL statement contains the expected fragment",
            expected=fragment,
            actual=self.statements,
        )


__all__ = ["SqlCapture"]
