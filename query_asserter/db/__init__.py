"""Database utilities for the query asserter.

Engine/session construction, named test stores, and SQL statement capture.
ORM models are owned by the fixtures that use them, never by this package.
"""

from query_asserter.db.base import dispose_engine, get_engine, get_sessionmaker, session_scope
from query_asserter.db.sql_capture import SqlCapture
from query_asserter.db.test_store import (
    SqliteTestStore,
    SqliteTestStoreFactory,
    TestStore,
    TestStoreFactory,
)

__all__ = [
    "get_engine",
    "dispose_engine",
    "get_sessionmaker",
    "session_scope",
    "SqlCapture",
    "TestStore",
    "SqliteTestStore",
    "TestStoreFactory",
    "SqliteTestStoreFactory",
]
