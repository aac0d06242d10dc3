"""FunkyData query fixtures.

FunkyDataQueryFixtureBase wires the FunkyData model, its seed rows and a
QueryAsserter to whichever test store a subclass provides. The SQLite fixture
plugs in SqliteTestStoreFactory and records executed SQL.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from operator import attrgetter
from typing import Dict, Optional

from sqlalchemy.orm import Session

from query_asserter.config import load_config
from query_asserter.db.sql_capture import SqlCapture
from query_asserter.db.test_store import SqliteTestStoreFactory, TestStore, TestStoreFactory
from query_asserter.logic.entity_registry import Asserter, Sorter, attribute_asserter
from query_asserter.logic.expected_data import ExpectedData, InMemoryExpectedData
from query_asserter.logic.query_asserter import QueryAsserter
from query_asserter.logging_setup import configure_logging
from query_asserter.models.funky_data import FunkyCustomer, FunkyDataBase, create_funky_customers

logger = logging.getLogger(__name__)


class FunkyDataQueryFixtureBase(ABC):
    store_name = "FunkyDataQueryTest"

    def __init__(self) -> None:
        configure_logging()
        self._store: Optional[TestStore] = None
        self._expected_data: Optional[ExpectedData] = None
        self._query_asserter: Optional[QueryAsserter] = None

    @property
    @abstractmethod
    def test_store_factory(self) -> TestStoreFactory:
        ...

    @property
    def test_store(self) -> TestStore:
        if self._store is None:
            store = self.test_store_factory.create(self.store_name)
            self._store = store.initialize(FunkyDataBase.metadata, self.seed)
            logger.info("funky_data_store_ready store=%s", self.store_name)
        return self._store

    @staticmethod
    def seed(session: Session) -> None:
        session.add_all(create_funky_customers())

    @property
    def expected_data(self) -> ExpectedData:
        if self._expected_data is None:
            self._expected_data = InMemoryExpectedData({FunkyCustomer: create_funky_customers()})
        return self._expected_data

    @property
    def entity_sorters(self) -> Dict[type, Sorter]:
        return {FunkyCustomer: attrgetter("id")}

    @property
    def entity_asserters(self) -> Dict[type, Asserter]:
        return {FunkyCustomer: attribute_asserter("id", "first_name", "last_name", "nullable_bool")}

    def create_context(self) -> Session:
        return self.test_store.create_session()

    @property
    def query_asserter(self) -> QueryAsserter:
        if self._query_asserter is None:
            self._query_asserter = QueryAsserter(
                self.create_context,
                self.expected_data,
                self.entity_sorters,
                self.entity_asserters,
            )
        return self._query_asserter

    def dispose(self) -> None:
        if self._store is not None:
            self._store.dispose()
            self._store = None
        self._query_asserter = None


class FunkyDataQuerySqliteFixture(FunkyDataQueryFixtureBase):
    def __init__(self) -> None:
        super().__init__()
        capture_cfg = load_config().capture
        self._capture_enabled = capture_cfg.enabled
        self.sql_capture = SqlCapture(max_statements=capture_cfg.max_statements)

    @property
    def test_store_factory(self) -> TestStoreFactory:
        return SqliteTestStoreFactory.INSTANCE

    @property
    def test_store(self) -> TestStore:
        store = super().test_store
        if self._capture_enabled and not self.sql_capture.attached:
            self.sql_capture.attach(store.engine)
        return store

    def dispose(self) -> None:
        self.sql_capture.detach()
        super().dispose()


__all__ = ["FunkyDataQueryFixtureBase", "FunkyDataQuerySqliteFixture"]
