"""Functional test bootstrap for the query asserter.

Each store is a named shared in-memory SQLite database, created once per
session and seeded from the same factories that build the expected data.
"""

from __future__ import annotations

import pytest

from query_asserter.db.test_store import SqliteTestStore
from query_asserter.fixtures.funky_data import FunkyDataQuerySqliteFixture
from query_asserter.logic.expected_data import InMemoryExpectedData
from query_asserter.logic.query_asserter import QueryAsserter
from tests.functional.order_model import (
    ENTITY_ASSERTERS,
    ENTITY_SORTERS,
    OrderBase,
    create_order_graph,
    seed_orders,
)


@pytest.fixture(scope="session")
def order_store():
    """Session-level store holding the customer/order/line graph."""
    store = SqliteTestStore("OrderQueryTest").initialize(OrderBase.metadata, seed_orders)
    yield store
    store.dispose()


@pytest.fixture()
def order_asserter(order_store) -> QueryAsserter:
    return QueryAsserter(
        order_store.create_session,
        InMemoryExpectedData(create_order_graph()),
        ENTITY_SORTERS,
        ENTITY_ASSERTERS,
    )


@pytest.fixture(scope="session")
def funky_fixture():
    fixture = FunkyDataQuerySqliteFixture()
    yield fixture
    fixture.dispose()
