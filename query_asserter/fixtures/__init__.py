"""Ready-made fixtures binding a dataset and a test store to a QueryAsserter."""

from query_asserter.fixtures.funky_data import FunkyDataQueryFixtureBase, FunkyDataQuerySqliteFixture

__all__ = ["FunkyDataQueryFixtureBase", "FunkyDataQuerySqliteFixture"]
