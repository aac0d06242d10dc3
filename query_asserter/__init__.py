"""Query asserter: run an ORM query against a database and in memory, then diff.

The harness executes a query once through a SQLAlchemy Session and once over
an in-memory reference dataset and asserts both produced the same results.
Comparison logic lives in `query_asserter/logic/`, database plumbing in
`query_asserter/db/`, and ready-made datasets in `query_asserter/fixtures/`.
"""

from __future__ import annotations

from query_asserter.logic.include_asserter import ExpectedInclude
from query_asserter.logic.query_asserter import QueryAsserter

__all__ = ["QueryAsserter", "ExpectedInclude"]
