"""Run a query against a live Session and against expected data, then diff.

QueryAsserter is the entry point tests use. Every assertion opens one
short-lived Session from ``context_creator``, evaluates the actual query over
live sources (``session.query(...)``) and the expected query over in-memory
lists, compares the results, and finally checks how many entities the Session
ended up tracking.

``entity_types`` is a single mapped class or a tuple of one to three; the
query callables receive one source per type, positionally:

    asserter.assert_query(
        (Customer, Order),
        lambda cs, os: [(c.id, o.id) for c in cs for o in os if o.customer_id == c.id],
        entry_count=7,
    )
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from sqlalchemy.orm import Session

from query_asserter.errors import (
    EntryCountMismatchError,
    NullScalarError,
    QueryAssertionError,
    ResultMismatchError,
)
from query_asserter.logic.entity_registry import Asserter, EntityRegistry, Sorter
from query_asserter.logic.expected_data import ExpectedData
from query_asserter.logic.include_asserter import ExpectedInclude, IncludeQueryResultAsserter
from query_asserter.logic.result_comparison import assert_results, assert_results_nullable
from query_asserter.logic.set_extractor import DefaultSetExtractor, SetExtractor

logger = logging.getLogger(__name__)

MAX_QUERY_SOURCES = 3

EntityTypes = Union[type, Sequence[type]]
QueryFn = Callable[..., Any]


def _normalize_entity_types(entity_types: EntityTypes) -> Tuple[type, ...]:
    if isinstance(entity_types, type):
        types_ = (entity_types,)
    else:
        types_ = tuple(entity_types)
    if not 1 <= len(types_) <= MAX_QUERY_SOURCES:
        raise ValueError(
            f"Queries take between 1 and {MAX_QUERY_SOURCES} entity sets; got {len(types_)}"
        )
    for t in types_:
        if not isinstance(t, type):
            raise ValueError(f"Entity set must be a class, got {t!r}")
    return types_


def _first(values: List[Any]) -> Any:
    return values[0] if values else None


def _assert_no_nulls(values: Iterable[Any], side: str) -> None:
    for index, value in enumerate(values):
        if value is None:
            raise NullScalarError(
                f"Non-nullable scalar query produced None on the {side} side",
                index=index,
            )


def _type_names(types_: Tuple[type, ...]) -> str:
    return ",".join(t.__name__ for t in types_)


class QueryAsserter:
    def __init__(
        self,
        context_creator: Callable[[], Session],
        expected_data: ExpectedData,
        entity_sorters: Optional[Mapping[type, Sorter]] = None,
        entity_asserters: Optional[Mapping[type, Asserter]] = None,
        set_extractor: Optional[SetExtractor] = None,
    ) -> None:
        self._context_creator = context_creator
        self.expected_data = expected_data
        self.registry = EntityRegistry(entity_sorters, entity_asserters)
        self.set_extractor = set_extractor or DefaultSetExtractor()
        self._include_asserter = IncludeQueryResultAsserter(self.registry)

    # -----------------------------
    # Source plumbing
    # -----------------------------

    def _actual_sources(self, session: Session, types_: Tuple[type, ...]) -> List[Any]:
        return [self.set_extractor.set(session, t) for t in types_]

    def _expected_sources(self, types_: Tuple[type, ...]) -> List[Any]:
        return [self.expected_data.set(t) for t in types_]

    def _run_sequences(
        self,
        session: Session,
        types_: Tuple[type, ...],
        actual_query: QueryFn,
        expected_query: QueryFn,
    ) -> Tuple[List[Any], List[Any]]:
        actual = list(actual_query(*self._actual_sources(session, types_)))
        expected = list(expected_query(*self._expected_sources(types_)))
        return actual, expected

    @staticmethod
    def _assert_entry_count(session: Session, entry_count: int) -> None:
        tracked = len(session.identity_map)
        if tracked != entry_count:
            raise EntryCountMismatchError(
                "Number of tracked entities differs",
                expected=entry_count,
                actual=tracked,
            )

    # -----------------------------
    # Single results
    # -----------------------------

    def assert_single_result(
        self,
        entity_types: EntityTypes,
        actual_query: QueryFn,
        expected_query: Optional[QueryFn] = None,
        *,
        asserter: Optional[Asserter] = None,
        entry_count: int = 0,
    ) -> None:
        """Compare non-sequence results (aggregates, ``first()``, ``one()``)."""
        types_ = _normalize_entity_types(entity_types)
        expected_query = expected_query or actual_query
        with self._context_creator() as session:
            actual = actual_query(*self._actual_sources(session, types_))
            expected = expected_query(*self._expected_sources(types_))

            if asserter is None and expected is not None:
                asserter = self.registry.asserter_for(expected)

            logger.debug(
                "query_asserter.assert_single_result sets=%s expected_type=%s",
                _type_names(types_),
                type(expected).__name__,
            )
            if asserter is not None:
                try:
                    asserter(expected, actual)
                except QueryAssertionError:
                    raise
                except AssertionError as exc:
                    raise ResultMismatchError(f"Single result asserter failed: {exc}", expected, actual) from exc
            elif expected != actual:
                raise ResultMismatchError("Single results differ", expected, actual)

            self._assert_entry_count(session, entry_count)

    # -----------------------------
    # Sequences of entities / projections
    # -----------------------------

    def assert_query(
        self,
        entity_types: EntityTypes,
        actual_query: QueryFn,
        expected_query: Optional[QueryFn] = None,
        *,
        element_sorter: Optional[Sorter] = None,
        element_asserter: Optional[Asserter] = None,
        assert_order: bool = False,
        entry_count: int = 0,
    ) -> None:
        """Compare the sequences produced by the actual and expected queries.

        Default sorter and asserter are looked up by the runtime type of the
        first expected element when not passed explicitly; the sorter is only
        looked up for order-insensitive comparisons.
        """
        types_ = _normalize_entity_types(entity_types)
        expected_query = expected_query or actual_query
        with self._context_creator() as session:
            actual, expected = self._run_sequences(session, types_, actual_query, expected_query)
            first = _first(expected)

            if not assert_order and element_sorter is None:
                element_sorter = self.registry.sorter_for(first)
            if element_asserter is None:
                element_asserter = self.registry.asserter_for(first)

            logger.debug(
                "query_asserter.assert_query sets=%s expected=%d actual=%d ordered=%s",
                _type_names(types_),
                len(expected),
                len(actual),
                assert_order,
            )
            assert_results(expected, actual, element_sorter, element_asserter, assert_order)
            self._assert_entry_count(session, entry_count)

    # -----------------------------
    # Scalar projections
    # -----------------------------

    def assert_query_scalar(
        self,
        entity_types: EntityTypes,
        actual_query: QueryFn,
        expected_query: Optional[QueryFn] = None,
        *,
        assert_order: bool = False,
    ) -> None:
        """Compare sequences of non-null scalars (ids, counts, flags)."""
        types_ = _normalize_entity_types(entity_types)
        expected_query = expected_query or actual_query
        with self._context_creator() as session:
            actual, expected = self._run_sequences(session, types_, actual_query, expected_query)
            _assert_no_nulls(expected, "expected")
            _assert_no_nulls(actual, "actual")
            logger.debug(
                "query_asserter.assert_query_scalar sets=%s expected=%d actual=%d",
                _type_names(types_),
                len(expected),
                len(actual),
            )
            assert_results(expected, actual, None, None, assert_order)

    def assert_query_nullable_scalar(
        self,
        entity_types: EntityTypes,
        actual_query: QueryFn,
        expected_query: Optional[QueryFn] = None,
        *,
        assert_order: bool = False,
    ) -> None:
        """Compare sequences of scalars that may be None; None sorts first."""
        types_ = _normalize_entity_types(entity_types)
        expected_query = expected_query or actual_query
        with self._context_creator() as session:
            actual, expected = self._run_sequences(session, types_, actual_query, expected_query)
            logger.debug(
                "query_asserter.assert_query_nullable_scalar sets=%s expected=%d actual=%d",
                _type_names(types_),
                len(expected),
                len(actual),
            )
            assert_results_nullable(expected, actual, None, None, assert_order)

    # -----------------------------
    # Include (eager loading) queries
    # -----------------------------

    def assert_include_query(
        self,
        entity_types: EntityTypes,
        actual_query: QueryFn,
        expected_query: Optional[QueryFn] = None,
        *,
        expected_includes: Sequence[ExpectedInclude],
        element_sorter: Optional[Sorter] = None,
        client_projections: Optional[Sequence[Callable[[Any], Any]]] = None,
        assert_order: bool = False,
        entry_count: int = 0,
    ) -> None:
        """Compare results and the related-entity graphs they eagerly loaded.

        Top-level rows are compared in the order they end up in: sorted when
        ``assert_order`` is false, as returned otherwise. With
        ``client_projections`` each projection is applied to both result lists
        and the projected lists are compared in turn.
        """
        types_ = _normalize_entity_types(entity_types)
        expected_query = expected_query or actual_query
        with self._context_creator() as session:
            actual, expected = self._run_sequences(session, types_, actual_query, expected_query)

            if not assert_order:
                if element_sorter is None:
                    element_sorter = self.registry.sorter_for(_first(expected))
                if element_sorter is not None:
                    actual = sorted(actual, key=element_sorter)
                    expected = sorted(expected, key=element_sorter)

            logger.debug(
                "query_asserter.assert_include_query sets=%s expected=%d actual=%d includes=%d",
                _type_names(types_),
                len(expected),
                len(actual),
                len(expected_includes),
            )
            if client_projections:
                for projection in client_projections:
                    self._include_asserter.assert_result(
                        [projection(e) for e in expected],
                        [projection(a) for a in actual],
                        expected_includes,
                        ordered=True,
                    )
            else:
                self._include_asserter.assert_result(expected, actual, expected_includes, ordered=True)

            self._assert_entry_count(session, entry_count)


__all__ = ["QueryAsserter", "MAX_QUERY_SOURCES"]
