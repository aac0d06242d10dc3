"""Validation of eagerly loaded related-entity graphs.

An include query is expected to return entities whose navigations were loaded
by the query itself (``joinedload``/``selectinload``), not lazily afterwards.
IncludeQueryResultAsserter walks the expected and actual graphs together and,
at every registered entity, checks each expected navigation was loaded and
matches.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, List, Sequence

from sqlalchemy import inspect as sa_inspect

from query_asserter.errors import (
    NavigationNotLoadedError,
    QueryAssertionError,
    ResultCountMismatchError,
    ResultMismatchError,
    UnsortableResultsError,
)
from query_asserter.logic.entity_registry import EntityRegistry

logger = logging.getLogger(__name__)


class ExpectedInclude:
    """Navigation ``navigation`` loaded on ``entity_type`` at ``navigation_path``.

    ``navigation_path`` is the dotted chain of navigations from the query root
    to the entity ("" for the root entities themselves), e.g.
    ``ExpectedInclude(Order, "lines", "orders")`` for
    ``joinedload(Customer.orders).joinedload(Order.lines)``.
    """

    def __init__(self, entity_type: type, navigation: str, navigation_path: str = "") -> None:
        if not navigation:
            raise ValueError("navigation must be a non-empty attribute name")
        self.entity_type = entity_type
        self.navigation = navigation
        self.navigation_path = navigation_path or ""

    def matches(self, entity: Any, path: Sequence[str]) -> bool:
        return isinstance(entity, self.entity_type) and ".".join(path) == self.navigation_path

    def __repr__(self) -> str:
        where = self.navigation_path or "<root>"
        return f"ExpectedInclude({self.entity_type.__name__}.{self.navigation} @ {where})"


def _is_loaded(entity: Any, navigation: str) -> bool:
    state = sa_inspect(entity, raiseerr=False)
    if state is None or not hasattr(state, "unloaded"):
        # Plain object, nothing to lazy-load
        return True
    return navigation not in state.unloaded


class IncludeQueryResultAsserter:
    def __init__(self, registry: EntityRegistry) -> None:
        self._registry = registry
        # Navigation chain used to match ExpectedInclude.navigation_path
        self._path: List[str] = []
        # Navigation chain plus mapping keys, reported on failures
        self._location: List[str] = []

    def assert_result(
        self,
        expected: Any,
        actual: Any,
        expected_includes: Sequence[ExpectedInclude],
        ordered: bool = False,
    ) -> None:
        """Walk both results and fail on the first difference.

        With ``ordered`` the top-level lists are compared position by position
        as given; only navigation collections below them are sorted.
        """
        self._path = []
        self._location = []
        includes = list(expected_includes or [])
        if not ordered:
            self._assert_object(expected, actual, includes)
            return

        expected_items = list(expected)
        actual_items = self._items(expected, actual)
        self._assert_counts(expected_items, actual_items, "Result counts differ")
        for index, (e, a) in enumerate(zip(expected_items, actual_items)):
            try:
                self._assert_object(e, a, includes)
            except QueryAssertionError as exc:
                raise exc.locate(index=index)

    def _assert_object(self, expected: Any, actual: Any, includes: List[ExpectedInclude]) -> None:
        if expected is None and actual is None:
            return
        if expected is None or actual is None:
            raise ResultMismatchError("Exactly one side is None", expected, actual, path=self._location)

        if isinstance(expected, Mapping):
            self._assert_mapping(expected, actual, includes)
        elif isinstance(expected, (str, bytes)):
            self._assert_equal(expected, actual)
        elif isinstance(expected, tuple):
            self._assert_tuple(expected, actual, includes)
        elif isinstance(expected, Iterable):
            self._assert_collection(expected, actual, includes)
        elif self._registry.has_asserter(expected):
            self._assert_entity(expected, actual, includes)
        else:
            self._assert_equal(expected, actual)

    def _assert_equal(self, expected: Any, actual: Any) -> None:
        if expected != actual:
            raise ResultMismatchError("Values differ", expected, actual, path=self._location)

    def _items(self, expected: Any, actual: Any) -> List[Any]:
        if isinstance(actual, (str, bytes, Mapping)) or not isinstance(actual, Iterable):
            raise ResultMismatchError("Shapes differ", expected, actual, path=self._location)
        return list(actual)

    def _assert_counts(self, expected_items: List[Any], actual_items: List[Any], message: str) -> None:
        if len(expected_items) != len(actual_items):
            raise ResultCountMismatchError(message, len(expected_items), len(actual_items), path=self._location)

    def _assert_mapping(self, expected: Mapping, actual: Any, includes: List[ExpectedInclude]) -> None:
        if not isinstance(actual, Mapping) or set(expected) != set(actual):
            raise ResultMismatchError("Mapping keys differ", expected, actual, path=self._location)
        for key in expected:
            self._location.append(str(key))
            try:
                self._assert_object(expected[key], actual[key], includes)
            finally:
                self._location.pop()

    def _assert_tuple(self, expected: tuple, actual: Any, includes: List[ExpectedInclude]) -> None:
        actual_items = self._items(expected, actual)
        self._assert_counts(list(expected), actual_items, "Tuple lengths differ")
        for e, a in zip(expected, actual_items):
            self._assert_object(e, a, includes)

    def _assert_collection(self, expected: Iterable, actual: Any, includes: List[ExpectedInclude]) -> None:
        expected_items = list(expected)
        actual_items = self._items(expected_items, actual)
        self._assert_counts(expected_items, actual_items, "Collection counts differ")
        if expected_items:
            sorter = self._registry.sorter_for(expected_items[0])
            if sorter is not None:
                try:
                    expected_items = sorted(expected_items, key=sorter)
                    actual_items = sorted(actual_items, key=sorter)
                except TypeError as exc:
                    raise UnsortableResultsError(
                        "Entity sorter produced keys that cannot be ordered",
                        expected=expected_items,
                        path=self._location,
                    ) from exc
        for e, a in zip(expected_items, actual_items):
            self._assert_object(e, a, includes)

    def _assert_entity(self, expected: Any, actual: Any, includes: List[ExpectedInclude]) -> None:
        asserter = self._registry.asserter_for(expected)
        try:
            asserter(expected, actual)
        except QueryAssertionError as exc:
            raise exc.locate(path=self._location)
        except AssertionError as exc:
            raise ResultMismatchError(f"Entity asserter failed: {exc}", expected, actual, path=self._location) from exc
        self._assert_includes(expected, actual, includes)

    def _assert_includes(self, expected: Any, actual: Any, includes: List[ExpectedInclude]) -> None:
        for include in includes:
            if not include.matches(expected, self._path):
                continue
            name = include.navigation
            if not _is_loaded(actual, name):
                raise NavigationNotLoadedError(
                    f"Navigation '{name}' of {type(actual).__name__} was not eagerly loaded",
                    path=[*self._location, name],
                )
            self._path.append(name)
            self._location.append(name)
            try:
                self._assert_object(getattr(expected, name), getattr(actual, name), includes)
            finally:
                self._path.pop()
                self._location.pop()
            logger.debug("include_verified navigation=%s path=%s", name, ".".join(self._path) or "<root>")


__all__ = ["ExpectedInclude", "IncludeQueryResultAsserter"]
