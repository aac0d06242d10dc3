"""Sequence comparison used by every query assertion.

``assert_results`` is the single place expected and actual sequences are
counted, put into a canonical order and compared element by element.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence

from query_asserter.errors import (
    QueryAssertionError,
    ResultCountMismatchError,
    ResultMismatchError,
    UnsortableResultsError,
)

logger = logging.getLogger(__name__)

Sorter = Callable[[Any], Any]
ElementAsserter = Callable[[Any, Any], None]


def _identity(value: Any) -> Any:
    return value


def _nulls_first(value: Any) -> Any:
    return (value is not None, value)


def _sorted(values: Sequence[Any], key: Sorter, has_explicit_sorter: bool) -> List[Any]:
    try:
        return sorted(values, key=key)
    except TypeError as exc:
        if has_explicit_sorter:
            message = "Element sorter produced keys that cannot be ordered"
        else:
            message = (
                "Results cannot be put in a canonical order; pass element_sorter "
                "or assert_order=True"
            )
        raise UnsortableResultsError(message, expected=list(values)) from exc


def _assert_equal(expected: Any, actual: Any) -> None:
    if expected != actual:
        raise ResultMismatchError("Elements differ", expected=expected, actual=actual)


def _compare(
    expected: Sequence[Any],
    actual: Sequence[Any],
    element_sorter: Optional[Sorter],
    element_asserter: Optional[ElementAsserter],
    assert_order: bool,
    natural_key: Sorter,
) -> None:
    expected = list(expected)
    actual = list(actual)

    if len(expected) != len(actual):
        raise ResultCountMismatchError(
            "Result counts differ",
            expected=len(expected),
            actual=len(actual),
        )

    if not assert_order:
        key = element_sorter or natural_key
        expected = _sorted(expected, key, element_sorter is not None)
        actual = _sorted(actual, key, element_sorter is not None)

    asserter = element_asserter or _assert_equal
    for index, (e, a) in enumerate(zip(expected, actual)):
        try:
            asserter(e, a)
        except QueryAssertionError as exc:
            raise exc.locate(index=index)
        except AssertionError as exc:
            raise ResultMismatchError(
                f"Element asserter failed at index {index}: {exc}",
                expected=e,
                actual=a,
                index=index,
            ) from exc

    logger.debug("results_match count=%d ordered=%s", len(expected), assert_order)


def assert_results(
    expected: Sequence[Any],
    actual: Sequence[Any],
    element_sorter: Optional[Sorter] = None,
    element_asserter: Optional[ElementAsserter] = None,
    assert_order: bool = False,
) -> None:
    """Assert two result sequences match.

    - Lengths must be equal.
    - Unless ``assert_order``, both sides are stably sorted with
      ``element_sorter`` (natural ordering when omitted). Elements that
      cannot be ordered raise UnsortableResultsError.
    - Elements are compared pairwise with ``element_asserter`` or ``==``;
      the first mismatch fails.
    """
    _compare(expected, actual, element_sorter, element_asserter, assert_order, _identity)


def assert_results_nullable(
    expected: Sequence[Any],
    actual: Sequence[Any],
    element_sorter: Optional[Sorter] = None,
    element_asserter: Optional[ElementAsserter] = None,
    assert_order: bool = False,
) -> None:
    """Like ``assert_results`` but natural ordering puts ``None`` first."""
    _compare(expected, actual, element_sorter, element_asserter, assert_order, _nulls_first)


__all__ = ["assert_results", "assert_results_nullable"]
