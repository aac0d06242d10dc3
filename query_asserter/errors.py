"""Assertion failures raised by the query asserter.

Every comparison failure is an ``AssertionError`` so test runners report it
as a failed test. Codes are kept in a single mapping so callers and tests
never hardcode the strings.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence


ERROR_CODES = {
    "count_mismatch": "QA_RESULT_COUNT_MISMATCH",
    "result_mismatch": "QA_RESULT_MISMATCH",
    "entry_count_mismatch": "QA_ENTRY_COUNT_MISMATCH",
    "null_scalar": "QA_NULL_SCALAR",
    "unsortable": "QA_UNSORTABLE_RESULTS",
    "navigation_not_loaded": "QA_NAVIGATION_NOT_LOADED",
    "sql_not_captured": "QA_SQL_NOT_CAPTURED",
}

_MISSING = object()


class QueryAssertionError(AssertionError):
    """Base failure carrying the expected and actual values."""

    kind = "result_mismatch"

    def __init__(
        self,
        message: str,
        expected: Any = _MISSING,
        actual: Any = _MISSING,
        path: Optional[Sequence[str]] = None,
        index: Optional[int] = None,
    ) -> None:
        self.message = message
        self.expected = None if expected is _MISSING else expected
        self.actual = None if actual is _MISSING else actual
        self.path = list(path) if path is not None else None
        self.index = index
        self._has_values = expected is not _MISSING or actual is not _MISSING
        super().__init__(self._render())

    def locate(self, path: Optional[Sequence[str]] = None, index: Optional[int] = None) -> "QueryAssertionError":
        """Record where the failure happened unless an inner frame already did."""
        if path is not None and self.path is None:
            self.path = list(path)
        if index is not None and self.index is None:
            self.index = index
        self.args = (self._render(),)
        return self

    @property
    def code(self) -> str:
        return ERROR_CODES[self.kind]

    @property
    def dotted_path(self) -> Optional[str]:
        if self.path is None:
            return None
        return ".".join(["root", *self.path])

    def _render(self) -> str:
        lines = [self.message]
        if self.index is not None:
            lines.append(f"Index: {self.index}")
        if self.path is not None:
            lines.append(f"Path: {self.dotted_path}")
        if self._has_values:
            lines.append(f"Expected: {self.expected!r}")
            lines.append(f"Actual:   {self.actual!r}")
        return "\n".join(lines)


class ResultCountMismatchError(QueryAssertionError):
    kind = "count_mismatch"


class ResultMismatchError(QueryAssertionError):
    kind = "result_mismatch"


class EntryCountMismatchError(QueryAssertionError):
    kind = "entry_count_mismatch"


class NullScalarError(QueryAssertionError):
    kind = "null_scalar"


class UnsortableResultsError(QueryAssertionError):
    """Order-insensitive comparison without a usable ordering.

    Raised instead of comparing in arrival order, which could pass or fail
    depending on how the backend happened to return rows.
    """

    kind = "unsortable"


class NavigationNotLoadedError(QueryAssertionError):
    kind = "navigation_not_loaded"


class SqlNotCapturedError(QueryAssertionError):
    kind = "sql_not_captured"


__all__ = [
    "ERROR_CODES",
    "QueryAssertionError",
    "ResultCountMismatchError",
    "ResultMismatchError",
    "EntryCountMismatchError",
    "NullScalarError",
    "UnsortableResultsError",
    "NavigationNotLoadedError",
    "SqlNotCapturedError",
]
