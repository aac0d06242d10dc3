"""Per-entity-type default sorters and asserters.

The registry is resolved by the exact runtime type of a result value, so a
subclass needs its own entry.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

from query_asserter.errors import ResultMismatchError

Sorter = Callable[[Any], Any]
Asserter = Callable[[Any, Any], None]


class EntityRegistry:
    def __init__(
        self,
        sorters: Optional[Mapping[type, Sorter]] = None,
        asserters: Optional[Mapping[type, Asserter]] = None,
    ) -> None:
        self._sorters: Dict[type, Sorter] = dict(sorters or {})
        self._asserters: Dict[type, Asserter] = dict(asserters or {})

    def register_sorter(self, entity_type: type, key_fn: Sorter) -> None:
        self._sorters[entity_type] = key_fn

    def register_asserter(self, entity_type: type, asserter_fn: Asserter) -> None:
        self._asserters[entity_type] = asserter_fn

    def sorter_for(self, value: Any) -> Optional[Sorter]:
        if value is None:
            return None
        return self._sorters.get(type(value))

    def asserter_for(self, value: Any) -> Optional[Asserter]:
        if value is None:
            return None
        return self._asserters.get(type(value))

    def has_asserter(self, value: Any) -> bool:
        return self.asserter_for(value) is not None


def attribute_asserter(*names: str) -> Asserter:
    """Build an asserter comparing the named attributes of two entities.

    >>> assert_customer = attribute_asserter("id", "first_name")
    """
    if not names:
        raise ValueError("attribute_asserter needs at least one attribute name")

    def _assert(expected: Any, actual: Any) -> None:
        for name in names:
            e = getattr(expected, name)
            a = getattr(actual, name)
            if e != a:
                raise ResultMismatchError(
                    f"{type(expected).__name__}.{name} differs",
                    expected=e,
                    actual=a,
                )

    _assert.__name__ = f"assert_{'_'.join(names)}"
    return _assert


__all__ = ["EntityRegistry", "attribute_asserter", "Sorter", "Asserter"]
