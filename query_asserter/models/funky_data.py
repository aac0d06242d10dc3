"""FunkyData model: customer names made of SQL wildcard characters.

Values deliberately mix ``%``, ``_``, empty strings and NULLs so LIKE-based
translations (``startswith``, ``endswith``, ``contains``) must escape their
patterns to agree with plain Python string methods.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class FunkyDataBase(DeclarativeBase):
    pass


class FunkyCustomer(FunkyDataBase):
    __tablename__ = "funky_customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    first_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    nullable_bool: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    def __repr__(self) -> str:
        return (
            f"FunkyCustomer(id={self.id!r}, first_name={self.first_name!r}, "
            f"last_name={self.last_name!r}, nullable_bool={self.nullable_bool!r})"
        )


_FUNKY_ROWS = [
    (1, "%Bar", "%B", True),
    (2, "Ba%r", "a%", False),
    (3, "Bar%", "%B%", None),
    (4, "%B%a%r%", None, None),
    (5, "", "_Shtark_", None),
    (6, "_Baz", "", False),
    (7, "Ba_z", "_", True),
    (8, "Baz_", "a_", None),
    (9, "_B_a_z_", "_B", None),
    (10, "Bar", "_B_", True),
    (11, "Baz", "B_", None),
    (12, None, None, True),
    (13, "Shtark", "", None),
]


def create_funky_customers() -> List[FunkyCustomer]:
    """Return fresh, transient seed rows; callers own the instances."""
    return [
        FunkyCustomer(id=i, first_name=f, last_name=l, nullable_bool=b)
        for (i, f, l, b) in _FUNKY_ROWS
    ]


__all__ = ["FunkyDataBase", "FunkyCustomer", "create_funky_customers"]
