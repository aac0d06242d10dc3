"""Small customer/order/line model used by the functional tests.

Seed graphs are built with both foreign keys and relationships populated so
the transient copy kept as expected data can be navigated and filtered exactly
like the rows loaded from the database.
"""

from __future__ import annotations

from operator import attrgetter
from typing import Dict, List, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, relationship

from query_asserter.logic.entity_registry import attribute_asserter


class OrderBase(DeclarativeBase):
    pass


class Customer(OrderBase):
    __tablename__ = "customers"

    id: Mapped[str] = mapped_column(String(5), primary_key=True)
    name: Mapped[str] = mapped_column(String(40))
    city: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    orders: Mapped[List["Order"]] = relationship(back_populates="customer")

    def __repr__(self) -> str:
        return f"Customer({self.id!r})"


class Order(OrderBase):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    customer_id: Mapped[str] = mapped_column(ForeignKey("customers.id"))
    total: Mapped[int] = mapped_column(Integer)
    shipped: Mapped[bool] = mapped_column(Boolean)
    customer: Mapped[Customer] = relationship(back_populates="orders")
    lines: Mapped[List["OrderLine"]] = relationship(back_populates="order")

    def __repr__(self) -> str:
        return f"Order({self.id!r})"


class OrderLine(OrderBase):
    __tablename__ = "order_lines"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"))
    product: Mapped[str] = mapped_column(String(40))
    quantity: Mapped[int] = mapped_column(Integer)
    order: Mapped[Order] = relationship(back_populates="lines")

    def __repr__(self) -> str:
        return f"OrderLine({self.id!r})"


_CUSTOMERS = [
    ("ALFKI", "Alfreds Futterkiste", "Berlin"),
    ("ANATR", "Ana Trujillo", "Mexico D.F."),
    ("AROUT", "Around the Horn", "London"),
    ("BSBEV", "B's Beverages", "London"),
    ("CACTU", "Cactus Comidas", None),
]

_ORDERS = [
    (1, "ALFKI", 100, True),
    (2, "ALFKI", 250, False),
    (3, "AROUT", 75, True),
    (4, "BSBEV", 300, True),
    (5, "BSBEV", 20, False),
    (6, "ANATR", 60, True),
]

_LINES = [
    (1, 1, "Chai", 2),
    (2, 1, "Chang", 1),
    (3, 2, "Tofu", 5),
    (4, 3, "Chai", 1),
    (5, 4, "Ikura", 3),
    (6, 4, "Konbu", 2),
    (7, 4, "Tofu", 1),
    (8, 5, "Chai", 4),
    (9, 6, "Chang", 2),
]

CUSTOMER_COUNT = len(_CUSTOMERS)
ORDER_COUNT = len(_ORDERS)
LINE_COUNT = len(_LINES)


def create_order_graph() -> Dict[type, list]:
    """Return fresh transient rows keyed by entity type."""
    customers = {cid: Customer(id=cid, name=name, city=city) for cid, name, city in _CUSTOMERS}
    orders = {}
    for oid, cid, total, shipped in _ORDERS:
        orders[oid] = Order(id=oid, customer_id=cid, total=total, shipped=shipped, customer=customers[cid])
    lines = [
        OrderLine(id=lid, order_id=oid, product=product, quantity=qty, order=orders[oid])
        for lid, oid, product, qty in _LINES
    ]
    return {Customer: list(customers.values()), Order: list(orders.values()), OrderLine: lines}


def seed_orders(session: Session) -> None:
    graph = create_order_graph()
    for rows in graph.values():
        session.add_all(rows)


ENTITY_SORTERS = {
    Customer: attrgetter("id"),
    Order: attrgetter("id"),
    OrderLine: attrgetter("id"),
}

ENTITY_ASSERTERS = {
    Customer: attribute_asserter("id", "name", "city"),
    Order: attribute_asserter("id", "customer_id", "total", "shipped"),
    OrderLine: attribute_asserter("id", "order_id", "product", "quantity"),
}
