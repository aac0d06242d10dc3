"""SQLAlchemy models used by the bundled fixtures."""

from query_asserter.models.funky_data import FunkyCustomer, FunkyDataBase, create_funky_customers

__all__ = ["FunkyCustomer", "FunkyDataBase", "create_funky_customers"]
