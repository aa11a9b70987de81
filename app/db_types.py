"""Database-agnostic type definitions for SQLAlchemy models.

This module provides type definitions that work with both SQLite and PostgreSQL.
"""
from sqlalchemy import Numeric, Uuid

# Native UUID on PostgreSQL, CHAR(32) on SQLite
UUIDType = Uuid(as_uuid=True)

# Money columns (prices, totals) - always Decimal, never float
MoneyType = Numeric(12, 2, asdecimal=True)
