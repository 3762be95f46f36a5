"""Declarative base shared by all ORM models."""

from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import DeclarativeBase

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
BigIntPK = BigInteger().with_variant(Integer(), "sqlite")

# Upper bound of the 32-bit INTEGER amount, price and credit columns.
MAX_INT = 2_147_483_647


class Base(DeclarativeBase):
    pass
