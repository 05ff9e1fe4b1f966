"""Declarative base for the index queue tables."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
