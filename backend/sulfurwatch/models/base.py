"""Shared declarative base and the append-only guard for ledger tables."""
from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def append_only(cls):
    """Class decorator: reject ORM updates and deletes of persisted rows."""

    def _reject_update(mapper, connection, target):
        raise ValueError(f"{cls.__name__} rows are append-only and cannot be modified")

    def _reject_delete(mapper, connection, target):
        raise ValueError(f"{cls.__name__} rows are append-only and cannot be deleted")

    event.listen(cls, "before_update", _reject_update)
    event.listen(cls, "before_delete", _reject_delete)
    return cls
