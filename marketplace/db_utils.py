"""
Database utility functions for SQLite-compatible concurrency handling.

SQLite does not support row-level locking (SELECT FOR UPDATE), so the
lifecycle mutations fall back to process-level locks there. On PostgreSQL
or MySQL the row lock taken by get_for_update() serializes concurrent
approvals and cascades instead.
"""

import threading
from typing import Any, Dict, Type, TypeVar

from sqlalchemy import select

from marketplace import db

# Application-level locks for single-process SQLite deployments
_locks: Dict[str, threading.Lock] = {
    'auction': threading.Lock(),
    'profile': threading.Lock(),
}

T = TypeVar('T')


def is_sqlite() -> bool:
    """Check if the current database is SQLite."""
    return db.engine.url.get_backend_name() == 'sqlite'


def get_for_update(model: Type[T], id_value: Any) -> T | None:
    """
    Get a model instance with optional row-level locking.

    Args:
        model: The SQLAlchemy model class
        id_value: The primary key value

    Returns:
        The model instance or None if not found
    """
    query = select(model).where(model.id == id_value)

    # Only use FOR UPDATE on databases that support row-level locking
    if not is_sqlite():
        query = query.with_for_update()

    return db.session.execute(query).scalar_one_or_none()


class _SQLiteLock:
    """Context manager taking a named process lock when running on SQLite."""

    name = ''

    def __enter__(self) -> '_SQLiteLock':
        self._held = is_sqlite()
        if self._held:
            _locks[self.name].acquire()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: Any
    ) -> None:
        if self._held:
            _locks[self.name].release()


class AuctionLock(_SQLiteLock):
    """Serializes approval and deletion of auctions."""
    name = 'auction'


class ProfileLock(_SQLiteLock):
    """Serializes user creation and the user deletion cascade."""
    name = 'profile'
