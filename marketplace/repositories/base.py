"""
Base repository class with common CRUD operations.

Provides a foundation for all repository classes with:
- Common query methods (get, create, delete, count)
- Row-level locking for concurrent access
"""

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy import func, select

from marketplace import db
from marketplace.db_utils import get_for_update

T = TypeVar('T')


class BaseRepository(Generic[T]):
    """Base repository providing common data access operations.

    Attributes:
        model: The SQLAlchemy model class this repository manages.
    """

    def __init__(self, model: Type[T]):
        self.model = model

    def get(self, id: Any) -> Optional[T]:
        """Get a single entity by primary key, or None."""
        return db.session.get(self.model, id)

    def get_for_update(self, id: Any) -> Optional[T]:
        """Get entity with row-level locking for updates.

        For PostgreSQL/MySQL, uses SELECT FOR UPDATE.
        For SQLite, relies on application-level locks.
        """
        return get_for_update(self.model, id)

    def create(self, **kwargs) -> T:
        """Create a new entity (added to the session, not yet committed)."""
        instance = self.model(**kwargs)
        db.session.add(instance)
        return instance

    def delete(self, instance: T) -> None:
        """Hard delete an entity."""
        db.session.delete(instance)

    def count(self, **kwargs) -> int:
        """Count entities matching filter criteria."""
        return db.session.execute(
            select(func.count()).select_from(self.model).filter_by(**kwargs)
        ).scalar_one()
