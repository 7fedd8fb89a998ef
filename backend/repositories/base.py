"""
Base repository class providing common database operations.
"""

from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from repositories.database import Base

T = TypeVar("T", bound=Base)  # type: ignore[type-arg]


class BaseRepository(Generic[T]):
    """
    Base repository providing common CRUD operations.

    Type parameter T should be a SQLAlchemy model class. Methods that end
    in a commit are named after the operation (create/update).
    """

    def __init__(self, model: type[T], db: Session):
        self.model = model
        self.db = db

    def get_by_id(self, id: int) -> T | None:
        """Get entity by primary key, or None."""
        return self.db.get(self.model, id)

    def create(self, entity: T) -> T:
        """
        Insert and commit a new entity.

        Args:
            entity: Entity to create

        Returns:
            The refreshed entity

        Raises:
            sqlalchemy.exc.IntegrityError: If a store constraint rejects the row.
                The session is rolled back before re-raising.
        """
        self.db.add(entity)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(entity)
        return entity

    def update(self, entity: T) -> T:
        """Commit pending changes on an entity and refresh it."""
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def commit(self) -> None:
        """Commit the current transaction."""
        self.db.commit()

    def rollback(self) -> None:
        """Rollback the current transaction."""
        self.db.rollback()
