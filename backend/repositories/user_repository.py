"""
User repository for database operations.
"""

from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class UserRepository(BaseRepository[db_models.User]):
    """Repository for User entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize user repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.User, db)

    def get_by_email(self, email: str) -> Optional[db_models.User]:
        """
        Get user by email (case-insensitive, emails are stored lower case).

        Args:
            email: User email

        Returns:
            User if found, None otherwise
        """
        return (
            self.db.query(db_models.User)
            .filter(db_models.User.email == email.strip().lower())
            .first()
        )

    def email_exists(self, email: str) -> bool:
        """Check if email already exists."""
        return self.get_by_email(email) is not None

    def get_by_roles(
        self,
        roles: Iterable[db_models.Role],
        skip: int = 0,
        limit: int = 100,
    ) -> List[db_models.User]:
        """
        Get users holding any of the given roles.

        Args:
            roles: Roles to match
            skip: Pagination offset
            limit: Pagination limit

        Returns:
            Users ordered by creation date
        """
        return (
            self.db.query(db_models.User)
            .filter(db_models.User.role.in_(list(roles)))
            .order_by(db_models.User.created_at.asc(), db_models.User.id.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )
