"""
Question repository for database operations.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import Question, Report


class QuestionRepository(BaseRepository[Question]):
    """Repository for Question entity database operations."""

    def __init__(self, db: Session):
        super().__init__(Question, db)

    def get_by_slug(self, slug: str) -> Optional[Question]:
        """
        Get question by slug.

        Args:
            slug: External identifier of the question

        Returns:
            Question if found, None otherwise
        """
        return self.db.query(Question).filter(Question.slug == slug).first()

    def slug_exists(self, slug: str) -> bool:
        """Check whether a slug is already taken."""
        return (
            self.db.query(Question.id).filter(Question.slug == slug).first()
            is not None
        )

    def get_recent(self, skip: int = 0, limit: int = 20) -> List[Question]:
        """
        Get questions newest first.

        Args:
            skip: Pagination offset
            limit: Pagination limit

        Returns:
            List of questions
        """
        return (
            self.db.query(Question)
            .order_by(Question.created_at.desc(), Question.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_reports(self, question_id: int) -> int:
        """Count reports attached to a question, whatever their status."""
        return (
            self.db.query(func.count(Report.id))
            .filter(Report.question_id == question_id)
            .scalar()
            or 0
        )
