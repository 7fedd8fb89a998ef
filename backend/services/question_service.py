"""
Service for question business logic.
"""

from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from helpers.sanitization import sanitize_html, sanitize_plain_text
from helpers.slug import slugify
from models.exceptions import (
    CannotModifyQuestionException,
    QuestionNotFoundException,
    SlugConflictException,
    UserNotFoundException,
    ValidationException,
)
from repositories.db_models import Question, Role
from repositories.question_repository import QuestionRepository
from repositories.report_repository import ReportRepository
from repositories.user_repository import UserRepository

MAX_TITLE_LENGTH = 200
MAX_BODY_LENGTH = 20000


class QuestionService:
    """Service for question business logic."""

    @staticmethod
    def _clean_title(title: str) -> str:
        cleaned = (sanitize_plain_text(title) or "").strip()
        if not cleaned:
            raise ValidationException("Title cannot be empty")
        if len(cleaned) > MAX_TITLE_LENGTH:
            raise ValidationException(
                f"Title must be at most {MAX_TITLE_LENGTH} characters"
            )
        return cleaned

    @staticmethod
    def _clean_body(body: str) -> str:
        cleaned = (sanitize_html(body) or "").strip()
        # Markup alone does not count as content
        if not (sanitize_plain_text(cleaned) or "").strip():
            raise ValidationException("Body cannot be empty")
        if len(cleaned) > MAX_BODY_LENGTH:
            raise ValidationException(
                f"Body must be at most {MAX_BODY_LENGTH} characters"
            )
        return cleaned

    @staticmethod
    def _can_modify(question: Question, actor_id: int, actor_role: Role) -> bool:
        return (
            question.author_id == actor_id
            or Role.parse(actor_role).is_privileged
        )

    @staticmethod
    def create_question(
        db: Session,
        author_id: int,
        title: str,
        body: str,
    ) -> Question:
        """
        Create a question with a slug derived from its title.

        Args:
            db: Database session
            author_id: ID of the author
            title: Question title (plain text)
            body: Question body (limited HTML)

        Returns:
            Created question

        Raises:
            ValidationException: If title or body is empty or too long
            UserNotFoundException: If the author does not exist
            SlugConflictException: If the derived slug is already taken
        """
        clean_title = QuestionService._clean_title(title)
        clean_body = QuestionService._clean_body(body)

        if UserRepository(db).get_by_id(author_id) is None:
            raise UserNotFoundException(f"User with ID {author_id} not found")

        slug = slugify(clean_title)

        question_repo = QuestionRepository(db)
        if question_repo.slug_exists(slug):
            raise SlugConflictException(slug)

        question = Question(
            title=clean_title,
            body=clean_body,
            author_id=author_id,
            slug=slug,
        )
        try:
            created = question_repo.create(question)
        except IntegrityError as e:
            # Lost a race with a concurrent writer; create() already rolled back
            logger.info(f"Slug '{slug}' taken by a concurrent insert")
            raise SlugConflictException(slug) from e

        logger.info(f"Question {created.id} '{slug}' created by user {author_id}")
        return created

    @staticmethod
    def get_question_by_slug(db: Session, slug: str) -> Question:
        """
        Get a question by its slug.

        Raises:
            QuestionNotFoundException: If no question has this slug
        """
        question = QuestionRepository(db).get_by_slug(slug)
        if question is None:
            raise QuestionNotFoundException(slug)
        return question

    @staticmethod
    def get_question_or_raise(db: Session, question_id: int) -> Question:
        """
        Get a question by ID.

        Raises:
            QuestionNotFoundException: If the question does not exist
        """
        question = QuestionRepository(db).get_by_id(question_id)
        if question is None:
            raise QuestionNotFoundException(question_id)
        return question

    @staticmethod
    def list_questions(db: Session, skip: int = 0, limit: int = 20) -> list[Question]:
        """List questions, newest first."""
        return QuestionRepository(db).get_recent(skip=skip, limit=limit)

    @staticmethod
    def count_reports(db: Session, question_id: int) -> int:
        return QuestionRepository(db).count_reports(question_id)

    @staticmethod
    def update_question(
        db: Session,
        question_id: int,
        actor_id: int,
        actor_role: Role,
        title: Optional[str] = None,
        body: Optional[str] = None,
    ) -> Question:
        """
        Edit a question's title and/or body.

        The slug is the question's external identifier and is kept as is,
        even when the title changes.

        Args:
            db: Database session
            question_id: ID of the question
            actor_id: ID of the user making the change
            actor_role: Role of that user
            title: New title, unchanged when None
            body: New body, unchanged when None

        Returns:
            Updated question

        Raises:
            QuestionNotFoundException: If the question does not exist
            CannotModifyQuestionException: If actor is neither author nor moderator
            ValidationException: If the new content is invalid
        """
        question_repo = QuestionRepository(db)
        question = question_repo.get_by_id(question_id)
        if question is None:
            raise QuestionNotFoundException(question_id)

        if not QuestionService._can_modify(question, actor_id, actor_role):
            raise CannotModifyQuestionException()

        if title is not None:
            question.title = QuestionService._clean_title(title)
        if body is not None:
            question.body = QuestionService._clean_body(body)

        return question_repo.update(question)

    @staticmethod
    def delete_question(
        db: Session,
        question_id: int,
        actor_id: int,
        actor_role: Role,
    ) -> int:
        """
        Delete a question together with every report filed against it.

        Both deletes are committed in one transaction, so no report can be
        left pointing at a missing question.

        Args:
            db: Database session
            question_id: ID of the question
            actor_id: ID of the user deleting
            actor_role: Role of that user

        Returns:
            Number of reports removed with the question

        Raises:
            QuestionNotFoundException: If the question does not exist
            CannotModifyQuestionException: If actor is neither author nor moderator
        """
        question_repo = QuestionRepository(db)
        question = question_repo.get_by_id(question_id)
        if question is None:
            raise QuestionNotFoundException(question_id)

        if not QuestionService._can_modify(question, actor_id, actor_role):
            raise CannotModifyQuestionException()

        return QuestionService.delete_with_reports(db, question)

    @staticmethod
    def delete_with_reports(db: Session, question: Question) -> int:
        """Delete question and its reports in the current transaction, then commit."""
        question_id = question.id
        try:
            removed = ReportRepository(db).delete_for_question(question_id)
            # Drop any loaded collection so the ORM cascade does not revisit rows
            db.expire(question, ["reports"])
            db.delete(question)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(f"Question {question_id} deleted with {removed} report(s)")
        return removed
