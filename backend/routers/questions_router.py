"""
Router for question endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimit, PaginationSkip
from repositories.database import get_db
from services import QuestionService, ReportService

router = APIRouter(prefix="/questions", tags=["questions"])


def _with_report_count(
    db: Session, question: db_models.Question
) -> schemas.QuestionWithReportCount:
    response = schemas.QuestionWithReportCount.model_validate(question)
    response.report_count = QuestionService.count_reports(db, question.id)
    return response


@router.post("", response_model=schemas.Question, status_code=201)
def create_question(
    question: schemas.QuestionCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
) -> db_models.Question:
    """
    Post a question.

    The slug is derived from the title; a title whose slug is already taken
    is rejected with 409.
    """
    return QuestionService.create_question(
        db=db,
        author_id=current_user.id,
        title=question.title,
        body=question.body,
    )


@router.get("", response_model=list[schemas.Question])
def list_questions(
    skip: PaginationSkip = 0,
    limit: PaginationLimit = 20,
    db: Session = Depends(get_db),
) -> list[db_models.Question]:
    """List questions, newest first."""
    return QuestionService.list_questions(db, skip=skip, limit=limit)


@router.get("/{slug}", response_model=schemas.QuestionWithReportCount)
def get_question(
    slug: str, db: Session = Depends(get_db)
) -> schemas.QuestionWithReportCount:
    """Get a question by slug."""
    question = QuestionService.get_question_by_slug(db, slug)
    return _with_report_count(db, question)


@router.patch("/{question_id}", response_model=schemas.Question)
def update_question(
    question_id: int,
    update: schemas.QuestionUpdate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
) -> db_models.Question:
    """
    Edit a question (author or administrator).

    Domain exceptions are caught by centralized exception handlers.
    """
    return QuestionService.update_question(
        db,
        question_id=question_id,
        actor_id=current_user.id,
        actor_role=current_user.role,
        title=update.title,
        body=update.body,
    )


@router.delete("/{question_id}", response_model=schemas.QuestionDeleted)
def delete_question(
    question_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
) -> schemas.QuestionDeleted:
    """Delete a question and all of its reports (author or administrator)."""
    removed = QuestionService.delete_question(
        db,
        question_id=question_id,
        actor_id=current_user.id,
        actor_role=current_user.role,
    )
    return schemas.QuestionDeleted(question_id=question_id, reports_removed=removed)


@router.post(
    "/{question_id}/reports", response_model=schemas.Report, status_code=201
)
def report_question(
    question_id: int,
    report: schemas.ReportCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
) -> db_models.Report:
    """
    Report a question to the moderators.

    Any signed-in user may report any question, including their own, as
    many times as they like.
    """
    return ReportService.file_report(
        db,
        question_id=question_id,
        reporter_id=current_user.id,
        reason=report.reason,
    )
