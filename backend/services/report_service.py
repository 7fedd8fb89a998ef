"""
Service for question reports and their resolution.
"""

from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
from helpers.sanitization import sanitize_plain_text
from models.exceptions import (
    InsufficientPermissionsException,
    QuestionNotFoundException,
    ReportAlreadyResolvedException,
    ReportNotFoundException,
    ValidationException,
)
from repositories.db_models import PRIVILEGED_ROLES, Report, ReportStatus, Role
from repositories.question_repository import QuestionRepository
from repositories.report_repository import ReportRepository
from services.question_service import QuestionService

MAX_REASON_LENGTH = 1000

RESOLUTION_OUTCOMES = frozenset({ReportStatus.ACTIONED, ReportStatus.DISMISSED})


class ReportService:
    """Service for report business logic."""

    @staticmethod
    def file_report(
        db: Session,
        question_id: int,
        reporter_id: int,
        reason: str,
    ) -> Report:
        """
        File a report against a question.

        Every call appends a new report: users may report their own
        questions and may report the same question more than once.

        Args:
            db: Database session
            question_id: ID of the reported question
            reporter_id: ID of the reporting user
            reason: Why the question is being reported

        Returns:
            Created report

        Raises:
            QuestionNotFoundException: If the question does not exist
            ValidationException: If reason is empty or too long
        """
        clean_reason = (sanitize_plain_text(reason) or "").strip()
        if not clean_reason:
            raise ValidationException("Reason cannot be empty")
        if len(clean_reason) > MAX_REASON_LENGTH:
            raise ValidationException(
                f"Reason must be at most {MAX_REASON_LENGTH} characters"
            )

        if QuestionRepository(db).get_by_id(question_id) is None:
            raise QuestionNotFoundException(question_id)

        report = Report(
            question_id=question_id,
            reporter_id=reporter_id,
            reason=clean_reason,
            status=ReportStatus.UNRESOLVED,
        )
        created = ReportRepository(db).create(report)
        logger.info(
            f"Report {created.id} filed on question {question_id} by user {reporter_id}"
        )
        return created

    @staticmethod
    def resolve_report(
        db: Session,
        report_id: int,
        resolver_id: int,
        resolver_role: Role,
        outcome: ReportStatus,
        notes: Optional[str] = None,
    ) -> schemas.ReportResolution:
        """
        Resolve a report.

        ``dismissed`` only closes the report. ``actioned`` closes it and
        removes the reported question with all of its reports.

        Args:
            db: Database session
            report_id: ID of the report
            resolver_id: ID of the moderator
            resolver_role: Role of the moderator
            outcome: ``actioned`` or ``dismissed``
            notes: Optional resolution notes

        Returns:
            Summary of what was done

        Raises:
            InsufficientPermissionsException: If resolver is not a moderator
            ValidationException: If outcome is not a final status
            ReportNotFoundException: If the report (or its question) is gone
            ReportAlreadyResolvedException: If the report was already resolved
        """
        if Role.parse(resolver_role) not in PRIVILEGED_ROLES:
            raise InsufficientPermissionsException(
                "Only administrators can resolve reports"
            )

        try:
            outcome = ReportStatus(outcome)
        except ValueError:
            raise ValidationException(f"Invalid outcome '{outcome}'") from None
        if outcome not in RESOLUTION_OUTCOMES:
            raise ValidationException("Outcome must be 'actioned' or 'dismissed'")

        report_repo = ReportRepository(db)
        report = report_repo.get_by_id(report_id)
        if report is None or report.question is None:
            # Another moderator may have removed the question already
            raise ReportNotFoundException(report_id)

        if report.status != ReportStatus.UNRESOLVED:
            raise ReportAlreadyResolvedException(report_id, report.status.value)

        clean_notes = sanitize_plain_text(notes)
        question_id = report.question_id
        if not report_repo.resolve_if_unresolved(
            report_id, outcome, resolver_id, clean_notes
        ):
            # Lost a race: the copy read above was stale
            report_repo.rollback()
            current = report_repo.get_by_id(report_id)
            if current is None or current.question is None:
                raise ReportNotFoundException(report_id)
            raise ReportAlreadyResolvedException(report_id, current.status.value)

        if outcome == ReportStatus.DISMISSED:
            report_repo.commit()
            logger.info(f"Report {report_id} dismissed by user {resolver_id}")
            return schemas.ReportResolution(
                report_id=report_id,
                question_id=question_id,
                outcome=outcome,
            )

        removed = QuestionService.delete_with_reports(db, report.question)
        logger.info(
            f"Report {report_id} actioned by user {resolver_id}: "
            f"question {question_id} removed"
        )
        return schemas.ReportResolution(
            report_id=report_id,
            question_id=question_id,
            outcome=outcome,
            question_deleted=True,
            reports_removed=removed,
        )

    @staticmethod
    def list_reports(
        db: Session,
        status: Optional[ReportStatus] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[Report], int]:
        """
        Get the moderation queue, oldest first.

        Returns:
            Tuple of (reports, total count)
        """
        return ReportRepository(db).get_queue(status=status, skip=skip, limit=limit)

    @staticmethod
    def get_reports_for_question(db: Session, question_id: int) -> list[Report]:
        """
        Get all reports filed against a question.

        Raises:
            QuestionNotFoundException: If the question does not exist
        """
        if QuestionRepository(db).get_by_id(question_id) is None:
            raise QuestionNotFoundException(question_id)
        return ReportRepository(db).get_for_question(question_id)
