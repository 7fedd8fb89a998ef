"""
Repository for report operations.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import Report, ReportStatus


class ReportRepository(BaseRepository[Report]):
    """Repository for report data access."""

    def __init__(self, db: Session):
        """
        Initialize report repository.

        Args:
            db: Database session
        """
        super().__init__(Report, db)

    def get_for_question(
        self,
        question_id: int,
        status: Optional[ReportStatus] = None,
    ) -> list[Report]:
        """
        Get reports filed against a question, oldest first.

        Args:
            question_id: ID of the question
            status: Only return reports in this state

        Returns:
            List of reports
        """
        query = self.db.query(Report).filter(Report.question_id == question_id)
        if status is not None:
            query = query.filter(Report.status == status)
        return query.order_by(Report.created_at.asc(), Report.id.asc()).all()

    def get_queue(
        self,
        status: Optional[ReportStatus] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[Report], int]:
        """
        Get the moderation queue.

        Args:
            status: Filter by status (all statuses when None)
            skip: Pagination offset
            limit: Pagination limit

        Returns:
            Tuple of (reports oldest first, total matching count)
        """
        query = self.db.query(Report)
        if status is not None:
            query = query.filter(Report.status == status)

        total = query.count()
        reports = (
            query.order_by(Report.created_at.asc(), Report.id.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return reports, total

    def count_for_question(self, question_id: int) -> int:
        """Count reports referencing a question."""
        return self.db.query(Report).filter(Report.question_id == question_id).count()

    def delete_for_question(self, question_id: int) -> int:
        """
        Delete every report referencing a question without committing.

        The caller commits together with the question delete so the two
        writes land in one transaction.

        Args:
            question_id: ID of the question

        Returns:
            Number of reports deleted
        """
        return (
            self.db.query(Report)
            .filter(Report.question_id == question_id)
            .delete(synchronize_session="fetch")
        )

    def resolve_if_unresolved(
        self,
        report_id: int,
        status: ReportStatus,
        resolver_id: int,
        notes: Optional[str] = None,
    ) -> bool:
        """
        Move a report out of ``unresolved`` without committing.

        The status check and the write are one UPDATE, so of two moderators
        racing on the same report only one gets a row back.

        Args:
            report_id: ID of the report
            status: Final status (actioned or dismissed)
            resolver_id: ID of the moderator
            notes: Optional resolution notes

        Returns:
            True if this call resolved the report, False if it was already
            resolved or no longer exists
        """
        updated = (
            self.db.query(Report)
            .filter(Report.id == report_id, Report.status == ReportStatus.UNRESOLVED)
            .update(
                {
                    Report.status: status,
                    Report.resolved_by_id: resolver_id,
                    Report.resolved_at: datetime.now(timezone.utc),
                    Report.resolution_notes: notes,
                },
                synchronize_session="fetch",
            )
        )
        return updated == 1
