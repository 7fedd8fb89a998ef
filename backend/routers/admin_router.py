"""
Administrative views.

Every endpoint here sits behind the access guard. A client that may not
reach a view gets the "Page Restricted" notice and a redirect instead of
the view; see ``services.access_guard``.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimitLarge, PaginationSkip
from repositories.database import get_db
from services import QuestionService, ReportService, UserService
from services.access_guard import Allow, require_admin, require_super_admin

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/administrators", response_model=schemas.AdministratorList)
def list_administrators(
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 100,
    db: Session = Depends(get_db),
    access: Allow = Depends(require_admin),
) -> schemas.AdministratorList:
    """List users holding an administrative role."""
    administrators = UserService.list_administrators(db, skip=skip, limit=limit)
    return schemas.AdministratorList(
        viewer_role=access.role,
        administrators=[
            schemas.UserSummary.model_validate(user) for user in administrators
        ],
    )


@router.get("/reports", response_model=schemas.ReportQueue)
def get_report_queue(
    status: Optional[db_models.ReportStatus] = Query(
        None, description="Filter by report status"
    ),
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 50,
    db: Session = Depends(get_db),
    access: Allow = Depends(require_admin),
) -> schemas.ReportQueue:
    """Moderation queue, oldest first."""
    reports, total = ReportService.list_reports(
        db, status=status, skip=skip, limit=limit
    )
    return schemas.ReportQueue(
        items=[schemas.Report.model_validate(report) for report in reports],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get(
    "/questions/{question_id}/reports", response_model=list[schemas.Report]
)
def get_question_reports(
    question_id: int,
    db: Session = Depends(get_db),
    access: Allow = Depends(require_admin),
) -> list[db_models.Report]:
    """All reports filed against a question."""
    return ReportService.get_reports_for_question(db, question_id)


@router.post(
    "/reports/{report_id}/resolve", response_model=schemas.ReportResolution
)
def resolve_report(
    report_id: int,
    resolution: schemas.ReportResolve,
    db: Session = Depends(get_db),
    access: Allow = Depends(require_admin),
) -> schemas.ReportResolution:
    """
    Resolve a report.

    ``actioned`` removes the reported question and all of its reports;
    ``dismissed`` keeps the question. Resolving twice returns 409, or 404
    once the question is gone.
    """
    return ReportService.resolve_report(
        db,
        report_id=report_id,
        resolver_id=access.user_id,
        resolver_role=access.role,
        outcome=resolution.outcome,
        notes=resolution.notes,
    )


@router.delete("/questions/{question_id}", response_model=schemas.QuestionDeleted)
def delete_question(
    question_id: int,
    db: Session = Depends(get_db),
    access: Allow = Depends(require_admin),
) -> schemas.QuestionDeleted:
    """Remove a question and its reports."""
    removed = QuestionService.delete_question(
        db,
        question_id=question_id,
        actor_id=access.user_id,
        actor_role=access.role,
    )
    return schemas.QuestionDeleted(question_id=question_id, reports_removed=removed)


@router.put("/users/{user_id}/role", response_model=schemas.User)
def update_user_role(
    user_id: int,
    role_update: schemas.RoleUpdate,
    db: Session = Depends(get_db),
    access: Allow = Depends(require_super_admin),
) -> db_models.User:
    """Change a user's role (super-admin only)."""
    return UserService.set_user_role(
        db,
        user_id=user_id,
        new_role=role_update.role,
        actor_id=access.user_id,
        actor_role=access.role,
    )
