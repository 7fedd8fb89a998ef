from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from repositories.db_models import ReportStatus, Role


# User Schemas
class UserBase(BaseModel):
    email: EmailStr
    display_name: str = Field(..., min_length=1, max_length=100)

    @field_validator("display_name")
    @classmethod
    def strip_display_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Display name cannot be empty")
        return v


class UserCreate(UserBase):
    password: str


class User(UserBase):
    id: int
    role: Role
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    """Public view of a user (no email)."""

    id: int
    display_name: str
    role: Role

    model_config = ConfigDict(from_attributes=True)


class RoleUpdate(BaseModel):
    role: Role


class Token(BaseModel):
    access_token: str
    token_type: str


# Question Schemas
class QuestionCreate(BaseModel):
    title: str = Field(..., max_length=200)
    body: str = Field(..., max_length=20000)


class QuestionUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    body: Optional[str] = Field(None, max_length=20000)


class Question(BaseModel):
    id: int
    title: str
    body: str
    slug: str
    author_id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class QuestionWithReportCount(Question):
    report_count: int = 0


class QuestionDeleted(BaseModel):
    question_id: int
    reports_removed: int


# Report Schemas
class ReportCreate(BaseModel):
    """Schema for reporting a question."""

    reason: str = Field(..., max_length=1000)


class Report(BaseModel):
    """Schema for report response."""

    id: int
    question_id: int
    reporter_id: Optional[int]
    reason: str
    status: ReportStatus
    created_at: datetime
    resolved_by_id: Optional[int] = None
    resolved_at: Optional[datetime] = None
    resolution_notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ReportQueue(BaseModel):
    """Moderation queue page (admin view)."""

    items: List[Report]
    total: int
    skip: int
    limit: int


class ReportResolve(BaseModel):
    """Schema for resolving a report."""

    outcome: ReportStatus
    notes: Optional[str] = Field(None, max_length=1000)


class ReportResolution(BaseModel):
    """Outcome of a resolve action."""

    report_id: int
    question_id: int
    outcome: ReportStatus
    question_deleted: bool = False
    reports_removed: int = 0


# Admin Schemas
class AdministratorList(BaseModel):
    """Administrators page, rendered for the role that was let through."""

    viewer_role: Role
    administrators: List[UserSummary]
