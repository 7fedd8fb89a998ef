"""
Database models using SQLAlchemy 2.0 style with Mapped type hints.

Three tables carry the whole moderation model:

- ``users``: identity and role
- ``questions``: authored content, addressed externally by ``slug``
- ``reports``: flags raised against a question, kept as an audit trail
  until the question itself goes away
"""

import enum
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repositories.database import Base


class Role(str, enum.Enum):
    """Privilege level attached to a user."""

    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super-admin"

    @classmethod
    def parse(cls, value: object) -> "Role":
        """
        Map a stored or claimed role onto the enum.

        Absent and unknown values resolve to ``Role.USER`` (least privilege).
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.USER
        return cls.USER

    @property
    def is_privileged(self) -> bool:
        return self in PRIVILEGED_ROLES


PRIVILEGED_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.SUPER_ADMIN})


class ReportStatus(str, enum.Enum):
    """Resolution state of a report."""

    UNRESOLVED = "unresolved"
    ACTIONED = "actioned"
    DISMISSED = "dismissed"


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[Role] = mapped_column(
        Enum(
            Role,
            name="user_role",
            values_callable=_enum_values,
            validate_strings=True,
        ),
        default=Role.USER,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    questions: Mapped[List["Question"]] = relationship(
        "Question", back_populates="author"
    )
    reports_filed: Mapped[List["Report"]] = relationship(
        "Report",
        back_populates="reporter",
        foreign_keys=lambda: [Report.reporter_id],
        passive_deletes=True,
    )


class Question(Base):
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    # Unique in the store: the constraint, not the service pre-check, is
    # what keeps two concurrent writers from sharing a slug.
    slug: Mapped[str] = mapped_column(String(80), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    author: Mapped["User"] = relationship("User", back_populates="questions")
    reports: Mapped[List["Report"]] = relationship(
        "Report",
        back_populates="question",
        order_by=lambda: [Report.created_at, Report.id],
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Report(Base):
    __tablename__ = "reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False
    )
    reporter_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    status: Mapped[ReportStatus] = mapped_column(
        Enum(
            ReportStatus,
            name="report_status",
            values_callable=_enum_values,
            validate_strings=True,
        ),
        default=ReportStatus.UNRESOLVED,
        nullable=False,
    )
    resolved_by_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    question: Mapped["Question"] = relationship("Question", back_populates="reports")
    reporter: Mapped[Optional["User"]] = relationship(
        "User", back_populates="reports_filed", foreign_keys=[reporter_id]
    )
    resolved_by: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[resolved_by_id]
    )

    __table_args__ = (
        Index("ix_reports_question_status", "question_id", "status"),
        Index("ix_reports_status_created", "status", "created_at"),
    )
