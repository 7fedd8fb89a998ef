"""
Services layer for business logic.

This package contains service modules that encapsulate business logic
separate from the API routes.
"""

from .auth_service import AuthService
from .email_service import EmailService
from .mail_dispatcher import MailDispatcher
from .question_service import QuestionService
from .report_service import ReportService
from .user_service import UserService

__all__ = [
    "AuthService",
    "EmailService",
    "MailDispatcher",
    "QuestionService",
    "ReportService",
    "UserService",
]
