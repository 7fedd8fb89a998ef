"""
Repository pattern implementation for data access layer.
"""

from .base import BaseRepository
from .question_repository import QuestionRepository
from .report_repository import ReportRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "QuestionRepository",
    "ReportRepository",
    "UserRepository",
]
