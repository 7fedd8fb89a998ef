"""Models package - settings, Pydantic schemas and domain exceptions."""

from .config import settings

__all__ = [
    "settings",
]
