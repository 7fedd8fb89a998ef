"""
Correlation ID generation and context management.

Every request gets a short ID that shows up in log lines, in Sentry tags,
in error bodies and in the X-Correlation-ID response header.
"""

import uuid
from contextvars import ContextVar

# Request-scoped correlation ID
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """
    Generate a short, unique correlation ID.

    Returns:
        8-character hexadecimal string (e.g. "abc123de").
    """
    return uuid.uuid4().hex[:8]


def get_correlation_id() -> str:
    """
    Get the current context's correlation ID.

    Returns:
        The correlation ID, or an empty string outside a request.
    """
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """
    Set the correlation ID for the current context.

    Args:
        correlation_id: ID to attach to everything logged from here on.
    """
    correlation_id_var.set(correlation_id)
