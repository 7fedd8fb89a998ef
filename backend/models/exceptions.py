"""
Custom domain exceptions for the application.

These exceptions are raised by the service layer and converted to HTTP responses
by centralized exception handlers in main.py, maintaining proper separation of concerns.

The authentication module (auth.py) and the access guard also use these domain
exceptions to remain HTTP-agnostic, allowing reuse in non-HTTP contexts
(CLI tools such as init_db.py, background workers).

Enhanced with correlation IDs for Sentry integration and user error reporting.
"""

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        correlation_id: Unique ID for error tracking (auto-generated if not provided).
    """

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        # Use request correlation ID if available, otherwise generate new one
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    pass


class PermissionDeniedException(DomainException):
    """Raised when user lacks required permissions."""

    pass


class ValidationException(DomainException):
    """Raised when input validation fails."""

    pass


class ConflictException(DomainException):
    """Raised when operation conflicts with existing data."""

    pass


class AuthenticationException(DomainException):
    """Raised when authentication fails."""

    pass


# Specific exceptions for domain entities


class UserNotFoundException(NotFoundException):
    """User not found."""

    pass


class UserAlreadyExistsException(ConflictException):
    """User already exists."""

    pass


class InvalidCredentialsException(AuthenticationException):
    """Invalid email or password."""

    pass


class InsufficientPermissionsException(PermissionDeniedException):
    """User doesn't have sufficient permissions."""

    pass


# ============================================================================
# Question / Report Exceptions
# ============================================================================


class QuestionNotFoundException(NotFoundException):
    """Raised when a question is not found."""

    def __init__(self, identifier: int | str):
        super().__init__(f"Question '{identifier}' not found")
        self.identifier = identifier


class SlugConflictException(ConflictException):
    """Raised when a question title maps to a slug that is already taken."""

    def __init__(self, slug: str):
        super().__init__(f"A question with slug '{slug}' already exists")
        self.slug = slug


class CannotModifyQuestionException(PermissionDeniedException):
    """Raised when user tries to change a question they neither own nor moderate."""

    def __init__(self) -> None:
        super().__init__("You can only modify your own questions")


class ReportNotFoundException(NotFoundException):
    """Raised when a report (or the question it points at) no longer exists."""

    def __init__(self, report_id: int):
        super().__init__(f"Report with ID {report_id} not found")
        self.report_id = report_id


class ReportAlreadyResolvedException(ConflictException):
    """Raised when trying to resolve a report a second time."""

    def __init__(self, report_id: int, status: str):
        super().__init__(f"Report {report_id} has already been resolved ({status})")
        self.report_id = report_id
        self.status = status


# ============================================================================
# Access Guard
# ============================================================================


class AccessDeniedException(PermissionDeniedException):
    """Raised by the access guard when a client may not reach an admin view.

    The handler in main.py turns this into the redirect contract; the message
    is the only thing the client ever sees.
    """

    def __init__(self, redirect_to: str, message: str = "Page Restricted"):
        super().__init__(message)
        self.redirect_to = redirect_to


# ============================================================================
# Email Exceptions
# ============================================================================


class EmailDeliveryException(DomainException):
    """Raised by an email provider when a message could not be handed off.

    Never crosses the dispatcher boundary: it is converted into a
    ``Failed`` delivery result and logged.
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason
