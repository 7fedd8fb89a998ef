"""
Detached delivery of welcome emails.

Registration hands the welcome email to ``MailDispatcher`` and returns
without waiting. Each job runs on a small thread pool and resolves a
``Future[DeliveryResult]``, which is the job's own completion channel:
callers that care (tests, scripts) can wait on it, the request path never
does.

Failures are terminal here. They are logged, kept in a bounded in-memory
history, and never retried inline; a retry would be a separate requeue.
"""

import threading
from collections import deque
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone

from loguru import logger

from core.correlation import get_correlation_id, set_correlation_id
from models.config import settings
from services.email_service import (
    DeliveryResult,
    EmailProvider,
    EmailService,
    Failed,
    get_email_provider,
)


@dataclass(frozen=True)
class DispatchFailure:
    """Record of a welcome email that was not delivered."""

    to_address: str
    reason: str
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class MailDispatcher:
    """Bounded, fire-and-forget sender for welcome emails."""

    def __init__(
        self,
        max_workers: int | None = None,
        max_pending: int | None = None,
        failure_history: int | None = None,
        provider_factory: Callable[[], EmailProvider] = get_email_provider,
    ) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or settings.MAIL_DISPATCH_WORKERS,
            thread_name_prefix="mail-dispatch",
        )
        # Queued plus running jobs; the executor's own queue is unbounded.
        self._slots = threading.BoundedSemaphore(
            max_pending or settings.MAIL_DISPATCH_MAX_PENDING
        )
        self._failures: deque[DispatchFailure] = deque(
            maxlen=failure_history or settings.MAIL_FAILURE_HISTORY
        )
        self._lock = threading.Lock()
        self._provider_factory = provider_factory
        self._closed = False

    def submit_welcome(self, to_address: str, display_name: str) -> Future:
        """
        Queue a welcome email and return immediately.

        Args:
            to_address: Recipient email
            display_name: Name used in the greeting

        Returns:
            Future resolving to ``Sent`` or ``Failed``. It never raises.
        """
        if self._closed:
            return self._rejected(to_address, "dispatcher is shut down")

        if not self._slots.acquire(blocking=False):
            return self._rejected(to_address, "dispatch queue full")

        correlation_id = get_correlation_id()
        try:
            future = self._executor.submit(
                self._run, to_address, display_name, correlation_id
            )
        except RuntimeError:
            # Executor shut down between the check and the submit
            self._slots.release()
            return self._rejected(to_address, "dispatcher is shut down")

        logger.debug(f"Welcome email to {to_address} queued")
        return future

    def _run(
        self, to_address: str, display_name: str, correlation_id: str
    ) -> DeliveryResult:
        set_correlation_id(correlation_id)
        try:
            result = EmailService.send_welcome(
                to_address, display_name, provider=self._provider_factory()
            )
        except Exception as e:
            logger.exception(f"Unexpected error sending welcome email to {to_address}")
            result = Failed(to_address, f"unexpected error: {e!r}")
        finally:
            # Free the slot before the future resolves
            self._slots.release()

        if isinstance(result, Failed):
            self._record_failure(result)
        else:
            logger.info(f"Welcome email delivered to {to_address}")
        return result

    def _rejected(self, to_address: str, reason: str) -> Future:
        result = Failed(to_address, reason)
        self._record_failure(result)
        future: Future = Future()
        future.set_result(result)
        return future

    def _record_failure(self, result: Failed) -> None:
        logger.warning(
            f"Welcome email to {result.to_address} failed: {result.reason}"
        )
        with self._lock:
            self._failures.append(DispatchFailure(result.to_address, result.reason))

    def recent_failures(self) -> list[DispatchFailure]:
        """Failures recorded so far, oldest first."""
        with self._lock:
            return list(self._failures)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting jobs; optionally wait for in-flight ones."""
        self._closed = True
        self._executor.shutdown(wait=wait)


_dispatcher: MailDispatcher | None = None
_dispatcher_lock = threading.Lock()


def get_mail_dispatcher() -> MailDispatcher:
    """Process-wide dispatcher (FastAPI dependency)."""
    global _dispatcher
    with _dispatcher_lock:
        if _dispatcher is None:
            _dispatcher = MailDispatcher()
        return _dispatcher


def shutdown_mail_dispatcher(wait: bool = True) -> None:
    """Shut the process-wide dispatcher down (application lifespan)."""
    global _dispatcher
    with _dispatcher_lock:
        dispatcher, _dispatcher = _dispatcher, None
    if dispatcher is not None:
        dispatcher.shutdown(wait=wait)
