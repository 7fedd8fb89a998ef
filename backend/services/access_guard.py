"""
Access guard for administrative views.

Two layers:

- ``authorize`` is a pure decision over an explicitly passed credential and
  a required-role set. It holds no state and caches nothing, so the same
  inputs at the same instant always produce the same decision.
- ``require_roles`` is the front controller used as a FastAPI dependency on
  every administrative view. It evaluates ``authorize`` exactly once per
  request and turns a ``Deny`` into ``AccessDeniedException``, which main.py
  renders as the "Page Restricted" notice plus a redirect.
"""

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from fastapi import Depends, Request
from loguru import logger
from sqlalchemy.orm import Session

from authentication.auth import decode_credential
from helpers.request_utils import get_presented_credential, resolve_redirect_target
from models.config import settings
from models.exceptions import AccessDeniedException
from repositories.database import get_db
from repositories.db_models import PRIVILEGED_ROLES, Role, User

REJECTION_NOTICE = "Page Restricted"


@dataclass(frozen=True)
class Allow:
    """Access granted; carries the resolved identity forward."""

    user_id: int
    role: Role


@dataclass(frozen=True)
class Deny:
    """Access refused. ``reason`` is for server logs only."""

    reason: str


AccessDecision = Union[Allow, Deny]


def authorize(
    presented_credential: Optional[str],
    required_roles: Iterable[Role],
    now: Optional[datetime] = None,
) -> AccessDecision:
    """
    Decide whether a presented credential may reach a role-gated resource.

    Args:
        presented_credential: Raw token as presented by the client, or None
        required_roles: Roles allowed through
        now: Instant to evaluate expiry at (defaults to the current time)

    Returns:
        ``Allow`` with the resolved identity, or ``Deny``
    """
    credential = decode_credential(presented_credential, now=now)
    if credential is None:
        return Deny("missing, malformed or expired credential")

    if credential.role not in frozenset(required_roles):
        return Deny(f"role '{credential.role.value}' not permitted")

    return Allow(user_id=credential.user_id, role=credential.role)


def trusted_redirect_origins() -> list[str]:
    """Origins a denied client may be sent back to besides the API's own."""
    return [*settings.CORS_ORIGINS, settings.APP_URL]


def denial_redirect_target(request: Request) -> str:
    """Referring page if present and trustworthy, otherwise the landing page."""
    return resolve_redirect_target(
        referrer=request.headers.get("referer"),
        request_url=str(request.url),
        trusted_origins=trusted_redirect_origins(),
        default=settings.DEFAULT_LANDING_PATH,
    )


def require_roles(
    *roles: Role,
) -> Callable[[Request, Session], Awaitable[Allow]]:
    """
    Build a dependency that gates a view behind a role set.

    Usage:
        @router.get("/administrators")
        def list_administrators(access: Allow = Depends(require_roles(*PRIVILEGED_ROLES))):
            ...

    Besides the token check, the user behind an ``Allow`` must still exist
    and still hold a permitted role in the store; tokens outlive role changes.

    Raises:
        AccessDeniedException: On any denial, with the redirect target set.
    """
    required = frozenset(roles)

    async def guard(request: Request, db: Session = Depends(get_db)) -> Allow:
        decision = authorize(get_presented_credential(request), required)

        if isinstance(decision, Allow):
            user = db.get(User, decision.user_id)
            if user is None:
                decision = Deny("user no longer exists")
            elif Role.parse(user.role) not in required:
                decision = Deny(f"stored role '{Role.parse(user.role).value}' not permitted")
            else:
                return Allow(user_id=user.id, role=Role.parse(user.role))

        target = denial_redirect_target(request)
        logger.warning(
            f"Access denied to {request.method} {request.url.path}: "
            f"{decision.reason}; redirecting to {target}"
        )
        raise AccessDeniedException(redirect_to=target, message=REJECTION_NOTICE)

    return guard


require_admin = require_roles(*PRIVILEGED_ROLES)
require_super_admin = require_roles(Role.SUPER_ADMIN)
