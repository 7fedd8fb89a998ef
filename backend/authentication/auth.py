from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, Request
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from helpers.request_utils import get_presented_credential
from models.config import settings
from models.exceptions import AuthenticationException
from repositories.database import get_db


@dataclass(frozen=True)
class Credential:
    """Identity and role carried by a validated access token."""

    user_id: int
    role: db_models.Role
    expires_at: datetime


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def create_access_token(
    user_id: int,
    role: db_models.Role,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issue a signed access token for a user."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {
        "sub": str(user_id),
        "role": db_models.Role.parse(role).value,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_credential(
    token: Optional[str], now: Optional[datetime] = None
) -> Optional[Credential]:
    """
    Validate a presented token.

    Expiry is checked against ``now`` (defaults to the current time) rather
    than PyJWT's own clock so callers can evaluate a token at a fixed instant.

    Returns:
        The credential, or None when the token is absent, malformed, signed
        with another key, missing its subject, or expired. Role claims inside
        an invalid token are never looked at.
    """
    if not token:
        return None

    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"verify_exp": False, "require": ["exp", "sub"]},
        )
    except jwt.exceptions.InvalidTokenError:
        return None

    try:
        user_id = int(payload["sub"])
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        return None

    current = now or datetime.now(timezone.utc)
    if expires_at <= current:
        return None

    return Credential(
        user_id=user_id,
        role=db_models.Role.parse(payload.get("role")),
        expires_at=expires_at,
    )


def authenticate_user(db: Session, email: str, password: str) -> db_models.User | None:
    user = (
        db.query(db_models.User)
        .filter(db_models.User.email == email.strip().lower())
        .first()
    )
    if not user:
        return None
    if not verify_password(password, str(user.hashed_password)):
        return None
    return user


async def get_current_user(
    request: Request, db: Session = Depends(get_db)
) -> db_models.User:
    """
    Get the current authenticated user from the presented token.

    The role used for authorization decisions in the service layer comes
    from the stored user, not from the token claim.

    Raises:
        AuthenticationException: If credentials are absent, invalid, expired,
            or the user no longer exists.
    """
    credential = decode_credential(get_presented_credential(request))
    if credential is None:
        raise AuthenticationException("Could not validate credentials")

    user = db.get(db_models.User, credential.user_id)
    if user is None:
        raise AuthenticationException("Could not validate credentials")
    return user
