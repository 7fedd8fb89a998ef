"""
Authentication Service

Handles login and token issuance.
"""

from datetime import timedelta
from typing import TYPE_CHECKING

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
from authentication.auth import authenticate_user, create_access_token
from models.config import settings
from models.exceptions import InvalidCredentialsException

if TYPE_CHECKING:
    import repositories.db_models as db_models


class AuthService:
    """Service for authentication business logic."""

    @staticmethod
    def login(db: Session, email: str, password: str) -> schemas.Token:
        """
        Authenticate a user and create an access token.

        Args:
            db: Database session
            email: User email
            password: User password

        Returns:
            Token object with access_token and token_type

        Raises:
            InvalidCredentialsException: If email or password is incorrect
        """
        user = authenticate_user(db, email, password)
        if user is None:
            logger.info("Failed login attempt")
            raise InvalidCredentialsException("Incorrect email or password")

        return AuthService.issue_token(user)

    @staticmethod
    def issue_token(user: "db_models.User") -> schemas.Token:
        """Create a bearer token carrying the user's id and current role."""
        access_token = create_access_token(
            user_id=user.id,
            role=user.role,
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )
        # nosec B106: "bearer" is OAuth2 token type, not a password
        return schemas.Token(access_token=access_token, token_type="bearer")  # nosec B106
