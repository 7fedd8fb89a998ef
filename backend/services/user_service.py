"""
User Service

Handles registration, lookups and role management.
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.password_validation import validate_password_complexity
from models.exceptions import (
    InsufficientPermissionsException,
    UserAlreadyExistsException,
    UserNotFoundException,
    ValidationException,
)
from repositories.user_repository import UserRepository
from services.mail_dispatcher import MailDispatcher


class UserService:
    """Service for managing users and roles."""

    @staticmethod
    def get_user_by_id_or_raise(db: Session, user_id: int) -> db_models.User:
        """
        Get user by ID or raise UserNotFoundException.

        Raises:
            UserNotFoundException: If user not found
        """
        user = UserRepository(db).get_by_id(user_id)
        if user is None:
            raise UserNotFoundException(f"User with ID {user_id} not found")
        return user

    @staticmethod
    def register_user(
        db: Session,
        user_data: schemas.UserCreate,
        dispatcher: Optional[MailDispatcher] = None,
        role: db_models.Role = db_models.Role.USER,
    ) -> db_models.User:
        """
        Register a new user and queue their welcome email.

        The account is committed before the email is handed to the
        dispatcher; whatever happens to the email afterwards, registration
        has already succeeded.

        Args:
            db: Database session
            user_data: Registration data
            dispatcher: Welcome email dispatcher (no email when None)
            role: Role to create the user with

        Returns:
            Created user

        Raises:
            ValidationException: If the password is too weak
            UserAlreadyExistsException: If the email is already registered
        """
        is_valid, errors = validate_password_complexity(user_data.password)
        if not is_valid:
            raise ValidationException("; ".join(errors))

        user_repo = UserRepository(db)
        email = str(user_data.email).strip().lower()
        if user_repo.email_exists(email):
            raise UserAlreadyExistsException("Email already registered")

        new_user = db_models.User(
            email=email,
            display_name=user_data.display_name,
            hashed_password=auth.get_password_hash(user_data.password),
            role=role,
        )
        try:
            user = user_repo.create(new_user)
        except IntegrityError as e:
            raise UserAlreadyExistsException("Email already registered") from e

        logger.info(f"User {user.id} registered with role {user.role.value}")

        if dispatcher is not None:
            UserService._queue_welcome(dispatcher, user)

        return user

    @staticmethod
    def _queue_welcome(dispatcher: MailDispatcher, user: db_models.User) -> None:
        try:
            dispatcher.submit_welcome(user.email, user.display_name)
        except Exception:
            # Registration is already committed; the email is best effort
            logger.exception(f"Could not queue welcome email for user {user.id}")

    @staticmethod
    def list_administrators(
        db: Session, skip: int = 0, limit: int = 100
    ) -> List[db_models.User]:
        """Get users holding a privileged role."""
        return UserRepository(db).get_by_roles(
            db_models.PRIVILEGED_ROLES, skip=skip, limit=limit
        )

    @staticmethod
    def set_user_role(
        db: Session,
        user_id: int,
        new_role: db_models.Role,
        actor_id: int,
        actor_role: db_models.Role,
    ) -> db_models.User:
        """
        Change a user's role (super-admin only).

        Args:
            db: Database session
            user_id: ID of the user to change
            new_role: Role to assign
            actor_id: ID of the super-admin making the change
            actor_role: Role of that user

        Returns:
            Updated user

        Raises:
            InsufficientPermissionsException: If actor is not a super-admin
            ValidationException: If a super-admin tries to demote themself
            UserNotFoundException: If the user does not exist
        """
        if db_models.Role.parse(actor_role) != db_models.Role.SUPER_ADMIN:
            raise InsufficientPermissionsException(
                "Only super-admins can change roles"
            )

        new_role = db_models.Role.parse(new_role)
        if user_id == actor_id and new_role != db_models.Role.SUPER_ADMIN:
            raise ValidationException("You cannot demote yourself")

        user = UserService.get_user_by_id_or_raise(db, user_id)

        previous = user.role
        user.role = new_role
        user = UserRepository(db).update(user)
        logger.info(
            f"User {actor_id} changed role of user {user_id} "
            f"from {db_models.Role.parse(previous).value} to {new_role.value}"
        )
        return user
