"""Authentication router endpoints."""

from fastapi import APIRouter, Depends, Request, Response
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.rate_limiter import limiter
from helpers.request_utils import clear_access_token_cookie, set_access_token_cookie
from models.config import settings
from repositories.database import get_db
from services import AuthService, UserService
from services.mail_dispatcher import MailDispatcher, get_mail_dispatcher

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=schemas.User, status_code=201)
@limiter.limit("3/minute")
def register(
    request: Request,
    user: schemas.UserCreate,
    db: Session = Depends(get_db),
    dispatcher: MailDispatcher = Depends(get_mail_dispatcher),
) -> db_models.User:
    """
    Register a new user.

    Responds as soon as the account is stored; the welcome email is sent in
    the background and its outcome never changes this response.
    Rate limited to 3 per minute.
    """
    return UserService.register_user(db=db, user_data=user, dispatcher=dispatcher)


@router.post("/login", response_model=schemas.Token)
@limiter.limit("5/minute")
def login(
    request: Request,
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
) -> schemas.Token:
    """
    Login user. Rate limited to 5 per minute.

    The token is returned in the body for API clients and also set as an
    httpOnly cookie so page navigations to admin views carry it.

    Domain exceptions are caught by centralized exception handlers.
    """
    token = AuthService.login(db, form_data.username, form_data.password)
    set_access_token_cookie(
        response,
        token.access_token,
        max_age_seconds=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        is_production=settings.is_production,
    )
    return token


@router.post("/logout")
def logout(response: Response) -> dict[str, str]:
    """Clear the access token cookie."""
    clear_access_token_cookie(response)
    return {"message": "Logged out"}


@router.get("/me", response_model=schemas.User)
async def read_users_me(
    current_user: db_models.User = Depends(auth.get_current_user),
) -> db_models.User:
    """Get current user."""
    return current_user
