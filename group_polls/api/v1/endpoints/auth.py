from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from group_polls.db.database import get_db
from group_polls.schemas.user import (
    SignUpRequest,
    SignInRequest,
    SignOutRequest,
    RefreshTokenRequest,
    AuthResponse,
    AccessTokenResponse,
)
from group_polls.services import auth_service
from group_polls.core.exception import DomainError
from group_polls.api.v1.endpoints.dependencies import get_refresh_token, database_error

# Setup logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def sign_up(user: SignUpRequest, db: Session = Depends(get_db)):
    """
    Sign up a new user and sign them in.

    Fails with 409 if the username or email is taken and 400 if the password
    is not strong enough.
    """
    try:
        logger.info(f"Sign-up attempt for username: {user.username}")
        return auth_service.sign_up(db, user.username, user.email, user.password)
    except DomainError as e:
        logger.warning(f"Sign-up failed for '{user.username}': {e.message}")
        raise e.to_http_exception()
    except SQLAlchemyError as e:
        raise database_error(db, "sign-up", e)


@router.post("/signin", response_model=AuthResponse)
def sign_in(credentials: SignInRequest, db: Session = Depends(get_db)):
    """Sign in with username and password; returns access and refresh tokens."""
    try:
        return auth_service.sign_in(db, credentials.username, credentials.password)
    except DomainError as e:
        raise e.to_http_exception()
    except SQLAlchemyError as e:
        raise database_error(db, "sign-in", e)


@router.post("/token", response_model=AuthResponse)
def sign_in_for_access_token(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """
    OAuth2-compatible sign-in (form data) used by the interactive docs.

    Same result as /signin.
    """
    try:
        return auth_service.sign_in(db, form_data.username, form_data.password)
    except DomainError as e:
        raise e.to_http_exception()
    except SQLAlchemyError as e:
        raise database_error(db, "token sign-in", e)


@router.post("/refresh-token", response_model=AccessTokenResponse)
def refresh_token(
    refresh_request: RefreshTokenRequest,
    db: Session = Depends(get_db),
    _token: str = Depends(get_refresh_token)
):
    """
    Issue a new access token.

    Requires `Authorization: Bearer <refresh token>` belonging to the body's username.
    """
    try:
        logger.info(f"Access token refresh for user: {refresh_request.username}")
        return auth_service.refresh_access_token(db, refresh_request.username)
    except DomainError as e:
        raise e.to_http_exception()
    except SQLAlchemyError as e:
        raise database_error(db, "token refresh", e)


@router.patch("/signout")
def sign_out(
    sign_out_request: SignOutRequest,
    db: Session = Depends(get_db),
    token: str = Depends(get_refresh_token)
):
    """
    Revoke the refresh token.

    The body token must be the same refresh token sent in the Authorization header.
    """
    try:
        auth_service.sign_out(db, sign_out_request.username, sign_out_request.token, token)
        return {"message": "Signed out successfully", "username": sign_out_request.username}
    except DomainError as e:
        logger.warning(f"Sign-out failed for '{sign_out_request.username}': {e.message}")
        raise e.to_http_exception()
    except SQLAlchemyError as e:
        raise database_error(db, "sign-out", e)
