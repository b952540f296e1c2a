from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from typing import Optional, Sequence
import logging

from group_polls.db.database import get_db
from group_polls.models.user import User, Role
from group_polls.core.constants import APIConfig, ErrorMessages, ErrorCodes
from group_polls.core.exception import InternalError
from group_polls.services import guards, credentials

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{APIConfig.API_V1_PREFIX}/auth/token", auto_error=False)


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"message": message, "error_code": ErrorCodes.INVALID_TOKEN},
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_bearer_token(token: Optional[str] = Depends(oauth2_scheme)) -> str:
    """Raw bearer token from the Authorization header."""
    if not token:
        raise _unauthorized(ErrorMessages.AUTH_REQUIRED)
    return token


def get_current_username(db: Session = Depends(get_db), token: str = Depends(get_bearer_token)) -> str:
    """
    Authenticated-request guard.

    Any endpoint that requires a signed-in caller depends on this; the
    returned username is the acting user for the operation.
    """
    username = guards.authenticate(db, token)
    if username is None:
        raise _unauthorized(ErrorMessages.INVALID_TOKEN)
    return username


def get_current_user(db: Session = Depends(get_db), username: str = Depends(get_current_username)) -> User:
    user = credentials.get_user(db, username)
    if user is None:
        raise _unauthorized(ErrorMessages.INVALID_TOKEN)
    return user


async def get_refresh_token(
    request: Request,
    db: Session = Depends(get_db),
    token: str = Depends(get_bearer_token)
) -> str:
    """
    Refresh guard.

    The bearer token must be an unrevoked refresh token owned by the username
    in the request body. Returns the token so sign-out can compare it.
    """
    try:
        body = await request.json()
    except ValueError:
        body = None
    body_username = body.get("username") if isinstance(body, dict) else None

    # authorize_refresh runs blocking queries, so it goes to the threadpool
    if not await run_in_threadpool(guards.authorize_refresh, db, token, body_username):
        raise _unauthorized(ErrorMessages.INVALID_REFRESH_TOKEN)
    return token


class RoleGuard:
    """
    Role guard dependency.

    Usage: `dependencies=[Depends(RoleGuard([Role.ADMIN]))]`. The caller's
    role is looked up on every request, so a role change applies immediately.
    """

    def __init__(self, roles: Sequence[Role] = ()):
        self.roles = [role.value if isinstance(role, Role) else role for role in roles]

    def __call__(
        self,
        db: Session = Depends(get_db),
        token: str = Depends(get_bearer_token),
        _username: str = Depends(get_current_username)
    ) -> None:
        if not guards.authorize_roles(db, token, self.roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "message": ErrorMessages.INSUFFICIENT_ROLE,
                    "error_code": ErrorCodes.INSUFFICIENT_PERMISSIONS,
                    "required_roles": self.roles,
                },
            )


require_admin = RoleGuard([Role.ADMIN])
require_member = RoleGuard([Role.ADMIN, Role.USER])


def database_error(db: Session, operation: str, exc: Exception) -> HTTPException:
    """Roll back and build the 500 response for an unexpected database failure."""
    db.rollback()
    logger.error(f"Database error during {operation}: {str(exc)}")
    return InternalError(
        ErrorMessages.DATABASE_ERROR,
        error_code=ErrorCodes.DATABASE_ERROR,
        operation=operation
    ).to_http_exception()
