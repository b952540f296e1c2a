"""
Access-control guards.

Each guard is a pure allow/deny decision over a bearer token. They never
raise; the FastAPI dependencies in api/v1/endpoints/dependencies.py turn a
deny into a 401 or 403.
"""

from typing import Iterable, Optional
from sqlalchemy.orm import Session
import logging

from group_polls.core.constants import AuthConfig
from group_polls.services import credentials, tokens

logger = logging.getLogger(__name__)


def authenticate(db: Session, token: Optional[str]) -> Optional[str]:
    """
    Authenticated-request guard.

    Returns the token's username when the token is a valid, unrevoked access
    token, otherwise None.
    """
    claims = tokens.decode(token)
    if claims is None:
        return None

    username = claims.get(AuthConfig.USERNAME_CLAIM)
    if not username:
        return None

    # Refresh tokens only buy new access tokens
    if tokens.is_refresh_token(claims):
        logger.warning(f"Refresh token presented as access token by '{username}'")
        return None

    if tokens.is_revoked(db, username, token):
        logger.warning(f"Revoked access token presented by '{username}'")
        return None

    return username


def authorize_refresh(db: Session, token: Optional[str], body_username: Optional[str]) -> bool:
    """
    Refresh guard.

    The token must decode, be a refresh token, belong to the username in the
    request body, and not be revoked.
    """
    claims = tokens.decode(token)
    if claims is None:
        return False

    username = claims.get(AuthConfig.USERNAME_CLAIM)
    if not username or not tokens.is_refresh_token(claims):
        return False

    if username != body_username:
        logger.warning(f"Refresh token of '{username}' presented for '{body_username}'")
        return False

    return not tokens.is_revoked(db, username, token)


def authorize_roles(db: Session, token: Optional[str], required_roles: Iterable[str]) -> bool:
    """
    Role guard.

    An empty requirement always allows. Otherwise the user's current role is
    read from the store; the token's own role claim is never trusted here.
    """
    required = set(required_roles)
    if not required:
        return True

    claims = tokens.decode(token)
    if claims is None:
        return False

    username = claims.get(AuthConfig.USERNAME_CLAIM)
    if not username:
        return False

    role = credentials.get_user_role(db, username)
    allowed = role in required
    if not allowed:
        logger.warning(f"User '{username}' with role {role!r} denied; requires {sorted(required)}")
    return allowed
