"""
Session operations built from the credential store and the token service.
"""

from typing import Any, Dict
from sqlalchemy.orm import Session
import logging

from group_polls.models.user import User
from group_polls.core.constants import ErrorMessages, ErrorCodes
from group_polls.core.exception import UnauthorizedError, BadRequestError
from group_polls.services import credentials, tokens

logger = logging.getLogger(__name__)


def _session_payload(user: User) -> Dict[str, Any]:
    return {
        "username": user.username,
        "role": user.role,
        "group_id": user.group_id,
        "access_token": tokens.issue_access_token(user),
        "refresh_token": tokens.issue_refresh_token(user),
    }


def sign_up(db: Session, username: str, email: str, password: str) -> Dict[str, Any]:
    user = credentials.register(db, username, email, password)
    return _session_payload(user)


def sign_in(db: Session, username: str, password: str) -> Dict[str, Any]:
    """
    Raises:
        UnauthorizedError: unknown username or wrong password
    """
    try:
        user = credentials.verify(db, username, password)
    except credentials.UserNotFoundError as e:
        logger.warning(f"Sign-in failed: unknown username '{username}'")
        raise UnauthorizedError(e.message, error_code=ErrorCodes.INVALID_CREDENTIALS)
    except credentials.WrongPasswordError:
        logger.warning(f"Sign-in failed: wrong password for '{username}'")
        raise

    logger.info(f"User signed in: '{username}'")
    return _session_payload(user)


def refresh_access_token(db: Session, username: str) -> Dict[str, str]:
    user = credentials.require_user(db, username)
    return {"access_token": tokens.issue_access_token(user)}


def sign_out(db: Session, username: str, token: str, presented_token: str) -> None:
    """
    Revoke the caller's refresh token.

    The token in the body must be the one the request was authenticated with;
    a mismatch fails loudly instead of silently revoking nothing.
    """
    if token != presented_token:
        raise BadRequestError(ErrorMessages.SIGNOUT_TOKEN_MISMATCH, error_code=ErrorCodes.BAD_REQUEST)
    tokens.revoke(db, username, token)
    logger.info(f"User signed out: '{username}'")
