"""
Token service.

Access tokens carry {email, username}; refresh tokens carry {username, role}.
The presence of the role claim is what marks a refresh token. Revoked tokens
are kept per user in the revoked_tokens table, the only server-side
authentication state.
"""

from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from group_polls.models.user import User, RevokedToken
from group_polls.core.constants import AuthConfig
from group_polls.core.security import create_access_token, create_refresh_token, decode_token

logger = logging.getLogger(__name__)


def issue_access_token(user: User) -> str:
    return create_access_token({
        AuthConfig.EMAIL_CLAIM: user.email,
        AuthConfig.USERNAME_CLAIM: user.username,
    })


def issue_refresh_token(user: User) -> str:
    return create_refresh_token({
        AuthConfig.USERNAME_CLAIM: user.username,
        AuthConfig.ROLE_CLAIM: user.role,
    })


def decode(token: Optional[str]) -> Optional[Dict[str, Any]]:
    """Claims of a valid, unexpired token; None for anything else."""
    return decode_token(token)


def is_refresh_token(claims: Dict[str, Any]) -> bool:
    return bool(claims.get(AuthConfig.ROLE_CLAIM))


def is_revoked(db: Session, username: str, token: str) -> bool:
    return db.query(RevokedToken.id).filter(
        RevokedToken.username == username,
        RevokedToken.token == token
    ).first() is not None


def revoke(db: Session, username: str, token: str) -> None:
    """Add a token to the user's blacklist. Revoking twice is the same as once."""
    if is_revoked(db, username, token):
        return

    db.add(RevokedToken(username=username, token=token))
    try:
        db.commit()
    except IntegrityError:
        # A concurrent revoke of the same token got there first
        db.rollback()
        if not is_revoked(db, username, token):
            raise
    logger.info(f"Token revoked for user '{username}'")
