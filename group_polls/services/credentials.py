"""
Credential store.

Registration with independent username/email uniqueness checks and a zxcvbn
strength gate, password verification, and the live identity/role lookups the
access-control guards rely on. Nothing here is cached between requests.
"""

from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from group_polls.models.user import User, Role
from group_polls.core.security import get_password_hash, verify_password, password_strength
from group_polls.core.constants import AuthConfig, ErrorMessages, ErrorCodes
from group_polls.core.exception import ConflictError, BadRequestError, NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)

# Compared against when the username is unknown so both failure paths cost one bcrypt check
_DUMMY_HASH = get_password_hash("group-polls-timing-dummy")


class UserNotFoundError(NotFoundError):
    pass


class WrongPasswordError(UnauthorizedError):
    error_code = ErrorCodes.INVALID_CREDENTIALS


def get_user(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def require_user(db: Session, username: str) -> User:
    user = get_user(db, username)
    if user is None:
        raise UserNotFoundError(ErrorMessages.USER_NOT_FOUND, username=username)
    return user


def get_user_role(db: Session, username: str) -> Optional[str]:
    """Current role straight from the store, or None for an unknown user."""
    row = db.query(User.role).filter(User.username == username).first()
    return row[0] if row else None


def _check_unique(db: Session, username: str, email: str) -> None:
    if get_user(db, username) is not None:
        raise ConflictError(ErrorMessages.DUPLICATE_USERNAME, username=username)
    if get_user_by_email(db, email) is not None:
        raise ConflictError(ErrorMessages.DUPLICATE_EMAIL, email=email)


def register(db: Session, username: str, email: str, raw_password: str) -> User:
    """
    Create a user with the default role.

    Raises:
        ConflictError: username or email already taken (reported separately)
        BadRequestError: password scored below the zxcvbn threshold
    """
    _check_unique(db, username, email)

    score = password_strength(raw_password, user_inputs=[username, email])
    if score < AuthConfig.MIN_PASSWORD_SCORE:
        logger.warning(f"Registration rejected for '{username}': weak password (score {score})")
        raise BadRequestError(
            ErrorMessages.WEAK_PASSWORD,
            score=score,
            min_score=AuthConfig.MIN_PASSWORD_SCORE
        )

    user = User(
        username=username,
        email=email,
        hashed_password=get_password_hash(raw_password),
        role=Role.USER.value
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent sign-up; report which key collided
        db.rollback()
        _check_unique(db, username, email)
        raise
    db.refresh(user)

    logger.info(f"User registered: ID {user.id}, username '{user.username}'")
    return user


def verify(db: Session, username: str, raw_password: str) -> User:
    """
    Check a username/password pair.

    Raises:
        UserNotFoundError: no such username
        WrongPasswordError: password does not match
    """
    user = get_user(db, username)
    if user is None:
        verify_password(raw_password, _DUMMY_HASH)
        raise UserNotFoundError(ErrorMessages.INVALID_USERNAME, error_code=ErrorCodes.INVALID_CREDENTIALS)
    if not verify_password(raw_password, user.hashed_password):
        raise WrongPasswordError(ErrorMessages.INVALID_PASSWORD)
    return user
