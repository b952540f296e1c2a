from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from passlib.context import CryptContext
from jose import JWTError, jwt
from dotenv import load_dotenv
from zxcvbn import zxcvbn
import bcrypt
import logging
import os
import uuid

from group_polls.core.constants import AuthConfig, DatabaseConfig

logger = logging.getLogger(__name__)

# Load environment variables from a .env file
load_dotenv()


def load_secret_key() -> str:
    """
    JWT signing key from SECRET_KEY.

    The development default is only accepted for a local SQLite database;
    any other deployment must set the key or the app refuses to start.
    """
    secret_key = os.getenv("SECRET_KEY")
    if secret_key:
        return secret_key

    database_url = os.getenv("DATABASE_URL", DatabaseConfig.DEFAULT_DATABASE_URL)
    if not database_url.startswith("sqlite"):
        raise RuntimeError("SECRET_KEY must be set when DATABASE_URL is not SQLite")

    logger.warning("SECRET_KEY is not set; using the development default")
    return AuthConfig.DEFAULT_SECRET_KEY


SECRET_KEY = load_secret_key()
ALGORITHM = AuthConfig.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = int(
    os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", AuthConfig.ACCESS_TOKEN_EXPIRE_MINUTES)
)
REFRESH_TOKEN_EXPIRE_DAYS = int(
    os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", AuthConfig.REFRESH_TOKEN_EXPIRE_DAYS)
)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=AuthConfig.BCRYPT_ROUNDS,
    bcrypt__default_ident="2b"
)


# Password hashing
def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception:
        # passlib cannot load newer bcrypt releases; verify with bcrypt itself
        try:
            return bcrypt.checkpw(
                plain_password.encode('utf-8')[:72], hashed_password.encode('utf-8')
            )
        except ValueError:
            return False


def get_password_hash(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > 72:
        password = password_bytes[:72].decode('utf-8', errors='ignore')

    try:
        return pwd_context.hash(password)
    except Exception:
        salt = bcrypt.gensalt(rounds=AuthConfig.BCRYPT_ROUNDS)
        return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def password_strength(password: str, user_inputs: Optional[list] = None) -> int:
    """Score a password on zxcvbn's 0-4 scale."""
    return zxcvbn(password, user_inputs=user_inputs or [])["score"]


# JWT token creation and verification
def _encode(claims: Dict[str, Any], expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = dict(claims)
    to_encode.update({
        "iat": now,
        "exp": now + expires_delta,
        "jti": uuid.uuid4().hex,
    })
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(data, expires_delta)


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)
    return _encode(data, expires_delta)


def decode_token(token: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Verify signature and expiry and return the claims.

    Returns None on any failure instead of raising, so callers can treat a
    failed decode uniformly as an untrusted request.
    """
    if not token:
        return None
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
