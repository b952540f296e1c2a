"""
Tests for token issuing, decoding and revocation.
"""

import os
import pytest
from datetime import timedelta
from unittest.mock import patch
from jose import jwt

from group_polls.core.constants import AuthConfig

from group_polls.models.user import RevokedToken
from group_polls.services import credentials, tokens
from group_polls.core.security import (
    SECRET_KEY,
    ALGORITHM,
    create_access_token,
    create_refresh_token,
    decode_token,
    load_secret_key,
)


class TestTokenClaims:
    """Claims carried by each token kind"""

    def test_access_token_claims(self, db_session, alice):
        claims = tokens.decode(alice["access_token"])

        assert claims["username"] == "alice"
        assert claims["email"] == "alice@example.com"
        assert "role" not in claims
        assert {"iat", "exp", "jti"} <= set(claims)
        assert not tokens.is_refresh_token(claims)

    def test_refresh_token_claims(self, db_session, alice):
        claims = tokens.decode(alice["refresh_token"])

        assert claims["username"] == "alice"
        assert claims["role"] == "User"
        assert "email" not in claims
        assert tokens.is_refresh_token(claims)

    def test_tokens_are_unique(self, db_session, alice):
        user = credentials.require_user(db_session, "alice")

        assert tokens.issue_access_token(user) != tokens.issue_access_token(user)
        assert tokens.issue_refresh_token(user) != tokens.issue_refresh_token(user)


class TestDecode:
    """decode_token never raises"""

    def test_empty_token(self):
        assert decode_token(None) is None
        assert decode_token("") is None

    def test_garbage_token(self):
        assert decode_token("not.a.jwt") is None

    def test_wrong_signature(self):
        forged = jwt.encode({"username": "alice"}, "some-other-secret", algorithm=ALGORITHM)

        assert decode_token(forged) is None

    def test_expired_token(self):
        expired = create_access_token({"username": "alice"}, expires_delta=timedelta(seconds=-1))

        assert decode_token(expired) is None

    def test_valid_token(self):
        token = create_refresh_token({"username": "alice", "role": "User"}, expires_delta=timedelta(minutes=5))

        claims = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        assert decode_token(token)["jti"] == claims["jti"]


class TestRevocation:
    """Per-user token blacklist"""

    def test_revoke_marks_token(self, db_session, alice):
        token = alice["refresh_token"]
        assert not tokens.is_revoked(db_session, "alice", token)

        tokens.revoke(db_session, "alice", token)

        assert tokens.is_revoked(db_session, "alice", token)

    def test_revoke_twice_keeps_one_row(self, db_session, alice):
        token = alice["refresh_token"]

        tokens.revoke(db_session, "alice", token)
        tokens.revoke(db_session, "alice", token)

        assert db_session.query(RevokedToken).filter(RevokedToken.token == token).count() == 1

    def test_revocation_is_per_user(self, db_session, alice, bob):
        tokens.revoke(db_session, "alice", alice["refresh_token"])

        assert not tokens.is_revoked(db_session, "bob", alice["refresh_token"])
        assert not tokens.is_revoked(db_session, "alice", alice["access_token"])


class TestSecretKey:
    """Where the signing key comes from"""

    def test_explicit_key_wins(self):
        env = {"SECRET_KEY": "from-env", "DATABASE_URL": "postgresql://db/polls"}
        with patch.dict(os.environ, env):
            assert load_secret_key() == "from-env"

    def test_sqlite_falls_back_to_development_key(self):
        with patch.dict(os.environ, {"DATABASE_URL": "sqlite:///./dev.db"}):
            os.environ.pop("SECRET_KEY", None)
            assert load_secret_key() == AuthConfig.DEFAULT_SECRET_KEY

    def test_missing_key_refused_outside_sqlite(self):
        with patch.dict(os.environ, {"DATABASE_URL": "postgresql://db/polls"}):
            os.environ.pop("SECRET_KEY", None)
            with pytest.raises(RuntimeError, match="SECRET_KEY"):
                load_secret_key()

    def test_empty_key_counts_as_missing(self):
        with patch.dict(os.environ, {"SECRET_KEY": "", "DATABASE_URL": "postgresql://db/polls"}):
            with pytest.raises(RuntimeError):
                load_secret_key()
