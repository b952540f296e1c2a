import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from group_polls.db.database import Base, get_db
from group_polls.core.exception import DomainError, http_exception_handler, domain_exception_handler
from group_polls.services import auth_service, groups as group_service, polls as poll_service

# Import models so every table is registered on Base.metadata
from group_polls.models import user, group, polls  # noqa: F401

# Test database - in-memory SQLite shared by the session and the TestClient
TEST_DB_URL = "sqlite:///:memory:"

STRONG_PASSWORD = "xK9#mP2$vL7!qR4w"


@pytest.fixture(scope="function")
def db_session():
    """Create a test database session for direct database tests"""
    test_engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=test_engine)

    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = testing_session_local()

    try:
        yield session
    finally:
        session.close()
        test_engine.dispose()


@pytest.fixture(scope="function")
def client(db_session):
    """Test client whose requests run against the db_session database"""
    from group_polls.api.v1.endpoints import users, auth, groups, polls as poll_endpoints

    app = FastAPI(title="Test Group Polls API", version="1.0.0")
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(DomainError, domain_exception_handler)
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(users.router, prefix="/api/v1")
    app.include_router(groups.router, prefix="/api/v1")
    app.include_router(poll_endpoints.router, prefix="/api/v1")

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def sign_up(db_session):
    """Factory: sign up a user and return the session payload (tokens included)"""
    def _sign_up(username, email=None, password=STRONG_PASSWORD):
        return auth_service.sign_up(db_session, username, email or f"{username}@example.com", password)
    return _sign_up


@pytest.fixture
def alice(sign_up):
    return sign_up("alice")


@pytest.fixture
def bob(sign_up):
    return sign_up("bob")


@pytest.fixture
def carol(sign_up):
    return sign_up("carol")


@pytest.fixture
def group_g1(db_session, alice):
    """G1 administered by alice"""
    return group_service.create_group(db_session, "alice", "G1")


@pytest.fixture
def group_with_bob(db_session, group_g1, bob):
    group_service.add_member(db_session, "bob", "alice", group_g1.id)
    return group_g1


@pytest.fixture
def color_poll(db_session, group_with_bob):
    """Open poll "Color?" with options Red and Blue in G1"""
    return poll_service.add_poll(db_session, "alice", group_with_bob.id, "Color?", ["Red", "Blue"])


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    """Factory: Authorization header for a token"""
    return bearer
