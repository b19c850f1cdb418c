"""
Test configuration and fixtures for Inkwell tests.
"""
import os

# Keep the application engine, log files and rate limits out of test runs
os.environ.setdefault("INKWELL_DB_URL", "sqlite://")
os.environ.setdefault("INKWELL_LOG_TO_FILE", "false")
os.environ.setdefault("INKWELL_RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.core.db.tables.base import Base
from src.core.db.tables.post import Post
from src.core.db.tables.recoverykey import RecoveryKey
from src.core.db.tables.secretkey import SecretKey
from src.core.principal import Principal, Role
from src.core.security import extract_key_id, hash_key, new_rk, new_sk


@pytest.fixture(scope="function")
def db_session():
    """Create an isolated test database session for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    Session = sessionmaker(bind=engine)
    session = Session()

    yield session

    session.close()
    Base.metadata.drop_all(engine)


@pytest.fixture
def client_factory():
    """Factory to create test clients with a specific db session."""

    def create_client(session, user_sk=None):
        from src.app import app
        from src.core.db.session import get_db

        def override_get_db():
            yield session

        app.dependency_overrides[get_db] = override_get_db

        client = TestClient(app)
        if user_sk:
            client.cookies.set("secret_key", user_sk)
        return client

    yield create_client

    from src.app import app

    app.dependency_overrides.clear()


def create_account(session, username: str, role: str = "user") -> dict:
    """Store hashed keys for a user and return the plaintext credentials."""
    sk = new_sk()
    rk = new_rk()

    session.add(SecretKey(sk_id=extract_key_id(sk), sk_hash=hash_key(sk), username=username, role=role))
    session.add(RecoveryKey(rk_id=extract_key_id(rk), rk_hash=hash_key(rk), username=username))
    session.commit()

    return {
        "username": username,
        "sk": sk,
        "rk": rk,
        "principal": Principal(id=username, role=Role(role)),
    }


@pytest.fixture
def test_user_data(db_session):
    """Create a test user and return their credentials."""
    return create_account(db_session, "testuser")


@pytest.fixture
def other_user_data(db_session):
    """A second ordinary user."""
    return create_account(db_session, "otheruser")


@pytest.fixture
def third_user_data(db_session):
    """A user who neither wrote nor moderates anything."""
    return create_account(db_session, "thirduser")


@pytest.fixture
def admin_user_data(db_session):
    """A user with the admin role."""
    return create_account(db_session, "siteadmin", role="admin")


@pytest.fixture
def test_post(db_session, test_user_data):
    """Create a post to comment on."""
    post = Post(
        title="Hello World",
        slug="hello-world",
        content="First post",
        category="general",
        author=test_user_data["username"],
    )
    db_session.add(post)
    db_session.commit()
    db_session.refresh(post)
    return post


@pytest.fixture
def other_post(db_session, test_user_data):
    """A second post, for cross-post reply checks."""
    post = Post(
        title="Second Post",
        slug="second-post",
        content="Another post",
        author=test_user_data["username"],
    )
    db_session.add(post)
    db_session.commit()
    db_session.refresh(post)
    return post
