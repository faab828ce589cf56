"""Shared test configuration and fixtures for fellowship server tests"""

import os

# Must be set before fellowship modules read their configuration
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import logging
import time
import uuid

import pytest
from authlib.jose import JsonWebToken
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from fellowship.auth.dependencies import get_current_user
from fellowship.auth.models import User
from fellowship.config import config
from fellowship.main import app
from fellowship.models.database import get_db
from fellowship.rate_limit import limiter
from fellowship.services.member_service import MemberService
from fellowship.services.registration_form_service import RegistrationFormService
from fellowship.services.submission_service import MemberSubmission, SubmissionService
from tests.config import test_config

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@pytest.fixture(autouse=True)
def app_config():
    """Apply test settings to the shared config dict and restore them afterwards"""
    original = dict(config)
    config["jwt_secret"] = test_config["jwt_secret"]
    config["frontend_url"] = test_config["frontend_url"]
    limiter.enabled = False

    yield config

    config.clear()
    config.update(original)
    limiter.enabled = False


@pytest.fixture
def engine():
    """Fresh in-memory database per test, shared across threads"""
    engine = create_engine(
        test_config["database_url"],
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    yield engine

    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def file_engine(tmp_path):
    """File-backed database so independent sessions see each other's commits"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'fellowship-test.db'}",
        connect_args={"check_same_thread": False},
    )
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()


@pytest.fixture
def _db_session(engine):
    """Private DB session for fixtures only.

    Do not use this fixture directly in tests. Prefer the service fixtures
    to avoid coupling tests to the session internals.
    """
    session = Session(engine)

    yield session

    session.close()


@pytest.fixture
def form_service(_db_session):
    """Create a RegistrationFormService instance for testing"""
    return RegistrationFormService(_db_session)


@pytest.fixture
def member_service(_db_session):
    """Create a MemberService instance for testing"""
    return MemberService(_db_session)


@pytest.fixture
def submission_service(_db_session):
    """Create a SubmissionService instance for testing"""
    return SubmissionService(_db_session)


@pytest.fixture
def member_payload():
    """Factory for valid submission payloads with a unique email"""

    def _create_payload(**overrides):
        data = {
            "name": "Grace Wanjiru",
            "email": f"member-{uuid.uuid4().hex[:8]}@example.com",
            "phone": "+254700000001",
            "department": "Computer Science",
            "address": {
                "street": "12 Campus Road",
                "city": "Nairobi",
                "state": "Nairobi",
                "zipCode": "00100",
            },
            "emergencyContact": {
                "name": "Peter Wanjiru",
                "phone": "+254700000002",
                "relationship": "Brother",
            },
            "notes": "Joined after the welcome service",
        }
        data.update(overrides)
        return data

    return _create_payload


@pytest.fixture
def submission(member_payload):
    """Factory for MemberSubmission models built from member_payload"""

    def _create_submission(**overrides):
        return MemberSubmission.model_validate(member_payload(**overrides))

    return _create_submission


@pytest.fixture
def mock_current_user():
    """Create a mock current user for testing authenticated endpoints"""

    def _create_mock_user(user_id=None, role="admin"):
        return User(
            user_id=user_id or f"admin-{uuid.uuid4()}",
            role=role,
            claims={"role": role, "iat": int(time.time())},
        )

    return _create_mock_user


@pytest.fixture
def client(_db_session):
    """Test client using the test database, with real authentication"""
    original_overrides = app.dependency_overrides.copy()

    def get_test_db():
        return _db_session

    app.dependency_overrides.clear()
    app.dependency_overrides[get_db] = get_test_db

    yield TestClient(app)

    app.dependency_overrides.clear()
    app.dependency_overrides.update(original_overrides)


@pytest.fixture
def admin_client(client, mock_current_user):
    """Test client that bypasses token verification as an admin user"""
    test_user = mock_current_user()

    async def mock_get_current_user():
        return test_user

    app.dependency_overrides[get_current_user] = mock_get_current_user

    yield client, test_user


@pytest.fixture
def make_token():
    """Build HS256 tokens signed with the test secret"""
    jwt = JsonWebToken(["HS256"])

    def _make_token(
        user_id=test_config["admin_user_id"],
        role="admin",
        expires_in=3600,
        secret=test_config["jwt_secret"],
        subject_claim="sub",
    ):
        now = int(time.time())
        payload = {subject_claim: user_id, "role": role, "iat": now, "exp": now + expires_in}
        token = jwt.encode({"alg": "HS256"}, payload, secret)
        return token.decode("utf-8")

    return _make_token
