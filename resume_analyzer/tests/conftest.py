"""
Pytest fixtures for Resume Analyzer API tests.
Uses in-memory SQLite, an in-memory fake S3 client, provides test user and session token.
"""
import io
import os
from datetime import datetime, timedelta

import pytest
from botocore.exceptions import ClientError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Use in-memory SQLite for tests - set before config/session load
# Must override any .env DATABASE_URL
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SESSION_COOKIE_SECURE"] = "false"
os.environ["FRONTEND_URL"] = "http://frontend.test"
os.environ["AWS_ACCESS_KEY_ID"] = "test-access-key"
os.environ["AWS_SECRET_ACCESS_KEY"] = "test-secret"
os.environ["STORAGE_BUCKET_NAME"] = "test-bucket"
os.environ["STORAGE_UPLOAD_BACKOFF"] = "0"
os.environ["STORAGE_READ_BACKOFF"] = "0"
os.environ["PDF_RETRY_BACKOFF"] = "0"

from resume_analyzer.app.db.base import Base
from resume_analyzer.main import app
from resume_analyzer.app.core.dependencies import get_db
from resume_analyzer.app.models.user import User
from resume_analyzer.app.models.user_session import UserSession
from resume_analyzer.app.services import storage_service
from resume_analyzer.app.services.pdf_generator import resume_to_pdf_bytes

# In-memory SQLite for tests - StaticPool ensures all sessions share same DB
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Patch the session module so scripts/tasks using SessionLocal hit our test engine
import resume_analyzer.app.db.session as session_module
session_module.engine = engine
session_module.SessionLocal = TestingSessionLocal


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


def client_error(code: str, operation: str = "HeadObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class FakeS3:
    """Just enough of the boto3 S3 client for the storage service, backed by a dict."""

    def __init__(self):
        self.objects: dict[str, dict] = {}
        self.acl: dict[str, str] = {}

    def put_object(self, Bucket, Key, Body, ContentType=None, Metadata=None):
        self.objects[Key] = {
            "Body": bytes(Body),
            "ContentType": ContentType,
            "Metadata": Metadata or {},
            "LastModified": datetime(2026, 1, 1),
        }
        return {}

    def head_object(self, Bucket, Key):
        obj = self.objects.get(Key)
        if obj is None:
            raise client_error("404")
        return {
            "ContentLength": len(obj["Body"]),
            "ContentType": obj["ContentType"],
            "Metadata": obj["Metadata"],
            "LastModified": obj["LastModified"],
        }

    def get_object(self, Bucket, Key):
        obj = self.objects.get(Key)
        if obj is None:
            raise client_error("NoSuchKey", "GetObject")
        return {"Body": io.BytesIO(obj["Body"])}

    def delete_object(self, Bucket, Key):
        self.objects.pop(Key, None)
        return {}

    def copy_object(self, Bucket, Key, CopySource):
        self.objects[Key] = dict(self.objects[CopySource["Key"]])
        return {}

    def list_objects_v2(self, Bucket, Prefix, MaxKeys=1000):
        keys = sorted(k for k in self.objects if k.startswith(Prefix))[:MaxKeys]
        return {
            "Contents": [
                {"Key": k, "Size": len(self.objects[k]["Body"]), "LastModified": self.objects[k]["LastModified"]}
                for k in keys
            ]
        }

    def generate_presigned_url(self, method, Params, ExpiresIn):
        return f"https://signed.test/{Params['Key']}?expires={ExpiresIn}"

    def put_object_acl(self, Bucket, Key, ACL):
        self.acl[Key] = ACL
        return {}


@pytest.fixture(scope="function")
def db_session():
    """Create tables and a fresh DB session per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_s3(monkeypatch):
    """Install a FakeS3 as the storage client."""
    fake = FakeS3()
    storage_service.reset_client()
    monkeypatch.setattr(storage_service, "_client", fake)
    yield fake
    storage_service.reset_client()


@pytest.fixture
def test_user(db_session):
    """Create a free-tier test user in the DB."""
    user = User(
        uuid="google-oauth-123",
        name="Test User",
        email="test@example.com",
        subscription_tier="free",
        trial_uses=0,
        max_trial_uses=3,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def session_token(db_session, test_user):
    session = UserSession(
        user_id=test_user.id,
        session_token="test-session-token",
        expires_at=datetime.utcnow() + timedelta(days=7),
    )
    db_session.add(session)
    db_session.commit()
    return session.session_token


@pytest.fixture
def auth_headers(session_token):
    """Bearer session token for test user."""
    return {"Authorization": f"Bearer {session_token}"}


@pytest.fixture
def client(db_session, test_user):
    """TestClient with DB and test user pre-seeded."""
    return TestClient(app)


@pytest.fixture
def sample_pdf() -> bytes:
    return resume_to_pdf_bytes(
        "Ada Lovelace",
        {
            "Summary": ["Backend engineer building Python services"],
            "Experience": ["Cut API latency by 40% across 12 services"],
            "Education": ["BSc Computer Science"],
            "Skills": ["Python, FastAPI, PostgreSQL, Docker"],
            "Projects": ["Resume analyzer"],
        },
        contact="ada@example.com | +1 555 010 0000",
    )
