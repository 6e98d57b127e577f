"""Shared fixtures: in-memory database, mocked S3, wired engine and app."""

import os

os.environ.setdefault("CLOUDNEST_SECRET_KEY", "test-secret-key")
os.environ.setdefault("CLOUDNEST_DATABASE_URL", "sqlite://")
os.environ.setdefault("CLOUDNEST_CLIENT_URL", "http://client.test")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")

import boto3  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from moto import mock_aws  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from cloudnest.auth import get_password_hash  # noqa: E402
from cloudnest.blobstore import BlobStore  # noqa: E402
from cloudnest.db import get_session  # noqa: E402
from cloudnest.dependencies import get_blob_store, get_mailer  # noqa: E402
from cloudnest.hierarchy import HierarchyEngine  # noqa: E402
from cloudnest.mailer import Mailer  # noqa: E402
from cloudnest.main import app  # noqa: E402
from cloudnest.metadata import MetadataStore  # noqa: E402
from cloudnest.models import User  # noqa: E402
from tests.helpers import BUCKET, PASSWORD  # noqa: E402


class RecordingMailer(Mailer):
    """Mailer that keeps messages instead of sending them."""

    def __init__(self):
        super().__init__()
        self.sent = []

    def send(self, to, subject, html):
        self.sent.append((to, subject, html))
        return True


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def s3_client():
    """Mock S3 service with the test bucket created.

    Yields:
        boto3 S3 client.
    """
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=BUCKET)
        yield client


@pytest.fixture
def blob_store(s3_client):
    return BlobStore(s3_client, BUCKET)


@pytest.fixture
def metadata(session):
    return MetadataStore(session)


@pytest.fixture
def hierarchy(metadata, blob_store):
    return HierarchyEngine(metadata, blob_store, max_upload_bytes=1024 * 1024)


def _make_user(session, email, is_active=True):
    user = User(
        email=email,
        first_name="Test",
        last_name="User",
        hashed_password=get_password_hash(PASSWORD),
        is_active=is_active,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def user(session):
    return _make_user(session, "test@example.com")


@pytest.fixture
def other_user(session):
    """Second user for isolation tests."""
    return _make_user(session, "other@example.com")


@pytest.fixture
def inactive_user(session):
    return _make_user(session, "pending@example.com", is_active=False)


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def client(session, blob_store, mailer):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_mailer] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()
