"""Pytest configuration and shared fixtures."""
# ruff: noqa: E402

import os

# Settings are read at import time; point them at throwaway resources first.
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("S3_BUCKET_NAME", "test-bucket")

from collections.abc import Generator

import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from sat_api.core.config import Settings
from sat_api.db.engine import Database
from sat_api.main import create_app
from sat_api.storage.images import ImageLifecycleManager
from sat_api.storage.s3 import S3ObjectStorage

TEST_BUCKET = "test-bucket"
TEST_REGION = "us-east-1"


class FakeS3Client:
    """In-memory stand-in for the boto3 S3 client calls S3ObjectStorage makes."""

    def __init__(self):
        self.objects: dict[str, dict] = {}
        self.put_calls: list[str] = []
        self.delete_calls: list[str] = []
        self.fail_put = False
        self.fail_delete = False

    def put_object(self, Bucket: str, Key: str, Body: bytes, ContentType: str) -> dict:
        self.put_calls.append(Key)
        if self.fail_put:
            raise ClientError(
                {"Error": {"Code": "ServiceUnavailable", "Message": "store unavailable"}},
                "PutObject",
            )
        self.objects[Key] = {"Bucket": Bucket, "Body": Body, "ContentType": ContentType}
        return {"ETag": '"fake-etag"'}

    def delete_object(self, Bucket: str, Key: str) -> dict:
        self.delete_calls.append(Key)
        if self.fail_delete:
            raise ClientError(
                {"Error": {"Code": "AccessDenied", "Message": "delete not allowed"}},
                "DeleteObject",
            )
        self.objects.pop(Key, None)
        return {}

    def head_bucket(self, Bucket: str) -> dict:
        return {}


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings override."""
    return Settings(
        ENV="test",
        DATABASE_URL="sqlite:///:memory:",
        S3_BUCKET_NAME=TEST_BUCKET,
        S3_REGION=TEST_REGION,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def database(test_settings) -> Generator[Database, None, None]:
    """Fresh in-memory database with the schema created."""
    database = Database(test_settings)
    database.create_all()
    try:
        yield database
    finally:
        database.dispose()


@pytest.fixture
def db(database) -> Generator[Session, None, None]:
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def s3_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def storage(s3_client) -> S3ObjectStorage:
    return S3ObjectStorage(s3_client, bucket=TEST_BUCKET, region=TEST_REGION)


@pytest.fixture
def image_manager(storage) -> ImageLifecycleManager:
    return ImageLifecycleManager(storage)


@pytest.fixture
def app(test_settings, database, storage):
    return create_app(settings=test_settings, database=database, storage=storage)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """FastAPI test client bound to the in-memory database and fake bucket."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def create_question(client):
    """Create a question through the API and return its JSON body."""

    def _create(image: tuple[str, bytes, str] | None = None, **fields) -> dict:
        data = {"test_id": "1", "section": "math", **{k: str(v) for k, v in fields.items()}}
        files = {"image": image} if image else None
        response = client.post("/v1/questions", data=data, files=files)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def bucket_url() -> str:
    """URL prefix of every object location in the test bucket."""
    return f"https://{TEST_BUCKET}.s3.{TEST_REGION}.amazonaws.com/"
