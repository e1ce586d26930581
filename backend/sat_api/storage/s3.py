"""S3 object storage adapter for question images."""

from typing import Protocol
from urllib.parse import quote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from sat_api.core.app_exceptions import StorageDeleteError, StorageWriteError
from sat_api.core.config import Settings
from sat_api.core.logging import get_logger

logger = get_logger(__name__)


class ObjectStorage(Protocol):
    """Minimal object-store interface consumed by the image lifecycle manager."""

    def put(self, key: str, data: bytes, content_type: str) -> str:
        """Store ``data`` under ``key`` and return its public location."""
        ...

    def delete(self, key: str) -> None:
        """Delete the object stored under ``key``."""
        ...


def build_s3_client(settings: Settings):
    """Create a boto3 S3 client from settings.

    Credentials fall back to the standard boto3 chain (env, profile,
    instance role) when not set explicitly.
    """
    return boto3.client(
        "s3",
        region_name=settings.S3_REGION,
        endpoint_url=settings.S3_ENDPOINT_URL,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        config=Config(
            connect_timeout=settings.S3_CONNECT_TIMEOUT,
            read_timeout=settings.S3_READ_TIMEOUT,
            retries={"max_attempts": settings.S3_MAX_ATTEMPTS, "mode": "standard"},
        ),
    )


class S3ObjectStorage:
    """ObjectStorage backed by a single S3 (or S3-compatible) bucket."""

    def __init__(
        self,
        client,
        bucket: str,
        region: str | None = None,
        endpoint_url: str | None = None,
        public_base_url: str | None = None,
    ):
        self.client = client
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_base_url = public_base_url

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3ObjectStorage":
        return cls(
            build_s3_client(settings),
            bucket=settings.S3_BUCKET_NAME,
            region=settings.S3_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            public_base_url=settings.S3_PUBLIC_BASE_URL,
        )

    def location_for(self, key: str) -> str:
        """Public URL of ``key``, matching what the S3 upload API reports."""
        path = quote(key, safe="/")
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{path}"
        if self.endpoint_url:
            # S3-compatible stores are addressed path-style
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{path}"
        if self.region:
            return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{path}"
        return f"https://{self.bucket}.s3.amazonaws.com/{path}"

    def put(self, key: str, data: bytes, content_type: str) -> str:
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageWriteError(key, str(e)) from e
        return self.location_for(key)

    def delete(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise StorageDeleteError(key, str(e)) from e

    def ping(self) -> None:
        """Raise if the bucket is not reachable (used by readiness checks)."""
        self.client.head_bucket(Bucket=self.bucket)
