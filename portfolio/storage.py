"""
Storage abstraction for uploaded images: S3-compatible buckets, Firebase
Storage and in-memory testing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from firebase_admin import storage as firebase_storage
from google.api_core import exceptions as google_exceptions

from portfolio.errors import StoreError


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> str:
        """Stores the object publicly and returns its public URL."""
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"
    stored_objects: dict = field(default_factory=dict)
    content_types: dict = field(default_factory=dict)

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> str:
        self.stored_objects[path] = bytes(data)
        self.content_types[path] = content_type
        return f"{self.base_url}/{path}"


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client (AWS S3, Tencent COS, MinIO).
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str
    public_base_url: Optional[str] = None

    def __post_init__(self):
        # Use virtual-hosted style addressing to satisfy COS requirements.
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    def public_url(self, path: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{path}"
        if self.endpoint:
            scheme, _, host = self.endpoint.partition("://")
            return f"{scheme}://{self.bucket}.{host.rstrip('/')}/{path}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{path}"

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> str:
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=path,
                Body=data,
                ContentType=content_type,
                ACL="public-read",
            )
        except (BotoCoreError, ClientError) as e:
            raise StoreError() from e
        return self.public_url(path)


@dataclass
class FirebaseStorageClient:
    """Firebase Storage (Google Cloud Storage) bucket via firebase-admin."""

    bucket_name: Optional[str] = None

    def __post_init__(self):
        self._bucket = firebase_storage.bucket(self.bucket_name)

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> str:
        blob = self._bucket.blob(path)
        try:
            blob.upload_from_string(data, content_type=content_type)
            blob.make_public()
        except google_exceptions.GoogleAPIError as e:
            raise StoreError() from e
        return f"https://storage.googleapis.com/{self._bucket.name}/{path}"
