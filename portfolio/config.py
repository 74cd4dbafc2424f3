"""
Configuration and settings for the portfolio backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared import constants


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")

    # Document store
    document_backend: Literal["memory", "firestore", "sql"] = Field(default="memory")
    database_url: Optional[str] = Field(default=None)

    # Firebase (Firestore, Auth, Storage)
    firebase_project_id: Optional[str] = Field(default=None)
    firebase_credentials_path: Optional[str] = Field(default=None)
    firebase_storage_bucket: Optional[str] = Field(default=None)

    # Image storage
    storage_backend: Literal["memory", "s3", "firebase"] = Field(default="memory")
    s3_endpoint: Optional[str] = Field(default=None)
    s3_region: Optional[str] = Field(default=None)
    s3_bucket: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)
    storage_public_base_url: Optional[str] = Field(default=None)

    # Admin authentication
    auth_backend: Literal["firebase", "static"] = Field(default="static")
    # Comma-separated "token:uid:email" triples for the static verifier.
    admin_tokens: str = Field(default="")
    # Comma-separated allow-list; empty means any verified identity is admin.
    admin_emails: str = Field(default="")

    # Contact form rate-limit key. Off: the peer address. On: the entry
    # appended by the N-th trusted proxy, counted from the right of
    # X-Forwarded-For.
    trust_forwarded_for: bool = Field(default=False)
    forwarded_for_trusted_hops: int = Field(default=1, ge=1)

    # Client cache / HTTP client
    cache_refresh_interval_seconds: float = Field(
        default=constants.CACHE_REFRESH_INTERVAL_SECONDS
    )
    cache_dedupe_interval_seconds: float = Field(
        default=constants.CACHE_DEDUPE_INTERVAL_SECONDS
    )
    client_timeout_seconds: float = Field(default=10.0)

    def admin_email_list(self) -> list[str]:
        return [e.strip().lower() for e in self.admin_emails.split(",") if e.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
