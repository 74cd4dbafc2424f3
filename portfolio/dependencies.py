"""
Dependency wiring for the FastAPI app.

Collaborators are built lazily from settings and kept as process-wide
singletons; tests swap them through ``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
from typing import Optional

import firebase_admin
from fastapi import Depends, Header, Request
from firebase_admin import credentials

from portfolio.auth import AuthGuard, FirebaseTokenVerifier, StaticTokenVerifier, TokenVerifier
from portfolio.config import Settings, get_settings
from portfolio.db import DocumentStore, FirestoreDocumentStore, InMemoryDocumentStore, SqlDocumentStore
from portfolio.errors import UnauthorizedError
from portfolio.rate_limit import RateLimiter
from portfolio.services import ContentAdminService, ContentReadService, InquiryService
from portfolio.storage import (
    FirebaseStorageClient,
    InMemoryStorageClient,
    S3StorageClient,
    StorageClient,
)
from portfolio.uploads import ImageUploader
from shared.types import Identity

logger = logging.getLogger(__name__)

_document_store: DocumentStore | None = None
_storage_client: StorageClient | None = None
_token_verifier: TokenVerifier | None = None


def _firebase_app() -> firebase_admin.App:
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass
    settings = get_settings()
    options = {}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id
    if settings.firebase_storage_bucket:
        options["storageBucket"] = settings.firebase_storage_bucket
    cred = (
        credentials.Certificate(settings.firebase_credentials_path)
        if settings.firebase_credentials_path
        else None
    )
    logger.info("Initializing Firebase app (project=%s)", settings.firebase_project_id)
    return firebase_admin.initialize_app(cred, options or None)


def get_document_store() -> DocumentStore:
    """
    Return a singleton document store so in-memory state persists across requests.
    """
    global _document_store
    if _document_store:
        return _document_store

    settings = get_settings()
    if settings.document_backend == "firestore":
        _firebase_app()
        _document_store = FirestoreDocumentStore()
    elif settings.document_backend == "sql":
        _document_store = SqlDocumentStore(settings.database_url or "")
    else:
        _document_store = InMemoryDocumentStore()
    return _document_store


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.storage_backend == "s3" and settings.s3_bucket:
        _storage_client = S3StorageClient(
            bucket=settings.s3_bucket,
            region=settings.s3_region or "",
            endpoint=settings.s3_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
            public_base_url=settings.storage_public_base_url,
        )
    elif settings.storage_backend == "firebase":
        _firebase_app()
        _storage_client = FirebaseStorageClient(settings.firebase_storage_bucket)
    else:
        _storage_client = InMemoryStorageClient()
    return _storage_client


def get_token_verifier() -> TokenVerifier:
    global _token_verifier
    if _token_verifier:
        return _token_verifier

    settings = get_settings()
    if settings.auth_backend == "firebase":
        _token_verifier = FirebaseTokenVerifier(app=_firebase_app())
    else:
        _token_verifier = StaticTokenVerifier.from_spec(settings.admin_tokens)
    return _token_verifier


def get_auth_guard(verifier: TokenVerifier = Depends(get_token_verifier)) -> AuthGuard:
    return AuthGuard(verifier, admin_emails=get_settings().admin_email_list())


def require_admin(
    authorization: Optional[str] = Header(default=None),
    guard: AuthGuard = Depends(get_auth_guard),
) -> Identity:
    identity = guard.authenticate(authorization)
    if identity is None:
        raise UnauthorizedError()
    return identity


def get_client_key(request: Request, settings: Settings = Depends(get_settings)) -> str:
    """
    Opaque rate-limit key for the calling client. Only X-Forwarded-For
    entries appended by trusted proxies are used; the leftmost entries are
    client-controlled.
    """
    if settings.trust_forwarded_for:
        entries = [
            e.strip() for e in request.headers.get("x-forwarded-for", "").split(",")
        ]
        entries = [e for e in entries if e]
        hops = settings.forwarded_for_trusted_hops
        if len(entries) >= hops:
            return entries[-hops]
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def get_read_service(store: DocumentStore = Depends(get_document_store)) -> ContentReadService:
    return ContentReadService(store)


def get_inquiry_service(store: DocumentStore = Depends(get_document_store)) -> InquiryService:
    return InquiryService(store, RateLimiter(store))


def get_admin_service(
    store: DocumentStore = Depends(get_document_store),
    storage: StorageClient = Depends(get_storage_client),
) -> ContentAdminService:
    return ContentAdminService(store, ImageUploader(storage))
