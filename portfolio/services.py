"""
Content services: public reads, public inquiry submission and the admin API.

Services hold no state between calls beyond their injected collaborators.
They raise ApiError subclasses; rendering to HTTP happens in the app.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Optional

from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from portfolio.db import DocumentMissingError, DocumentStore, FieldFilter, OrderBy
from portfolio.errors import NotFoundError, RateLimitedError, ValidationFailedError
from portfolio.rate_limit import RateLimiter
from portfolio.records import (
    decode_profile,
    decode_project,
    normalize_profile_fields,
    normalize_project_fields,
)
from portfolio.uploads import ImageUploader
from portfolio.validation import (
    validate_contact_form,
    validate_profile_record,
    validate_project_record,
)
from shared.firebase_constants import (
    INQUIRIES_COLLECTION,
    PROFILE_COLLECTION,
    PROFILE_DOCUMENT_ID,
    PROJECTS_COLLECTION,
)
from shared.types import Inquiry, Profile, Project

logger = logging.getLogger(__name__)

PROJECT_NOT_FOUND = "Project not found"
PROFILE_NOT_FOUND = "Profile not found"


def _is_valid_document_id(doc_id: Any) -> bool:
    return (
        isinstance(doc_id, str)
        and bool(doc_id)
        and doc_id not in (".", "..")
        and "/" not in doc_id
        and len(doc_id.encode("utf-8")) <= 1500
    )


class ContentReadService:
    """Published-only reads backing the public endpoints."""

    def __init__(self, store: DocumentStore):
        self._store = store

    def list_published_projects(self) -> list[Project]:
        """Published projects, newest first."""
        documents = self._store.query(
            PROJECTS_COLLECTION,
            filters=[FieldFilter("published", "==", True)],
            order_by=[OrderBy("createdAt", descending=True)],
        )
        return [decode_project(doc.id, doc.data) for doc in documents]

    def get_published_project(self, project_id: str) -> Project:
        """
        Raises NotFoundError both for missing and for unpublished projects so
        that drafts cannot be discovered.
        """
        if not _is_valid_document_id(project_id):
            raise NotFoundError(PROJECT_NOT_FOUND)
        doc = self._store.get(PROJECTS_COLLECTION, project_id)
        if doc is None or doc.data.get("published") is not True:
            raise NotFoundError(PROJECT_NOT_FOUND)
        return decode_project(doc.id, doc.data)

    def get_profile(self) -> Profile:
        doc = self._store.get(PROFILE_COLLECTION, PROFILE_DOCUMENT_ID)
        if doc is None:
            logger.error("Profile document %s is missing", PROFILE_DOCUMENT_ID)
            raise NotFoundError(PROFILE_NOT_FOUND)
        return decode_profile(doc.data)


class InquiryService:
    """Public contact-form submissions."""

    def __init__(self, store: DocumentStore, limiter: RateLimiter):
        self._store = store
        self._limiter = limiter

    def submit_inquiry(self, form: Any, client_key: str) -> str:
        """
        Validates, throttles and stores an inquiry, returning its id.

        Validation runs before the rate-limit check so malformed submissions
        do not use up the caller's budget.
        """
        errors = validate_contact_form(form)
        if errors:
            raise ValidationFailedError(errors)

        if self._limiter.is_over_limit(client_key):
            logger.info("Rate limit exceeded for client %s", client_key)
            raise RateLimitedError()

        inquiry = Inquiry(
            name=form["name"].strip(),
            email=form["email"].strip(),
            subject=form["subject"].strip(),
            message=form["message"].strip(),
            ip=client_key,
            timestamp=None,
        )
        # The sentinel is set after asdict(), which would deep-copy it.
        data = {**asdict(inquiry), "timestamp": SERVER_TIMESTAMP}
        inquiry_id = self._store.add(INQUIRIES_COLLECTION, data)
        logger.info("Stored inquiry %s", inquiry_id)
        return inquiry_id


class ContentAdminService:
    """
    Admin CRUD over projects, the profile and uploaded images. Callers must
    have authenticated the request before calling any method.
    """

    def __init__(self, store: DocumentStore, uploader: ImageUploader):
        self._store = store
        self._uploader = uploader

    def list_all_projects(self) -> list[Project]:
        """Every project including drafts, by display order then newest first."""
        documents = self._store.query(
            PROJECTS_COLLECTION,
            order_by=[OrderBy("order"), OrderBy("createdAt", descending=True)],
        )
        return [decode_project(doc.id, doc.data) for doc in documents]

    def get_project(self, project_id: str) -> Project:
        if not _is_valid_document_id(project_id):
            raise NotFoundError(PROJECT_NOT_FOUND)
        doc = self._store.get(PROJECTS_COLLECTION, project_id)
        if doc is None:
            raise NotFoundError(PROJECT_NOT_FOUND)
        return decode_project(doc.id, doc.data)

    def create_project(self, payload: Any) -> str:
        errors = validate_project_record(payload)
        if errors:
            raise ValidationFailedError(errors)

        fields = normalize_project_fields(payload, partial=False)
        fields["createdAt"] = SERVER_TIMESTAMP
        fields["updatedAt"] = SERVER_TIMESTAMP
        project_id = self._store.add(PROJECTS_COLLECTION, fields)
        logger.info("Created project %s (published=%s)", project_id, fields["published"])
        return project_id

    def update_project(self, project_id: str, payload: Any) -> None:
        """
        Partial update: only supplied fields change. ``id`` and ``createdAt``
        in the payload are ignored; ``updatedAt`` is always refreshed.
        """
        errors = validate_project_record(payload, partial=True)
        if errors:
            raise ValidationFailedError(errors)
        self._require_project(project_id)

        changes = normalize_project_fields(payload, partial=True)
        changes["updatedAt"] = SERVER_TIMESTAMP
        try:
            self._store.update(PROJECTS_COLLECTION, project_id, changes)
        except DocumentMissingError:
            raise NotFoundError(PROJECT_NOT_FOUND)
        logger.info("Updated project %s fields=%s", project_id, sorted(changes))

    def delete_project(self, project_id: str) -> None:
        self._require_project(project_id)
        self._store.delete(PROJECTS_COLLECTION, project_id)
        logger.info("Deleted project %s", project_id)

    def update_profile(self, payload: Any) -> None:
        errors = validate_profile_record(payload, partial=True)
        if errors:
            raise ValidationFailedError(errors)
        if self._store.get(PROFILE_COLLECTION, PROFILE_DOCUMENT_ID) is None:
            raise NotFoundError(PROFILE_NOT_FOUND)

        changes = normalize_profile_fields(payload)
        changes["updatedAt"] = SERVER_TIMESTAMP
        try:
            self._store.update(PROFILE_COLLECTION, PROFILE_DOCUMENT_ID, changes)
        except DocumentMissingError:
            raise NotFoundError(PROFILE_NOT_FOUND)
        logger.info("Updated profile fields=%s", sorted(changes))

    def upload_image(
        self,
        *,
        file_data: str,
        file_name: str,
        mime_type: str,
        folder: Optional[str] = None,
    ) -> str:
        return self._uploader.upload(
            file_data=file_data, file_name=file_name, mime_type=mime_type, folder=folder
        )

    def _require_project(self, project_id: str) -> None:
        # Explicit existence read; not transactional with the write that follows.
        if not _is_valid_document_id(project_id):
            raise NotFoundError(PROJECT_NOT_FOUND)
        if self._store.get(PROJECTS_COLLECTION, project_id) is None:
            raise NotFoundError(PROJECT_NOT_FOUND)
