"""
Provisioning of the profile singleton and initial projects.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from portfolio.db import DocumentStore
from portfolio.errors import ValidationFailedError
from portfolio.records import normalize_profile_fields, normalize_project_fields
from portfolio.validation import validate_profile_record, validate_project_record
from shared.firebase_constants import (
    PROFILE_COLLECTION,
    PROFILE_DOCUMENT_ID,
    PROJECTS_COLLECTION,
)

logger = logging.getLogger(__name__)


def seed_profile(store: DocumentStore, profile: Mapping[str, Any]) -> None:
    errors = validate_profile_record(profile, partial=False)
    if errors:
        raise ValidationFailedError(errors, "Invalid profile data")
    fields = normalize_profile_fields(profile)
    fields.setdefault("skills", [])
    fields.setdefault("experience", [])
    fields["updatedAt"] = SERVER_TIMESTAMP
    store.set(PROFILE_COLLECTION, PROFILE_DOCUMENT_ID, fields)
    logger.info("Profile seeded")


def seed_projects(store: DocumentStore, projects: list[Mapping[str, Any]]) -> list[str]:
    # Validate everything first so a bad entry doesn't leave a partial seed.
    for index, project in enumerate(projects):
        errors = validate_project_record(project)
        if errors:
            raise ValidationFailedError(errors, f"Invalid project at index {index}")

    ids = []
    for project in projects:
        fields = normalize_project_fields(project, partial=False)
        fields["createdAt"] = SERVER_TIMESTAMP
        fields["updatedAt"] = SERVER_TIMESTAMP
        ids.append(store.add(PROJECTS_COLLECTION, fields))
    logger.info("%d projects seeded", len(ids))
    return ids


def seed_portfolio(store: DocumentStore, data: Mapping[str, Any]) -> dict:
    """Seeds from a mapping shaped like ``{"profile": {...}, "projects": [...]}``."""
    summary = {"profile": False, "projects": []}
    if data.get("profile"):
        seed_profile(store, data["profile"])
        summary["profile"] = True
    if data.get("projects"):
        summary["projects"] = seed_projects(store, data["projects"])
    return summary
