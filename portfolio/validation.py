"""
Validation engine for contact-form and record payloads.

All functions here are pure: they take raw decoded JSON (any shape) and
return a mapping of field name to message, empty when the input is
acceptable. They never raise.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from shared.constants import MIN_MESSAGE_LENGTH

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PROJECT_REQUIRED_TEXT_FIELDS = {
    "title": "Title is required",
    "description": "Description is required",
    "fullDescription": "Full description is required",
    "thumbnail": "Thumbnail is required",
    "category": "Category is required",
}

PROFILE_REQUIRED_TEXT_FIELDS = {
    "name": "Name is required",
    "title": "Title is required",
    "bio": "Bio is required",
}


def is_valid_email(email: Any) -> bool:
    return isinstance(email, str) and bool(EMAIL_PATTERN.match(email))


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def validate_contact_form(data: Any) -> dict[str, str]:
    if not isinstance(data, Mapping):
        data = {}
    errors: dict[str, str] = {}

    if _is_blank(data.get("name")):
        errors["name"] = "Please enter your name"

    email = data.get("email")
    if _is_blank(email):
        errors["email"] = "Please enter your email address"
    elif not is_valid_email(email.strip()):
        errors["email"] = "Please enter a valid email address"

    if _is_blank(data.get("subject")):
        errors["subject"] = "Please enter a subject"

    message = data.get("message")
    if _is_blank(message):
        errors["message"] = "Please enter a message"
    elif len(message.strip()) < MIN_MESSAGE_LENGTH:
        errors["message"] = (
            f"Message must be at least {MIN_MESSAGE_LENGTH} characters"
        )

    return errors


def validate_project_record(data: Any, *, partial: bool = False) -> dict[str, str]:
    """
    Checks project fields. With partial=True only the fields present in the
    payload are checked (update semantics).

    An empty technologies list is accepted here; requiring at least one tag is
    left to the admin form.
    """
    if not isinstance(data, Mapping):
        return {"_": "Project payload must be an object"}
    errors: dict[str, str] = {}

    for field_name, message in PROJECT_REQUIRED_TEXT_FIELDS.items():
        if partial and field_name not in data:
            continue
        if _is_blank(data.get(field_name)):
            errors[field_name] = message

    if not partial or "technologies" in data:
        if not isinstance(data.get("technologies"), list):
            errors["technologies"] = "Technologies must be an array"

    if "images" in data and data["images"] is not None:
        if not isinstance(data["images"], list):
            errors["images"] = "Images must be an array"

    for url_field in ("liveUrl", "githubUrl"):
        value = data.get(url_field)
        if value is not None and not isinstance(value, str):
            errors[url_field] = "Must be a string"

    for flag in ("featured", "published"):
        if flag in data and data[flag] is not None and not isinstance(data[flag], bool):
            errors[flag] = "Must be a boolean"

    if "order" in data and data["order"] is not None:
        order = data["order"]
        if isinstance(order, bool) or not isinstance(order, int):
            errors["order"] = "Order must be an integer"

    return errors


def validate_profile_record(data: Any, *, partial: bool = True) -> dict[str, str]:
    if not isinstance(data, Mapping):
        return {"_": "Profile payload must be an object"}
    errors: dict[str, str] = {}

    for field_name, message in PROFILE_REQUIRED_TEXT_FIELDS.items():
        if partial and field_name not in data:
            continue
        if _is_blank(data.get(field_name)):
            errors[field_name] = message

    if not partial or "email" in data:
        email = data.get("email")
        if not isinstance(email, str) or not is_valid_email(email.strip()):
            errors["email"] = "Please enter a valid email address"

    if "skills" in data and not isinstance(data["skills"], list):
        errors["skills"] = "Skills must be an array"

    if "experience" in data:
        experience = data["experience"]
        if not isinstance(experience, list) or not all(
            isinstance(entry, Mapping) for entry in experience
        ):
            errors["experience"] = "Experience must be an array of objects"

    return errors
