"""
Conversion between raw documents and typed records.

Store documents and wire payloads are camelCase dicts of unknown shape.
Decoding applies the defaulting rules here so that nothing downstream has to
trust what the store returned; encoding produces the wire representation
with every timestamp rendered as ISO-8601 UTC.
"""

from __future__ import annotations

from dataclasses import asdict, replace
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from dacite import Config, from_dict

from shared.json_utils import convert_keys
from shared.types import Experience, Profile, Project


def to_datetime(value: Any) -> Optional[datetime]:
    """Normalises store/wire timestamp representations to aware datetimes."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    value = to_datetime(value)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _flag(value: Any) -> bool:
    return value is True


def _integer(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


def _str_list(value: Any) -> list:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _mapping_list(value: Any) -> list:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


DACITE_CONFIG = Config(
    type_hooks={
        str: _text,
        bool: _flag,
        int: _integer,
        datetime: to_datetime,
        List[str]: _str_list,
        List[Experience]: _mapping_list,
    },
    check_types=False,
)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    return value.strip() or None if value else None


def decode_project(doc_id: str, data: Mapping[str, Any] | None) -> Project:
    raw = convert_keys(dict(data or {}), "camel_to_snake")
    raw["id"] = doc_id
    project = from_dict(data_class=Project, data=raw, config=DACITE_CONFIG)
    return replace(
        project,
        live_url=_blank_to_none(project.live_url),
        github_url=_blank_to_none(project.github_url),
    )


def decode_profile(data: Mapping[str, Any] | None) -> Profile:
    raw = convert_keys(dict(data or {}), "camel_to_snake")
    profile = from_dict(data_class=Profile, data=raw, config=DACITE_CONFIG)
    return replace(
        profile,
        linkedin=_blank_to_none(profile.linkedin),
        github=_blank_to_none(profile.github),
        twitter=_blank_to_none(profile.twitter),
        resume_url=_blank_to_none(profile.resume_url),
        avatar=_blank_to_none(profile.avatar),
    )


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_encode(v) for v in value]
    return value


def project_to_wire(project: Project) -> dict:
    return _encode(convert_keys(asdict(project), "snake_to_camel"))


def profile_to_wire(profile: Profile) -> dict:
    return _encode(convert_keys(asdict(profile), "snake_to_camel"))


# Fields an admin may write, in camelCase as stored.
PROJECT_TEXT_FIELDS = ("title", "description", "fullDescription", "thumbnail", "category")
PROJECT_URL_FIELDS = ("liveUrl", "githubUrl")
PROFILE_TEXT_FIELDS = ("name", "title", "bio", "email")
PROFILE_URL_FIELDS = ("linkedin", "github", "twitter", "resumeUrl", "avatar")


def _clean_tags(values: list) -> list[str]:
    seen: list[str] = []
    for value in values:
        if not isinstance(value, str):
            continue
        tag = value.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def _clean_url(value: Any) -> Optional[str]:
    return value.strip() or None if isinstance(value, str) else None


def normalize_project_fields(payload: Mapping[str, Any], *, partial: bool) -> dict:
    """
    Builds the camelCase document fields for a validated project payload.

    With partial=False every field is present with its default; with
    partial=True only the fields supplied by the caller are returned. The
    identifier and timestamps are never taken from the payload.
    """
    fields: dict[str, Any] = {}
    for name in PROJECT_TEXT_FIELDS:
        if name in payload:
            fields[name] = payload[name].strip()
    if "images" in payload or not partial:
        fields["images"] = _str_list(payload.get("images"))
    if "technologies" in payload or not partial:
        fields["technologies"] = _clean_tags(payload.get("technologies") or [])
    for name in PROJECT_URL_FIELDS:
        if name in payload or not partial:
            fields[name] = _clean_url(payload.get(name))
    for name in ("featured", "published"):
        if name in payload or not partial:
            fields[name] = payload.get(name) is True
    if "order" in payload or not partial:
        fields["order"] = _integer(payload.get("order"))
    return fields


def normalize_profile_fields(payload: Mapping[str, Any]) -> dict:
    fields: dict[str, Any] = {}
    for name in PROFILE_TEXT_FIELDS:
        if name in payload:
            fields[name] = payload[name].strip()
    for name in PROFILE_URL_FIELDS:
        if name in payload:
            fields[name] = _clean_url(payload[name])
    if "skills" in payload:
        fields["skills"] = _clean_tags(payload["skills"])
    if "experience" in payload:
        fields["experience"] = [
            convert_keys(asdict(entry), "snake_to_camel")
            for entry in (
                from_dict(
                    data_class=Experience,
                    data=convert_keys(dict(item), "camel_to_snake"),
                    config=DACITE_CONFIG,
                )
                for item in payload["experience"]
            )
        ]
    return fields
