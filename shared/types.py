# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, List, Optional


@dataclass
class Project:
    """A single portfolio entry."""

    id: str
    title: str = ""
    description: str = ""
    full_description: str = ""
    thumbnail: str = ""
    images: List[str] = field(default_factory=list)
    technologies: List[str] = field(default_factory=list)
    category: str = ""
    live_url: Optional[str] = None
    github_url: Optional[str] = None
    featured: bool = False
    published: bool = False
    order: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Experience:
    """One work-experience entry on the profile."""

    company: str = ""
    position: str = ""
    location: str = ""
    start_date: str = ""  # YYYY-MM
    end_date: str = ""  # YYYY-MM or "present"
    responsibilities: List[str] = field(default_factory=list)


@dataclass
class Profile:
    """The portfolio owner's display identity (singleton document)."""

    name: str = ""
    title: str = ""
    bio: str = ""
    email: str = ""
    linkedin: Optional[str] = None
    github: Optional[str] = None
    twitter: Optional[str] = None
    resume_url: Optional[str] = None
    avatar: Optional[str] = None
    skills: List[str] = field(default_factory=list)
    experience: List[Experience] = field(default_factory=list)
    updated_at: Optional[datetime] = None


@dataclass
class Inquiry:
    """Schema for contact-form submissions stored in Firestore."""

    name: str
    email: str
    subject: str
    message: str
    # Rate-limit key of the submitting client. Opaque; usually a network address.
    ip: str
    timestamp: Any  # Firestore timestamp created with firestore_v1.SERVER_TIMESTAMP
    read: bool = False
    replied: bool = False


class AuthFailure(StrEnum):
    INVALID_EMAIL = "INVALID_EMAIL"
    USER_DISABLED = "USER_DISABLED"
    WRONG_CREDENTIAL = "WRONG_CREDENTIAL"
    TOO_MANY_ATTEMPTS = "TOO_MANY_ATTEMPTS"
    UNKNOWN = "UNKNOWN"


@dataclass
class Identity:
    """A verified administrator identity."""

    uid: str
    email: Optional[str] = None
    claims: dict = field(default_factory=dict)
