"""
Pydantic schemas for the portfolio API wire format (camelCase).
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel


class ExperienceOut(BaseModel):
    company: str
    position: str
    location: str
    startDate: str
    endDate: str
    responsibilities: list[str]


class ProjectOut(BaseModel):
    id: str
    title: str
    description: str
    fullDescription: str
    thumbnail: str
    images: list[str]
    technologies: list[str]
    category: str
    liveUrl: Optional[str] = None
    githubUrl: Optional[str] = None
    featured: bool
    published: bool
    order: int
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class ProfileOut(BaseModel):
    name: str
    title: str
    bio: str
    email: str
    linkedin: Optional[str] = None
    github: Optional[str] = None
    twitter: Optional[str] = None
    resumeUrl: Optional[str] = None
    avatar: Optional[str] = None
    skills: list[str]
    experience: list[ExperienceOut]
    updatedAt: Optional[str] = None


class ProjectsResponse(BaseModel):
    projects: list[ProjectOut]


class ProjectResponse(BaseModel):
    project: ProjectOut


class ProfileResponse(BaseModel):
    profile: ProfileOut


class MessageResponse(BaseModel):
    success: Literal[True] = True
    message: str


class ProjectCreatedResponse(MessageResponse):
    id: str


class UploadImageRequest(BaseModel):
    fileData: str = ""
    fileName: str = ""
    mimeType: str = ""
    folder: Optional[str] = None


class UploadImageResponse(MessageResponse):
    url: str


class ErrorResponse(BaseModel):
    error: str
    code: str
    details: Optional[dict] = None
    timestamp: str
