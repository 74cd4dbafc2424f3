"""
HTTP routes for the portfolio API.

Public routes serve published content and accept inquiries; admin routes
require a bearer token and are mounted under /admin.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from portfolio.dependencies import (
    get_admin_service,
    get_client_key,
    get_inquiry_service,
    get_read_service,
    require_admin,
)
from portfolio.records import profile_to_wire, project_to_wire
from portfolio.schemas import (
    MessageResponse,
    ProfileResponse,
    ProjectCreatedResponse,
    ProjectResponse,
    ProjectsResponse,
    UploadImageRequest,
    UploadImageResponse,
)
from portfolio.services import ContentAdminService, ContentReadService, InquiryService

router = APIRouter()
admin_router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])


@router.get("/projects", response_model=ProjectsResponse)
def list_projects(service: ContentReadService = Depends(get_read_service)):
    projects = service.list_published_projects()
    return ProjectsResponse(projects=[project_to_wire(p) for p in projects])


@router.get("/projects/{project_id}", response_model=ProjectResponse)
def get_project(project_id: str, service: ContentReadService = Depends(get_read_service)):
    project = service.get_published_project(project_id)
    return ProjectResponse(project=project_to_wire(project))


@router.get("/profile", response_model=ProfileResponse)
def get_profile(service: ContentReadService = Depends(get_read_service)):
    return ProfileResponse(profile=profile_to_wire(service.get_profile()))


@router.post("/inquiries", response_model=MessageResponse)
def submit_inquiry(
    payload: Any = Body(default=None),
    client_key: str = Depends(get_client_key),
    service: InquiryService = Depends(get_inquiry_service),
):
    service.submit_inquiry(payload, client_key)
    return MessageResponse(message="Inquiry submitted successfully")


@admin_router.get("/projects", response_model=ProjectsResponse)
def admin_list_projects(service: ContentAdminService = Depends(get_admin_service)):
    projects = service.list_all_projects()
    return ProjectsResponse(projects=[project_to_wire(p) for p in projects])


@admin_router.get("/projects/{project_id}", response_model=ProjectResponse)
def admin_get_project(
    project_id: str, service: ContentAdminService = Depends(get_admin_service)
):
    return ProjectResponse(project=project_to_wire(service.get_project(project_id)))


@admin_router.post("/projects", response_model=ProjectCreatedResponse, status_code=201)
def create_project(
    payload: Any = Body(default=None),
    service: ContentAdminService = Depends(get_admin_service),
):
    project_id = service.create_project(payload)
    return ProjectCreatedResponse(id=project_id, message="Project created successfully")


@admin_router.put("/projects/{project_id}", response_model=MessageResponse)
def update_project(
    project_id: str,
    payload: Any = Body(default=None),
    service: ContentAdminService = Depends(get_admin_service),
):
    service.update_project(project_id, payload)
    return MessageResponse(message="Project updated successfully")


@admin_router.delete("/projects/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: str, service: ContentAdminService = Depends(get_admin_service)
):
    service.delete_project(project_id)
    return MessageResponse(message="Project deleted successfully")


@admin_router.put("/profile", response_model=MessageResponse)
def update_profile(
    payload: Any = Body(default=None),
    service: ContentAdminService = Depends(get_admin_service),
):
    service.update_profile(payload)
    return MessageResponse(message="Profile updated successfully")


@admin_router.post("/uploads", response_model=UploadImageResponse)
def upload_image(
    payload: UploadImageRequest,
    service: ContentAdminService = Depends(get_admin_service),
):
    url = service.upload_image(
        file_data=payload.fileData,
        file_name=payload.fileName,
        mime_type=payload.mimeType,
        folder=payload.folder,
    )
    return UploadImageResponse(url=url, message="Image uploaded successfully")
