# app/routes/project_routes.py
from fastapi import APIRouter, Depends

from app.core.context import AppContext
from app.deps import Caller, get_context, get_current_user
from app.models.project import (
    CreateProjectRequest, CreateProjectResponse,
    MessageResponse, ProjectListResponse, UpdateProjectRequest,
)
from app.services.project_service import (
    create_project, delete_project, get_projects, update_project,
)

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.post("", response_model=CreateProjectResponse, summary="Create project (admin only)")
async def create_project_endpoint(
    req: CreateProjectRequest,
    user: Caller = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    return await create_project(ctx, user.uid, req.name, req.description, req.members)


@router.get("", response_model=ProjectListResponse, summary="List projects visible to the caller")
async def list_projects_endpoint(
    user: Caller = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    return await get_projects(ctx, user.uid)


@router.patch("/{project_id}", response_model=MessageResponse, summary="Update project (admin only)")
async def update_project_endpoint(
    project_id: str,
    req: UpdateProjectRequest,
    user: Caller = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    return await update_project(ctx, user.uid, project_id, req.updates)


@router.delete("/{project_id}", response_model=MessageResponse, summary="Delete project (admin only)")
async def delete_project_endpoint(
    project_id: str,
    user: Caller = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    return await delete_project(ctx, user.uid, project_id)
