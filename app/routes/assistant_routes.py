# app/routes/assistant_routes.py
from fastapi import APIRouter, Depends

from app.core.context import AppContext
from app.deps import Caller, get_context, get_current_user
from app.models.assistant import (
    ProjectSummaryRequest, ProjectSummaryResponse,
    QuickSearchRequest, QuickSearchResponse,
)
from app.services.assistant_service import project_summary, quick_search

router = APIRouter(prefix="/api/assistant", tags=["assistant"])


@router.post("/project-summary", response_model=ProjectSummaryResponse, summary="AI summary of a project")
async def project_summary_endpoint(
    req: ProjectSummaryRequest,
    user: Caller = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    return await project_summary(ctx, user.uid, req.projectId)


@router.post("/quick-search", response_model=QuickSearchResponse, summary="AI search across sources (admin only)")
async def quick_search_endpoint(
    req: QuickSearchRequest,
    user: Caller = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    return await quick_search(ctx, user.uid, req.query)
