# app/routes/invite_routes.py
from fastapi import APIRouter, Depends

from app.core.context import AppContext
from app.deps import Caller, get_context, get_current_user
from app.models.invite import (
    AcceptInviteRequest, AcceptInviteResponse,
    CreateInviteRequest, CreateInviteResponse,
)
from app.services.invite_service import create_invite, verify_and_accept_invite

router = APIRouter(prefix="/api/invites", tags=["invites"])


@router.post("", response_model=CreateInviteResponse, summary="Create invite (admin only)")
async def create_invite_endpoint(
    req: CreateInviteRequest,
    user: Caller = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    return await create_invite(ctx, user.uid, req.email, req.role)


# Public: called right after signup, the code + email pair is the credential
@router.post("/accept", response_model=AcceptInviteResponse, summary="Verify invite code and assign role")
async def accept_invite_endpoint(req: AcceptInviteRequest, ctx: AppContext = Depends(get_context)):
    return await verify_and_accept_invite(ctx, req.inviteCode, req.newUserUid, req.newUserEmail)
