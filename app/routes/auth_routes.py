from fastapi import APIRouter, Depends

from app.core.context import AppContext
from app.deps import Caller, get_context, get_current_user
from app.models.auth import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
from app.models.user import MeResponse
from app.services.auth_service import get_me, password_login, register_user

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, summary="Register a new user")
def register(req: RegisterRequest, ctx: AppContext = Depends(get_context)):
    return register_user(ctx, req)


@router.post("/login", response_model=LoginResponse, summary="Login with email & password")
async def login(req: LoginRequest, ctx: AppContext = Depends(get_context)):
    return await password_login(ctx, req.email, req.password)


@router.get("/me", response_model=MeResponse, summary="Current user profile with role")
def me(user: Caller = Depends(get_current_user), ctx: AppContext = Depends(get_context)):
    return get_me(ctx, user.uid, user.email)
