# app/services/auth_service.py
import logging
from typing import Any, Dict, Optional

import httpx

from app.core.context import AppContext
from app.core.errors import CallableError, ErrorCode
from app.helper import utcnow
from app.models.auth import LoginResponse, RegisterRequest, RegisterResponse
from app.models.user import USER, MeResponse

logger = logging.getLogger(__name__)

# =======================
# Identity Toolkit (REST)
# =======================
IDT_BASE = "https://identitytoolkit.googleapis.com/v1"
FIREBASE_SIGNIN_URL = f"{IDT_BASE}/accounts:signInWithPassword"


# ---------- Login ----------
async def password_login(ctx: AppContext, email: str, password: str) -> LoginResponse:
    api_key = ctx.settings.FIREBASE_API_KEY
    if not api_key:
        raise CallableError(ErrorCode.INTERNAL, "FIREBASE_API_KEY is not set.")

    params = {"key": api_key}
    payload = {"email": email, "password": password, "returnSecureToken": True}
    try:
        async with httpx.AsyncClient(timeout=20) as client:
            r = await client.post(FIREBASE_SIGNIN_URL, params=params, json=payload)
    except httpx.HTTPError as e:
        logger.exception("Identity Toolkit request failed")
        raise CallableError(ErrorCode.INTERNAL, "Login service unavailable.") from e

    if r.status_code != 200:
        try:
            detail = r.json().get("error", {}).get("message", "LOGIN_FAILED")
        except ValueError:
            detail = "LOGIN_FAILED"
        raise CallableError(ErrorCode.UNAUTHENTICATED, f"Firebase login error: {detail}")

    try:
        data = r.json()
        return LoginResponse(
            idToken=data["idToken"],
            refreshToken=data["refreshToken"],
            expiresIn=int(data["expiresIn"]),
            uid=data["localId"],
            email=data["email"],
        )
    except (ValueError, KeyError, TypeError) as e:
        logger.error("Unexpected Identity Toolkit response: %s", r.text[:500])
        raise CallableError(ErrorCode.INTERNAL, "Login service returned an unexpected response.") from e


# ---------- Register ----------
def register_user(ctx: AppContext, req: RegisterRequest) -> RegisterResponse:
    """
    Self-service signup. The account starts as a plain, not-yet-onboarded User;
    accepting an invite afterwards grants the invited role.
    """
    try:
        user = ctx.auth.create_user(
            email=req.email,
            password=req.password,
            display_name=req.displayName or None,
            email_verified=False,
            disabled=False,
        )
    except ctx.auth.EmailAlreadyExistsError:
        raise CallableError(ErrorCode.INVALID_ARGUMENT, "Email already exists.")
    except Exception as e:
        logger.exception("Register failed for %s", req.email)
        raise CallableError(ErrorCode.INTERNAL, "Register failed.") from e

    try:
        now = utcnow()
        ctx.users.merge(user.uid, {
            "email": req.email,
            "displayName": req.displayName or "",
            "role": USER,
            "onboarded": False,
            "assignedProjects": [],
            "createdAt": now,
            "updatedAt": now,
        })
    except Exception as e:
        logger.exception("Could not write users/%s", user.uid)
        raise CallableError(ErrorCode.INTERNAL, "Register failed.") from e

    logger.info("Registered %s (uid=%s)", req.email, user.uid)
    return RegisterResponse(uid=user.uid, email=req.email, displayName=req.displayName)


# ---------- Me ----------
def get_me(ctx: AppContext, uid: str, email: Optional[str]) -> MeResponse:
    try:
        data: Dict[str, Any] = ctx.users.get(uid) or {}
    except Exception as e:
        logger.exception("Could not read users/%s", uid)
        raise CallableError(ErrorCode.INTERNAL, "Could not load profile.") from e

    return MeResponse(
        uid=uid,
        email=data.get("email") or email,
        displayName=data.get("displayName"),
        role=data.get("role"),
        onboarded=bool(data.get("onboarded", False)),
        assignedProjects=list(data.get("assignedProjects") or []),
    )
