import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.context import AppContext
from app.core.errors import CallableError, ErrorCode

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass
class Caller:
    uid: str
    email: Optional[str] = None


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    ctx: AppContext = Depends(get_context),
) -> Caller:
    if credentials is None or not credentials.credentials:
        raise CallableError(ErrorCode.UNAUTHENTICATED, "The function must be called while authenticated.")
    try:
        decoded = ctx.auth.verify_id_token(credentials.credentials)
    except Exception as e:
        logger.info("Rejected ID token: %s", e.__class__.__name__)
        raise CallableError(ErrorCode.UNAUTHENTICATED, "Invalid or expired token.")

    uid = decoded.get("uid") or decoded.get("sub")
    if not uid:
        raise CallableError(ErrorCode.UNAUTHENTICATED, "Token carries no uid.")
    return Caller(uid=uid, email=decoded.get("email"))
