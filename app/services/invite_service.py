# app/services/invite_service.py
import logging
import uuid
from typing import Any, Dict
from urllib.parse import urlencode

from app.core.context import AppContext
from app.core.errors import CallableError, ErrorCode
from app.helper import run_blocking, same_email, utcnow
from app.models.invite import ACCEPTED, PENDING
from app.models.user import ROLES
from app.services.authorization import require_administrator

logger = logging.getLogger(__name__)


def invite_link(base_url: str, code: str) -> str:
    return f"{base_url.rstrip('/')}/signup?{urlencode({'invite': code})}"


# ===== CREATE =====
async def create_invite(ctx: AppContext, caller_uid: str, email: str, role: str) -> Dict[str, Any]:
    if not email or not role or role not in ROLES:
        raise CallableError(
            ErrorCode.INVALID_ARGUMENT,
            "Please provide a valid email and role ('User' or 'Administrator').",
        )

    try:
        await run_blocking(
            require_administrator, ctx.users, caller_uid, "Only administrators can create invites."
        )

        code = str(uuid.uuid4())
        await run_blocking(ctx.invites.create, code, {
            "email": email,
            "inviteCode": code,
            "status": PENDING,
            "role": role,
            "createdBy": caller_uid,
            "createdAt": utcnow(),
        })
    except CallableError:
        raise
    except Exception as e:
        logger.exception("Error creating invite for %s", email)
        raise CallableError(
            ErrorCode.INTERNAL, "An internal error occurred while creating the invite."
        ) from e

    logger.info("Invite created for %s with code %s by %s", email, code, caller_uid)
    return {
        "success": True,
        "inviteCode": code,
        "inviteLink": invite_link(ctx.settings.APP_BASE_URL, code),
        "message": "Invite created successfully.",
    }


# ===== VERIFY + ACCEPT =====
async def verify_and_accept_invite(
    ctx: AppContext,
    invite_code: str,
    new_user_uid: str,
    new_user_email: str,
) -> Dict[str, Any]:
    """
    No caller check here: holding the code plus the invited email is what
    authorizes the role grant.
    """
    if not invite_code or not new_user_uid or not new_user_email:
        raise CallableError(
            ErrorCode.INVALID_ARGUMENT, "Missing invite code, user UID, or user email."
        )

    not_found = CallableError(ErrorCode.NOT_FOUND, "Invalid, expired, or already used invite code.")

    try:
        invite = await run_blocking(ctx.invites.get, invite_code)
        if invite is None or invite.get("status") != PENDING:
            raise not_found

        if not same_email(invite.get("email", ""), new_user_email):
            raise CallableError(
                ErrorCode.PERMISSION_DENIED,
                "Invite code is not associated with this email address.",
            )

        role = invite.get("role")
        now = utcnow()
        accepted = await run_blocking(
            ctx.invites.accept,
            invite_code,
            invite_update={
                "status": ACCEPTED,
                "acceptedByUid": new_user_uid,
                "acceptedAt": now,
            },
            user_uid=new_user_uid,
            user_data={
                "email": new_user_email,
                "role": role,
                "assignedProjects": [],
                "onboarded": True,
                "updatedAt": now,
            },
            user_defaults={"createdAt": now},
        )
        # lost the race against another acceptance of the same code
        if not accepted:
            raise not_found
    except CallableError:
        raise
    except Exception as e:
        logger.exception("Error verifying/accepting invite %s", invite_code)
        raise CallableError(
            ErrorCode.INTERNAL, "An internal error occurred while processing the invite."
        ) from e

    logger.info(
        "Invite %s accepted by %s (uid=%s). Role set to %s.",
        invite_code, new_user_email, new_user_uid, role,
    )
    return {
        "success": True,
        "role": role,
        "message": "Invite accepted successfully. User role assigned.",
    }
