# app/services/authorization.py
import logging

from app.core.errors import CallableError, ErrorCode
from app.models.user import ADMINISTRATOR

logger = logging.getLogger(__name__)


def is_administrator(users, uid: str) -> bool:
    """
    True only if users/{uid} exists and its role is Administrator.
    Lookup failures count as "not an administrator".
    """
    if not uid:
        return False
    try:
        data = users.get(uid)
    except Exception:
        logger.exception("Error checking admin status for uid=%s", uid)
        return False
    return data is not None and data.get("role") == ADMINISTRATOR


def require_administrator(users, uid: str, message: str) -> None:
    if not is_administrator(users, uid):
        raise CallableError(ErrorCode.PERMISSION_DENIED, message)
