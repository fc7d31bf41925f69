# app/services/project_service.py
import logging
from typing import Any, Dict, List, Optional

from google.cloud.firestore_v1.field_path import FieldPath

from app.core.context import AppContext
from app.core.errors import CallableError, ErrorCode
from app.helper import run_blocking, serialize_doc, unique, utcnow
from app.models.project import IMMUTABLE_FIELDS
from app.services.authorization import is_administrator, require_administrator

logger = logging.getLogger(__name__)


def _invalid(message: str) -> CallableError:
    return CallableError(ErrorCode.INVALID_ARGUMENT, message)


def _valid_name(name: Any) -> bool:
    return isinstance(name, str) and name.strip() != ""


def _valid_members(members: Any) -> bool:
    return (
        isinstance(members, list)
        and len(members) > 0
        and all(isinstance(m, str) and m for m in members)
    )


def _top_level_field(key: Any) -> str:
    """
    Resolve an update key the way Firestore will read it. Only plain top-level
    fields are accepted, so `createdBy` or createdAt.x cannot reach a
    protected field and members.0 cannot turn the list into a map.
    """
    if not isinstance(key, str):
        raise _invalid("Update keys must be field names.")
    try:
        parts = FieldPath.from_string(key).parts
    except ValueError:
        raise _invalid(f"Invalid field name: {key!r}.")
    if len(parts) != 1:
        raise _invalid(f"Nested field updates are not supported: {key!r}.")
    return parts[0]


# ===== CREATE =====
async def create_project(
    ctx: AppContext,
    caller_uid: str,
    name: Optional[str],
    description: Optional[str],
    members: Optional[List[str]],
) -> Dict[str, Any]:
    await run_blocking(
        require_administrator, ctx.users, caller_uid, "Only administrators can create projects."
    )

    if not _valid_name(name):
        raise _invalid("Project name is required.")
    if not _valid_members(members):
        raise _invalid("Project must have at least one member.")
    if caller_uid not in members:
        raise _invalid("Project creator must be included in the members list.")

    try:
        project_id = await run_blocking(ctx.projects.new_id)
        now = utcnow()
        await run_blocking(ctx.projects.create, project_id, {
            "projectId": project_id,
            "name": name.strip(),
            "description": (description or "").strip(),
            "members": unique(members),
            "createdBy": caller_uid,
            "createdAt": now,
            "updatedAt": now,
        })
    except Exception as e:
        logger.exception("Error creating project %r", name)
        raise CallableError(
            ErrorCode.INTERNAL, "An internal error occurred while creating the project."
        ) from e

    # TODO: push project_id into users/{uid}.assignedProjects for each member
    # (needs a batched write plus the matching removal on update/delete)
    logger.info("Project created: %s by %s", project_id, caller_uid)
    return {"success": True, "projectId": project_id, "message": "Project created successfully."}


# ===== READ (LIST) =====
async def get_projects(ctx: AppContext, caller_uid: str) -> Dict[str, Any]:
    """Admins get every project, everyone else only the ones they are a member of."""
    admin = await run_blocking(is_administrator, ctx.users, caller_uid)
    try:
        rows = await run_blocking(ctx.projects.list, member_uid=None if admin else caller_uid)
    except Exception as e:
        logger.exception("Error getting projects for %s", caller_uid)
        raise CallableError(
            ErrorCode.INTERNAL, "An internal error occurred while retrieving projects."
        ) from e

    projects = [serialize_doc(doc_id, data) for doc_id, data in rows]
    return {"success": True, "projects": projects, "message": "Projects retrieved successfully."}


# ===== READ (DETAIL) =====
async def get_visible_project(ctx: AppContext, caller_uid: str, project_id: str) -> Dict[str, Any]:
    """
    One project, if the caller may see it. Projects the caller cannot see
    are reported as not-found, same as missing ones.
    """
    if not project_id:
        raise _invalid("Project ID is required.")
    try:
        data = await run_blocking(ctx.projects.get, project_id)
    except Exception as e:
        logger.exception("Error reading project %s", project_id)
        raise CallableError(
            ErrorCode.INTERNAL, "An internal error occurred while retrieving the project."
        ) from e

    if data is None:
        raise CallableError(ErrorCode.NOT_FOUND, "Project not found.")
    if caller_uid not in (data.get("members") or []):
        if not await run_blocking(is_administrator, ctx.users, caller_uid):
            raise CallableError(ErrorCode.NOT_FOUND, "Project not found.")
    return serialize_doc(project_id, data)


# ===== UPDATE =====
async def update_project(
    ctx: AppContext,
    caller_uid: str,
    project_id: Optional[str],
    updates: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    await run_blocking(
        require_administrator, ctx.users, caller_uid, "Only administrators can update projects."
    )

    if not project_id or not isinstance(project_id, str):
        raise _invalid("Project ID is required.")
    if not updates or not isinstance(updates, dict):
        raise _invalid("Updates object is required.")

    payload = {}
    for key, value in updates.items():
        field = _top_level_field(key)
        if field not in IMMUTABLE_FIELDS:
            payload[field] = value

    if "name" in payload:
        if not _valid_name(payload["name"]):
            raise _invalid("Project name cannot be empty.")
        payload["name"] = payload["name"].strip()
    if "members" in payload:
        if not _valid_members(payload["members"]):
            raise _invalid("Members list cannot be empty.")
        payload["members"] = unique(payload["members"])

    try:
        if await run_blocking(ctx.projects.get, project_id) is None:
            raise CallableError(ErrorCode.NOT_FOUND, "Project not found.")

        payload["updatedAt"] = utcnow()
        await run_blocking(ctx.projects.update, project_id, payload)
    except CallableError:
        raise
    except Exception as e:
        logger.exception("Error updating project %s", project_id)
        raise CallableError(
            ErrorCode.INTERNAL, "An internal error occurred while updating the project."
        ) from e

    logger.info("Project updated: %s by %s (fields=%s)", project_id, caller_uid, sorted(payload))
    return {"success": True, "message": "Project updated successfully."}


# ===== DELETE =====
async def delete_project(ctx: AppContext, caller_uid: str, project_id: Optional[str]) -> Dict[str, Any]:
    await run_blocking(
        require_administrator, ctx.users, caller_uid, "Only administrators can delete projects."
    )

    if not project_id or not isinstance(project_id, str):
        raise _invalid("Project ID is required.")

    try:
        if await run_blocking(ctx.projects.get, project_id) is None:
            raise CallableError(ErrorCode.NOT_FOUND, "Project not found.")
        # members' assignedProjects and project sub-collections are left as-is
        await run_blocking(ctx.projects.delete, project_id)
    except CallableError:
        raise
    except Exception as e:
        logger.exception("Error deleting project %s", project_id)
        raise CallableError(
            ErrorCode.INTERNAL, "An internal error occurred while deleting the project."
        ) from e

    logger.info("Project deleted: %s by %s", project_id, caller_uid)
    return {"success": True, "message": "Project deleted successfully."}
