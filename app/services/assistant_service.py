# app/services/assistant_service.py
import json
import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from app.core.context import AppContext
from app.core.errors import CallableError, ErrorCode
from app.helper import run_blocking
from app.models.assistant import SearchResult
from app.services.authorization import require_administrator
from app.services.project_service import get_visible_project
from app.services.sources import gather_sources

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = """You are an AI Project Assistant. Produce a summary of the project progress, key risks, and next steps from this information:

Project: {name} ({project_id})
Description: {description}
Members: {member_count}
Requested by: {uid}
Emails: {emails}
Documents: {documents}
Calendar Events: {events}
"""

SEARCH_PROMPT = """You are an AI assistant helping an administrator find information across different sources.

The administrator is looking for: {query}

Here are some emails:
{emails}

Here are some files:
{files}

Here are some calendar events:
{events}

Based on the information provided, find the most relevant results. For each result give its type
(email, document, calendar event), source, title, a short description and a link inside CollabFlow
(/email/<id>, /files/<id>, /calendar/<id>). Only include results relevant to the query.

Respond with JSON only, shaped like:
{{"results": [{{"type": "email", "source": "Gmail", "title": "Project Update", "description": "An email from John about the latest project update.", "link": "/email/123"}}]}}
"""


def _bullets(lines: List[str]) -> str:
    return "\n".join(f"- {ln}" for ln in lines) or "- (none)"


# ===== PROJECT SUMMARY =====
async def project_summary(ctx: AppContext, caller_uid: str, project_id: str) -> Dict[str, Any]:
    project = await get_visible_project(ctx, caller_uid, project_id)
    data = await gather_sources(ctx.connectors, caller_uid)

    prompt = SUMMARY_PROMPT.format(
        name=project.get("name", ""),
        project_id=project_id,
        description=project.get("description") or "(none)",
        member_count=len(project.get("members") or []),
        uid=caller_uid,
        emails=", ".join(e.subject for e in data["emails"]) or "(none)",
        documents=", ".join(f.name for f in data["files"]) or "(none)",
        events=", ".join(ev.title for ev in data["calendar_events"]) or "(none)",
    )
    summary = await ctx.llm.generate(prompt)
    return {"success": True, "summary": summary.strip()}


# ===== QUICK SEARCH =====
def parse_search_results(raw: str) -> List[SearchResult]:
    text = raw.strip()
    # models sometimes wrap JSON in a fenced block
    if text.startswith("```"):
        text = text.strip("`")
        if text.startswith("json"):
            text = text[4:]
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"not JSON: {e}") from e

    items = payload.get("results") if isinstance(payload, dict) else payload
    if not isinstance(items, list):
        raise ValueError("no results list")
    return [SearchResult.model_validate(item) for item in items]


async def quick_search(ctx: AppContext, caller_uid: str, query: str) -> Dict[str, Any]:
    await run_blocking(
        require_administrator, ctx.users, caller_uid, "Only administrators can use quick search."
    )
    if not query or not query.strip():
        raise CallableError(ErrorCode.INVALID_ARGUMENT, "Search query is required.")

    data = await gather_sources(ctx.connectors, caller_uid)
    prompt = SEARCH_PROMPT.format(
        query=query.strip(),
        emails=_bullets([
            f"[{e.source} #{e.id}] Sender: {e.sender}, Subject: {e.subject}, Body: {e.body}"
            for e in data["emails"]
        ]),
        files=_bullets([f"[{f.source} #{f.id}] Name: {f.name}, Path: {f.path}" for f in data["files"]]),
        events=_bullets([
            f"[{ev.source} #{ev.id}] Title: {ev.title}, Start: {ev.start_time.isoformat()}, End: {ev.end_time.isoformat()}"
            for ev in data["calendar_events"]
        ]),
    )

    raw = await ctx.llm.generate(prompt, json_output=True)
    try:
        results = parse_search_results(raw)
    except (ValueError, ValidationError) as e:
        logger.error("Unusable quick-search output: %s", e)
        raise CallableError(ErrorCode.INTERNAL, "The assistant returned an unreadable answer.") from e

    logger.info("Quick search by %s returned %d results", caller_uid, len(results))
    return {"success": True, "results": [r.model_dump() for r in results]}
