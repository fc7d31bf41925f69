# app/core/context.py
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from app.config import Settings
from app.core.firebase import init_firebase
from app.core.gemini import GeminiClient
from app.repositories.invite_repository import InviteRepository
from app.repositories.project_repository import ProjectRepository
from app.repositories.user_repository import UserRepository
from app.services.sources import SourceConnector


@dataclass
class AppContext:
    """Process-wide dependencies, built once at startup and shared by every request."""

    settings: Settings
    auth: Any  # firebase_admin.auth or a compatible verifier
    users: UserRepository
    invites: InviteRepository
    projects: ProjectRepository
    llm: GeminiClient
    connectors: List[SourceConnector] = field(default_factory=list)


def build_context(settings: Settings, connectors: Optional[Sequence[SourceConnector]] = None) -> AppContext:
    db, auth = init_firebase(settings)
    users = UserRepository(db)
    return AppContext(
        settings=settings,
        auth=auth,
        users=users,
        invites=InviteRepository(db, users),
        projects=ProjectRepository(db),
        llm=GeminiClient(settings.GEMINI_API_KEY, settings.GEMINI_MODEL, settings.GEMINI_TIMEOUT),
        connectors=list(connectors or []),
    )
