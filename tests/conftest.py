"""
Pytest configuration and shared fixtures.

Services run against in-memory repositories with the same contract as the
Firestore-backed ones; the API is driven through httpx over ASGI with an
injected AppContext, so no Firebase project is needed.
"""

import copy
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import AsyncGenerator
from uuid import uuid4

import pytest
from httpx import AsyncClient, ASGITransport

from app.config import Settings
from app.core.context import AppContext
from app.models.assistant import CalendarEvent, Email, StoredFile
from app.services.sources import SourceConnector


# ============================================================================
# In-memory repositories
# ============================================================================

class InMemoryUsers:
    def __init__(self):
        self.docs = {}
        self.fail = False

    def get(self, uid):
        if self.fail:
            raise RuntimeError("users unavailable")
        doc = self.docs.get(uid)
        return copy.deepcopy(doc) if doc is not None else None

    def merge(self, uid, data):
        if self.fail:
            raise RuntimeError("users unavailable")
        self.docs.setdefault(uid, {}).update(copy.deepcopy(data))


class InMemoryInvites:
    def __init__(self, users: InMemoryUsers):
        self.docs = {}
        self.users = users
        self.fail = False
        # hook run between the pre-check and the transaction, to simulate races
        self.before_accept = None

    def create(self, code, data):
        if self.fail:
            raise RuntimeError("invites unavailable")
        if code in self.docs:
            raise RuntimeError(f"invites/{code} already exists")
        self.docs[code] = copy.deepcopy(data)

    def get(self, code):
        if self.fail:
            raise RuntimeError("invites unavailable")
        doc = self.docs.get(code)
        return copy.deepcopy(doc) if doc is not None else None

    def accept(self, code, invite_update, user_uid, user_data, user_defaults):
        if self.before_accept:
            self.before_accept()
        invite = self.docs.get(code)
        if invite is None or invite.get("status") != "pending":
            return False

        existing = self.users.docs.get(user_uid, {})
        payload = dict(user_data)
        for k, v in user_defaults.items():
            if k not in existing:
                payload[k] = v

        # both writes or neither
        new_invite = {**invite, **invite_update}
        new_user = {**existing, **copy.deepcopy(payload)}
        self.docs[code] = new_invite
        self.users.docs[user_uid] = new_user
        return True


class InMemoryProjects:
    def __init__(self):
        self.docs = {}
        self.fail = False

    def _check(self):
        if self.fail:
            raise RuntimeError("projects unavailable")

    def new_id(self):
        self._check()
        return uuid4().hex[:20]

    def create(self, project_id, data):
        self._check()
        self.docs[project_id] = copy.deepcopy(data)

    def get(self, project_id):
        self._check()
        doc = self.docs.get(project_id)
        return copy.deepcopy(doc) if doc is not None else None

    def list(self, member_uid=None):
        self._check()
        rows = [
            (pid, copy.deepcopy(d))
            for pid, d in reversed(list(self.docs.items()))
            if member_uid is None or member_uid in d.get("members", [])
        ]
        rows.sort(key=lambda row: row[1]["createdAt"], reverse=True)
        return rows

    def update(self, project_id, data):
        self._check()
        self.docs[project_id].update(copy.deepcopy(data))

    def delete(self, project_id):
        self._check()
        del self.docs[project_id]


# ============================================================================
# External service fakes
# ============================================================================

class FakeAuth:
    """Token "<uid>" verifies as that uid; tokens starting with "bad" are rejected."""

    class EmailAlreadyExistsError(Exception):
        pass

    def __init__(self):
        self.created = {}

    def verify_id_token(self, token):
        if token.startswith("bad"):
            raise ValueError("invalid token")
        return {"uid": token, "email": f"{token}@example.com"}

    def create_user(self, email, password, display_name=None, **kwargs):
        if email in self.created:
            raise self.EmailAlreadyExistsError(email)
        uid = f"uid-{len(self.created) + 1}"
        self.created[email] = uid
        return SimpleNamespace(uid=uid, email=email, display_name=display_name)


class FakeLLM:
    def __init__(self):
        self.prompts = []
        self.response = "ok"

    async def generate(self, prompt, json_output=False):
        self.prompts.append((prompt, json_output))
        return self.response


class FakeConnector(SourceConnector):
    name = "fake"

    async def emails(self, uid):
        return [Email(id="9", source="Gmail", sender="john@example.com",
                      subject="Project Update", body="Please review the latest project update.")]

    async def files(self, uid):
        return [StoredFile(id="f1", source="Dropbox", name="roadmap.pdf", path="/docs/roadmap.pdf")]

    async def calendar_events(self, uid):
        start = datetime(2026, 10, 20, 9, 0, tzinfo=timezone.utc)
        return [CalendarEvent(id="c1", source="Google Calendar", title="Launch review",
                              start_time=start, end_time=start.replace(hour=10))]


class BrokenConnector(SourceConnector):
    name = "broken"

    async def emails(self, uid):
        raise ConnectionError("mail provider down")


# ============================================================================
# Fixtures
# ============================================================================

ADMIN = "admin"
ALICE = "alice"
BOB = "bob"


@pytest.fixture
def settings() -> Settings:
    return Settings(APP_BASE_URL="https://collabflow.test", FIREBASE_API_KEY="test-key")


@pytest.fixture
def ctx(settings) -> AppContext:
    users = InMemoryUsers()
    users.docs[ADMIN] = {"email": "admin@example.com", "role": "Administrator", "onboarded": True}
    users.docs[ALICE] = {"email": "alice@example.com", "role": "User", "onboarded": True}
    users.docs[BOB] = {"email": "bob@example.com", "role": "User", "onboarded": True}
    return AppContext(
        settings=settings,
        auth=FakeAuth(),
        users=users,
        invites=InMemoryInvites(users),
        projects=InMemoryProjects(),
        llm=FakeLLM(),
        connectors=[FakeConnector()],
    )


@pytest.fixture
async def async_client(ctx) -> AsyncGenerator[AsyncClient, None]:
    from app.main import create_app

    app = create_app(ctx)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


def bearer(uid: str) -> dict:
    return {"Authorization": f"Bearer {uid}"}


@pytest.fixture
def auth_headers():
    return bearer


@pytest.fixture
def broken_connector():
    return BrokenConnector()
