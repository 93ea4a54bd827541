"""
Shared pytest fixtures for the LeaderDojo test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - headers / other_headers: identity headers for two users
    - user_id / other_user_id: two independent owners
    - make_project / project: committed Projects owned by user_id
    - provider / gateway: scripted LLM provider behind the real AIGateway
    - use_gateway: installs that gateway on the app for API tests
"""

import json

import pytest

from leaderdojo import create_app
from leaderdojo.ai.gateway import AIGateway, LLMProvider
from leaderdojo.models import db as _db
from leaderdojo.repositories import ProjectsRepository

USER_ID = "user-alice"
OTHER_USER_ID = "user-bob"


# ── Scripted provider ────────────────────────────────────────────────────


class ScriptedProvider(LLMProvider):
    """LLMProvider that replays queued replies and records every call.

    Each queued item is one of:
        dict       → returned as JSON content
        str        → returned verbatim as content
        Exception  → raised from chat()
    """

    name = "scripted"

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []

    def queue(self, *replies):
        self.replies.extend(replies)

    def chat(self, messages, model, **kwargs):
        self.calls.append({"messages": messages, "model": model, **kwargs})
        if not self.replies:
            raise RuntimeError("ScriptedProvider: no reply queued")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        content = json.dumps(reply) if isinstance(reply, dict) else reply
        return {"content": content, "prompt_tokens": 10, "completion_tokens": 20, "model": model}

    @property
    def last_prompt(self) -> str:
        return "\n".join(m["content"] for m in self.calls[-1]["messages"])


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def headers():
    return {"X-User-Id": USER_ID}


@pytest.fixture()
def other_headers():
    return {"X-User-Id": OTHER_USER_ID}


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def user_id():
    return USER_ID


@pytest.fixture()
def other_user_id():
    return OTHER_USER_ID


@pytest.fixture()
def make_project():
    """Factory: make_project(user_id=USER_ID, **values) → committed Project."""
    def _make(user_id=USER_ID, **values):
        payload = {"name": "Apollo Migration", "description": "Move billing to the new platform"}
        payload.update(values)
        created = ProjectsRepository().create(user_id, payload)
        _db.session.commit()
        return created
    return _make


@pytest.fixture()
def project(make_project):
    """Active priority-4 project owned by USER_ID (committed)."""
    return make_project(priority=4)


@pytest.fixture()
def provider():
    return ScriptedProvider()


@pytest.fixture()
def gateway(provider):
    return AIGateway(provider, model="test-model")


@pytest.fixture()
def use_gateway(app, gateway, monkeypatch):
    """Route the app's AI calls through the scripted provider."""
    monkeypatch.setitem(app.extensions, "ai_gateway", gateway)
    return gateway
