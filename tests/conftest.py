"""Pytest configuration and fixtures."""

import os

# Settings are read at import time by some modules, so set these before any app import
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("SIGNAL_ENV", "test")

import pytest
from fastapi.testclient import TestClient

from tests.fakes.fake_anthropic import FakeAnthropic
from tests.fakes.fake_supabase import FakeSupabase

# Modules that bind get_supabase at import time
_DB_MODULES = (
    "app.db.supabase_client",
    "app.db.users",
    "app.db.vision",
    "app.db.focus_areas",
    "app.db.archetypes",
    "app.db.hypotheses",
    "app.db.ideas",
    "app.db.decisions",
    "app.db.workspace",
)


@pytest.fixture(autouse=True)
def fake_db(monkeypatch):
    """Route every database call to an empty in-memory store."""
    db = FakeSupabase()
    for module in _DB_MODULES:
        monkeypatch.setattr(f"{module}.get_supabase", lambda: db)
    return db


@pytest.fixture
def anthropic(monkeypatch):
    """Install a scripted Anthropic client: ``client = anthropic(reply, ...)``."""

    def install(*replies) -> FakeAnthropic:
        client = FakeAnthropic(*replies)
        monkeypatch.setattr("app.core.llm.get_anthropic_client", lambda: client)
        monkeypatch.setattr("app.chains.research_augmentation.get_anthropic_client", lambda: client)
        return client

    return install


@pytest.fixture
def client():
    from app.main import app

    return TestClient(app)


@pytest.fixture
def login(fake_db):
    """Create a user with the given role and return bearer auth headers."""

    def _login(role: str = "team", user_id: str = "user-1") -> dict[str, str]:
        token = f"token-{user_id}"
        fake_db.auth.add_token(token, user_id, email=f"{user_id}@example.com")
        fake_db.seed(
            "users",
            {"id": user_id, "email": f"{user_id}@example.com", "display_name": "Jordan Lee", "role": role},
        )
        return {"Authorization": f"Bearer {token}"}

    return _login
