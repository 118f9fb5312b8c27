"""Master test fixtures.

Mail environment variables are cleared BEFORE any application imports so
that ``config.Settings()`` initialises with no transport configured and
never touches a real mail server.
"""

import os
import tempfile

# ── Clear mail env vars before any app import ───────────────────────
MAIL_ENV_VARS = [
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_SECURE",
    "SMTP_USER",
    "SMTP_PASS",
    "SMTP_PASS_FILE",
    "SMTP_FROM",
    "MAIL_TO",
    "FORWARD_TO",
    "APP_MAILBOX",
    "GRAPH_TENANT_ID",
    "GRAPH_CLIENT_ID",
    "GRAPH_CLIENT_SECRET",
    "GRAPH_CLIENT_SECRET_FILE",
    "MAIL_TIMEOUT_SECONDS",
]
for _name in MAIL_ENV_VARS:
    os.environ.pop(_name, None)
os.environ["SUBMISSIONS_DIR"] = tempfile.mkdtemp(prefix="quote-submissions-")

import pytest

from httpx import ASGITransport, AsyncClient

# Now safe to import application code
from config import Settings, get_settings

SMTP_ENV = {
    "SMTP_HOST": "smtp.example.com",
    "SMTP_PORT": "587",
    "SMTP_USER": "quotes@example.com",
    "SMTP_PASS": "smtp-password",
    "MAIL_TO": "sales@example.com",
}

GRAPH_ENV = {
    "GRAPH_TENANT_ID": "tenant-1",
    "GRAPH_CLIENT_ID": "client-1",
    "GRAPH_CLIENT_SECRET": "graph-secret",
    "APP_MAILBOX": "quotes@example.com",
    "FORWARD_TO": "sales@example.com",
}


@pytest.fixture
def submissions_dir(tmp_path):
    return tmp_path / "submissions"


@pytest.fixture
def make_settings(monkeypatch, submissions_dir):
    """Build a fresh ``Settings`` from a clean mail environment plus ``env``."""

    def _make(**env: str) -> Settings:
        for name in MAIL_ENV_VARS:
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("SUBMISSIONS_DIR", str(submissions_dir))
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return Settings()

    return _make


@pytest.fixture
def app_settings(make_settings) -> Settings:
    """Settings used by ``test_client``; override in a test class to configure mail."""
    return make_settings()


@pytest.fixture
async def test_client(app_settings: Settings):
    """HTTPX async client wired to the FastAPI app, with settings override.

    The startup event is NOT run.
    """
    from main import app

    app.dependency_overrides[get_settings] = lambda: app_settings
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def saved_records(submissions_dir):
    """Callable listing saved submission directories (staging dirs excluded)."""

    def _list() -> list:
        if not submissions_dir.exists():
            return []
        return sorted(
            p for p in submissions_dir.iterdir() if p.is_dir() and not p.name.startswith(".")
        )

    return _list


@pytest.fixture
def smtp_env() -> dict:
    return dict(SMTP_ENV)


@pytest.fixture
def graph_env() -> dict:
    return dict(GRAPH_ENV)
