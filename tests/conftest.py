"""
Pytest config.

Local imports like ``import app`` rely on the repo root being on sys.path; pin
that here so a global ``pytest`` entrypoint can always find the package.
"""

from __future__ import annotations

import asyncio
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest


def _ensure_repo_root_on_syspath() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


_ensure_repo_root_on_syspath()

from fastapi import BackgroundTasks  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import undefer  # noqa: E402

from app.config import Settings  # noqa: E402
from app.database import build_session_factory, init_db  # noqa: E402
from app.main import create_app  # noqa: E402
from app.models.admin import Admin  # noqa: E402
from app.services.auth_service import AuthService  # noqa: E402
from app.services.email_service import EmailOutbox  # noqa: E402
from app.services.google_auth import GoogleIdentityVerifier  # noqa: E402
from app.services.event_service import EventService  # noqa: E402
from app.utils.exceptions import ImageUploadFailed  # noqa: E402
from app.utils.jwt_handler import SessionIssuer  # noqa: E402

TEST_SECRET = "test-secret-key-for-testing-purposes-only"


class RecordingEmailService:
    """Stands in for the SMTP-backed EmailService and keeps what would have been sent."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[str, str, str | None]] = []

    async def send_otp_email(self, to_email: str, name: str, otp: str) -> None:
        if self.fail:
            raise RuntimeError("SMTP unavailable")
        self.sent.append(("otp", to_email, otp))

    async def send_welcome_email(self, to_email: str, name: str) -> None:
        if self.fail:
            raise RuntimeError("SMTP unavailable")
        self.sent.append(("welcome", to_email, None))

    def otps_for(self, email: str) -> list[str]:
        return [code for kind, to, code in self.sent if kind == "otp" and to == email]

    def kinds_for(self, email: str) -> list[str]:
        return [kind for kind, to, _ in self.sent if to == email]


class FakeImageStore:
    """Stands in for Cloudinary; hands out stable URLs and records removals."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.uploads: list[str] = []
        self.destroyed: list[str] = []

    def upload(self, content: bytes, filename: str) -> str:
        if self.fail:
            raise ImageUploadFailed()
        url = f"https://res.cloudinary.com/demo/image/upload/dev-events/poster{len(self.uploads) + 1}.png"
        self.uploads.append(url)
        return url

    def destroy(self, url: str) -> None:
        self.destroyed.append(url)


class Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def run_background(tasks: BackgroundTasks) -> None:
    asyncio.run(tasks())
    tasks.tasks.clear()


def load_admin(db, email: str) -> Admin | None:
    """Fetch an admin with every deferred column, bypassing the identity map."""
    return (
        db.query(Admin)
        .options(undefer(Admin.hashed_password), undefer(Admin.otp), undefer(Admin.otp_expiry))
        .populate_existing()
        .filter(Admin.email == email)
        .first()
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        SECRET_KEY=TEST_SECRET,
        ENVIRONMENT="development",
    )


@pytest.fixture
def session_factory(settings):
    factory = build_session_factory(settings.DATABASE_URL)
    init_db(factory)
    yield factory
    factory.kw["bind"].dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def mailer() -> RecordingEmailService:
    return RecordingEmailService()


@pytest.fixture
def background_tasks() -> BackgroundTasks:
    return BackgroundTasks()


@pytest.fixture
def clock() -> Clock:
    return Clock(datetime(2026, 1, 1, 12, 0, 0))


@pytest.fixture
def sessions(settings) -> SessionIssuer:
    return SessionIssuer(settings)


@pytest.fixture
def service(db, sessions, mailer, background_tasks, clock, settings) -> AuthService:
    return AuthService(
        db=db,
        sessions=sessions,
        outbox=EmailOutbox(mailer, background_tasks),
        google=GoogleIdentityVerifier(settings),
        clock=clock,
    )


@pytest.fixture
def images() -> FakeImageStore:
    return FakeImageStore()


@pytest.fixture
def events(db, images) -> EventService:
    return EventService(db=db, images=images)


@pytest.fixture
def app(settings, mailer, images):
    application = create_app(settings)
    application.state.email_service = mailer
    application.state.image_store = images
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def event_fields(title: str = "React Summit 2026", **overrides) -> dict:
    """Form fields for a complete event, as the admin form submits them."""
    fields = {
        "title": title,
        "description": "A day of talks about React.",
        "overview": "Talks, workshops and networking.",
        "venue": "Expo Hall",
        "location": "Amsterdam, NL",
        "date": "2026-06-12",
        "time": "09:00",
        "mode": "offline",
        "audience": "Frontend developers",
        "organizer": "GitNation",
        "tags": '["react", "frontend"]',
        "agenda": '["Keynote", "Workshops"]',
    }
    fields.update(overrides)
    return fields
