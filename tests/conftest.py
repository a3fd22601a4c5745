"""Shared fixtures.

Every test gets a fresh in-memory SQLite database, a clock it can move
forward and a mailer that records messages instead of talking to SMTP.
"""

from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from laphub.config import Settings
from laphub.container import build_services
from laphub.database import Database
from laphub.main import create_app
from laphub.schemas.errors import EmailSendError


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class RecordingMailer:
    def __init__(self, configured: bool = True, fail: bool = False) -> None:
        self.configured = configured
        self.fail = fail
        self.sent: list[tuple[str, str, str]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def send(self, recipient: str, subject: str, body: str) -> None:
        if self.fail:
            raise EmailSendError("Failed to reach SMTP server")
        self.sent.append((recipient, subject, body))

    def last_code(self) -> str:
        _, _, body = self.sent[-1]
        return body.split("Your code is ", 1)[1][:6]


@pytest.fixture()
def settings() -> Settings:
    return Settings(database_url="sqlite://", session_secret="test-secret")


@pytest.fixture()
def database(settings) -> Generator[Database, None, None]:
    db = Database(settings.database_url)
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture()
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture()
def services(settings, database, mailer, clock):
    return build_services(settings, database=database, mailer=mailer, clock=clock)


@pytest.fixture()
def client(settings, database, mailer, clock) -> Generator[TestClient, None, None]:
    app = create_app(settings, database=database, mailer=mailer, clock=clock)
    with TestClient(app) as test_client:
        yield test_client
