import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from doc_chaser.config import Settings
from doc_chaser.database import get_db, init_db
from doc_chaser.dependencies import get_gateway, get_settings
from doc_chaser.main import app
from doc_chaser.models.document_request import DocumentRequest
from doc_chaser.services.messaging import MessageGateway, SendOutcome
from doc_chaser.utils.filesystem import ensure_data_dirs
from doc_chaser.utils.timestamps import format_timestamp

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def hours_ago(hours: float, now: datetime = NOW) -> str:
    return format_timestamp(now - timedelta(hours=hours))


def hours_ahead(hours: float, now: datetime = NOW) -> str:
    return format_timestamp(now + timedelta(hours=hours))


class FakeProvider:
    """Records every send; destinations listed in `failures` are rejected."""

    def __init__(self):
        self.sent = []
        self.failures: dict[str, str] = {}

    def fail(self, destination: str, error: str = "REJECTED"):
        self.failures[destination] = error

    async def send(self, channel, destination, content):
        self.sent.append((channel, destination, content))
        if destination in self.failures:
            return SendOutcome.failure(self.failures[destination], "provider")
        return SendOutcome(success=True, debug={"fake": True})

    def messages_to(self, destination: str) -> list:
        return [content for _, dest, content in self.sent if dest == destination]


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def tmp_data(tmp_path):
    data_path = tmp_path / "DocChaser"
    ensure_data_dirs(data_path)
    return data_path


@pytest.fixture
def test_settings(tmp_data):
    return Settings(
        data_path=tmp_data,
        app_url="https://docs.example.com",
        cron_secret=None,
        broker_phone="+15550000001",
        broker_email="broker@example.com",
        clicksend_username="user",
        clicksend_api_key="key",
        clicksend_email_address_id="32592",
    )


@pytest.fixture
def test_db(tmp_data):
    db_path = tmp_data / "db.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    init_db(db_path)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def db_session(test_db):
    session = test_db()
    yield session
    session.close()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def gateway(fake_provider, test_settings):
    return MessageGateway(fake_provider, test_settings)


@pytest.fixture
def make_request(db_session):
    """Insert a request row directly, with full control over its timestamps."""

    def _make(**overrides) -> DocumentRequest:
        values = {
            "id": str(uuid.uuid4()),
            "client_name": "Jane Doe",
            "client_phone": "+15550102030",
            "client_email": None,
            "document_type": "Proof of Income",
            "created_at": hours_ago(1),
            "deadline": None,
            "status": "pending",
            "upload_token": uuid.uuid4().hex,
            "upload_link": None,
            "last_reminder_at": None,
            "reminders_stopped": False,
        }
        values.update(overrides)
        request = DocumentRequest(**values)
        db_session.add(request)
        db_session.commit()
        return request

    return _make


@pytest.fixture
def client(test_db, test_settings, gateway):
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_gateway] = lambda: gateway
    c = TestClient(app)
    yield c
    app.dependency_overrides.clear()
