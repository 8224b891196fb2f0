import json
import os
import threading

# Settings are read at import time; keep the app away from real services.
os.environ.setdefault("DATABASE_URL", "sqlite:///./data/test.db")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ["NOTIFICATION_WORKER_ENABLED"] = "false"
os.environ["TWILIO_ACCOUNT_SID"] = ""
os.environ["TWILIO_AUTH_TOKEN"] = ""

import pytest
from sqlalchemy.orm import sessionmaker

from backend.app.database import make_engine
from backend.app.models.generated import Base, Providers
from backend.app.services import events
from backend.app.services.errors import DeliveryFailure
from backend.app.services.notifications.channels import MessageService
from backend.app.services.notifications.dispatcher import NotificationDispatcher


class RecordingQueue:
    """Stands in for the Redis client used by emit_event (rpush only)."""

    def __init__(self):
        self._lock = threading.Lock()
        self.items: list[tuple[str, str]] = []

    def rpush(self, name: str, value: str) -> int:
        with self._lock:
            self.items.append((name, value))
            return len(self.items)

    @property
    def events(self) -> list[dict]:
        return [json.loads(value) for _, value in self.items]

    def types(self) -> list[str]:
        return [event["type"] for event in self.events]


class ScriptedMessageService(MessageService):
    """Records messages; fails every send while `fail` is set."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[tuple[str, str, str]] = []
        self.attempts = 0

    async def send_whatsapp(self, to: str, body: str) -> None:
        self._send("whatsapp", to, body)

    async def send_sms(self, to: str, body: str) -> None:
        self._send("sms", to, body)

    def _send(self, channel: str, to: str, body: str) -> None:
        self.attempts += 1
        if self.fail:
            raise DeliveryFailure("channel down")
        self.sent.append((channel, to, body))


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'booking.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def queue(monkeypatch):
    recording = RecordingQueue()
    monkeypatch.setattr(events, "redis_client", recording)
    return recording


@pytest.fixture
def provider(db):
    obj = Providers(name="Dr. Ahmad Ali", slug="dr-ahmad-ali", phone="+963912345678")
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def other_provider(db):
    obj = Providers(name="Dr. Lina Haddad", slug="dr-lina-haddad", whatsapp_number="+963933333333")
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def channel():
    return ScriptedMessageService()


@pytest.fixture
def dispatcher(session_factory, channel):
    return NotificationDispatcher(session_factory, channel)
