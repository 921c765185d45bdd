import asyncio
import base64
import itertools
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Settings are read at import time, so the environment has to be ready first.
_TMP_DIR = Path(tempfile.mkdtemp(prefix="asha-assist-tests-"))
TEST_SECRET = base64.b64encode(b"asha-assist-test-signing-key-000").decode()

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR / 'test.db'}"
os.environ["JWT_SECRET"] = TEST_SECRET
os.environ["TWILIO_ACCOUNT_SID"] = "AC-test"
os.environ["TWILIO_AUTH_TOKEN"] = "test-token"
os.environ["TWILIO_PHONE_NUMBER"] = "+15550000000"
os.environ["BOOTSTRAP_ADMIN_USERNAME"] = "admin"
os.environ["BOOTSTRAP_ADMIN_PASSWORD"] = "admin-pass"
os.environ["LOG_LEVEL"] = "WARNING"

from fastapi.testclient import TestClient  # noqa: E402

from asha_assist.database import Base, engine  # noqa: E402
from asha_assist.exceptions import DeliveryFailed, TranscriptionFailed  # noqa: E402
from asha_assist.main import app  # noqa: E402
from asha_assist.services.sms_service import get_sms_client  # noqa: E402
from asha_assist.services.transcription_service import (  # noqa: E402
    TranscriptionClient,
    get_transcription_client,
)


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeSms:
    def __init__(self):
        self.sent = []
        self.fail = False

    async def send(self, destination: str, message: str) -> None:
        if self.fail:
            raise DeliveryFailed("Failed to send OTP SMS. Please check phone number and Twilio configuration.")
        self.sent.append((destination, message))

    @property
    def last_code(self) -> str:
        return self.sent[-1][1].rsplit(" ", 1)[-1]


class FakeTranscriber(TranscriptionClient):
    def __init__(self):
        super().__init__("http://whisper.test/transcribe", "http://ai.test")
        self.response = '{"transcription": "patient reports mild fever"}'
        self.fail = False
        self.indexed = []

    async def transcribe(self, filename, content, content_type="application/octet-stream"):
        if self.fail:
            raise TranscriptionFailed("Speech service returned an error: 500")
        return self.response

    async def index(self, visit_id, transcript):
        self.indexed.append((visit_id, transcript))
        return True


class InMemoryStorage:
    """Storage double keeping entities in dicts and assigning sequential ids."""

    def __init__(self):
        self.users = {}
        self.patients = {}
        self.visits = {}
        self.records = {}
        self._ids = itertools.count(1)

    def _assign_id(self, entity):
        if entity.id is None:
            entity.id = next(self._ids)
        return entity

    async def find_user_by_username(self, username):
        return self.users.get(username)

    async def save_user(self, user):
        self.users[user.username] = self._assign_id(user)
        return user

    async def find_patient_by_phone(self, phone_number):
        return self.patients.get(phone_number)

    async def save_patient(self, patient):
        self.patients[patient.phone_number] = self._assign_id(patient)
        return patient

    async def find_visit_by_id(self, visit_id):
        return self.visits.get(visit_id)

    async def save_visit(self, visit):
        self._assign_id(visit)
        self.visits[visit.id] = visit
        return visit

    async def list_recent_visits_for_worker(self, username, limit):
        owned = [v for v in self.visits.values() if v.owner_username == username]
        owned.sort(key=lambda v: (v.created_at, v.id), reverse=True)
        return owned[:limit]

    async def find_medical_record_for_visit(self, visit_id):
        return self.records.get(visit_id)

    async def save_medical_record(self, record):
        self._assign_id(record)
        self.records[record.visit_id] = record
        return record


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def fake_sms():
    return FakeSms()


@pytest.fixture
def fake_transcriber():
    return FakeTranscriber()


@pytest.fixture
def storage():
    return InMemoryStorage()


async def _reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def client(fake_sms, fake_transcriber):
    """TestClient over a fresh SQLite schema with fake SMS and speech services."""
    asyncio.run(_reset_schema())
    app.dependency_overrides[get_sms_client] = lambda: fake_sms
    app.dependency_overrides[get_transcription_client] = lambda: fake_transcriber
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register_and_login(client: TestClient, username: str, password: str = "pw-123", full_name: str = None) -> str:
    resp = client.post(
        "/api/auth/register",
        json={"fullName": full_name or username.title(), "username": username, "password": password},
    )
    assert resp.status_code == 201, resp.text
    return login(client, username, password)


def login(client: TestClient, username: str, password: str) -> str:
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["accessToken"]
