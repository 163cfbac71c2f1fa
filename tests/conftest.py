import os
import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Settings are read at import time, so the test database must be chosen first.
_DB_DIR = Path(tempfile.mkdtemp(prefix="tal-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR / 'test.db'}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["SUPER_ADMIN_EMAILS"] = "root@example.com"

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import update  # noqa: E402

from app.database import AsyncSessionLocal  # noqa: E402
from app.main import app  # noqa: E402
from app.models.task import Task  # noqa: E402

PASSWORD = "correct-horse-battery"


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as test_client:
        yield test_client


def _register_and_login(client, email: str, full_name: str = "Test User"):
    response = client.post(
        "/auth/register",
        json={"email": email, "full_name": full_name, "password": PASSWORD},
    )
    assert response.status_code == 200, response.text
    login = client.post("/auth/login", json={"email": email, "password": PASSWORD})
    assert login.status_code == 200, login.text
    token = login.json()["access_token"]
    return login.json()["user"], {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(client):
    """Register a fresh user; returns (user_json, auth_headers)."""

    def _make(full_name: str = "Test User"):
        return _register_and_login(client, f"user-{uuid.uuid4().hex[:12]}@example.com", full_name)

    return _make


@pytest.fixture(scope="session")
def admin(client):
    return _register_and_login(client, "root@example.com", "Root Admin")


async def _set_created_at(task_id: int, created_at: datetime):
    async with AsyncSessionLocal() as session:
        await session.execute(update(Task).where(Task.id == task_id).values(created_at=created_at))
        await session.commit()


@pytest.fixture
def backdate(client):
    """Move a stored task's creation time, which the API never accepts from clients."""

    def _backdate(task_id: int, created_at: str):
        when = datetime.fromisoformat(created_at.replace("Z", "+00:00")).astimezone(timezone.utc)
        client.portal.call(_set_created_at, task_id, when)

    return _backdate
