from __future__ import annotations

import asyncio
import os
import tempfile
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import pytest
from passlib.context import CryptContext

# Settings are read at import time, so the environment must be ready before any
# counseling module is imported.
_TMP_DIR = Path(tempfile.mkdtemp(prefix="counseling-tests-"))
ADMIN_USERNAME = "counselor"
ADMIN_PASSWORD = "correct horse battery"

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR / 'test.db'}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_USERNAME"] = ADMIN_USERNAME
os.environ["ADMIN_PASSWORD_HASH"] = CryptContext(schemes=["bcrypt"], bcrypt__rounds=4).hash(ADMIN_PASSWORD)
os.environ["SEED_DEFAULT_SCHEDULE"] = "false"
os.environ["TIMEZONE"] = "UTC"
os.environ["SMTP_HOST"] = ""

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

import counseling.models  # noqa: E402,F401 - register tables
from counseling.core.db import async_session_maker, engine  # noqa: E402
from counseling.models.schedule import ScheduleSlotRule  # noqa: E402


async def _reset_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)


@pytest.fixture(autouse=True)
def fresh_db() -> None:
    asyncio.run(_reset_db())


def with_session(fn: Callable[[AsyncSession], Awaitable[Any]]) -> Any:
    """Run `fn(session)` in its own event loop and commit, like one request would."""

    async def _run() -> Any:
        async with async_session_maker() as session:
            result = await fn(session)
            await session.commit()
            return result

    return asyncio.run(_run())


def add_rule(
    weekday: int,
    time_of_day: str,
    *,
    online: bool = True,
    offline: bool = True,
    active: bool = True,
) -> ScheduleSlotRule:
    async def _add(session: AsyncSession) -> ScheduleSlotRule:
        rule = ScheduleSlotRule(
            weekday=weekday,
            time_of_day=time_of_day,
            online_allowed=online,
            offline_allowed=offline,
            active=active,
        )
        session.add(rule)
        await session.flush()
        await session.refresh(rule)
        return rule

    return with_session(_add)


def intake_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "appointment_date": "2030-01-07",
        "appointment_time": "10:00",
        "consultation_type": "regular",
        "consultation_mode": "online",
        "name": "Lin",
        "gender": "female",
        "birth_date": "1995-04-12",
        "contact_phone": "13800000000",
        "contact_email": "b@x.com",
        "consultation_topics": ["anxiety", "work stress"],
        "situation_description": "Trouble sleeping before deadlines.",
        "data_collection_consent": True,
        "confidentiality_consent": True,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def client() -> TestClient:
    from counseling.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_headers(client: TestClient) -> dict[str, str]:
    resp = client.post(
        "/api/admin/login",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}
