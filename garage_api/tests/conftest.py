import os

# Settings are read when the app module is imported.
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")
os.environ.setdefault("AUTO_SEED", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("POSTGRES_URL", "sqlite+aiosqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Callable, Dict

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from src.api.main import app
from src.db import models  # noqa: F401
from src.db.base import Base
from src.db.models.maintenance import ServiceType
from src.db.seed import SERVICE_TYPE_NAMES
from src.db.session import get_async_session

PASSWORD = "Secret123!"


def _enable_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def database_url(tmp_path) -> str:
    """Fresh SQLite file with the full schema and the service types."""
    path = tmp_path / "garage.db"
    engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        session.add_all([ServiceType(name=name) for name in SERVICE_TYPE_NAMES])
        session.commit()
    engine.dispose()
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def session_maker(database_url) -> async_sessionmaker[AsyncSession]:
    engine = create_async_engine(database_url, poolclass=NullPool)
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False, autocommit=False)


@pytest.fixture
async def session(session_maker):
    async with session_maker() as s:
        yield s


@pytest.fixture
def client(session_maker):
    async def _session_override():
        async with session_maker() as s:
            yield s

    app.dependency_overrides[get_async_session] = _session_override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def register(client: TestClient, email: str, password: str = PASSWORD) -> dict:
    res = client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "first_name": "Test", "last_name": "User"},
    )
    assert res.status_code == 201, res.text
    return res.json()


def login(client: TestClient, email: str, password: str = PASSWORD, **extra) -> dict:
    res = client.post("/api/v1/auth/login", json={"email": email, "password": password, **extra})
    assert res.status_code == 200, res.text
    return res.json()


def bearer(tokens: dict) -> Dict[str, str]:
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest.fixture
def make_user(client) -> Callable[[str], Dict[str, str]]:
    """Register and log in a user; returns the Authorization headers."""

    def _make(email: str) -> Dict[str, str]:
        register(client, email)
        return bearer(login(client, email))

    return _make


@pytest.fixture
def auth_headers(make_user) -> Dict[str, str]:
    return make_user("driver@example.com")


@pytest.fixture
def make_vehicle(client):
    def _make(headers: Dict[str, str], **overrides) -> dict:
        payload = {
            "brand": "Toyota",
            "model": "Corolla",
            "engine_type": "Hybrid",
            "manufactured_year": 2020,
            "energy_types": ["Gasoline"],
        }
        payload.update(overrides)
        res = client.post("/api/v1/vehicles", json=payload, headers=headers)
        assert res.status_code == 201, res.text
        return res.json()

    return _make
