"""
Shared test fixtures for the employee directory tests.
"""
import os
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

# Keep developer .env files and shell variables out of the tests
for _var in ("DATABASE_URL", "DB_HOST", "DB_USER", "DB_PASSWORD", "DB_NAME", "ALLOWED_ORIGINS"):
    os.environ.pop(_var, None)

from employee_directory.core.config import Settings  # noqa: E402
from employee_directory.core.db import build_session_factory, init_db  # noqa: E402
from employee_directory.core.exceptions import DuplicateKeyError, NotFoundError  # noqa: E402
from employee_directory.main import create_app  # noqa: E402
from employee_directory.services.employee_store import (  # noqa: E402
    UPDATABLE_FIELDS,
    EmployeeStore,
)

TEST_ORIGIN = "http://localhost:3000"


@pytest.fixture
def settings() -> Settings:
    """Settings for tests: in-memory SQLite, cheap bcrypt, one allowed origin."""
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        BCRYPT_ROUNDS=4,
        ALLOWED_ORIGINS=[TEST_ORIGIN],
    )


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine shared across sessions via StaticPool."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def store(engine: AsyncEngine) -> EmployeeStore:
    return EmployeeStore(build_session_factory(engine))


@pytest_asyncio.fixture
async def client(settings: Settings, store: EmployeeStore) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client talking to the app in-process, backed by the SQLite store."""
    app = create_app(settings, store=store)
    # Starlette re-raises after sending the 500; we only care about the response
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def ann_payload() -> dict:
    return {
        "name": "Ann Lee",
        "email": "ann@x.com",
        "department": "Eng",
        "position": "SWE",
        "salary": 90000,
    }


class FakeEmployeeStore:
    """
    In-memory stand-in for EmployeeStore used by the handler tests.
    Set `fail_with` to make every call raise that exception.
    """

    def __init__(self):
        self.rows = {}
        self.next_id = 1
        self.fail_with = None
        self.calls = []

    def _check(self, name):
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    def _active(self):
        return [row for row in self.rows.values() if row.deleted_at is None]

    def _email_taken(self, email, exclude_id=None):
        return any(
            row.email == email and row.id != exclude_id
            for row in self._active()
        )

    async def create(self, fields):
        self._check("create")
        if self._email_taken(fields["email"]):
            raise DuplicateKeyError("email already in use")
        now = datetime.now(timezone.utc)
        row = SimpleNamespace(
            id=self.next_id,
            created_at=now,
            updated_at=now,
            deleted_at=None,
            **fields,
        )
        self.rows[row.id] = row
        self.next_id += 1
        return row

    async def list_active(self):
        self._check("list_active")
        return self._active()

    async def search(self, term):
        self._check("search")
        term = term.lower()
        return [
            row for row in self._active()
            if term in row.name.lower()
            or term in row.email.lower()
            or term in row.position.lower()
        ]

    async def get_active(self, employee_id):
        self._check("get_active")
        row = self.rows.get(employee_id)
        if row is None or row.deleted_at is not None:
            raise NotFoundError(f"Employee {employee_id} not found")
        return row

    async def update(self, employee_id, changes):
        self._check("update")
        row = await self.get_active(employee_id)
        if "email" in changes and self._email_taken(changes["email"], exclude_id=employee_id):
            raise DuplicateKeyError("email already in use")
        for field in UPDATABLE_FIELDS:
            if field in changes:
                setattr(row, field, changes[field])
        row.updated_at = datetime.now(timezone.utc)
        return row

    async def soft_delete(self, employee_id):
        self._check("soft_delete")
        row = await self.get_active(employee_id)
        row.deleted_at = datetime.now(timezone.utc)


@pytest.fixture
def fake_store() -> FakeEmployeeStore:
    return FakeEmployeeStore()
