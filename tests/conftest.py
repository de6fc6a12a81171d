"""
Test Configuration and Fixtures
Provides a scripted store double and an HTTP client wired to it
"""
import pytest
import pytest_asyncio
from collections import deque
from datetime import datetime
from decimal import Decimal
from httpx import ASGITransport, AsyncClient

from estatelink.config import settings
from estatelink.database.bootstrap import SchemaReport
from estatelink.main import app
from estatelink.utils.dependencies import get_optional_store, get_schema_report, get_store


def normalize_sql(sql: str) -> str:
    return " ".join(sql.split())


class ScriptedStore:
    """
    Stands in for the database handle.
    Records every statement and answers each call with the next queued result;
    queued exceptions are raised instead.
    """

    def __init__(self):
        self.calls = []
        self.responses = deque()

    def queue(self, *responses):
        self.responses.extend(responses)

    async def _next(self, method, sql, args):
        self.calls.append((method, normalize_sql(sql), args))
        if not self.responses:
            return None
        response = self.responses.popleft()
        if isinstance(response, Exception):
            raise response
        return response

    async def fetch(self, sql, *args):
        return (await self._next("fetch", sql, args)) or []

    async def fetchrow(self, sql, *args):
        return await self._next("fetchrow", sql, args)

    async def fetchval(self, sql, *args):
        return await self._next("fetchval", sql, args)

    async def execute(self, sql, *args):
        await self._next("execute", sql, args)

    async def ping(self):
        return True

    @property
    def statements(self):
        return [sql for _, sql, _ in self.calls]


def account_row(**overrides):
    row = {
        "id": 1,
        "username": "alice",
        "fullName": "Alice A",
        "email": "a@x.com",
        "phoneNumber": "123456789",
        "accountType": "tenant",
        "isActive": True,
        "lastLogin": None,
        "createdAt": datetime(2024, 1, 1, 12, 0, 0),
    }
    row.update(overrides)
    return row


def property_row(**overrides):
    row = {
        "id": 10,
        "landlordId": 1,
        "title": "Flat",
        "description": None,
        "location": "Town",
        "price": Decimal("500.00"),
        "propertyType": None,
        "bedrooms": None,
        "bathrooms": None,
        "area": None,
        "picture": None,
        "video": None,
        "verificationDocument": None,
        "status": "pending",
        "paymentStatus": "pending",
        "paymentMethod": None,
        "createdAt": datetime(2024, 1, 2, 9, 30, 0),
        "updatedAt": datetime(2024, 1, 2, 9, 30, 0),
    }
    row.update(overrides)
    return row


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    """Cheapest bcrypt cost keeps the suite fast"""
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def store():
    return ScriptedStore()


@pytest.fixture
def schema():
    return SchemaReport()


@pytest_asyncio.fixture(scope="function")
async def client(store, schema):
    """HTTP client whose requests hit the scripted store"""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_optional_store] = lambda: store
    app.dependency_overrides[get_schema_report] = lambda: schema

    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


def api(path: str) -> str:
    return f"{settings.API_PREFIX}{path}"
