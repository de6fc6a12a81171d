"""
Test Case Suite: Authentication Module
Test ID Range: TC-001 to TC-014

Registration, login and profile lookup over HTTP against a scripted store.
"""

import uuid
from datetime import datetime

import pytest
from httpx import AsyncClient

from estatelink.database.introspection import KeyKind
from estatelink.exceptions import UNIQUE_VIOLATION, IntegrityConflict
from estatelink.utils.security import hash_password
from tests.conftest import account_row, api

REGISTRATION = {
    "username": "alice",
    "fullName": "Alice A",
    "email": "a@x.com",
    "phoneNumber": "123456789",
    "password": "secret1",
}


class TestRegistration:
    @pytest.mark.asyncio
    async def test_tc001_register_valid_account(self, client: AsyncClient, store):
        """TC-001: Registration returns the created record without the password"""
        created = account_row()
        del created["isActive"], created["lastLogin"]
        store.queue(None, created)

        response = await client.post(api("/auth/register"), json=REGISTRATION)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "User registered successfully"
        assert body["data"]["username"] == "alice"
        assert body["data"]["accountType"] == "tenant"
        assert "password" not in body["data"]

        insert_args = store.calls[1][2]
        assert insert_args[4] == "tenant"
        assert insert_args[5] != "secret1"
        assert insert_args[5].startswith("$2")

    @pytest.mark.asyncio
    async def test_tc002_register_phone_not_nine_digits(self, client: AsyncClient, store):
        """TC-002: Phone numbers must be exactly 9 digits"""
        response = await client.post(api("/auth/register"), json={**REGISTRATION, "phoneNumber": "12345"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Phone number must be exactly 9 digits"
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_tc003_register_duplicate_username(self, client: AsyncClient, store):
        """TC-003: Same handle with a different email is rejected"""
        store.queue({"id": 1})

        response = await client.post(api("/auth/register"), json={**REGISTRATION, "email": "other@x.com"})

        assert response.status_code == 400
        assert response.json()["message"] == "Username or email already exists"
        method, sql, args = store.calls[0]
        assert '"username" = $1 OR "email" = $2' in sql
        assert args == ("alice", "other@x.com")
        assert len(store.calls) == 1

    @pytest.mark.asyncio
    async def test_tc004_register_race_reported_as_duplicate(self, client: AsyncClient, store):
        """TC-004: A unique-key conflict from the store reads as a duplicate"""
        store.queue(None, IntegrityConflict(constraint="Users_username_key", sqlstate=UNIQUE_VIOLATION))

        response = await client.post(api("/auth/register"), json=REGISTRATION)

        assert response.status_code == 400
        assert response.json()["message"] == "Username or email already exists"

    @pytest.mark.asyncio
    async def test_tc005_register_missing_fields(self, client: AsyncClient, store):
        """TC-005: Missing required fields are a 400"""
        response = await client.post(api("/auth/register"), json={"username": "alice"})

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_tc006_register_unknown_role(self, client: AsyncClient, store):
        """TC-006: Roles outside the closed set are rejected"""
        response = await client.post(api("/auth/register"), json={**REGISTRATION, "accountType": "owner"})

        assert response.status_code == 400
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_tc013_register_other_constraint_not_reported_as_duplicate(self, client: AsyncClient, store):
        """TC-013: Only unique-key conflicts read as duplicates"""
        store.queue(
            None,
            IntegrityConflict(
                "Database constraint violated",
                error='new row for relation "Users" violates check constraint "Users_accountType_check"',
                constraint="Users_accountType_check",
                sqlstate="23514",
            ),
        )

        response = await client.post(api("/auth/register"), json=REGISTRATION)

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert response.json()["message"] == "Database constraint violated"


class TestLogin:
    @pytest.mark.asyncio
    async def test_tc007_login_valid_credentials(self, client: AsyncClient, store):
        """TC-007: Login returns the public profile with lastLogin"""
        stored = account_row(password=hash_password("secret1"))
        refreshed = account_row(lastLogin=datetime(2024, 5, 1, 8, 0, 0))
        store.queue(stored, refreshed)

        response = await client.post(api("/auth/login"), json={"username": "alice", "password": "secret1"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["username"] == "alice"
        assert data["lastLogin"].startswith("2024-05-01T08:00:00")
        assert "password" not in data
        assert '"isActive" = true' in store.calls[0][1]
        assert store.calls[1][1].startswith('UPDATE "Users" SET "lastLogin" = CURRENT_TIMESTAMP')

    @pytest.mark.asyncio
    async def test_tc008_wrong_password_and_unknown_user_identical(self, client: AsyncClient, store):
        """TC-008: Wrong password and unknown handle give the same answer"""
        store.queue(account_row(password=hash_password("secret1")))
        wrong_password = await client.post(api("/auth/login"), json={"username": "alice", "password": "nope"})

        store.queue(None)
        unknown_user = await client.post(api("/auth/login"), json={"username": "mallory", "password": "nope"})

        assert wrong_password.status_code == unknown_user.status_code == 401
        assert wrong_password.json() == unknown_user.json()
        assert wrong_password.json()["message"] == "Invalid username or password"
        # No lastLogin touch on failure
        assert not any(sql.startswith("UPDATE") for sql in store.statements)

    @pytest.mark.asyncio
    async def test_tc009_login_missing_fields(self, client: AsyncClient, store):
        """TC-009: Username and password are both required"""
        response = await client.post(api("/auth/login"), json={"username": "alice"})

        assert response.status_code == 400
        assert store.calls == []


class TestProfile:
    @pytest.mark.asyncio
    async def test_tc010_profile_requires_user_id(self, client: AsyncClient):
        """TC-010: userId query parameter is required"""
        response = await client.get(api("/auth/profile"))

        assert response.status_code == 400
        assert response.json()["message"] == "User ID is required"

    @pytest.mark.asyncio
    async def test_tc011_profile_not_found(self, client: AsyncClient, store):
        """TC-011: Unknown ids are a 404"""
        response = await client.get(api("/auth/profile"), params={"userId": "99"})

        assert response.status_code == 404
        assert response.json()["message"] == "User not found"
        assert store.calls[0][2] == (99,)

    @pytest.mark.asyncio
    async def test_tc012_profile_binds_uuid_keys_as_text(self, client: AsyncClient, store, schema):
        """TC-012: With UUID account keys the id is bound as a UUID string"""
        schema.account_key = KeyKind.UUID
        account_id = str(uuid.uuid4())
        store.queue(account_row(id=account_id))

        response = await client.get(api("/auth/profile"), params={"userId": account_id})

        assert response.status_code == 200
        assert response.json()["data"]["id"] == account_id
        assert store.calls[0][2] == (account_id,)

        bad = await client.get(api("/auth/profile"), params={"userId": "42"})
        assert bad.status_code == 400
        assert bad.json()["message"] == "Invalid user ID"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", ["99999999999", "--5", "²"])
    async def test_tc014_profile_rejects_ids_outside_integer_keys(self, client: AsyncClient, store, user_id):
        """TC-014: Malformed or out-of-range ids never reach the store"""
        response = await client.get(api("/auth/profile"), params={"userId": user_id})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid user ID"
        assert store.calls == []
