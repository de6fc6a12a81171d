import logging
from typing import Dict

from estatelink.database.bootstrap import SchemaReport
from estatelink.database.tables import PUBLIC_ACCOUNT_COLUMNS, USERS_TABLE, column_list
from estatelink.exceptions import (
    UNIQUE_VIOLATION,
    DuplicateError,
    IntegrityConflict,
    InvalidCredentials,
    NotFound,
)
from estatelink.utils.values import plain_changes
from estatelink.utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)

PUBLIC_COLUMNS = column_list(PUBLIC_ACCOUNT_COLUMNS)

# Same message for unknown handle and wrong password
LOGIN_FAILED = "Invalid username or password"


async def register_account(store, account_data: Dict) -> dict:
    """
    Create an account with a hashed password.

    The duplicate check and the insert are separate statements; a conflict
    that slips in between surfaces from the store's unique constraints and
    is reported the same way.
    """
    data = plain_changes(account_data)

    existing = await store.fetchrow(
        f'SELECT "id" FROM "{USERS_TABLE}" WHERE "username" = $1 OR "email" = $2',
        data["username"],
        data["email"],
    )
    if existing:
        raise DuplicateError("Username or email already exists")

    hashed_password = hash_password(data["password"])

    try:
        account = await store.fetchrow(
            f'INSERT INTO "{USERS_TABLE}" '
            '("username", "fullName", "email", "phoneNumber", "accountType", "password", "createdAt", "updatedAt") '
            "VALUES ($1, $2, $3, $4, $5, $6, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP) "
            'RETURNING "id", "username", "fullName", "email", "phoneNumber", "accountType", "createdAt"',
            data["username"],
            data["fullName"],
            data["email"],
            data["phoneNumber"],
            data.get("accountType") or "tenant",
            hashed_password,
        )
    except IntegrityConflict as e:
        if e.sqlstate != UNIQUE_VIOLATION:
            raise
        logger.warning(f"Registration conflict on {e.constraint or 'unique key'} for {data['username']}")
        raise DuplicateError("Username or email already exists") from e

    logger.info(f"✅ User created successfully: {data['username']}")
    return account


async def authenticate_account(store, username: str, password: str) -> dict:
    """Verify credentials of an active account and stamp lastLogin"""
    account = await store.fetchrow(
        f'SELECT * FROM "{USERS_TABLE}" WHERE "username" = $1 AND "isActive" = true',
        username,
    )

    if not account or not verify_password(password, account.get("password") or ""):
        raise InvalidCredentials(LOGIN_FAILED)

    refreshed = await store.fetchrow(
        f'UPDATE "{USERS_TABLE}" SET "lastLogin" = CURRENT_TIMESTAMP WHERE "id" = $1 RETURNING {PUBLIC_COLUMNS}',
        account["id"],
    )

    logger.info(f"✅ Login successful: {username}")
    if refreshed:
        return refreshed
    return {column: account.get(column) for column in PUBLIC_ACCOUNT_COLUMNS}


async def get_account_profile(store, schema: SchemaReport, user_id) -> dict:
    account_id = schema.account_key.coerce(user_id, "user ID")
    account = await store.fetchrow(
        f'SELECT {PUBLIC_COLUMNS} FROM "{USERS_TABLE}" WHERE "id" = $1',
        account_id,
    )
    if not account:
        raise NotFound("User not found")
    return account
