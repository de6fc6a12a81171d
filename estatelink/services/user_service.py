import logging
from typing import Dict, List, Optional

from estatelink.config import settings
from estatelink.database.bootstrap import SchemaReport
from estatelink.database.query_builder import apply_update, build_update
from estatelink.database.tables import (
    ACCOUNT_UPDATABLE_COLUMNS,
    PUBLIC_ACCOUNT_COLUMNS,
    USERS_TABLE,
    column_list,
)
from estatelink.exceptions import UNIQUE_VIOLATION, DuplicateError, IntegrityConflict, NotFound
from estatelink.utils.values import plain_changes

logger = logging.getLogger(__name__)

PUBLIC_COLUMNS = column_list(PUBLIC_ACCOUNT_COLUMNS)

# Display names used by the admin dashboard
ACCOUNT_TYPE_DISPLAY_NAMES = {
    "Landlords": "landlord",
    "Tenants/Buyers": "tenant",
    "Technicians": "technician",
    "Council Officials": "admin",
}
COUNCIL_OFFICIALS = "Council Officials"


def resolve_account_type(account_type: Optional[str]) -> Optional[str]:
    if not account_type or account_type in ("undefined", "null"):
        return None
    return ACCOUNT_TYPE_DISPLAY_NAMES.get(account_type, account_type.lower())


async def list_accounts(store, account_type: Optional[str] = None) -> List[dict]:
    """List public profiles, newest first, optionally filtered by role display name"""
    query = f'SELECT {PUBLIC_COLUMNS} FROM "{USERS_TABLE}"'
    params = []

    role = resolve_account_type(account_type)
    if role:
        logger.debug(f'Mapping "{account_type}" to database type: "{role}"')
        params.append(role)
        query += f' WHERE "accountType" = ${len(params)}'

        # Council officials are admins, minus the seeded system account
        if account_type == COUNCIL_OFFICIALS:
            params.append(settings.DEFAULT_ADMIN_USERNAME)
            query += f' AND "username" != ${len(params)}'

    query += ' ORDER BY "createdAt" DESC'
    return await store.fetch(query, *params)


async def update_account(store, schema: SchemaReport, user_id, update_data: Dict) -> dict:
    account_id = schema.account_key.coerce(user_id, "user ID")
    changes = plain_changes(update_data, required=ACCOUNT_UPDATABLE_COLUMNS)
    statement = build_update(
        USERS_TABLE,
        account_id,
        changes,
        allowed_columns=ACCOUNT_UPDATABLE_COLUMNS,
        returning=PUBLIC_COLUMNS,
    )

    try:
        account = await apply_update(store, statement, "User not found")
    except IntegrityConflict as e:
        if e.sqlstate != UNIQUE_VIOLATION:
            raise
        raise DuplicateError("Email already exists") from e

    logger.info(f"✅ User updated: {account_id}")
    return account


async def delete_account(store, schema: SchemaReport, user_id) -> None:
    account_id = schema.account_key.coerce(user_id, "user ID")
    existing = await store.fetchrow(
        f'SELECT "id", "username" FROM "{USERS_TABLE}" WHERE "id" = $1', account_id
    )
    if not existing:
        raise NotFound("User not found")

    await store.execute(f'DELETE FROM "{USERS_TABLE}" WHERE "id" = $1', account_id)
    logger.info(f"✅ User deleted: {account_id}")


async def set_account_status(store, schema: SchemaReport, user_id, is_active: bool) -> dict:
    account_id = schema.account_key.coerce(user_id, "user ID")
    account = await store.fetchrow(
        f'UPDATE "{USERS_TABLE}" SET "isActive" = $1, "updatedAt" = CURRENT_TIMESTAMP '
        f'WHERE "id" = $2 RETURNING {PUBLIC_COLUMNS}',
        is_active,
        account_id,
    )
    if not account:
        raise NotFound("User not found")

    logger.info(f"✅ User {'activated' if is_active else 'suspended'}: {account_id}")
    return account
