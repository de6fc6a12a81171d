"""
Property Service - listings submitted by landlords and their review workflow
"""
import logging
from typing import Dict, List, Optional

from estatelink.database.bootstrap import SchemaReport
from estatelink.database.introspection import KeyKind
from estatelink.database.query_builder import apply_update, build_update
from estatelink.database.tables import (
    PAYMENT_UPDATABLE_COLUMNS,
    PROPERTIES_TABLE,
    PROPERTY_UPDATABLE_COLUMNS,
    USERS_TABLE,
)
from estatelink.exceptions import (
    FOREIGN_KEY_VIOLATION,
    NOT_NULL_VIOLATION,
    IntegrityConflict,
    NotFound,
    NotPending,
    ValidationError,
)
from estatelink.utils.values import plain_changes

logger = logging.getLogger(__name__)

OWNER_COLUMNS = 'u."username", u."fullName", u."email"'
NON_NULLABLE_COLUMNS = ("title", "location", "price", "status")

INSERT_PROPERTY_COLUMNS = (
    "landlordId",
    "title",
    "description",
    "location",
    "price",
    "propertyType",
    "bedrooms",
    "bathrooms",
    "area",
    "picture",
    "video",
    "verificationDocument",
)


async def create_property(store, schema: SchemaReport, property_data: Dict) -> dict:
    """Insert a new listing; status and paymentStatus always start as pending"""
    data = plain_changes(property_data)
    data["landlordId"] = schema.owner_key.coerce(data.get("landlordId"), "landlord ID")

    columns = ", ".join(f'"{column}"' for column in INSERT_PROPERTY_COLUMNS)
    placeholders = ", ".join(f"${index}" for index in range(1, len(INSERT_PROPERTY_COLUMNS) + 1))
    values = [data.get(column) or None for column in INSERT_PROPERTY_COLUMNS]

    try:
        prop = await store.fetchrow(
            f'INSERT INTO "{PROPERTIES_TABLE}" ({columns}, "status", "paymentStatus", "createdAt", "updatedAt") '
            f"VALUES ({placeholders}, 'pending', 'pending', CURRENT_TIMESTAMP, CURRENT_TIMESTAMP) "
            "RETURNING *",
            *values,
        )
    except IntegrityConflict as e:
        if e.sqlstate == FOREIGN_KEY_VIOLATION:
            raise ValidationError("Landlord not found", error=e.error) from e
        if e.sqlstate == NOT_NULL_VIOLATION:
            raise ValidationError(f"{e.column or 'A required field'} is required", error=e.error) from e
        raise

    logger.info(f"✅ Property created successfully: {prop['id']}")
    return prop


async def _properties_table_exists(store) -> bool:
    return bool(await store.fetchval(f"SELECT to_regclass('\"{PROPERTIES_TABLE}\"') IS NOT NULL"))


async def list_properties(
    store,
    schema: SchemaReport,
    landlord_id: Optional[str] = None,
    status: Optional[str] = None,
) -> List[dict]:
    """
    All listings with their owner's handle, newest first.
    A landlordId that is not UUID-shaped is ignored when owner keys are UUIDs.
    """
    if not await _properties_table_exists(store):
        logger.warning("⚠️ Properties table does not exist yet, returning empty array")
        return []

    query = (
        f'SELECT p.*, {OWNER_COLUMNS} FROM "{PROPERTIES_TABLE}" p '
        f'LEFT JOIN "{USERS_TABLE}" u ON p."landlordId" = u."id"'
    )
    conditions = []
    params = []

    if landlord_id:
        if schema.owner_key is KeyKind.UUID and not schema.owner_key.accepts(landlord_id):
            # TODO: confirm with product whether this should be a 400 instead of an unfiltered list
            logger.warning(f'⚠️ landlordId "{landlord_id}" is not a valid UUID format, skipping filter')
        else:
            params.append(schema.owner_key.coerce(landlord_id, "landlord ID"))
            conditions.append(f'p."landlordId" = ${len(params)}')

    if status:
        params.append(status)
        conditions.append(f'p."status" = ${len(params)}')

    if conditions:
        query += " WHERE " + " AND ".join(conditions)
    query += ' ORDER BY p."createdAt" DESC'

    return await store.fetch(query, *params)


async def get_property(store, property_id: int) -> dict:
    prop = await store.fetchrow(
        f'SELECT p.*, {OWNER_COLUMNS} FROM "{PROPERTIES_TABLE}" p '
        f'JOIN "{USERS_TABLE}" u ON p."landlordId" = u."id" '
        'WHERE p."id" = $1',
        property_id,
    )
    if not prop:
        raise NotFound("Property not found")
    return prop


async def update_property(store, property_id: int, update_data: Dict) -> dict:
    changes = plain_changes(update_data, required=NON_NULLABLE_COLUMNS)
    statement = build_update(
        PROPERTIES_TABLE,
        property_id,
        changes,
        allowed_columns=PROPERTY_UPDATABLE_COLUMNS,
    )
    prop = await apply_update(store, statement, "Property not found")
    logger.info(f"✅ Property updated: {property_id}")
    return prop


async def delete_property(store, property_id: int) -> None:
    """Only listings still pending review may be removed"""
    existing = await store.fetchrow(
        f'SELECT "id", "status" FROM "{PROPERTIES_TABLE}" WHERE "id" = $1', property_id
    )
    if not existing:
        raise NotFound("Property not found")

    if existing["status"] != "pending":
        raise NotPending("Cannot delete property that is not pending")

    await store.execute(f'DELETE FROM "{PROPERTIES_TABLE}" WHERE "id" = $1', property_id)
    logger.info(f"✅ Property deleted: {property_id}")


async def forward_to_council(store, property_id: int) -> dict:
    prop = await store.fetchrow(
        f'UPDATE "{PROPERTIES_TABLE}" '
        "SET \"status\" = 'forwarded_to_council', \"updatedAt\" = CURRENT_TIMESTAMP "
        'WHERE "id" = $1 RETURNING *',
        property_id,
    )
    if not prop:
        raise NotFound("Property not found")

    logger.info(f"✅ Property forwarded to council: {property_id}")
    return prop


async def update_payment(store, property_id: int, payment_data: Dict) -> dict:
    changes = plain_changes(payment_data, required=("paymentStatus",))
    statement = build_update(
        PROPERTIES_TABLE,
        property_id,
        changes,
        allowed_columns=PAYMENT_UPDATABLE_COLUMNS,
        empty_message="No payment fields to update",
    )
    return await apply_update(store, statement, "Property not found")
