"""
Idempotent schema bootstrap, run once per process before serving.

Table creation is fatal when it fails; every other step is attempted on
its own and downgraded to a warning on failure.
"""
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List

from estatelink.config import settings
from estatelink.database.introspection import KeyKind, column_storage_type
from estatelink.database.tables import (
    ACCOUNT_TYPES,
    PAYMENT_STATUSES,
    PROPERTIES_TABLE,
    PROPERTY_STATUSES,
    USERS_TABLE,
    sql_in_list,
)
from estatelink.exceptions import SchemaBootstrapError, StoreError
from estatelink.utils.security import hash_password

logger = logging.getLogger(__name__)

USERS_ID_SEQUENCE = "Users_id_seq"
TOUCH_FUNCTION = "update_updated_at_column"

CREATE_USERS_TABLE = f"""
    CREATE TABLE IF NOT EXISTS "{USERS_TABLE}" (
        "id" SERIAL PRIMARY KEY,
        "username" VARCHAR(50) UNIQUE NOT NULL,
        "fullName" VARCHAR(100) NOT NULL,
        "email" VARCHAR(100) UNIQUE NOT NULL,
        "phoneNumber" VARCHAR(9) NOT NULL,
        "accountType" VARCHAR(20) NOT NULL DEFAULT 'tenant'
            CHECK ("accountType" IN ({sql_in_list(ACCOUNT_TYPES)})),
        "password" VARCHAR(255) NOT NULL,
        "isActive" BOOLEAN DEFAULT true,
        "lastLogin" TIMESTAMP,
        "createdAt" TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        "updatedAt" TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""


def create_properties_table_sql(owner_key: KeyKind) -> str:
    return f"""
    CREATE TABLE IF NOT EXISTS "{PROPERTIES_TABLE}" (
        "id" SERIAL PRIMARY KEY,
        "landlordId" {owner_key.sql_type} NOT NULL REFERENCES "{USERS_TABLE}"("id") ON DELETE CASCADE,
        "title" VARCHAR(200) NOT NULL,
        "description" TEXT,
        "location" VARCHAR(200) NOT NULL,
        "price" DECIMAL(12, 2) NOT NULL,
        "propertyType" VARCHAR(50),
        "bedrooms" INTEGER,
        "bathrooms" INTEGER,
        "area" DECIMAL(10, 2),
        "picture" TEXT,
        "video" TEXT,
        "verificationDocument" TEXT,
        "status" VARCHAR(20) NOT NULL DEFAULT 'pending'
            CHECK ("status" IN ({sql_in_list(PROPERTY_STATUSES)})),
        "paymentStatus" VARCHAR(20) DEFAULT 'pending'
            CHECK ("paymentStatus" IN ({sql_in_list(PAYMENT_STATUSES)})),
        "paymentMethod" VARCHAR(50),
        "createdAt" TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        "updatedAt" TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """


USERS_INDEXES = (
    f'CREATE INDEX IF NOT EXISTS "idx_users_username" ON "{USERS_TABLE}"("username")',
    f'CREATE INDEX IF NOT EXISTS "idx_users_email" ON "{USERS_TABLE}"("email")',
    f'CREATE INDEX IF NOT EXISTS "idx_users_accountType" ON "{USERS_TABLE}"("accountType")',
)

PROPERTIES_INDEXES = (
    f'CREATE INDEX IF NOT EXISTS "idx_properties_landlordId" ON "{PROPERTIES_TABLE}"("landlordId")',
    f'CREATE INDEX IF NOT EXISTS "idx_properties_status" ON "{PROPERTIES_TABLE}"("status")',
    f'CREATE INDEX IF NOT EXISTS "idx_properties_paymentStatus" ON "{PROPERTIES_TABLE}"("paymentStatus")',
)

CREATE_TOUCH_FUNCTION = f"""
    CREATE OR REPLACE FUNCTION {TOUCH_FUNCTION}()
    RETURNS TRIGGER AS $$
    BEGIN
        NEW."updatedAt" = CURRENT_TIMESTAMP;
        RETURN NEW;
    END;
    $$ language 'plpgsql'
"""

# trigger name -> table
TOUCH_TRIGGERS = (
    ("update_users_updated_at", USERS_TABLE),
    ("update_properties_updated_at", PROPERTIES_TABLE),
)


@dataclass
class SchemaReport:
    """Outcome of a bootstrap run, consumed by request handlers"""

    account_key: KeyKind = KeyKind.INTEGER
    owner_key: KeyKind = KeyKind.INTEGER
    warnings: List[str] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.warnings)


async def _attempt(report: SchemaReport, step: str, action: Callable[[], Awaitable[None]]) -> None:
    try:
        await action()
    except StoreError as e:
        logger.warning(f"⚠️ {step} failed: {e.error or e.message}")
        report.warnings.append(f"{step}: {e.error or e.message}")


async def _create_table(store, sql: str, table: str) -> None:
    try:
        await store.execute(sql)
    except StoreError as e:
        logger.error(f"❌ Failed to create {table} table: {e.error or e.message}")
        raise SchemaBootstrapError(f"Failed to create {table} table", error=e.error) from e


async def ensure_account_key_default(store, kind: KeyKind) -> None:
    """Install a generator default on Users.id matching its storage type"""
    if kind is KeyKind.UUID:
        logger.info("🔧 Setting up UUID generation for id column...")
        await store.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')
        await store.execute(f'ALTER TABLE "{USERS_TABLE}" ALTER COLUMN "id" SET DEFAULT gen_random_uuid()')
        return

    if kind is KeyKind.INTEGER:
        logger.info("🔧 Setting up SERIAL sequence for id column...")
        await store.execute(f'CREATE SEQUENCE IF NOT EXISTS "{USERS_ID_SEQUENCE}"')
        await store.execute(f'ALTER SEQUENCE "{USERS_ID_SEQUENCE}" OWNED BY "{USERS_TABLE}"."id"')
        await store.execute(
            f'ALTER TABLE "{USERS_TABLE}" ALTER COLUMN "id" '
            f"SET DEFAULT nextval('\"{USERS_ID_SEQUENCE}\"')"
        )
        # Rows inserted without the sequence must not collide with future ids
        max_id = await store.fetchval(f'SELECT COALESCE(MAX("id")::BIGINT, 0) AS max_id FROM "{USERS_TABLE}"')
        if max_id and int(max_id) > 0:
            await store.execute(f"SELECT setval('\"{USERS_ID_SEQUENCE}\"', $1, true)", int(max_id))
        return

    logger.warning("⚠️ Unknown id column type. Skipping default setup.")


async def ensure_timestamp_defaults(store) -> None:
    for column in ("createdAt", "updatedAt"):
        await store.execute(f'ALTER TABLE "{USERS_TABLE}" ALTER COLUMN "{column}" SET DEFAULT CURRENT_TIMESTAMP')


async def _create_indexes(store, statements) -> None:
    for sql in statements:
        await store.execute(sql)


async def ensure_touch_triggers(store) -> None:
    await store.execute(CREATE_TOUCH_FUNCTION)
    for trigger, table in TOUCH_TRIGGERS:
        await store.execute(f'DROP TRIGGER IF EXISTS {trigger} ON "{table}"')
        await store.execute(
            f'CREATE TRIGGER {trigger} BEFORE UPDATE ON "{table}" '
            f"FOR EACH ROW EXECUTE FUNCTION {TOUCH_FUNCTION}()"
        )


async def ensure_schema(store) -> SchemaReport:
    """
    Create or reconcile the Users and Properties tables.

    Raises SchemaBootstrapError when a table cannot be created. Failures in
    the remaining steps are collected on the returned report.
    """
    report = SchemaReport()
    logger.info("🔧 Creating database tables...")

    await _create_table(store, CREATE_USERS_TABLE, USERS_TABLE)

    account_key = await column_storage_type(store, USERS_TABLE, "id")
    report.account_key = account_key if account_key is not KeyKind.OTHER else KeyKind.INTEGER

    await _attempt(report, "Sequence setup", lambda: ensure_account_key_default(store, account_key))
    await _attempt(report, "Timestamp defaults", lambda: ensure_timestamp_defaults(store))
    await _attempt(report, "Users indexes", lambda: _create_indexes(store, USERS_INDEXES))

    logger.info(f"🔧 Creating {PROPERTIES_TABLE} table with landlordId type: {report.account_key.sql_type}")
    await _create_table(store, create_properties_table_sql(report.account_key), PROPERTIES_TABLE)

    await _attempt(report, "Properties indexes", lambda: _create_indexes(store, PROPERTIES_INDEXES))
    await _attempt(report, "updatedAt triggers", lambda: ensure_touch_triggers(store))

    owner_key = await column_storage_type(store, PROPERTIES_TABLE, "landlordId")
    report.owner_key = owner_key if owner_key is not KeyKind.OTHER else report.account_key

    if report.partial:
        logger.warning(f"⚠️ Database tables created with {len(report.warnings)} warning(s)")
    else:
        logger.info("✅ Database tables created successfully")
    return report


async def ensure_default_admin(store) -> bool:
    """Seed one administrator when none exists. Returns True if one was created."""
    try:
        existing = await store.fetchrow(
            f'SELECT "id" FROM "{USERS_TABLE}" WHERE "accountType" = $1 LIMIT 1', "admin"
        )
        if existing:
            logger.info("👤 Admin user already exists")
            return False

        await store.execute(
            f'INSERT INTO "{USERS_TABLE}" '
            '("username", "fullName", "email", "phoneNumber", "accountType", "password") '
            "VALUES ($1, $2, $3, $4, $5, $6)",
            settings.DEFAULT_ADMIN_USERNAME,
            settings.DEFAULT_ADMIN_FULL_NAME,
            settings.DEFAULT_ADMIN_EMAIL,
            settings.DEFAULT_ADMIN_PHONE,
            "admin",
            hash_password(settings.DEFAULT_ADMIN_PASSWORD),
        )
    except StoreError as e:
        logger.error(f"❌ Failed to create admin user: {e.error or e.message}")
        return False

    logger.info("👤 Admin user created successfully")
    return True
