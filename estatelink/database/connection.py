import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from estatelink.config import settings
from estatelink.exceptions import IntegrityConflict, StoreError

logger = logging.getLogger(__name__)


def get_database_url(raw_url: Optional[str] = None) -> str:
    """Parse database URL and convert to asyncpg-compatible format"""
    url = make_url(raw_url or settings.DATABASE_URL)
    url = url.set(drivername="postgresql+asyncpg")

    # asyncpg rejects libpq-only options; ssl is handled in connect_args
    query_params = {
        key: value
        for key, value in url.query.items()
        if key not in ("sslmode", "channel_binding")
    }
    return url.set(query=query_params).render_as_string(hide_password=False)


def get_connect_args(raw_url: Optional[str] = None) -> Dict[str, Any]:
    """Get connection arguments for asyncpg, especially for SSL"""
    url = make_url(raw_url or settings.DATABASE_URL)
    connect_args: Dict[str, Any] = {}

    if url.query and url.query.get("sslmode") == "require":
        connect_args["ssl"] = "require"

    return connect_args


def create_engine() -> AsyncEngine:
    return create_async_engine(
        get_database_url(),
        echo=settings.DEBUG,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=0,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_pre_ping=True,
        pool_recycle=settings.DB_POOL_RECYCLE,
        connect_args=get_connect_args(),
    )


def _driver_detail(exc: IntegrityError, attribute: str) -> Optional[str]:
    """Read a diagnostic field off the asyncpg exception behind the DBAPI wrapper"""
    cause = getattr(exc.orig, "__cause__", None)
    value = getattr(cause, attribute, None)
    if value is None:
        value = getattr(exc.orig, attribute, None)
    return value


class Store:
    """
    Thin handle over the pooled engine.

    Statements are plain SQL with $1..$n positional placeholders, passed
    straight to asyncpg. Each call runs in its own transaction on a pooled
    connection that is returned to the pool on every exit path.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncConnection]:
        try:
            async with self.engine.begin() as conn:
                yield conn
        except IntegrityError as e:
            raise IntegrityConflict(
                "Database constraint violated",
                error=str(e.orig),
                constraint=_driver_detail(e, "constraint_name"),
                sqlstate=_driver_detail(e, "sqlstate"),
                column=_driver_detail(e, "column_name"),
            ) from e
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(error=str(e)) from e

    async def _run(self, sql: str, args: tuple):
        async with self.transaction() as conn:
            result = await conn.exec_driver_sql(sql, args or None)
            if not result.returns_rows:
                return []
            return [dict(row) for row in result.mappings().all()]

    async def fetch(self, sql: str, *args) -> List[dict]:
        return await self._run(sql, args)

    async def fetchrow(self, sql: str, *args) -> Optional[dict]:
        rows = await self._run(sql, args)
        return rows[0] if rows else None

    async def fetchval(self, sql: str, *args) -> Any:
        row = await self.fetchrow(sql, *args)
        if row is None:
            return None
        return next(iter(row.values()), None)

    async def execute(self, sql: str, *args) -> None:
        await self._run(sql, args)

    async def ping(self) -> bool:
        """Connectivity probe; never raises"""
        try:
            await self.fetchval("SELECT NOW()")
            return True
        except StoreError as e:
            logger.error(f"❌ Database connection failed: {e.error}")
            return False

    async def close(self) -> None:
        await self.engine.dispose()
