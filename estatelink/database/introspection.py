"""
Live column-type lookup against information_schema.

Callers branch on the returned KeyKind instead of comparing catalog
type names themselves.
"""
import logging
import re
import uuid
from enum import Enum
from typing import Optional, Union

from estatelink.exceptions import StoreError, ValidationError

logger = logging.getLogger(__name__)

COLUMN_TYPE_SQL = """
    SELECT data_type
    FROM information_schema.columns
    WHERE table_name = $1 AND column_name = $2
"""

INTEGER_TYPES = frozenset({"integer", "bigint", "smallint"})

# Keys are created as INTEGER; anything wider is rejected before binding
INT4_MIN = -(2 ** 31)
INT4_MAX = 2 ** 31 - 1

INTEGER_ID_PATTERN = re.compile(r"-?\d+", re.ASCII)

UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)


def _integer_id(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        if not INTEGER_ID_PATTERN.fullmatch(text):
            return None
        number = int(text)
    if not INT4_MIN <= number <= INT4_MAX:
        return None
    return number


class KeyKind(str, Enum):
    INTEGER = "integer"
    UUID = "uuid"
    OTHER = "other"

    @classmethod
    def from_data_type(cls, data_type) -> "KeyKind":
        if data_type is None:
            return cls.OTHER
        data_type = str(data_type).lower()
        if data_type == "uuid":
            return cls.UUID
        if data_type in INTEGER_TYPES:
            return cls.INTEGER
        return cls.OTHER

    @property
    def sql_type(self) -> str:
        """DDL type for a column referencing a key of this kind"""
        return "UUID" if self is KeyKind.UUID else "INTEGER"

    def accepts(self, value) -> bool:
        if self is KeyKind.UUID:
            return isinstance(value, uuid.UUID) or bool(UUID_PATTERN.fullmatch(str(value).strip()))
        return _integer_id(value) is not None

    def coerce(self, value, label: str = "ID") -> Union[int, str]:
        """Convert an external id to the Python type asyncpg binds for this kind"""
        if self is KeyKind.UUID:
            if not self.accepts(value):
                raise ValidationError(f"Invalid {label}")
            return str(value).strip().lower()
        number = _integer_id(value)
        if number is None:
            raise ValidationError(f"Invalid {label}")
        return number


async def column_storage_type(store, table: str, column: str) -> KeyKind:
    """
    Best-effort lookup of a column's storage type.
    Returns KeyKind.OTHER when the column is missing or the catalog query fails.
    """
    try:
        data_type = await store.fetchval(COLUMN_TYPE_SQL, table, column)
    except StoreError as e:
        logger.warning(f"⚠️ Could not check {table}.{column} type: {e.error or e.message}")
        return KeyKind.OTHER

    if data_type is None:
        logger.warning(f"⚠️ Column {table}.{column} not found in catalog")
        return KeyKind.OTHER

    kind = KeyKind.from_data_type(data_type)
    logger.info(f"🔍 Detected {table}.{column} type: {data_type}")
    return kind
