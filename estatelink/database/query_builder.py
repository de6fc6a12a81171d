"""
Partial UPDATE construction.

Assignments are accumulated as (column, placeholder) pairs so that the
placeholder index and the bound value always advance together.
"""
from typing import Any, Iterable, List, Mapping, NamedTuple, Optional, Tuple

from estatelink.exceptions import NoFieldsToUpdate, NotFound

TIMESTAMP_COLUMN = "updatedAt"


class UpdateStatement(NamedTuple):
    sql: str
    params: Tuple[Any, ...]


def quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def build_update(
    table: str,
    record_id: Any,
    field_changes: Mapping[str, Any],
    allowed_columns: Iterable[str],
    returning: str = "*",
    empty_message: Optional[str] = None,
) -> UpdateStatement:
    """
    Build `UPDATE table SET ... WHERE id = $n RETURNING ...` for the supplied
    fields only, in the order given. The record id is always the last
    parameter.
    """
    if not field_changes:
        raise NoFieldsToUpdate(empty_message)

    allowed = frozenset(allowed_columns)
    unknown = [name for name in field_changes if name not in allowed]
    if unknown:
        raise ValueError(f"Columns not updatable on {table}: {', '.join(unknown)}")

    assignments: List[Tuple[str, str]] = []
    params: List[Any] = []
    for column, value in field_changes.items():
        params.append(value)
        assignments.append((column, f"${len(params)}"))

    set_clause = [f"{quote_ident(column)} = {placeholder}" for column, placeholder in assignments]
    set_clause.append(f"{quote_ident(TIMESTAMP_COLUMN)} = CURRENT_TIMESTAMP")

    params.append(record_id)
    sql = (
        f"UPDATE {quote_ident(table)} "
        f"SET {', '.join(set_clause)} "
        f'WHERE "id" = ${len(params)} '
        f"RETURNING {returning}"
    )
    return UpdateStatement(sql, tuple(params))


async def apply_update(store, statement: UpdateStatement, not_found_message: str) -> dict:
    """Run a built UPDATE and return the affected row"""
    row = await store.fetchrow(statement.sql, *statement.params)
    if row is None:
        raise NotFound(not_found_message)
    return row
