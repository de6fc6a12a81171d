from typing import Optional

from fastapi import Request

from estatelink.database.bootstrap import SchemaReport
from estatelink.database.connection import Store
from estatelink.exceptions import StoreError


def get_optional_store(request: Request) -> Optional[Store]:
    """Process-wide store built in the application lifespan, if it exists yet"""
    return getattr(request.app.state, "store", None)


def get_store(request: Request) -> Store:
    store = get_optional_store(request)
    if store is None:
        raise StoreError("Database client not initialised")
    return store


def get_schema_report(request: Request) -> SchemaReport:
    # Before bootstrap has run, keys are assumed to be integers
    return getattr(request.app.state, "schema_report", None) or SchemaReport()
