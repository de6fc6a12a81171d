from fastapi import APIRouter, Depends, Query
from typing import Optional

from estatelink.database.bootstrap import SchemaReport
from estatelink.database.connection import Store
from estatelink.schemas.auth import AccountResponse
from estatelink.schemas.common import ApiResponse
from estatelink.schemas.user import UserStatusRequest, UserUpdateRequest
from estatelink.services.user_service import (
    delete_account,
    list_accounts,
    set_account_status,
    update_account,
)
from estatelink.utils.dependencies import get_schema_report, get_store

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=ApiResponse, response_model_exclude_unset=True)
async def get_users(
    account_type: Optional[str] = Query(None, alias="accountType"),
    store: Store = Depends(get_store),
):
    """List users, optionally by dashboard account type (e.g. "Landlords")"""
    accounts = await list_accounts(store, account_type)
    return ApiResponse(
        data=[AccountResponse(**account) for account in accounts],
        count=len(accounts),
    )


@router.put("/{user_id}", response_model=ApiResponse, response_model_exclude_unset=True)
async def update_user(
    user_id: str,
    request: UserUpdateRequest,
    store: Store = Depends(get_store),
    schema: SchemaReport = Depends(get_schema_report),
):
    account = await update_account(store, schema, user_id, request.model_dump(exclude_unset=True))
    return ApiResponse(message="User updated successfully", data=AccountResponse(**account))


@router.delete("/{user_id}", response_model=ApiResponse, response_model_exclude_unset=True)
async def delete_user(
    user_id: str,
    store: Store = Depends(get_store),
    schema: SchemaReport = Depends(get_schema_report),
):
    await delete_account(store, schema, user_id)
    return ApiResponse(message="User deleted successfully")


@router.patch("/{user_id}/status", response_model=ApiResponse, response_model_exclude_unset=True)
async def update_user_status(
    user_id: str,
    request: UserStatusRequest,
    store: Store = Depends(get_store),
    schema: SchemaReport = Depends(get_schema_report),
):
    """Suspend or reactivate a user"""
    account = await set_account_status(store, schema, user_id, request.isActive)
    action = "activated" if request.isActive else "suspended"
    return ApiResponse(message=f"User {action} successfully", data=AccountResponse(**account))
