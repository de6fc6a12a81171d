from fastapi import APIRouter, Depends, Query, status
from typing import Optional

from estatelink.database.bootstrap import SchemaReport
from estatelink.database.connection import Store
from estatelink.exceptions import ValidationError
from estatelink.schemas.auth import AccountResponse, LoginRequest, RegisterRequest
from estatelink.schemas.common import ApiResponse
from estatelink.services.auth_service import (
    authenticate_account,
    get_account_profile,
    register_account,
)
from estatelink.utils.dependencies import get_schema_report, get_store

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=ApiResponse,
    response_model_exclude_unset=True,
    status_code=status.HTTP_201_CREATED,
)
async def register(request: RegisterRequest, store: Store = Depends(get_store)):
    """Register a new account"""
    account = await register_account(store, request.model_dump())
    return ApiResponse(
        message="User registered successfully",
        data=AccountResponse(**account),
    )


@router.post("/login", response_model=ApiResponse, response_model_exclude_unset=True)
async def login(request: LoginRequest, store: Store = Depends(get_store)):
    account = await authenticate_account(store, request.username, request.password)
    return ApiResponse(message="Login successful", data=AccountResponse(**account))


@router.get("/profile", response_model=ApiResponse, response_model_exclude_unset=True)
async def profile(
    user_id: Optional[str] = Query(None, alias="userId"),
    store: Store = Depends(get_store),
    schema: SchemaReport = Depends(get_schema_report),
):
    """Get a user's public profile"""
    if not user_id:
        raise ValidationError("User ID is required")

    account = await get_account_profile(store, schema, user_id)
    return ApiResponse(data=AccountResponse(**account))
