"""
Property Controller - listing CRUD plus review and payment actions
"""
from fastapi import APIRouter, Depends, Path, Query, status
from typing import Annotated, Optional

from estatelink.database.bootstrap import SchemaReport
from estatelink.database.connection import Store
from estatelink.database.introspection import INT4_MAX, INT4_MIN
from estatelink.schemas.common import ApiResponse
from estatelink.schemas.property import (
    PaymentUpdateRequest,
    PropertyCreateRequest,
    PropertyResponse,
    PropertyStatus,
    PropertyUpdateRequest,
)
from estatelink.services.property_service import (
    create_property,
    delete_property,
    forward_to_council,
    get_property,
    list_properties,
    update_payment,
    update_property,
)
from estatelink.utils.dependencies import get_schema_report, get_store

router = APIRouter(prefix="/properties", tags=["Properties"])

# Listing ids are SERIAL; wider values never reach the store
PropertyId = Annotated[int, Path(ge=INT4_MIN, le=INT4_MAX)]


@router.post(
    "",
    response_model=ApiResponse,
    response_model_exclude_unset=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_property_endpoint(
    request: PropertyCreateRequest,
    store: Store = Depends(get_store),
    schema: SchemaReport = Depends(get_schema_report),
):
    """Submit a new listing for review"""
    prop = await create_property(store, schema, request.model_dump())
    return ApiResponse(message="Property created successfully", data=PropertyResponse(**prop))


@router.get("", response_model=ApiResponse, response_model_exclude_unset=True)
async def get_properties(
    landlord_id: Optional[str] = Query(None, alias="landlordId"),
    status_filter: Optional[PropertyStatus] = Query(None, alias="status"),
    store: Store = Depends(get_store),
    schema: SchemaReport = Depends(get_schema_report),
):
    """Get all properties (admin view), optionally by owner and status"""
    props = await list_properties(
        store,
        schema,
        landlord_id=landlord_id,
        status=status_filter.value if status_filter else None,
    )
    return ApiResponse(data=[PropertyResponse(**prop) for prop in props], count=len(props))


@router.get("/{property_id}", response_model=ApiResponse, response_model_exclude_unset=True)
async def get_property_endpoint(property_id: PropertyId, store: Store = Depends(get_store)):
    prop = await get_property(store, property_id)
    return ApiResponse(data=PropertyResponse(**prop))


@router.put("/{property_id}", response_model=ApiResponse, response_model_exclude_unset=True)
async def update_property_endpoint(
    property_id: PropertyId,
    request: PropertyUpdateRequest,
    store: Store = Depends(get_store),
):
    """Update listing details; also used to approve or reject"""
    prop = await update_property(store, property_id, request.model_dump(exclude_unset=True))
    return ApiResponse(message="Property updated successfully", data=PropertyResponse(**prop))


@router.delete("/{property_id}", response_model=ApiResponse, response_model_exclude_unset=True)
async def delete_property_endpoint(property_id: PropertyId, store: Store = Depends(get_store)):
    await delete_property(store, property_id)
    return ApiResponse(message="Property deleted successfully")


@router.patch(
    "/{property_id}/forward-to-council",
    response_model=ApiResponse,
    response_model_exclude_unset=True,
)
async def forward_property_to_council(property_id: PropertyId, store: Store = Depends(get_store)):
    prop = await forward_to_council(store, property_id)
    return ApiResponse(message="Property forwarded to council successfully", data=PropertyResponse(**prop))


@router.patch("/{property_id}/payment", response_model=ApiResponse, response_model_exclude_unset=True)
async def update_property_payment(
    property_id: PropertyId,
    request: PaymentUpdateRequest,
    store: Store = Depends(get_store),
):
    prop = await update_payment(store, property_id, request.model_dump(exclude_unset=True))
    return ApiResponse(message="Payment status updated successfully", data=PropertyResponse(**prop))
