from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field


class PropertyStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FORWARDED_TO_COUNCIL = "forwarded_to_council"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class PropertyCreateRequest(BaseModel):
    landlordId: Union[int, str]
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    location: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    propertyType: Optional[str] = Field(None, max_length=50)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    area: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    picture: Optional[str] = None
    video: Optional[str] = None
    verificationDocument: Optional[str] = None


class PropertyUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = Field(None, min_length=1, max_length=200)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    propertyType: Optional[str] = Field(None, max_length=50)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    area: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    picture: Optional[str] = None
    video: Optional[str] = None
    verificationDocument: Optional[str] = None
    status: Optional[PropertyStatus] = None


class PaymentUpdateRequest(BaseModel):
    paymentStatus: Optional[PaymentStatus] = None
    paymentMethod: Optional[str] = Field(None, max_length=50)


class PropertyResponse(BaseModel):
    id: int
    landlordId: Union[int, UUID, str]
    title: str
    description: Optional[str] = None
    location: str
    price: Decimal
    propertyType: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    area: Optional[Decimal] = None
    picture: Optional[str] = None
    video: Optional[str] = None
    verificationDocument: Optional[str] = None
    status: PropertyStatus
    paymentStatus: Optional[PaymentStatus] = None
    paymentMethod: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    # Owner columns joined in on reads
    username: Optional[str] = None
    fullName: Optional[str] = None
    email: Optional[str] = None
