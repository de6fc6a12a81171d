import re
from datetime import datetime
from enum import Enum
from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

PHONE_PATTERN = re.compile(r"^\d{9}$")


class AccountType(str, Enum):
    TENANT = "tenant"
    LANDLORD = "landlord"
    TECHNICIAN = "technician"
    ADMIN = "admin"


def validate_phone_number(value: Optional[str]) -> Optional[str]:
    if value is not None and not PHONE_PATTERN.match(value):
        raise ValueError("Phone number must be exactly 9 digits")
    return value


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    fullName: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phoneNumber: str
    accountType: AccountType = AccountType.TENANT
    password: str = Field(..., min_length=6, max_length=100)

    @field_validator("phoneNumber")
    @classmethod
    def check_phone_number(cls, value):
        return validate_phone_number(value)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AccountResponse(BaseModel):
    """Public view of an account; the password hash has no field here"""
    id: Union[int, UUID, str]
    username: str
    fullName: str
    email: str
    phoneNumber: str
    accountType: AccountType
    isActive: Optional[bool] = None
    lastLogin: Optional[datetime] = None
    createdAt: Optional[datetime] = None
