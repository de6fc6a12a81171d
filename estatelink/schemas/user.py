from pydantic import BaseModel, EmailStr, Field, StrictBool, field_validator
from typing import Optional

from estatelink.schemas.auth import AccountType, validate_phone_number


class UserUpdateRequest(BaseModel):
    fullName: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    phoneNumber: Optional[str] = None
    accountType: Optional[AccountType] = None

    @field_validator("phoneNumber")
    @classmethod
    def check_phone_number(cls, value):
        return validate_phone_number(value)


class UserStatusRequest(BaseModel):
    isActive: StrictBool
