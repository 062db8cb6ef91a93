"""
User, auth and address schemas
"""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .catalog import reject_null


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: str = Field(..., min_length=10, max_length=20)
    role: Literal["customer", "artisan"] = "customer"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)


class UserOut(BaseModel):
    """Public projection of a user (never carries the password hash)"""

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Indian PIN codes never start with 0; mobile numbers start with 6-9
PINCODE_PATTERN = r"^[1-9][0-9]{5}$"
PHONE_PATTERN = r"^[6-9][0-9]{9}$"


class AddressIn(BaseModel):
    type: Literal["home", "work", "other"] = "home"
    name: str = Field(..., min_length=1, max_length=50)
    street: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=50)
    state: str = Field(..., min_length=1, max_length=50)
    pincode: str = Field(..., pattern=PINCODE_PATTERN)
    phone: str = Field(..., pattern=PHONE_PATTERN)
    is_default: bool = False


class AddressUpdate(BaseModel):
    type: Optional[Literal["home", "work", "other"]] = None
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    street: Optional[str] = Field(None, min_length=1, max_length=200)
    city: Optional[str] = Field(None, min_length=1, max_length=50)
    state: Optional[str] = Field(None, min_length=1, max_length=50)
    pincode: Optional[str] = Field(None, pattern=PINCODE_PATTERN)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    is_default: Optional[bool] = None

    @field_validator(
        "type", "name", "street", "city", "state", "pincode", "phone", "is_default", mode="before"
    )
    @classmethod
    def check_not_null(cls, v, info):
        return reject_null(v, info)


class AddressOut(BaseModel):
    id: int
    type: str
    name: str
    street: str
    city: str
    state: str
    pincode: str
    phone: str
    is_default: bool

    model_config = ConfigDict(from_attributes=True)
