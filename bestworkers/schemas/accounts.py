from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from bestworkers.schemas.fields import (
    normalize_email,
    normalize_mobile,
    normalize_name,
    normalize_pin,
)
from bestworkers.schemas.profiles import ProfileResponse


class AccountResponse(BaseModel):
    id: int
    name: str
    email: str
    mobile: str
    verified: bool
    has_profile: bool
    created_at: datetime


class BasicAccountView(BaseModel):
    kind: Literal["basic"] = "basic"
    account: AccountResponse


class ProfessionalAccountView(BaseModel):
    kind: Literal["professional"] = "professional"
    account: AccountResponse
    profile: ProfileResponse


AccountView = Annotated[
    Union[BasicAccountView, ProfessionalAccountView], Field(discriminator="kind")
]


class AccountViewResponse(BaseModel):
    success: bool = True
    data: AccountView


class AccountDetailsResponse(BaseModel):
    success: bool = True
    data: AccountResponse


class AccountUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[str] = Field(default=None, max_length=255)
    mobile: Optional[str] = Field(default=None, max_length=16)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return normalize_name(value)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return normalize_email(value)

    @field_validator("mobile")
    @classmethod
    def validate_mobile(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return normalize_mobile(value)


class ChangePinRequest(BaseModel):
    current_pin: str = Field(min_length=1, max_length=16)
    new_pin: str
    confirm_pin: str

    @field_validator("new_pin", mode="before")
    @classmethod
    def validate_new_pin(cls, value) -> str:
        return normalize_pin(value)

    @field_validator("current_pin", "confirm_pin", mode="before")
    @classmethod
    def stringify_pin(cls, value) -> str:
        return str(value).strip()


class MessageResponse(BaseModel):
    success: bool = True
    message: str
