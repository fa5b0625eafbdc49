from typing import Optional

from pydantic import BaseModel, Field, field_validator

from bestworkers.config import settings
from bestworkers.schemas.accounts import AccountResponse
from bestworkers.schemas.fields import (
    clean_email,
    normalize_email,
    normalize_mobile,
    normalize_name,
    normalize_pin,
)

OTP_LENGTH = settings.otp_length


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    mobile: str = Field(min_length=10, max_length=16)
    pin: str
    confirm_pin: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return normalize_name(value)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("mobile", mode="before")
    @classmethod
    def validate_mobile(cls, value) -> str:
        return normalize_mobile(value)

    @field_validator("pin", mode="before")
    @classmethod
    def validate_pin(cls, value) -> str:
        return normalize_pin(value)

    @field_validator("confirm_pin", mode="before")
    @classmethod
    def strip_confirm_pin(cls, value) -> str:
        return str(value).strip()


class VerifyOtpRequest(RegisterRequest):
    """Registration fields resubmitted together with the emailed code."""

    code: str = Field(min_length=OTP_LENGTH, max_length=OTP_LENGTH)

    @field_validator("code")
    @classmethod
    def strip_code(cls, value: str) -> str:
        return value.strip()


class ResendOtpRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class LoginRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    pin: str = Field(min_length=1, max_length=16)

    @field_validator("pin", mode="before")
    @classmethod
    def stringify_pin(cls, value) -> str:
        return str(value).strip()

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return clean_email(value)


class OtpIssuedResponse(BaseModel):
    success: bool = True
    message: str
    email: str
    expires_in_seconds: int
    otp: Optional[str] = None


class AuthTokenResponse(BaseModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
    expires_in_seconds: int
    data: AccountResponse
