from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from bestworkers.schemas.fields import normalize_email, normalize_mobile


def _required_text(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError("This field is required")
    return cleaned


def _optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def _price(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


REQUIRED_TEXT_FIELDS = (
    "name",
    "state",
    "district",
    "city",
    "service_category",
    "service_name",
    "experience",
)


class ProfileCreate(BaseModel):
    name: str = Field(max_length=100)
    email: str = Field(max_length=255)
    mobile_no: str = Field(max_length=16)
    secondary_mobile_no: Optional[str] = Field(default=None, max_length=16)
    state: str = Field(max_length=100)
    district: str = Field(max_length=100)
    city: str = Field(max_length=100)
    service_category: str = Field(max_length=100)
    service_name: str = Field(max_length=100)
    designation: Optional[str] = Field(default=None, max_length=100)
    experience: str = Field(max_length=50)
    service_price: Optional[float] = Field(default=None, ge=0)
    price_unit: str = Field(default="per hour", max_length=32)
    need_support: bool = False
    profession_description: Optional[str] = Field(default=None, max_length=2000)

    @field_validator(*REQUIRED_TEXT_FIELDS)
    @classmethod
    def normalize_required_text(cls, value: str) -> str:
        return _required_text(value)

    @field_validator("designation", "profession_description")
    @classmethod
    def normalize_optional_text(cls, value: Optional[str]) -> Optional[str]:
        return _optional_text(value)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("mobile_no")
    @classmethod
    def validate_mobile(cls, value: str) -> str:
        return normalize_mobile(value)

    @field_validator("secondary_mobile_no")
    @classmethod
    def validate_secondary_mobile(cls, value: Optional[str]) -> Optional[str]:
        if _optional_text(value) is None:
            return None
        return normalize_mobile(value)

    @field_validator("service_price", mode="before")
    @classmethod
    def blank_price_is_none(cls, value: Any) -> Any:
        return _price(value)


class ProfileUpdate(BaseModel):
    """Partial update; only fields present in the request are applied."""

    name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[str] = Field(default=None, max_length=255)
    mobile_no: Optional[str] = Field(default=None, max_length=16)
    secondary_mobile_no: Optional[str] = Field(default=None, max_length=16)
    state: Optional[str] = Field(default=None, max_length=100)
    district: Optional[str] = Field(default=None, max_length=100)
    city: Optional[str] = Field(default=None, max_length=100)
    service_category: Optional[str] = Field(default=None, max_length=100)
    service_name: Optional[str] = Field(default=None, max_length=100)
    designation: Optional[str] = Field(default=None, max_length=100)
    experience: Optional[str] = Field(default=None, max_length=50)
    service_price: Optional[float] = Field(default=None, ge=0)
    price_unit: Optional[str] = Field(default=None, max_length=32)
    need_support: Optional[bool] = None
    profession_description: Optional[str] = Field(default=None, max_length=2000)

    @field_validator(*REQUIRED_TEXT_FIELDS, "price_unit")
    @classmethod
    def normalize_required_text(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("This field cannot be cleared")
        return _required_text(value)

    @field_validator("designation", "profession_description")
    @classmethod
    def normalize_optional_text(cls, value: Optional[str]) -> Optional[str]:
        return _optional_text(value)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("This field cannot be cleared")
        return normalize_email(value)

    @field_validator("mobile_no")
    @classmethod
    def validate_mobile(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("This field cannot be cleared")
        return normalize_mobile(value)

    @field_validator("secondary_mobile_no")
    @classmethod
    def validate_secondary_mobile(cls, value: Optional[str]) -> Optional[str]:
        if _optional_text(value) is None:
            return None
        return normalize_mobile(value)

    @field_validator("need_support")
    @classmethod
    def reject_null_flag(cls, value: Optional[bool]) -> bool:
        if value is None:
            raise ValueError("This field cannot be cleared")
        return value

    @field_validator("service_price", mode="before")
    @classmethod
    def blank_price_is_none(cls, value: Any) -> Any:
        return _price(value)

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ProfileResponse(BaseModel):
    id: int
    account_id: int
    name: str
    email: str
    mobile_no: str
    secondary_mobile_no: Optional[str] = None
    state: str
    district: str
    city: str
    service_category: str
    service_name: str
    designation: Optional[str] = None
    experience: str
    service_price: Optional[float] = None
    price_unit: str
    need_support: bool
    profession_description: Optional[str] = None
    status: str
    created_at: datetime


class ProfileDetailResponse(BaseModel):
    success: bool = True
    data: ProfileResponse


class ProfileListResponse(BaseModel):
    success: bool = True
    count: int
    data: list[ProfileResponse]
