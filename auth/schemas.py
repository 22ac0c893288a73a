"""Auth request/response schemas."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from auth.barangays import is_valid_barangay, normalize_barangay
from auth.phone import is_valid_phone

_NAME_PATTERN = re.compile(r"^[A-Za-z\s]{2,50}$")
# Lowercase, uppercase, digit and special character, each at least once.
_PASSWORD_RULES = tuple(re.compile(rule) for rule in (r"[a-z]", r"[A-Z]", r"\d", r"[@$!%*?&]"))


def _check_phone(value: str) -> str:
    value = value.strip()
    if not is_valid_phone(value):
        raise ValueError("Please enter a valid Philippine mobile number")
    return value


def _check_name(value: str) -> str:
    value = value.strip()
    if not _NAME_PATTERN.match(value):
        raise ValueError("Name must be 2-50 characters and contain only letters and spaces")
    return value


def _check_barangay(value: str) -> str:
    if not is_valid_barangay(value):
        raise ValueError("Please select a valid barangay")
    return normalize_barangay(value)


def _check_password_strength(value: str) -> str:
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not all(rule.search(value) for rule in _PASSWORD_RULES):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter, "
            "one number, and one special character"
        )
    return value


PhoneNumber = Annotated[str, AfterValidator(_check_phone)]
PersonName = Annotated[str, AfterValidator(_check_name)]
BarangayName = Annotated[str, AfterValidator(_check_barangay)]
StrongPassword = Annotated[str, Field(max_length=128), AfterValidator(_check_password_strength)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(BaseModel):
    success: bool
    message: str
    data: dict[str, Any] | None = None


class SendOtpRequest(CamelModel):
    first_name: PersonName
    last_name: PersonName
    contact_number: PhoneNumber
    password: StrongPassword
    confirm_password: str
    barangay: BarangayName

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        # A password that failed its own checks is already reported.
        if "password" in info.data and value != info.data["password"]:
            raise ValueError("Passwords do not match")
        return value


class VerifyOtpRequest(CamelModel):
    contact_number: PhoneNumber
    otp: str = Field(pattern=r"^\d{6}$")


class ResendOtpRequest(CamelModel):
    contact_number: PhoneNumber


class LoginRequest(CamelModel):
    contact_number: PhoneNumber
    password: str = Field(min_length=1, max_length=128)


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class ProfileDetails(CamelModel):
    bio: str | None = Field(default=None, max_length=500)
    address: str | None = Field(default=None, max_length=200)


class UpdateProfileRequest(CamelModel):
    first_name: PersonName | None = None
    last_name: PersonName | None = None
    barangay: BarangayName | None = None
    profile: ProfileDetails | None = None


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: StrongPassword
    confirm_new_password: str

    @field_validator("confirm_new_password")
    @classmethod
    def confirmation_matches(cls, value: str, info: ValidationInfo) -> str:
        if "new_password" in info.data and value != info.data["new_password"]:
            raise ValueError("Password confirmation does not match")
        return value


class AdminCreateUserRequest(CamelModel):
    first_name: PersonName
    last_name: PersonName
    contact_number: PhoneNumber
    barangay: BarangayName
    role: str = Field(default="citizen", pattern=r"^(citizen|admin)$")
    password: StrongPassword | None = None


class AdminResetPasswordRequest(CamelModel):
    new_password: StrongPassword | None = None


class AdminUpdateUserRequest(CamelModel):
    first_name: PersonName | None = None
    last_name: PersonName | None = None
    barangay: BarangayName | None = None
    role: str | None = Field(default=None, pattern=r"^(citizen|admin)$")
    is_active: bool | None = None
    is_verified: bool | None = None
    profile: ProfileDetails | None = None


class AuthUser(CamelModel):
    id: int | str
    first_name: str
    last_name: str
    contact_number: str
    barangay: str
    role: str = "citizen"
    is_verified: bool = False
    is_active: bool = True
    profile: dict[str, Any] = Field(default_factory=dict)
    last_login: datetime | None = None
    created_at: datetime | None = None


def serialize_user(user: dict[str, Any]) -> dict[str, Any]:
    """Public view of a stored user; the password hash never leaves the service."""
    return AuthUser.model_validate(user).model_dump(by_alias=True, mode="json")
