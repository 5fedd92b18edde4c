from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic_core import PydanticCustomError

from identity.shared.errors.validation_types import ValidationErrorType

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128


def validate_password_policy(value: str) -> str:
    if not value.strip():
        raise PydanticCustomError(
            ValidationErrorType.PASSWORD_BLANK,
            "Password cannot be blank",
            {},
        )

    if len(value) < PASSWORD_MIN_LENGTH:
        raise PydanticCustomError(
            ValidationErrorType.PASSWORD_TOO_SHORT,
            "Password must be at least {min_length} characters long",
            {"min_length": PASSWORD_MIN_LENGTH},
        )

    if len(value) > PASSWORD_MAX_LENGTH:
        raise PydanticCustomError(
            ValidationErrorType.PASSWORD_TOO_LONG,
            "Password must be at most {max_length} characters long",
            {"max_length": PASSWORD_MAX_LENGTH},
        )

    return value


class LoginRequestDTO(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH)  # No policy check on login


class RegisterRequestDTO(BaseModel):
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return validate_password_policy(value)


class TokenResponseDTO(BaseModel):
    token: str


class AuthSuccessDTO(BaseModel):
    ok: bool = True
