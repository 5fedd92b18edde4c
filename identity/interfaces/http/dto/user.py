from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from identity.shared.errors.validation_types import ValidationErrorType

from .auth import PASSWORD_MAX_LENGTH, validate_password_policy

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 32
USERNAME_PATTERN = r"^[A-Za-z][A-Za-z0-9_.-]*$"


class ChangeUsernameRequestDTO(BaseModel):
    username: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        if len(value) < USERNAME_MIN_LENGTH:
            raise PydanticCustomError(
                ValidationErrorType.USERNAME_TOO_SHORT,
                "Username must be at least {min_length} characters long",
                {"min_length": USERNAME_MIN_LENGTH},
            )

        if len(value) > USERNAME_MAX_LENGTH:
            raise PydanticCustomError(
                ValidationErrorType.USERNAME_TOO_LONG,
                "Username must be at most {max_length} characters long",
                {"max_length": USERNAME_MAX_LENGTH},
            )

        if not re.match(USERNAME_PATTERN, value):
            raise PydanticCustomError(
                ValidationErrorType.USERNAME_INVALID_CHARS,
                "Username must start with a letter and contain only letters, digits, '_', '.' or '-'",
                {"pattern": USERNAME_PATTERN},
            )

        return value


class ChangePasswordRequestDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    password: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH)
    new_password: str = Field(alias="newPassword")

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, value: str) -> str:
        return validate_password_policy(value)
