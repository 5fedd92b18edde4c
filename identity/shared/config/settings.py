# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_SECTION_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    populate_by_name=True,
)


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///identity.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = _SECTION_CONFIG


class AuthConfig(BaseSettings):
    jwt_secret: str = Field("dev", alias="JWT_SECRET")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    jwt_ttl_seconds: int = Field(60 * 60 * 24, ge=1, alias="JWT_TTL_SECONDS")
    jwt_issuer: str | None = Field(None, alias="JWT_ISSUER")

    model_config = _SECTION_CONFIG


class HashingConfig(BaseSettings):
    # werkzeug method string, e.g. "scrypt:32768:8:1" or "pbkdf2:sha256:600000"
    method: str = Field("scrypt:32768:8:1", alias="PASSWORD_HASH_METHOD")
    salt_length: int = Field(16, ge=8, alias="PASSWORD_SALT_LENGTH")

    model_config = _SECTION_CONFIG


class NotificationConfig(BaseSettings):
    url: str | None = Field(None, alias="NOTIFY_URL")
    workers: int = Field(2, ge=1, alias="NOTIFY_WORKERS")
    max_pending: int = Field(100, ge=1, alias="NOTIFY_MAX_PENDING")
    timeout: float = Field(10.0, ge=0.1, alias="NOTIFY_TIMEOUT")
    max_retries: int = Field(3, ge=0, alias="NOTIFY_RETRIES")
    backoff_base: float = Field(0.5, ge=0.1, alias="NOTIFY_BACKOFF_BASE")
    backoff_cap: float = Field(8.0, ge=0.1, alias="NOTIFY_BACKOFF_CAP")
    circuit_fail_threshold: int = Field(5, ge=1, alias="NOTIFY_CIRCUIT_THRESHOLD")
    circuit_reset_timeout: float = Field(60.0, ge=1.0, alias="NOTIFY_CIRCUIT_RESET")

    model_config = _SECTION_CONFIG

    @field_validator("url", mode="before")
    @classmethod
    def _empty_url(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            return None
        return value


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _auth_config_factory() -> AuthConfig:
    return AuthConfig()  # type: ignore[call-arg]


def _hashing_config_factory() -> HashingConfig:
    return HashingConfig()  # type: ignore[call-arg]


def _notification_config_factory() -> NotificationConfig:
    return NotificationConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    auth: AuthConfig = Field(default_factory=_auth_config_factory)
    hashing: HashingConfig = Field(default_factory=_hashing_config_factory)
    notifications: NotificationConfig = Field(default_factory=_notification_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        if self.auth.jwt_secret in ("dev", "development", "test", "") or len(
            self.auth.jwt_secret
        ) < 32:
            print(
                "\n❌ CRITICAL SECURITY ERROR: Insecure JWT_SECRET detected in production!\n"
                "   JWT_SECRET must be a strong random value of at least 32 characters.\n"
                "   Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        if self.notifications.url is None:
            print(
                "\n⚠️  NOTIFY_URL is not set: activation and password-change notices "
                "will only be logged.\n",
                file=sys.stderr,
            )

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()


__all__ = [
    "AppConfig",
    "AuthConfig",
    "DatabaseConfig",
    "HashingConfig",
    "NotificationConfig",
    "load_config",
]
