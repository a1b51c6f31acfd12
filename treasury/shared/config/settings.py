# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_SECTION_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    validate_by_name=True,
)


def _parse_bool(value: str | bool) -> bool:
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes")
    return bool(value)


class ServerConfig(BaseSettings):
    ip_address: str = Field("127.0.0.1", alias="SERVER_ADDRESS")
    port: int = Field(3001, ge=1, le=65535, alias="SERVER_PORT")
    shutdown_grace_period: float = Field(10.0, ge=0.0, alias="SHUTDOWN_GRACE_PERIOD")

    model_config = _SECTION_CONFIG


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///treasury.db", alias="DATABASE_URL")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = _SECTION_CONFIG


class StorageConfig(BaseSettings):
    user_files_dir: Path = Field(Path("user_files"), alias="USER_FILES_DIR")
    default_quota_bytes: int = Field(10 * 1024**3, ge=0, alias="DEFAULT_QUOTA_BYTES")
    max_entry_name_length: int = Field(255, ge=1, le=255, alias="MAX_ENTRY_NAME_LENGTH")

    model_config = _SECTION_CONFIG

    @field_validator("user_files_dir", mode="after")
    @classmethod
    def _ensure_paths(cls, value: Any) -> Any:
        if isinstance(value, Path):
            value.mkdir(parents=True, exist_ok=True)
        return value


class LoggingConfig(BaseSettings):
    level: str = Field("INFO", alias="LOG_LEVEL")
    file: Path | None = Field(None, alias="LOG_FILE")
    rotation: str = Field("10 MB", alias="LOG_ROTATION")
    retention: str = Field("14 days", alias="LOG_RETENTION")
    colorize: bool = Field(True, alias="LOG_COLORIZE")

    model_config = _SECTION_CONFIG

    @field_validator("level", mode="after")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("colorize", mode="before")
    @classmethod
    def _parse_flag(cls, value: str | bool) -> bool:
        return _parse_bool(value)


class ObservabilityConfig(BaseSettings):
    metrics_enabled: bool = Field(True, alias="METRICS_ENABLED")

    model_config = _SECTION_CONFIG

    @field_validator("metrics_enabled", mode="before")
    @classmethod
    def _parse_flag(cls, value: str | bool) -> bool:
        return _parse_bool(value)


class SecurityConfig(BaseSettings):
    # Cookie security
    cookie_secure: bool = Field(False, alias="COOKIE_SECURE")
    cookie_samesite: str = Field("Strict", alias="COOKIE_SAMESITE")

    # Sessions
    session_idle_timeout: float = Field(3600.0, gt=0, alias="SESSION_IDLE_TIMEOUT")
    session_absolute_timeout: float | None = Field(None, gt=0, alias="SESSION_ABSOLUTE_TIMEOUT")
    session_sweep_interval: float = Field(60.0, gt=0, alias="SESSION_SWEEP_INTERVAL")
    single_session: bool = Field(False, alias="SINGLE_SESSION")

    # Password verifier
    password_hash_method: str = Field("pbkdf2:sha256:600000", alias="PASSWORD_HASH_METHOD")
    password_salt_length: int = Field(16, ge=8, alias="PASSWORD_SALT_LENGTH")
    client_salt_bytes: int = Field(16, ge=8, le=64, alias="CLIENT_SALT_BYTES")

    # Claim codes
    claim_code_length: int = Field(12, ge=8, le=64, alias="CLAIM_CODE_LENGTH")

    # CORS
    allowed_origins: list[str] = Field(["*"], alias="ALLOWED_ORIGINS")

    # Rate limiting
    enable_rate_limit: bool = Field(True, alias="ENABLE_RATE_LIMIT")
    rate_limit_requests: int = Field(10, alias="RL_LIMIT")
    rate_limit_window: float = Field(60.0, alias="RL_WINDOW")

    # Reverse proxies in front of the server; X-Forwarded-For is ignored when 0
    trusted_proxy_hops: int = Field(0, ge=0, le=8, alias="TRUSTED_PROXY_HOPS")

    # HSTS
    enable_hsts: bool = Field(False, alias="ENABLE_HSTS")

    model_config = _SECTION_CONFIG

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator(
        "cookie_secure", "single_session", "enable_rate_limit", "enable_hsts", mode="before"
    )
    @classmethod
    def _parse_flags(cls, value: str | bool) -> bool:
        return _parse_bool(value)

    @field_validator("cookie_samesite", mode="after")
    @classmethod
    def _normalize_samesite(cls, value: str) -> str:
        normalized = value.strip().capitalize()
        if normalized not in ("Strict", "Lax", "None"):
            raise ValueError("cookie_samesite must be Strict, Lax or None")
        return normalized


def _server_config_factory() -> ServerConfig:
    return ServerConfig()  # type: ignore[call-arg]


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _storage_config_factory() -> StorageConfig:
    return StorageConfig()  # type: ignore[call-arg]


def _logging_config_factory() -> LoggingConfig:
    return LoggingConfig()  # type: ignore[call-arg]


def _observability_config_factory() -> ObservabilityConfig:
    return ObservabilityConfig()  # type: ignore[call-arg]


def _security_config_factory() -> SecurityConfig:
    return SecurityConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    secret_key: str = Field("dev", alias="SECRET_KEY")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")

    server: ServerConfig = Field(default_factory=_server_config_factory)
    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    storage: StorageConfig = Field(default_factory=_storage_config_factory)
    logging: LoggingConfig = Field(default_factory=_logging_config_factory)
    observability: ObservabilityConfig = Field(default_factory=_observability_config_factory)
    security: SecurityConfig = Field(default_factory=_security_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
        validate_by_name=True,
        arbitrary_types_allowed=True,
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        return _parse_bool(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        if self.secret_key in ("dev", "development", "test", ""):
            print(
                "\n❌ CRITICAL SECURITY ERROR: Insecure SECRET_KEY detected in production!\n"
                "   SECRET_KEY signs session cookies and must be a strong random value.\n"
                "   Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        warnings = []
        if not self.security.cookie_secure:
            warnings.append("⚠️  Cookie Secure flag is DISABLED (use HTTPS!)")
        if "*" in self.security.allowed_origins:
            warnings.append("⚠️  CORS allows wildcard (*) origins")
        if not self.security.enable_hsts:
            warnings.append("⚠️  HSTS is DISABLED (recommended for HTTPS)")

        if warnings:
            print("\n⚠️  PRODUCTION SECURITY WARNINGS:", file=sys.stderr)
            for warning in warnings:
                print(f"   {warning}", file=sys.stderr)
            print(
                "   Consider enabling these security features in production.\n",
                file=sys.stderr,
            )

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()  # type: ignore[call-arg]


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "ObservabilityConfig",
    "SecurityConfig",
    "ServerConfig",
    "StorageConfig",
    "load_config",
]
