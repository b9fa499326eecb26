# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Runtime configuration for the POS session layer.

Each section is a plain model whose fields alias flat environment variables,
e.g. ``RESILIENCE_RETRIES=1`` or ``SESSION_CHECK_INTERVAL_SECONDS=10``.
"""

import os
from collections.abc import Callable
from functools import lru_cache
from typing import Annotated, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _truthy(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


EnvBool = Annotated[bool, BeforeValidator(_truthy)]


class _EnvSection(BaseModel):
    model_config = ConfigDict(validate_by_name=True, extra="ignore", frozen=True)


class ApiConfig(_EnvSection):
    base_url: str = Field("http://localhost:5002/api", alias="POS_API_BASE_URL")
    timeout_ms: int = Field(30000, ge=1, alias="POS_API_TIMEOUT_MS")

    @field_validator("base_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class ResilienceConfig(_EnvSection):
    max_retries: int = Field(3, ge=0, alias="RESILIENCE_RETRIES")
    base_delay_ms: int = Field(1000, ge=0, alias="RESILIENCE_BASE_DELAY_MS")
    max_delay_ms: int = Field(10000, ge=0, alias="RESILIENCE_MAX_DELAY_MS")
    backoff_multiplier: float = Field(2.0, ge=1.0, alias="RESILIENCE_BACKOFF_MULTIPLIER")


class SessionConfig(_EnvSection):
    default_timeout_minutes: int = Field(30, ge=1, alias="SESSION_DEFAULT_TIMEOUT_MINUTES")
    min_timeout_minutes: int = Field(5, ge=1, alias="SESSION_MIN_TIMEOUT_MINUTES")
    timeout_cache_seconds: int = Field(300, ge=0, alias="SESSION_TIMEOUT_CACHE_SECONDS")
    check_interval_seconds: float = Field(30.0, gt=0, alias="SESSION_CHECK_INTERVAL_SECONDS")
    warning_threshold_minutes: int = Field(5, ge=0, alias="SESSION_WARNING_THRESHOLD_MINUTES")
    token_bytes: int = Field(32, ge=32, alias="SESSION_TOKEN_BYTES")


class ObservabilityConfig(_EnvSection):
    metrics_enabled: EnvBool = Field(True, alias="METRICS_ENABLED")


S = TypeVar("S", bound=_EnvSection)


def _from_env(section: type[S]) -> Callable[[], S]:
    return lambda: section.model_validate(dict(os.environ))


class AppConfig(BaseSettings):
    debug_logging: EnvBool = Field(False, alias="DEBUG_LOGGING")

    api: ApiConfig = Field(default_factory=_from_env(ApiConfig))
    resilience: ResilienceConfig = Field(default_factory=_from_env(ResilienceConfig))
    session: SessionConfig = Field(default_factory=_from_env(SessionConfig))
    observability: ObservabilityConfig = Field(default_factory=_from_env(ObservabilityConfig))

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()


__all__ = [
    "ApiConfig",
    "AppConfig",
    "ObservabilityConfig",
    "ResilienceConfig",
    "SessionConfig",
    "load_config",
]
