"""
Configuration for the Vorte challenge service.

Every setting can be overridden through the environment with the ``VORTE_``
prefix, or from a ``.env`` file. List values are given as JSON::

    VORTE_ALLOWED_ORIGINS='["https://vorte.app"]'
    VORTE_ALLOW_MISSING_ORIGIN=false
"""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    ALLOWED_ORIGINS,
    CHALLENGE_BYTES,
    CHALLENGE_TIMEOUT_MS,
    DEV_HOSTS,
    PRODUCTION_RP_ID,
    RATE_LIMIT_CAPACITY,
    RATE_LIMIT_WINDOW_SECONDS,
    TRANSACTION_CAPACITY,
    TRANSACTION_TTL_SECONDS,
    USER_VERIFICATION,
)


class VorteSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="VORTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    allowed_origins: Tuple[str, ...] = Field(
        default=ALLOWED_ORIGINS,
        description="Origins permitted to request a challenge",
    )
    allow_missing_origin: bool = Field(
        default=True,
        description="Admit requests that carry no Origin header",
    )
    production_rp_id: str = Field(
        default=PRODUCTION_RP_ID,
        description="RP ID shared by every non-development host",
    )
    dev_hosts: Tuple[str, ...] = Field(
        default=DEV_HOSTS,
        description="Hosts that keep their own name as RP ID",
    )

    rate_limit_window_seconds: float = Field(default=RATE_LIMIT_WINDOW_SECONDS, gt=0)
    rate_limit_capacity: int = Field(default=RATE_LIMIT_CAPACITY, ge=1)
    transaction_ttl_seconds: float = Field(default=TRANSACTION_TTL_SECONDS, gt=0)
    transaction_capacity: int = Field(default=TRANSACTION_CAPACITY, ge=1)

    challenge_bytes: int = Field(default=CHALLENGE_BYTES, ge=16)
    user_verification: str = Field(default=USER_VERIFICATION)
    challenge_timeout_ms: int = Field(default=CHALLENGE_TIMEOUT_MS, gt=0)

    log_level: str = Field(default="INFO")

    @field_validator("user_verification")
    @classmethod
    def _check_user_verification(cls, value: str) -> str:
        if value not in ("required", "preferred", "discouraged"):
            raise ValueError("user_verification must be required, preferred or discouraged")
        return value

    @field_validator("dev_hosts")
    @classmethod
    def _lower_dev_hosts(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(host.strip().lower() for host in value)

    @field_validator("production_rp_id")
    @classmethod
    def _check_rp_id(cls, value: str) -> str:
        value = value.strip().lower()
        if not value or ":" in value or "/" in value:
            raise ValueError("production_rp_id must be a bare domain")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def rate_limit_policy(self) -> str:
        """``RateLimit-Limit`` header value: one request per window."""

        return f"1;w={math.ceil(self.rate_limit_window_seconds)}"


@lru_cache()
def get_settings() -> VorteSettings:
    return VorteSettings()


__all__ = ["VorteSettings", "get_settings"]
