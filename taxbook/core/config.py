from __future__ import annotations

import os
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from taxbook.services.profit_loss.classification import InclusionPolicy

_INCLUSION_POLICIES = tuple(policy.value for policy in InclusionPolicy)


class BaseAppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Taxbook"
    ENV: str = "dev"
    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    CORS_ALLOW_METHODS: list[str] = ["*"]
    CORS_ALLOW_HEADERS: list[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CONTENT_SECURITY_POLICY: str = (
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "img-src 'self' data: https://fastapi.tiangolo.com; "
        "font-src 'self' data:; "
        "connect-src 'self'"
    )
    HSTS_SECONDS: int = 31_536_000
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"
    SENTRY_DSN: str | None = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    # P&L engine
    # Which transactions count toward business P&L:
    # "exclude_personal" (everything except personal rows) or "business_only"
    PL_INCLUSION_POLICY: str = "exclude_personal"
    # Upper bound on transactions accepted in one report request
    PL_MAX_TRANSACTIONS: int = 50_000
    # Overrides LOG_LEVEL for the engine's per-report summaries (e.g. WARNING)
    PL_ENGINE_LOG_LEVEL: str | None = None

    @field_validator("PL_INCLUSION_POLICY", mode="before")
    @classmethod
    def normalise_inclusion_policy(cls, v):
        """Accept any casing but only the known policy names."""
        value = str(v).strip().lower()
        if value not in _INCLUSION_POLICIES:
            raise ValueError(
                f"PL_INCLUSION_POLICY must be one of {', '.join(_INCLUSION_POLICIES)}; got {v!r}"
            )
        return value


class DevSettings(BaseAppSettings):
    ENV: str = "dev"


class TestSettings(BaseAppSettings):
    ENV: str = "test"
    LOG_LEVEL: str = "WARNING"


class ProdSettings(BaseAppSettings):
    ENV: str = "prod"
    CORS_ALLOW_ORIGINS: list[str] = [
        "https://taxbook.ng",
        "https://www.taxbook.ng",
        "http://localhost:3000",  # Local development
    ]
    CORS_ALLOW_CREDENTIALS: bool = True
    LOG_FORMAT: str = "json"


_ENV_TO_SETTINGS: dict[str, type[BaseAppSettings]] = {
    "dev": DevSettings,
    "development": DevSettings,
    "test": TestSettings,
    "testing": TestSettings,
    "prod": ProdSettings,
    "production": ProdSettings,
}


@lru_cache
def get_settings() -> BaseAppSettings:
    env_name = os.getenv("APP_ENV") or os.getenv("ENV") or "dev"
    env = env_name.lower()
    settings_cls = _ENV_TO_SETTINGS.get(env, DevSettings)
    return settings_cls()


settings = get_settings()
