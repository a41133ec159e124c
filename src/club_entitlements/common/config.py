"""Club-Entitlements configuration via pydantic-settings."""

import warnings
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_DEFAULTS = {
    "api_key": "insecure-admin-key-change-me",
}

CACHE_BACKENDS = ("memory", "redis", "none")


class EntitlementsSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CLUBENT_")

    environment: str = "development"
    log_level: str = "INFO"

    # Database
    db_url: str = "sqlite+aiosqlite:///./data/club_entitlements.db"

    # API
    api_title: str = "Club-Entitlements"
    api_version: str = "0.1.0"
    api_key: str = "insecure-admin-key-change-me"
    host: str = "0.0.0.0"
    port: int = 8080
    api_prefix: str = ""
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Flag cache
    cache_backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl: int = 300  # seconds
    cache_prefix: str = "feature-flags:"

    def validate_for_production(self) -> None:
        """Raise if insecure defaults or an unknown cache backend are configured."""
        if self.cache_backend not in CACHE_BACKENDS:
            raise ValueError(
                f"CLUBENT_CACHE_BACKEND must be one of {', '.join(CACHE_BACKENDS)}, "
                f"got: {self.cache_backend!r}"
            )

        insecure_fields = [
            field
            for field, default in _INSECURE_DEFAULTS.items()
            if getattr(self, field) == default
        ]

        if self.environment != "development" and insecure_fields:
            env_vars = ", ".join(f"CLUBENT_{f.upper()}" for f in insecure_fields)
            raise RuntimeError(
                f"Insecure default values detected in '{self.environment}' environment. "
                f"Set these environment variables to secure values: {env_vars}."
            )

        if insecure_fields:
            warnings.warn(
                "Using insecure default API key, set CLUBENT_API_KEY for production",
                UserWarning,
                stacklevel=2,
            )

        # Memory entries are per process; another worker's write never drops them
        if self.environment != "development" and self.cache_backend == "memory":
            warnings.warn(
                "The memory flag cache is per-process and other workers keep serving "
                "stale flags after a write, set CLUBENT_CACHE_BACKEND=redis when "
                "running more than one worker",
                UserWarning,
                stacklevel=2,
            )


@lru_cache
def get_settings() -> EntitlementsSettings:
    settings = EntitlementsSettings()
    settings.validate_for_production()
    return settings
