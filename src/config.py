"""Central application configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


class ConfigurationError(RuntimeError):
    """Raised when a required configuration value is missing."""


def _database_url_from_env() -> str:
    return (
        os.getenv("DATABASE_URL")
        or os.getenv("POSTGRES_URL")
        or os.getenv("POSTGRES_URL_NON_POOLING")
        or ""
    )


def _zips_from_env() -> tuple[str, ...]:
    raw = os.getenv("PETPLACE_ZIPS", "")
    return tuple(z.strip() for z in raw.split(",") if z.strip())


def _timeout_from_env() -> float | None:
    raw = os.getenv("PETPLACE_TIMEOUT")
    return float(raw) if raw else None


@dataclass(frozen=True)
class Config:
    """Central application configuration.

    Reads from environment variables with sensible defaults. The collector
    and the read API share one instance built at process start.
    """

    # Upstream
    target_url: str = field(default_factory=lambda: os.getenv("TARGET_URL", ""))
    search_url: str | None = field(
        default_factory=lambda: os.getenv("PETPLACE_SEARCH_URL") or None
    )
    source_name: str = "petplace"
    user_agent: str = "dobiefetch/0.1 (+https://example.local)"
    request_timeout: float | None = field(default_factory=_timeout_from_env)

    # Search parameters
    zip_postal: str = field(default_factory=lambda: os.getenv("PETPLACE_ZIP", "94110"))
    zips: tuple[str, ...] = field(default_factory=_zips_from_env)
    breed: str = field(
        default_factory=lambda: os.getenv("PETPLACE_BREED", "DOBERMAN PINSCH")
    )
    radius: str = field(default_factory=lambda: os.getenv("PETPLACE_RADIUS", "100"))
    start_index: int = field(
        default_factory=lambda: int(os.getenv("PETPLACE_START_INDEX", "0"))
    )

    # Collector pacing
    limit: int = 25
    delay_ms: int = 250

    # Database
    database_url: str = field(default_factory=_database_url_from_env)

    # Read API
    api_key: str = field(default_factory=lambda: os.getenv("API_KEY", ""))
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "3000")))

    def require_target(self, search_url_override: str | None = None) -> None:
        """Fail fast when there is nothing to search.

        Raises:
            ConfigurationError: If neither TARGET_URL nor a search URL is set.
        """
        if not (self.target_url or self.search_url or search_url_override):
            raise ConfigurationError(
                "TARGET_URL is required (or set PETPLACE_SEARCH_URL)."
            )

    def require_database_url(self) -> str:
        """Return the database URL or raise if it is not configured.

        Raises:
            ConfigurationError: If no DATABASE_URL (or fallback) is set.
        """
        if not self.database_url:
            raise ConfigurationError("DATABASE_URL is required")
        return self.database_url


def get_config() -> Config:
    """Get application configuration.

    Returns:
        Config instance with values from environment or defaults.
    """
    return Config()
