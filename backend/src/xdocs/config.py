"""Application configuration via environment variables.

Provides type-safe settings loading using pydantic-settings.
Environment variables can be loaded from a .env file.

Environment Variables:
    DATABASE_URL: SQLAlchemy connection string (required)
    JWT_SECRET: HS256 signing key for session tokens (required)
    STORAGE_ROOT: Blob store root directory
    BIND_ADDR: host:port the bundled server listens on
    DEFAULT_ADMIN_EMAIL / DEFAULT_ADMIN_USERNAME / DEFAULT_ADMIN_PASSWORD:
        Identity of the administrator ensured at startup
    DOWNLOAD_APPROVAL_TTL_HOURS: Lifetime of a download approval (min 1)
    LOG_LEVEL: Logging level (default INFO)
"""

from functools import lru_cache
from typing import List, Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ADMIN_PASSWORD = "admin123"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    DATABASE_URL and JWT_SECRET have no defaults; startup fails without them.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 5

    # Security
    JWT_SECRET: str

    # Blob storage
    STORAGE_ROOT: str = "../data/documents"
    MAX_UPLOAD_SIZE_BYTES: int = 50 * 1024 * 1024  # 50 MiB

    # Server
    BIND_ADDR: str = "127.0.0.1:8752"
    CORS_ORIGINS: str = (
        "http://localhost:5173,http://127.0.0.1:5173,"
        "http://localhost:8080,http://127.0.0.1:8080,"
        "http://localhost:9080,http://127.0.0.1:9080"
    )

    # Bootstrap administrator
    DEFAULT_ADMIN_EMAIL: str = "admin@xdocs.local"
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: str = DEFAULT_ADMIN_PASSWORD

    # Release workflow
    DOWNLOAD_APPROVAL_TTL_HOURS: int = 24

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @property
    def approval_ttl_hours(self) -> int:
        """Approval lifetime in hours, never below one hour."""
        return max(1, self.DOWNLOAD_APPROVAL_TTL_HOURS)

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def _split_bind_addr(self) -> Tuple[str, int]:
        host, sep, port = self.BIND_ADDR.rpartition(":")
        if not sep or not host:
            raise ValueError(f"Invalid BIND_ADDR: {self.BIND_ADDR!r} (expected host:port)")
        try:
            return host, int(port)
        except ValueError:
            raise ValueError(f"Invalid BIND_ADDR port: {self.BIND_ADDR!r}")

    @property
    def bind_host(self) -> str:
        return self._split_bind_addr()[0]

    @property
    def bind_port(self) -> int:
        return self._split_bind_addr()[1]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache for singleton behavior.
    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
