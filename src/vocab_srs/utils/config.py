"""Configuration management for vocab-srs."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_DATA_DIR = "~/.vocab-srs"


@dataclass
class Config:
    """
    Application configuration.

    Loaded from environment variables with sensible defaults. Scheduler
    parameters are not part of it; they live in the meta table.
    """

    # Storage settings
    data_dir: Path = field(default_factory=lambda: Path(DEFAULT_DATA_DIR).expanduser())
    storage_backend: str = "sqlite"  # sqlite, memory
    sqlite_path: str | None = None

    # Catalog used by sync/review when none is given explicitly
    catalog_path: str | None = None

    # Server settings
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # CORS settings
    cors_origins: list[str] = field(
        default_factory=lambda: ["http://localhost:*", "http://127.0.0.1:*"]
    )

    @property
    def db_path(self) -> Path:
        """SQLite database file, ``<data_dir>/srs.db`` unless overridden."""
        if self.sqlite_path:
            return Path(self.sqlite_path).expanduser()
        return self.data_dir / "srs.db"

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables."""

        def get_bool(key: str, default: bool) -> bool:
            value = os.getenv(key)
            if value is None:
                return default
            return value.lower() in ("true", "1", "yes")

        def get_int(key: str, default: int) -> int:
            value = os.getenv(key)
            if value is None:
                return default
            try:
                return int(value)
            except ValueError:
                return default

        def get_list(key: str, default: list[str]) -> list[str]:
            value = os.getenv(key)
            if value is None:
                return default
            return [s.strip() for s in value.split(",") if s.strip()]

        return cls(
            data_dir=Path(os.getenv("VOCAB_SRS_DIR", DEFAULT_DATA_DIR)).expanduser(),
            storage_backend=os.getenv("VOCAB_SRS_STORAGE", "sqlite").lower(),
            sqlite_path=os.getenv("VOCAB_SRS_DB_PATH"),
            catalog_path=os.getenv("VOCAB_SRS_CATALOG"),
            host=os.getenv("VOCAB_SRS_HOST", "127.0.0.1"),
            port=get_int("VOCAB_SRS_PORT", 8000),
            debug=get_bool("VOCAB_SRS_DEBUG", False),
            cors_origins=get_list(
                "VOCAB_SRS_CORS_ORIGINS",
                ["http://localhost:*", "http://127.0.0.1:*"],
            ),
        )


# Singleton config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
