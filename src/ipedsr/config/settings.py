"""Application settings and configuration."""

from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent


def _optional_path(name: str) -> Optional[Path]:
    value = os.getenv(name)
    return Path(value) if value else None


@dataclass
class DatabaseConfig:
    """Database configuration settings."""

    path: Path = field(
        default_factory=lambda: Path(
            os.getenv("IPEDS_DB_PATH", str(PROJECT_ROOT / "data" / "ipeds.duckdb"))
        )
    )
    # Survey queries only read; the CLI opens read-write just to materialize
    read_only: bool = field(
        default_factory=lambda: os.getenv("IPEDS_DB_READ_ONLY", "true").lower()
        in ("1", "true", "yes")
    )
    memory_limit: str = field(
        default_factory=lambda: os.getenv("IPEDS_MEMORY_LIMIT", "4GB")
    )
    threads: int = field(
        default_factory=lambda: int(os.getenv("IPEDS_THREADS", "-1"))
    )  # -1 uses all available threads


@dataclass
class AppConfig:
    """Application configuration settings."""

    name: str = field(default_factory=lambda: os.getenv("APP_NAME", "IPEDSR"))
    version: str = field(default_factory=lambda: os.getenv("APP_VERSION", "0.3.0"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: Optional[Path] = field(default_factory=lambda: _optional_path("IPEDS_LOG_FILE"))
    registry_path: Optional[Path] = field(
        default_factory=lambda: _optional_path("IPEDS_REGISTRY_PATH")
    )


@dataclass
class Config:
    """Main configuration container."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    app: AppConfig = field(default_factory=AppConfig)


# Global config instance
config = Config()
