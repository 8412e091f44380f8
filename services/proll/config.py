"""
Configuration management for proll.

Non-secret configuration loaded from YAML file, overridden by environment variables.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_PATH = Path("/etc/proll/config.yaml")


def yaml_config_settings_source() -> dict[str, Any]:
    """Load configuration from YAML file."""
    if CONFIG_PATH.exists():
        with open(CONFIG_PATH) as f:
            return yaml.safe_load(f) or {}
    return {}


# --- Archive Configuration ---


class ArchiveConfig(BaseModel):
    """Remote package archive configuration."""

    url: str = Field(
        default="https://archive.archlinux.org",
        description="Archive root URL",
    )
    index_path: str = Field(
        default="/packages/.all/index.0.xz",
        description="Path of the xz-compressed package index below the archive root",
    )
    package_extensions: list[str] = Field(
        default=[".pkg.tar.zst", ".pkg.tar.xz"],
        description="Package file extensions, probed in order (newest first)",
    )
    timeout_seconds: float = Field(
        default=60.0,
        description="Timeout applied to every archive request",
    )


# --- Cache Configuration ---


class CacheConfig(BaseModel):
    """Local index cache configuration."""

    enabled: bool = Field(default=True)
    dir: str = Field(default="/tmp/.proll", description="Directory holding the cached index")
    ttl_seconds: int = Field(
        default=300,
        description="Maximum age of a cached index before it is fetched again",
    )


# --- Install Configuration ---


class InstallConfig(BaseModel):
    """External package manager invocation."""

    command: list[str] = Field(
        default=["sudo", "pacman", "-U"],
        description="Command that installs a package file; the URL is appended",
    )


# --- Main Settings ---


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="PROLL_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = Field(default="WARNING")
    json_logs: bool = Field(default=False, description="JSON logging instead of console output")

    archive: ArchiveConfig = Field(default_factory=ArchiveConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    install: InstallConfig = Field(default_factory=InstallConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Customize settings sources: env vars override YAML config."""
        return (
            init_settings,
            env_settings,
            yaml_config_settings_source,
            dotenv_settings,
            file_secret_settings,
        )


# Global settings instance
settings = Settings()
