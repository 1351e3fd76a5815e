"""Configuration management for file-drive."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DATABASE_NAME = "files.db"
STORE_NAME = "files"
DATA_DIR_NAME = "data"
SESSION_FILE_NAME = "session.json"
LOG_FILE_NAME = "file-drive.log"


class DriveConfig(BaseSettings):
    """Configuration for a file-drive home directory."""

    # Default to ~/.file-drive but allow override with env var
    home: Path = Field(
        default_factory=lambda: Path.home() / ".file-drive",
        description="Base path for file-drive data",
    )
    database_name: str = Field(default=DATABASE_NAME, description="SQLite file name")
    store_name: str = Field(default=STORE_NAME, description="Table holding stored objects")

    login_email: str = Field(default="owner@example.com", description="The accepted login")
    login_password: SecretStr = Field(default=SecretStr("changeme"))

    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="FILE_DRIVE_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @property
    def database_path(self) -> Path:
        """Get SQLite database path."""
        return self.home / DATA_DIR_NAME / self.database_name

    @property
    def session_path(self) -> Path:
        return self.home / SESSION_FILE_NAME

    @property
    def log_path(self) -> Path:
        return self.home / LOG_FILE_NAME

    @field_validator("home")
    @classmethod
    def ensure_path_exists(cls, v: Path) -> Path:
        """Ensure home path exists."""
        v = v.expanduser()
        if not v.exists():
            v.mkdir(parents=True)
        return v

    @field_validator("store_name")
    @classmethod
    def validate_store_name(cls, v: str) -> str:
        """Table names are used verbatim in DDL."""
        if not v.isidentifier():
            raise ValueError(f"store_name must be a valid identifier, got {v!r}")
        return v


@lru_cache
def get_config() -> DriveConfig:
    """Load configuration from the environment once per process."""
    return DriveConfig()
