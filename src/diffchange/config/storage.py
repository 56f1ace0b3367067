"""Where the recent files cache lives on disk."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

APP_DIR_NAME: Final[str] = "diffchange"
DEFAULT_DB_FILENAME: Final[str] = "diffchange.db"
DATA_DIR_ENV: Final[str] = "DIFFCHANGE_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def database_path(self, *, ensure: bool = True) -> Path:
        base = self.resolve_data_dir()
        if ensure:
            base.mkdir(parents=True, exist_ok=True)
        return base / self.database_filename


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str

    @property
    def in_memory(self) -> bool:
        if not self.uri.startswith("sqlite"):
            return False
        return ":memory:" in self.uri or self.uri.endswith("://")


def _platform_data_home() -> Path:
    if os.name == "nt":
        base = optional_env_var("LOCALAPPDATA")
        return Path(base) if base else Path.home() / "AppData" / "Local"
    base = optional_env_var("XDG_DATA_HOME")
    return Path(base) if base else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    explicit = optional_env_var(DATA_DIR_ENV)
    data_dir = Path(explicit) if explicit else _platform_data_home() / APP_DIR_NAME
    return StorageConfig(data_dir=data_dir.expanduser().resolve())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise a SQLite file inside the data directory."""

    explicit = optional_env_var(DATABASE_URI_ENV)
    if explicit:
        return DatabaseConfig(uri=explicit)
    path = (storage or get_storage_config()).database_path()
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{path}")
