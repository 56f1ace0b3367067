"""SQLAlchemy adapter package for the file cache."""

from __future__ import annotations

from .file_cache import SqlAlchemyFileCache, StartupError, is_started, shutdown, startup
from .mappings import cached_file_table, create_all_tables, mapper_registry, start_mappers

__all__ = [
    "SqlAlchemyFileCache",
    "StartupError",
    "cached_file_table",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "start_mappers",
    "shutdown",
    "startup",
]
