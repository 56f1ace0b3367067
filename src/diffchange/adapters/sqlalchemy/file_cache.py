"""SQLAlchemy-backed cache of recently used input files."""

from __future__ import annotations

import io
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from sqlalchemy import create_engine, delete, select
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import Session, sessionmaker

from diffchange.config.storage import DatabaseConfig, get_database_config
from diffchange.domain.ports.file_cache import MAX_FILES_PER_TAG, MAX_LISTED_FILES, CachedFile

from .mappings import cached_file_table, create_all_tables, start_mappers

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy.engine import Engine

    from diffchange.domain.model import FileTag

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the file cache is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "File cache not initialised. Call diffchange.adapters.sqlalchemy."
                "file_cache.startup() before opening the cache."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def _create_engine(config: DatabaseConfig) -> Engine:
    if config.in_memory:
        return create_engine(
            config.uri,
            future=True,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_engine(config.uri, future=True)


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the engine, create the cache table and prepare sessions."""

    if _STATE.engine is not None and not force:
        raise StartupError("File cache already initialised. Pass force=True to reconfigure.")

    resolved_engine = engine or _create_engine(
        DatabaseConfig(uri=database_uri) if database_uri else get_database_config()
    )
    start_mappers()
    create_all_tables(resolved_engine)
    _STATE.engine = resolved_engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


def _display_name(file: BinaryIO, tag: FileTag) -> str:
    raw = getattr(file, "name", None)
    if isinstance(raw, str) and raw:
        return Path(raw).name
    return f"{tag}.txt"


class SqlAlchemyFileCache:
    """Keeps the newest few uploads per tag so they can be restored later."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory = session_factory or _STATE.session_factory

    def save(
        self,
        file: BinaryIO,
        tag: FileTag,
        *,
        name: str | None = None,
        last_modified: datetime | None = None,
    ) -> int:
        entry = CachedFile(
            name=name or _display_name(file, tag),
            tag=tag,
            data=file.read(),
            last_modified=last_modified,
        )
        with self.session_factory() as session, session.begin():
            self._prune(session, tag, keep=MAX_FILES_PER_TAG - 1)
            session.add(entry)
            session.flush()
        if entry.id is None:
            raise StartupError("Cached file was not assigned an id")
        log.info("Cached %s file %s (%s bytes) as #%s", tag, entry.name, entry.size, entry.id)
        return entry.id

    def list(self) -> list[CachedFile]:
        statement = (
            select(CachedFile)
            .order_by(cached_file_table.c.saved_at.desc(), cached_file_table.c.id.desc())
            .limit(MAX_LISTED_FILES)
        )
        with self.session_factory() as session:
            return list(session.scalars(statement).all())

    def remove(self, file_id: int) -> bool:
        with self.session_factory() as session, session.begin():
            entry = session.get(CachedFile, file_id)
            if entry is None:
                return False
            session.delete(entry)
        log.info("Removed cached file #%s", file_id)
        return True

    def restore(self, file_id: int) -> BinaryIO:
        with self.session_factory() as session:
            entry = session.get(CachedFile, file_id)
        if entry is None:
            raise KeyError(f"No cached file with id {file_id}")
        restored = io.BytesIO(entry.data)
        restored.name = entry.name
        log.info("Restored cached %s file %s", entry.tag, entry.name)
        return restored

    @staticmethod
    def _prune(session: Session, tag: FileTag, *, keep: int) -> None:
        stale_ids = session.scalars(
            select(cached_file_table.c.id)
            .where(cached_file_table.c.tag == tag)
            .order_by(cached_file_table.c.saved_at.desc(), cached_file_table.c.id.desc())
            .offset(keep)
        ).all()
        if stale_ids:
            session.execute(
                delete(cached_file_table).where(cached_file_table.c.id.in_(stale_ids))
            )
            log.info("Pruned %s old %s file(s) from cache", len(stale_ids), tag)


if TYPE_CHECKING:
    from diffchange.domain.ports.file_cache import FileCache

    _cache_check: FileCache = SqlAlchemyFileCache()
