"""Application orchestration entry points."""

from __future__ import annotations

import io
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from diffchange.adapters.diff_server import DiffServerClient
from diffchange.adapters.payload import build_export_payload, parse_diff_payload
from diffchange.adapters.sqlalchemy import SqlAlchemyFileCache, is_started, startup
from diffchange.domain.errors import DiffChangeError
from diffchange.domain.model import FileTag

if TYPE_CHECKING:
    from diffchange.domain.ingest import PayloadParser
    from diffchange.domain.mass_actions import MassChangeResult
    from diffchange.domain.model import Source
    from diffchange.domain.ports.fetching import DiffFetcher, MergeExporter
    from diffchange.domain.ports.file_cache import FileCache
    from diffchange.domain.session import ReconciliationSession

type AsyncDiffFetcher = Callable[[BinaryIO, BinaryIO], Awaitable[object]]

log = getLogger(__name__)


def open_file_cache(*, database_uri: str | None = None) -> SqlAlchemyFileCache:
    """Return the file cache, initialising the database on first use."""

    if not is_started():
        startup(database_uri=database_uri)
    return SqlAlchemyFileCache()


def _read_input(path: Path) -> tuple[BinaryIO, datetime]:
    data = path.read_bytes()
    modified = datetime.fromtimestamp(path.stat().st_mtime, tz=UTC)
    stream = io.BytesIO(data)
    stream.name = path.name
    return stream, modified


def _load_inputs(
    old_path: Path, new_path: Path, cache: FileCache | None
) -> tuple[BinaryIO, BinaryIO]:
    old, old_modified = _read_input(old_path)
    new, new_modified = _read_input(new_path)
    if cache is not None:
        cache.save(old, FileTag.OLD, name=old_path.name, last_modified=old_modified)
        cache.save(new, FileTag.NEW, name=new_path.name, last_modified=new_modified)
        old.seek(0)
        new.seek(0)
    return old, new


def compare_files(
    session: ReconciliationSession,
    old_path: Path,
    new_path: Path,
    *,
    fetcher: DiffFetcher | None = None,
    cache: FileCache | None = None,
    parser: PayloadParser = parse_diff_payload,
) -> bool:
    """Upload two files for comparison and load the resulting diff into ``session``."""

    effective_fetcher = fetcher or DiffServerClient().compare
    log.info("Comparing %s against %s", old_path, new_path)
    old, new = _load_inputs(old_path, new_path, cache)

    ticket = session.begin_ingestion()
    try:
        diff = parser(effective_fetcher(old, new))
    except DiffChangeError as exc:
        session.fail_ingestion(ticket, exc)
        raise
    return session.complete_ingestion(ticket, diff)


async def compare_files_async(
    session: ReconciliationSession,
    old_path: Path,
    new_path: Path,
    *,
    fetcher: AsyncDiffFetcher | None = None,
    cache: FileCache | None = None,
    parser: PayloadParser = parse_diff_payload,
) -> bool:
    """Async variant of ``compare_files``; preparation yields between chunks."""

    effective_fetcher = fetcher or DiffServerClient().compare_async
    old, new = _load_inputs(old_path, new_path, cache)

    ticket = session.begin_ingestion()
    try:
        diff = parser(await effective_fetcher(old, new))
    except DiffChangeError as exc:
        session.fail_ingestion(ticket, exc)
        raise
    return await session.complete_ingestion_async(ticket, diff)


def review_payload(
    session: ReconciliationSession,
    path: Path,
    *,
    parser: PayloadParser = parse_diff_payload,
) -> bool:
    """Load a diff payload previously saved as JSON."""

    ticket = session.begin_ingestion()
    try:
        diff = parser(path.read_bytes())
    except DiffChangeError as exc:
        session.fail_ingestion(ticket, exc)
        raise
    return session.complete_ingestion(ticket, diff)


def accept_all_mass_changes(
    session: ReconciliationSession, source: Source | str
) -> list[MassChangeResult]:
    groups = session.group_similar_changes()
    results = [session.apply_mass_change(group, source) for group in groups]
    log.info(
        f"Applied {len(results)} mass change(s): "
        f"{sum(result.applied for result in results)} field(s) updated"
    )
    return results


def export_merged(
    session: ReconciliationSession,
    output_dir: Path,
    *,
    exporter: MergeExporter | None = None,
) -> Path:
    """Send the merged collection to the server and write the returned file."""

    effective_exporter = exporter or DiffServerClient().export
    payload_format, records = session.export_snapshot()
    artifact = effective_exporter(build_export_payload(payload_format, records))

    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / Path(artifact.filename).name
    target.write_bytes(artifact.content)
    log.info("Wrote %s (%s bytes)", target, len(artifact.content))
    return target


def restore_cached_file(cache: FileCache, file_id: int, output_dir: Path) -> Path:
    """Write a cached input back to disk under its original name."""

    restored = cache.restore(file_id)
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / Path(getattr(restored, "name", f"cached-{file_id}.txt")).name
    target.write_bytes(restored.read())
    log.info("Restored cached file #%s to %s", file_id, target)
    return target
