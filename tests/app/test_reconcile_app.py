from __future__ import annotations

import asyncio
import json
from pathlib import Path  # noqa: TC003
from typing import TYPE_CHECKING, BinaryIO

import pytest

from diffchange.adapters.sqlalchemy import SqlAlchemyFileCache  # noqa: TC001
from diffchange.app import (
    accept_all_mass_changes,
    compare_files,
    compare_files_async,
    export_merged,
    restore_cached_file,
    review_payload,
)
from diffchange.domain.errors import MalformedPayloadError, TransportFailure
from diffchange.domain.model import FileTag, Source
from diffchange.domain.ports.fetching import ExportedArtifact
from diffchange.domain.session import ReconciliationSession

if TYPE_CHECKING:
    from collections.abc import Mapping


def _inputs(tmp_path: Path) -> tuple[Path, Path]:
    old = tmp_path / "old.txt"
    new = tmp_path / "new.txt"
    old.write_text("id=1;name=Bob\n")
    new.write_text("id=1;name=Rob\n")
    return old, new


class FakeFetcher:
    def __init__(self, payload: object) -> None:
        self.payload = payload
        self.uploads: list[tuple[bytes, bytes]] = []

    def __call__(self, old: BinaryIO, new: BinaryIO) -> object:
        self.uploads.append((old.read(), new.read()))
        return self.payload


class FakeExporter:
    def __init__(self) -> None:
        self.payloads: list[Mapping[str, object]] = []

    def __call__(self, payload: Mapping[str, object]) -> ExportedArtifact:
        self.payloads.append(payload)
        return ExportedArtifact(filename="merged.txt", content=b"id=1;name=Rob\n")


def test_compare_files_loads_diff_and_caches_inputs(
    tmp_path: Path,
    scenario_payload: dict[str, object],
    file_cache: SqlAlchemyFileCache,
) -> None:
    old, new = _inputs(tmp_path)
    fetcher = FakeFetcher(scenario_payload)
    session = ReconciliationSession()

    assert compare_files(session, old, new, fetcher=fetcher, cache=file_cache)

    assert fetcher.uploads == [(b"id=1;name=Bob\n", b"id=1;name=Rob\n")]
    assert len(session.store) == 3
    cached = file_cache.list()
    assert {(entry.name, entry.tag) for entry in cached} == {
        ("old.txt", FileTag.OLD),
        ("new.txt", FileTag.NEW),
    }
    assert all(entry.last_modified is not None for entry in cached)


def test_compare_files_failure_keeps_previous_collection(
    tmp_path: Path, scenario_payload: dict[str, object]
) -> None:
    old, new = _inputs(tmp_path)
    session = ReconciliationSession()
    compare_files(session, old, new, fetcher=FakeFetcher(scenario_payload))

    def failing(_old: BinaryIO, _new: BinaryIO) -> object:
        raise TransportFailure("Internal Server Error", status_code=500)

    with pytest.raises(TransportFailure):
        compare_files(session, old, new, fetcher=failing)

    assert len(session.store) == 3
    assert session.status.is_error
    assert session.status.text == "Internal Server Error"


def test_compare_files_rejects_malformed_payload(tmp_path: Path) -> None:
    old, new = _inputs(tmp_path)
    session = ReconciliationSession()

    with pytest.raises(MalformedPayloadError):
        compare_files(session, old, new, fetcher=FakeFetcher([1, 2]))

    assert session.status.is_error
    assert not session.ingestion_in_flight


def test_compare_files_async(tmp_path: Path, mass_payload: dict[str, object]) -> None:
    old, new = _inputs(tmp_path)
    session = ReconciliationSession()

    async def fetcher(_old: BinaryIO, _new: BinaryIO) -> object:
        await asyncio.sleep(0)
        return mass_payload

    assert asyncio.run(compare_files_async(session, old, new, fetcher=fetcher))
    assert [record.id for record in session.store.records] == ["record1", "record2"]


def test_review_payload_reads_saved_json(
    tmp_path: Path, scenario_payload: dict[str, object]
) -> None:
    path = tmp_path / "diff.json"
    path.write_text(json.dumps(scenario_payload))
    session = ReconciliationSession()

    assert review_payload(session, path)

    assert session.statistics.total == 3


def test_accept_all_mass_changes(mass_payload: dict[str, object], tmp_path: Path) -> None:
    path = tmp_path / "diff.json"
    path.write_text(json.dumps(mass_payload))
    session = ReconciliationSession()
    review_payload(session, path)

    results = accept_all_mass_changes(session, Source.OLD)

    assert [result.applied for result in results] == [2]
    assert [record.fields[0].merged_value for record in session.store.records] == [
        "Active",
        "Active",
    ]


def test_export_merged_writes_artifact(
    tmp_path: Path, scenario_payload: dict[str, object]
) -> None:
    session = ReconciliationSession()
    compare_files(session, *_inputs(tmp_path), fetcher=FakeFetcher(scenario_payload))
    exporter = FakeExporter()

    target = export_merged(session, tmp_path / "out", exporter=exporter)

    assert target == tmp_path / "out" / "merged.txt"
    assert target.read_bytes() == b"id=1;name=Rob\n"
    assert exporter.payloads[0]["format"] == "line"


def test_restore_cached_file(tmp_path: Path, file_cache: SqlAlchemyFileCache) -> None:
    old, new = _inputs(tmp_path)
    compare_files(
        ReconciliationSession(),
        old,
        new,
        fetcher=FakeFetcher({"records": []}),
        cache=file_cache,
    )
    old_entry = next(entry for entry in file_cache.list() if entry.tag is FileTag.OLD)
    assert old_entry.id is not None

    target = restore_cached_file(file_cache, old_entry.id, tmp_path / "restored")

    assert target.name == "old.txt"
    assert target.read_text() == "id=1;name=Bob\n"
