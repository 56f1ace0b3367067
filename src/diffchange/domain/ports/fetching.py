"""Ports for talking to the diff server."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, BinaryIO, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(slots=True, frozen=True)
class ExportedArtifact:
    """Flat text artifact produced by the server from an export payload."""

    filename: str
    content: bytes


@runtime_checkable
class DiffFetcher(Protocol):
    """Upload OLD and NEW inputs and return the raw diff payload."""

    def __call__(self, old: BinaryIO, new: BinaryIO) -> object: ...


@runtime_checkable
class MergeExporter(Protocol):
    """Hand an export payload to the formatter and return the artifact."""

    def __call__(self, payload: Mapping[str, object]) -> ExportedArtifact: ...


__all__ = ["DiffFetcher", "ExportedArtifact", "MergeExporter"]
