"""Port for the cache of recently used input files."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, BinaryIO, Protocol, runtime_checkable

if TYPE_CHECKING:
    from diffchange.domain.model import FileTag

MAX_LISTED_FILES = 20
MAX_FILES_PER_TAG = 10


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class CachedFile:
    name: str
    tag: FileTag
    data: bytes = field(repr=False)
    last_modified: datetime | None = None
    saved_at: datetime = field(default_factory=_utcnow)
    id: int | None = None

    @property
    def size(self) -> int:
        return len(self.data)


@runtime_checkable
class FileCache(Protocol):
    def save(
        self,
        file: BinaryIO,
        tag: FileTag,
        *,
        name: str | None = None,
        last_modified: datetime | None = None,
    ) -> int: ...

    def list(self) -> list[CachedFile]: ...

    def remove(self, file_id: int) -> bool: ...

    def restore(self, file_id: int) -> BinaryIO: ...


__all__ = ["MAX_FILES_PER_TAG", "MAX_LISTED_FILES", "CachedFile", "FileCache"]
