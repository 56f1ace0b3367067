"""Ports implemented by adapters at the edges of the domain."""

from __future__ import annotations

from .fetching import DiffFetcher, ExportedArtifact, MergeExporter
from .file_cache import MAX_FILES_PER_TAG, MAX_LISTED_FILES, CachedFile, FileCache

__all__ = [
    "MAX_FILES_PER_TAG",
    "MAX_LISTED_FILES",
    "CachedFile",
    "DiffFetcher",
    "ExportedArtifact",
    "FileCache",
    "MergeExporter",
]
