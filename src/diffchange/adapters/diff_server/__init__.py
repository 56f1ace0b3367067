"""Public interface for the diff server adapter."""

from __future__ import annotations

from .client import DiffServerClient

__all__ = ["DiffServerClient"]
