"""Public interface for the diff payload adapter."""

from __future__ import annotations

from .schema import DiffPayload, FieldPayload, RecordPayload
from .translator import (
    build_export_payload,
    export_filename,
    parse_diff_payload,
    parse_field,
    parse_record,
    validate_diff_payload,
)

__all__ = [
    "DiffPayload",
    "FieldPayload",
    "RecordPayload",
    "build_export_payload",
    "export_filename",
    "parse_diff_payload",
    "parse_field",
    "parse_record",
    "validate_diff_payload",
]
