"""Translate diff payloads to domain records and back."""

from __future__ import annotations

from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from diffchange.domain.errors import MalformedPayloadError
from diffchange.domain.ingest import IngestedDiff
from diffchange.domain.model import Field, Record

from .schema import DiffPayload, FieldPayload, RecordPayload

if TYPE_CHECKING:
    from collections.abc import Iterable

    from diffchange.domain.model import PayloadFormat

log = getLogger(__name__)


def validate_diff_payload(raw: object) -> DiffPayload:
    """Validate ``raw`` (model, mapping, JSON text/bytes or readable file)."""

    if isinstance(raw, DiffPayload):
        return raw
    try:
        if isinstance(raw, str | bytes | bytearray):
            return DiffPayload.model_validate_json(raw)
        if hasattr(raw, "read"):
            return DiffPayload.model_validate_json(raw.read())  # type: ignore[union-attr]
        if isinstance(raw, Mapping):
            return DiffPayload.model_validate(raw)
    except ValidationError as exc:
        raise MalformedPayloadError(f"Malformed diff payload: {exc}") from exc
    raise MalformedPayloadError(f"Unrecognized diff payload container: {type(raw).__name__}")


def parse_field(payload: FieldPayload, *, record_deleted: bool = False) -> Field:
    merged = next(
        (
            value
            for value in (payload.merged_value, payload.new_value, payload.old_value)
            if value is not None
        ),
        "",
    )
    return Field(
        key=payload.key,
        old_value=payload.old_value,
        new_value=payload.new_value,
        merged_value=merged,
        deleted=payload.deleted or record_deleted,
    )


def parse_record(payload: RecordPayload) -> Record:
    return Record(
        id=payload.id,
        fields=[parse_field(item, record_deleted=payload.deleted) for item in payload.fields],
        deleted=payload.deleted,
    )


def parse_diff_payload(raw: object) -> IngestedDiff:
    """Normalize a raw diff payload; statuses are derived later, on publication."""

    payload = validate_diff_payload(raw)
    records = [parse_record(item) for item in payload.records]
    log.info("Parsed diff payload: format=%s, records=%s", payload.format, len(records))
    return IngestedDiff(format=payload.format, records=records)


def build_export_payload(
    payload_format: PayloadFormat, records: Iterable[Record]
) -> dict[str, object]:
    """Return the export payload reflecting the live merged state of ``records``."""

    payload = DiffPayload(
        format=payload_format,
        records=[
            RecordPayload(
                id=record.id,
                deleted=record.deleted,
                fields=[
                    FieldPayload(
                        key=item.key,
                        old_value=item.old_value,
                        new_value=item.new_value,
                        merged_value=item.merged_value,
                        status=item.status,
                        deleted=item.deleted,
                    )
                    for item in record.fields
                ],
            )
            for record in records
        ],
    )
    return payload.model_dump(mode="json", by_alias=True)


def export_filename(payload_format: PayloadFormat) -> str:
    return payload_format.export_filename
