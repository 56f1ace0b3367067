"""Pydantic models describing the diff server's ingestion and export payloads."""

from __future__ import annotations

from logging import getLogger

from pydantic import BaseModel, ConfigDict, Field, field_validator

from diffchange.domain.model import FieldStatus, PayloadFormat

log = getLogger(__name__)


def _scalar_to_str(value: object) -> object:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return str(value)
    return value


def _none_to_false(value: object) -> object:
    return False if value is None else value


class PayloadBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class FieldPayload(PayloadBaseModel):
    key: str = ""
    old_value: str | None = Field(default=None, alias="oldValue")
    new_value: str | None = Field(default=None, alias="newValue")
    merged_value: str | None = Field(default=None, alias="mergedValue")
    status: FieldStatus | None = None
    deleted: bool = False

    _normalize_values = field_validator("old_value", "new_value", "merged_value", mode="before")(
        _scalar_to_str
    )
    _normalize_deleted = field_validator("deleted", mode="before")(_none_to_false)

    @field_validator("key", mode="before")
    @classmethod
    def _normalize_key(cls, value: object) -> object:
        if value is None:
            return ""
        return _scalar_to_str(value)

    @field_validator("status", mode="before")
    @classmethod
    def _drop_unknown_status(cls, value: object) -> object:
        # Statuses are re-derived on ingestion; an unknown label is not worth failing over.
        if isinstance(value, str) and value.lower() in set(FieldStatus):
            return value.lower()
        return None


class RecordPayload(PayloadBaseModel):
    id: str = ""
    fields: list[FieldPayload] = Field(default_factory=list[FieldPayload])
    deleted: bool = False

    _normalize_deleted = field_validator("deleted", mode="before")(_none_to_false)

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: object) -> object:
        if value is None:
            return ""
        return _scalar_to_str(value)

    @field_validator("fields", mode="before")
    @classmethod
    def _missing_fields(cls, value: object) -> object:
        return [] if value is None else value


class DiffPayload(PayloadBaseModel):
    format: PayloadFormat = PayloadFormat.LINE
    records: list[RecordPayload] = Field(default_factory=list[RecordPayload])

    @field_validator("format", mode="before")
    @classmethod
    def _normalize_format(cls, value: object) -> object:
        if value is None or value == "":
            return PayloadFormat.LINE
        if isinstance(value, str) and value.strip().lower() in set(PayloadFormat):
            return value.strip().lower()
        log.warning("Unknown payload format %r, falling back to %s", value, PayloadFormat.LINE)
        return PayloadFormat.LINE

    @field_validator("records", mode="before")
    @classmethod
    def _missing_records(cls, value: object) -> object:
        return [] if value is None else value
