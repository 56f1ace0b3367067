from __future__ import annotations

import io
import json

import pytest

from diffchange.adapters.payload import (
    DiffPayload,
    build_export_payload,
    export_filename,
    parse_diff_payload,
    validate_diff_payload,
)
from diffchange.domain.errors import MalformedPayloadError
from diffchange.domain.model import FieldStatus, PayloadFormat
from diffchange.domain.session import ReconciliationSession


def test_parse_normalizes_missing_pieces() -> None:
    diff = parse_diff_payload(
        {
            "records": [
                {"id": 7, "fields": [{"key": "qty", "oldValue": 1, "newValue": None}]},
                {"id": None, "fields": None, "deleted": None},
            ]
        }
    )

    assert diff.format is PayloadFormat.LINE
    first, second = diff.records
    assert first.id == "7"
    assert first.fields[0].old_value == "1"
    assert first.fields[0].new_value is None
    assert first.fields[0].merged_value == "1"
    assert second.id == ""
    assert second.fields == []
    assert not second.deleted


def test_merged_value_prefers_merged_then_new_then_old() -> None:
    diff = parse_diff_payload(
        {
            "format": "BLOCK",
            "records": [
                {
                    "id": "r",
                    "fields": [
                        {"key": "a", "oldValue": "o", "newValue": "n", "mergedValue": "m"},
                        {"key": "b", "oldValue": "o", "newValue": "n"},
                        {"key": "c", "oldValue": "o"},
                        {"key": "d"},
                        {"key": "e", "oldValue": "o", "newValue": "", "mergedValue": None},
                    ],
                }
            ],
        }
    )

    assert diff.format is PayloadFormat.BLOCK
    assert [item.merged_value for item in diff.records[0].fields] == ["m", "n", "o", "", ""]


def test_record_deletion_cascades_to_fields() -> None:
    diff = parse_diff_payload(
        {"records": [{"id": "r", "deleted": True, "fields": [{"key": "a", "oldValue": "x"}]}]}
    )

    assert diff.records[0].deleted
    assert diff.records[0].fields[0].deleted


def test_upstream_statuses_are_rederived() -> None:
    diff = parse_diff_payload(
        {
            "records": [
                {
                    "id": "r",
                    "fields": [
                        {"key": "a", "oldValue": "x", "newValue": "x", "status": "changed"},
                        {"key": "b", "oldValue": "x", "newValue": "y", "status": "bogus"},
                    ],
                }
            ]
        }
    )
    session = ReconciliationSession()

    session.ingest(diff)

    statuses = [item.status for item in session.store.records[0].fields]
    assert statuses == [FieldStatus.SAME, FieldStatus.CHANGED]


def test_unknown_format_falls_back_to_line() -> None:
    assert parse_diff_payload({"format": "columns", "records": []}).format is PayloadFormat.LINE


def test_accepts_json_text_bytes_and_files() -> None:
    raw = json.dumps({"format": "line", "records": [{"id": "r", "fields": []}]})

    for source in (raw, raw.encode(), io.BytesIO(raw.encode())):
        assert [record.id for record in parse_diff_payload(source).records] == ["r"]


@pytest.mark.parametrize(
    "raw",
    [
        [1, 2, 3],
        42,
        "not json",
        {"records": "nope"},
        {"records": [{"fields": [{"key": "a", "deleted": "maybe"}]}]},
    ],
)
def test_unrecognizable_payloads_raise(raw: object) -> None:
    with pytest.raises(MalformedPayloadError):
        validate_diff_payload(raw)


def test_malformed_payload_error_is_a_value_error() -> None:
    with pytest.raises(ValueError, match="Malformed diff payload"):
        parse_diff_payload("{")


def test_export_payload_uses_wire_names_and_live_values(
    scenario_payload: dict[str, object],
) -> None:
    session = ReconciliationSession()
    session.ingest(parse_diff_payload(scenario_payload))
    session.engine.set_merged_value(1, 0, "Robert")
    session.engine.toggle_record_deleted(2)

    payload = build_export_payload(*session.export_snapshot())

    assert payload["format"] == "line"
    records = payload["records"]
    assert isinstance(records, list)
    assert records[1]["fields"][0] == {
        "key": "name",
        "oldValue": "Bob",
        "newValue": "Rob",
        "mergedValue": "Robert",
        "status": "changed",
        "deleted": False,
    }
    assert records[2]["deleted"] is True
    assert records[2]["fields"][0]["status"] == "removed"
    assert DiffPayload.model_validate(payload).records[0].id == "A"


def test_export_filename_depends_on_format() -> None:
    assert export_filename(PayloadFormat.LINE) == "merged.txt"
    assert export_filename(PayloadFormat.BLOCK) == "merged_item_name.txt"
