"""Builders for records, fields and loaded sessions used across tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from diffchange.domain.ingest import IngestedDiff
from diffchange.domain.model import Field, PayloadFormat, Record, default_merged_value
from diffchange.domain.session import ReconciliationSession
from diffchange.domain.status import refresh_record

if TYPE_CHECKING:
    from diffchange.config import ViewConfig
    from diffchange.domain.scheduling import TaskScheduler
    from diffchange.domain.view_models import RenderPlan


def make_field(
    key: str,
    old_value: str | None,
    new_value: str | None,
    *,
    merged_value: str | None = None,
    deleted: bool = False,
) -> Field:
    return Field(
        key=key,
        old_value=old_value,
        new_value=new_value,
        merged_value=(
            default_merged_value(old_value, new_value) if merged_value is None else merged_value
        ),
        deleted=deleted,
    )


def make_record(record_id: str, *fields: Field, deleted: bool = False) -> Record:
    return refresh_record(Record(id=record_id, fields=list(fields), deleted=deleted))


def person(record_id: str, old_name: str | None, new_name: str | None) -> Record:
    return make_record(record_id, make_field("name", old_name, new_name))


def load_session(
    *records: Record,
    payload_format: PayloadFormat = PayloadFormat.LINE,
    config: ViewConfig | None = None,
    scheduler: TaskScheduler | None = None,
    sink: RecordingSink | None = None,
) -> ReconciliationSession:
    session = ReconciliationSession(config=config, scheduler=scheduler, sink=sink)
    assert session.ingest(IngestedDiff(format=payload_format, records=list(records)))
    return session


class RecordingSink:
    """Render sink that keeps every plan it receives."""

    def __init__(self) -> None:
        self.plans: list[RenderPlan] = []

    def render(self, plan: RenderPlan) -> None:
        self.plans.append(plan)

    @property
    def renders(self) -> int:
        return len(self.plans)


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now
