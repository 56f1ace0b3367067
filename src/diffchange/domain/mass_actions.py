"""Detection and bulk application of repeated field-level changes.

A mass action targets every field that underwent the same change: same key,
same old value, same new value. Groups are snapshots; applying one re-checks
each member against its snapshot before writing, so edits made after grouping
are never overwritten.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import StaleReferenceError
from .model import FieldStatus, Source
from .reconciliation import AcceptField

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .model import Record
    from .reconciliation import ReconciliationEngine

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ChangeSignature:
    """Structured grouping key for one field-level change."""

    key: str
    old_value: str
    new_value: str


@dataclass(slots=True, frozen=True)
class FieldRef:
    record: int
    field: int


@dataclass(slots=True, frozen=True)
class ChangeGroup:
    signature: ChangeSignature
    members: tuple[FieldRef, ...]

    @property
    def count(self) -> int:
        return len(self.members)


@dataclass(slots=True, frozen=True)
class MassChangeResult:
    applied: int
    total: int
    on_deleted_records: int = 0

    @property
    def skipped(self) -> int:
        return self.total - self.applied


def group_similar_changes(records: Iterable[Record]) -> list[ChangeGroup]:
    """Return groups of identical changes with more than one member.

    Groups are ordered by descending size; equal sizes keep discovery order.
    """

    members_by_signature: dict[ChangeSignature, list[FieldRef]] = {}
    for record_index, record in enumerate(records):
        for field_index, item in enumerate(record.fields):
            if item.status is not FieldStatus.CHANGED:
                continue
            if not item.old_value or not item.new_value:
                continue
            signature = ChangeSignature(item.key, item.old_value, item.new_value)
            members_by_signature.setdefault(signature, []).append(
                FieldRef(record=record_index, field=field_index)
            )

    groups = [
        ChangeGroup(signature=signature, members=tuple(members))
        for signature, members in members_by_signature.items()
        if len(members) > 1
    ]
    # list.sort is stable, so ties stay in discovery order.
    groups.sort(key=lambda group: group.count, reverse=True)
    return groups


def apply_mass_change(
    engine: ReconciliationEngine,
    group: ChangeGroup,
    source: Source | str,
) -> MassChangeResult:
    """Accept ``source`` for every member whose change still matches the group."""

    side = Source(source)
    applied = 0
    on_deleted_records = 0
    for member in group.members:
        try:
            record, item = engine.store.field_at(member.record, member.field)
        except StaleReferenceError:
            continue
        if (item.old_value, item.new_value) != (
            group.signature.old_value,
            group.signature.new_value,
        ):
            continue
        if record.deleted:
            on_deleted_records += 1
            continue
        if engine.apply(AcceptField(record=member.record, field=member.field, source=side)):
            applied += 1

    log.info(
        "Mass change %r (%s): applied=%s of %s, on deleted records=%s",
        group.signature.key,
        side,
        applied,
        group.count,
        on_deleted_records,
    )
    return MassChangeResult(
        applied=applied,
        total=group.count,
        on_deleted_records=on_deleted_records,
    )
