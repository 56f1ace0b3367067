from __future__ import annotations

from diffchange.domain.statistics import StatisticsAccumulator, compute_statistics
from tests.helpers.records import make_field, make_record, person


def test_statistics_for_same_changed_and_added_records() -> None:
    records = [person("A", "Bob", "Bob"), person("B", "Bob", "Rob"), person("C", None, "New")]

    statistics = compute_statistics(records)

    assert statistics.total == 3
    assert statistics.added == 1
    assert statistics.removed == 0
    assert statistics.common == 2
    assert statistics.with_changes == 1
    assert statistics.without_changes == 1
    assert statistics.changed_fields == 1
    assert statistics.added_fields == 1
    assert statistics.removed_fields == 0


def test_record_missing_from_new_counts_as_removed() -> None:
    records = [
        make_record("gone", make_field("name", "Zed", None), make_field("city", "Rome", None)),
    ]

    statistics = compute_statistics(records)

    assert statistics.removed == 1
    assert statistics.common == 0
    assert statistics.removed_fields == 2


def test_empty_string_counts_as_a_present_side() -> None:
    statistics = compute_statistics([person("blank", "", "x")])

    assert statistics.common == 1
    assert statistics.added == 0
    assert statistics.added_fields == 1


def test_accumulator_snapshots_intermediate_results() -> None:
    accumulator = StatisticsAccumulator()
    accumulator.add(person("A", "Bob", "Bob"))
    first = accumulator.result()
    accumulator.add(person("B", "Bob", "Rob"))

    assert first.total == 1
    assert accumulator.result().total == 2
    assert accumulator.result().with_changes == 1
