"""
Tests for domain/scheduling/overlap.py

Covers ordering checks, half-open overlap detection, self-exclusion for
edits and the read-failure policy.
"""

from datetime import datetime, timedelta

import pytest

from terminplaner.domain.scheduling.overlap import (
    IntervalOverlapValidator,
    combine_instant,
    find_conflicts,
    intervals_overlap,
)
from terminplaner.errors import OrderingError, OverlapError, StoreError
from terminplaner.storage.base import AppointmentInterval


def dt(value: str) -> datetime:
    return datetime.fromisoformat(value)


def add_existing(store, start: str, end: str, title: str = "Existing") -> int:
    record = store.create_appointment(
        {"title": title, "start": dt(start), "end": dt(end), "status": "planned"}
    )
    return record.id


class FailingStore:
    """Store whose interval read always fails"""

    def list_appointment_intervals(self, start=None, end=None):
        raise StoreError("connection refused")


class TestCombineInstant:
    def test_combines_date_and_time(self):
        assert combine_instant("2024-01-01", "10:30") == dt("2024-01-01T10:30")

    def test_accepts_seconds(self):
        assert combine_instant("2024-01-01", "10:30:15") == dt("2024-01-01T10:30:15")

    @pytest.mark.parametrize(
        "date_value, time_value",
        [("", "10:00"), ("2024-01-01", ""), (None, None), ("2024-13-01", "10:00"), ("2024-01-01", "25:00"),
         ("20240101", "10:00"), ("2024-W01-1", "10:00"), ("2024-001", "10:00")],
    )
    def test_missing_or_invalid_parts(self, date_value, time_value):
        assert combine_instant(date_value, time_value) is None


class TestIntervalsOverlap:
    def test_partial_overlap(self):
        assert intervals_overlap(
            dt("2024-01-01T10:30"), dt("2024-01-01T11:30"),
            dt("2024-01-01T10:00"), dt("2024-01-01T11:00"),
        )

    def test_containment(self):
        assert intervals_overlap(
            dt("2024-01-01T10:15"), dt("2024-01-01T10:45"),
            dt("2024-01-01T10:00"), dt("2024-01-01T11:00"),
        )

    def test_back_to_back_does_not_overlap(self):
        first = (dt("2024-01-01T09:00"), dt("2024-01-01T10:00"))
        second = (dt("2024-01-01T10:00"), dt("2024-01-01T11:00"))
        assert not intervals_overlap(*first, *second)
        assert not intervals_overlap(*second, *first)

    def test_find_conflicts_excludes_id(self):
        existing = [
            AppointmentInterval(id=1, start=dt("2024-01-01T10:00"), end=dt("2024-01-01T11:00")),
            AppointmentInterval(id=2, start=dt("2024-01-01T10:30"), end=dt("2024-01-01T12:00")),
        ]
        conflicts = find_conflicts(dt("2024-01-01T10:00"), dt("2024-01-01T11:00"), existing, exclude_id=1)
        assert conflicts == [2]


class TestIntervalOverlapValidator:
    def test_accepts_valid_interval_on_empty_store(self, store):
        validator = IntervalOverlapValidator(store)
        for hours in (1, 2, 8, 30):
            start = dt("2024-01-01T08:00")
            validator.validate(start, start + timedelta(hours=hours))

    @pytest.mark.parametrize("minutes", [0, -1, -60, -24 * 60])
    def test_rejects_end_not_after_start(self, store, minutes):
        add_existing(store, "2024-03-01T10:00", "2024-03-01T11:00")
        start = dt("2024-01-01T10:00")
        with pytest.raises(OrderingError):
            IntervalOverlapValidator(store).validate(start, start + timedelta(minutes=minutes))

    def test_equal_instants_message(self, store):
        start = dt("2024-01-01T10:00")
        with pytest.raises(OrderingError, match="End time must be after the start time"):
            IntervalOverlapValidator(store).validate(start, start)

    def test_rejects_missing_instants(self, store):
        with pytest.raises(OrderingError):
            IntervalOverlapValidator(store).validate(None, dt("2024-01-01T10:00"))
        with pytest.raises(OrderingError):
            IntervalOverlapValidator(store).validate(dt("2024-01-01T10:00"), None)

    def test_rejects_partial_overlap(self, store):
        existing_id = add_existing(store, "2024-01-01T10:00", "2024-01-01T11:00")

        with pytest.raises(OverlapError) as exc_info:
            IntervalOverlapValidator(store).validate(dt("2024-01-01T10:30"), dt("2024-01-01T11:30"))

        assert exc_info.value.conflicting_ids == [existing_id]

    def test_rejects_candidate_enclosing_existing(self, store):
        add_existing(store, "2024-01-01T10:00", "2024-01-01T11:00")
        with pytest.raises(OverlapError):
            IntervalOverlapValidator(store).validate(dt("2024-01-01T09:00"), dt("2024-01-01T12:00"))

    def test_accepts_back_to_back(self, store):
        add_existing(store, "2024-01-01T10:00", "2024-01-01T11:00")
        validator = IntervalOverlapValidator(store)

        validator.validate(dt("2024-01-01T11:00"), dt("2024-01-01T12:00"))
        validator.validate(dt("2024-01-01T09:00"), dt("2024-01-01T10:00"))

    def test_edit_excludes_itself(self, store):
        existing_id = add_existing(store, "2024-01-01T10:00", "2024-01-01T11:00")

        IntervalOverlapValidator(store).validate(
            dt("2024-01-01T10:00"), dt("2024-01-01T11:00"), exclude_id=existing_id
        )

    def test_edit_still_sees_other_appointments(self, store):
        own_id = add_existing(store, "2024-01-01T08:00", "2024-01-01T09:00")
        add_existing(store, "2024-01-01T10:00", "2024-01-01T11:00")

        with pytest.raises(OverlapError):
            IntervalOverlapValidator(store).validate(
                dt("2024-01-01T08:00"), dt("2024-01-01T10:30"), exclude_id=own_id
            )

    def test_multi_day_appointment_overlaps_next_day(self, store):
        add_existing(store, "2024-01-01T22:00", "2024-01-02T02:00")
        with pytest.raises(OverlapError):
            IntervalOverlapValidator(store).validate(dt("2024-01-02T01:00"), dt("2024-01-02T03:00"))

    def test_read_failure_propagates_by_default(self):
        with pytest.raises(StoreError):
            IntervalOverlapValidator(FailingStore()).validate(
                dt("2024-01-01T10:00"), dt("2024-01-01T11:00")
            )

    def test_read_failure_permissive_mode_accepts(self):
        validator = IntervalOverlapValidator(FailingStore(), read_failure="permissive")
        validator.validate(dt("2024-01-01T10:00"), dt("2024-01-01T11:00"))

    def test_permissive_mode_still_checks_ordering(self):
        validator = IntervalOverlapValidator(FailingStore(), read_failure="permissive")
        with pytest.raises(OrderingError):
            validator.validate(dt("2024-01-01T11:00"), dt("2024-01-01T10:00"))

    def test_unknown_read_failure_mode(self, local_store):
        with pytest.raises(ValueError):
            IntervalOverlapValidator(local_store, read_failure="ignore")
