"""
Overlap Detection Service

Decides whether a candidate appointment interval may be saved:
- end must be strictly after start
- the half-open interval [start, end) must not intersect a stored appointment
- the appointment being edited is excluded from its own check
"""

import logging
from datetime import datetime
from typing import Optional

from ...errors import OrderingError, OverlapError, StoreError
from ...shared.validators import parse_date, parse_time
from ...storage.base import AppointmentInterval, RecordStore

logger = logging.getLogger(__name__)

READ_FAILURE_PROPAGATE = "propagate"
READ_FAILURE_PERMISSIVE = "permissive"


def combine_instant(date_value: Optional[str], time_value: Optional[str]) -> Optional[datetime]:
    """Combine separate date (YYYY-MM-DD) and time (HH:MM) fields; None if either is empty or invalid"""
    day = parse_date(date_value)
    clock = parse_time(time_value)
    if day is None or clock is None:
        return None
    return datetime.combine(day, clock)


def intervals_overlap(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    """Half-open overlap test: touching boundaries do not overlap"""
    return start_a < end_b and end_a > start_b


def check_ordering(candidate_start: Optional[datetime], candidate_end: Optional[datetime]) -> None:
    """Raise OrderingError unless both instants exist and end > start"""
    if candidate_start is None or candidate_end is None:
        raise OrderingError("Start and end must be valid dates and times.")
    if candidate_end <= candidate_start:
        raise OrderingError("End time must be after the start time.")


def find_conflicts(
    candidate_start: datetime,
    candidate_end: datetime,
    existing: list[AppointmentInterval],
    exclude_id: Optional[int] = None,
) -> list[int]:
    """Ids of existing intervals intersecting [candidate_start, candidate_end)"""
    return [
        interval.id
        for interval in existing
        if interval.id != exclude_id
        and intervals_overlap(candidate_start, candidate_end, interval.start, interval.end)
    ]


class IntervalOverlapValidator:
    """
    Validates candidate intervals against the appointments in a store.

    Args:
        store: persistence collaborator providing list_appointment_intervals
        read_failure: "propagate" re-raises StoreError from the read,
            "permissive" logs it and treats the store as empty
    """

    def __init__(self, store: RecordStore, read_failure: str = READ_FAILURE_PROPAGATE):
        if read_failure not in (READ_FAILURE_PROPAGATE, READ_FAILURE_PERMISSIVE):
            raise ValueError(f"Unknown read failure mode: {read_failure}")
        self.store = store
        self.read_failure = read_failure

    def _existing_intervals(self, start: datetime, end: datetime) -> list[AppointmentInterval]:
        try:
            return self.store.list_appointment_intervals(start, end)
        except StoreError as e:
            if self.read_failure == READ_FAILURE_PERMISSIVE:
                logger.warning(f"⚠️ Overlap check failed, treating as no overlap: {e}")
                return []
            raise

    def validate(
        self,
        candidate_start: Optional[datetime],
        candidate_end: Optional[datetime],
        exclude_id: Optional[int] = None,
    ) -> None:
        """
        Accept or reject a candidate interval.

        Algorithm:
            1. Missing/invalid instant -> OrderingError
            2. end <= start -> OrderingError
            3. Read intervals intersecting the candidate window, minus exclude_id
            4. Any [s, e) with start < e and end > s -> OverlapError
            5. Otherwise accept

        Raises:
            OrderingError, OverlapError, StoreError (when propagating)
        """
        check_ordering(candidate_start, candidate_end)

        existing = self._existing_intervals(candidate_start, candidate_end)
        conflicts = find_conflicts(candidate_start, candidate_end, existing, exclude_id)

        if conflicts:
            logger.warning(
                f"⚠️ Interval {candidate_start.isoformat()} - {candidate_end.isoformat()} "
                f"overlaps appointments {conflicts}"
            )
            raise OverlapError("There is already an appointment in this time range.", conflicts)
