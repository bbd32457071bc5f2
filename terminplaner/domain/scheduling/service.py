"""Appointment service - Business logic for appointment operations"""

import logging
from collections import OrderedDict
from datetime import datetime
from typing import Optional

from ...errors import FormValidationError, NotFoundError, OrderingError
from ...storage.base import AppointmentRecord, RecordStore, appointment_sort_key
from .overlap import READ_FAILURE_PROPAGATE, IntervalOverlapValidator, combine_instant
from .schemas import (
    AppointmentFieldErrors,
    AppointmentForm,
    AppointmentResponse,
    AppointmentStatus,
    CalendarDay,
    CalendarResponse,
)

logger = logging.getLogger(__name__)

EDIT_CHECKS_SKIP = "skip"
EDIT_CHECKS_ENFORCE = "enforce"

VALID_STATUSES = {s.value for s in AppointmentStatus}


def to_civil(value: Optional[datetime]) -> Optional[datetime]:
    """Drop any zone offset; stored instants are naive civil times"""
    if value is None or value.tzinfo is None:
        return value
    return value.replace(tzinfo=None)


def to_response(record: AppointmentRecord) -> AppointmentResponse:
    """Split stored instants back into the form's date and time fields"""
    return AppointmentResponse(
        id=record.id,
        title=record.title,
        start=record.start,
        end=record.end,
        startDate=record.start.date().isoformat(),
        endDate=record.end.date().isoformat(),
        startTime=record.start.strftime("%H:%M"),
        endTime=record.end.strftime("%H:%M"),
        status=record.status,
        customerId=record.customer_id,
        created_at=record.created_at,
    )


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(
        self,
        store: RecordStore,
        edit_checks: str = EDIT_CHECKS_SKIP,
        read_failure: str = READ_FAILURE_PROPAGATE,
    ):
        if edit_checks not in (EDIT_CHECKS_SKIP, EDIT_CHECKS_ENFORCE):
            raise ValueError(f"Unknown edit check policy: {edit_checks}")
        self.store = store
        self.edit_checks = edit_checks
        self.validator = IntervalOverlapValidator(store, read_failure=read_failure)

    @staticmethod
    def validate_required(form: AppointmentForm) -> AppointmentFieldErrors:
        """Collect a message for every missing required field"""
        return AppointmentFieldErrors(
            title=None if (form.title or "").strip() else "Please enter a title.",
            startDate=None if form.startDate else "Please choose a start date.",
            endDate=None if form.endDate else "Please choose an end date.",
            startTime=None if form.startTime else "Please choose a start time.",
            endTime=None if form.endTime else "Please choose an end time.",
            status=None if form.status in VALID_STATUSES else "Please choose a status.",
        )

    def _require_fields(self, form: AppointmentForm) -> None:
        errors = self.validate_required(form)
        if errors.has_errors():
            logger.warning(f"⚠️ Appointment form incomplete: {errors.model_dump(exclude_none=True)}")
            raise FormValidationError(errors)

    def _require_customer(self, customer_id: Optional[int]) -> None:
        if customer_id is not None and not self.store.get_customer(customer_id):
            raise NotFoundError(f"Customer {customer_id} not found")

    def get_appointment(self, appointment_id: int) -> AppointmentRecord:
        """Get a specific appointment"""
        record = self.store.get_appointment(appointment_id)
        if not record:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        return record

    def list_appointments(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[AppointmentRecord]:
        """Appointments intersecting the optional [start, end) window, chronologically"""
        start, end = to_civil(start), to_civil(end)
        if start is not None and end is not None and end <= start:
            raise OrderingError("Window end must be after window start.")

        unique = OrderedDict()
        for record in sorted(self.store.list_appointments(start, end), key=appointment_sort_key):
            unique.setdefault(record.id, record)
        return list(unique.values())

    def calendar(self, start: datetime, end: datetime) -> CalendarResponse:
        """Appointments in the window grouped by the day they start"""
        start, end = to_civil(start), to_civil(end)
        days: "OrderedDict[str, list[AppointmentResponse]]" = OrderedDict()
        for record in self.list_appointments(start, end):
            days.setdefault(record.start.date().isoformat(), []).append(to_response(record))

        return CalendarResponse(
            start=start,
            end=end,
            days=[CalendarDay(date=day, appointments=items) for day, items in days.items()],
        )

    def create_appointment(self, form: AppointmentForm) -> AppointmentRecord:
        """Create a new appointment after required-field, ordering and overlap checks"""
        self._require_fields(form)

        start = combine_instant(form.startDate, form.startTime)
        end = combine_instant(form.endDate, form.endTime)
        self.validator.validate(start, end)
        self._require_customer(form.customerId)

        record = self.store.create_appointment(
            {
                "title": form.title.strip(),
                "start": start,
                "end": end,
                "status": form.status,
                "customer_id": form.customerId,
            }
        )
        logger.info(f"✅ Appointment {record.id} saved ({start.isoformat()} - {end.isoformat()})")
        return record

    def update_appointment(self, appointment_id: int, form: AppointmentForm) -> AppointmentRecord:
        """Update an appointment; interval checks depend on the edit policy"""
        self.get_appointment(appointment_id)
        self._require_fields(form)

        start = combine_instant(form.startDate, form.startTime)
        end = combine_instant(form.endDate, form.endTime)

        if self.edit_checks == EDIT_CHECKS_ENFORCE:
            self.validator.validate(start, end, exclude_id=appointment_id)
        else:
            if start is None or end is None:
                raise OrderingError("Start and end must be valid dates and times.")
            logger.info(f"Skipping ordering/overlap checks for edit of appointment {appointment_id}")

        self._require_customer(form.customerId)

        updates = {
            "title": form.title.strip(),
            "start": start,
            "end": end,
            "status": form.status,
        }
        if form.customerId is not None:
            updates["customer_id"] = form.customerId

        record = self.store.update_appointment(appointment_id, updates)
        if not record:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        logger.info(f"✅ Appointment {appointment_id} updated")
        return record

    def delete_appointment(self, appointment_id: int) -> dict:
        """Delete an appointment"""
        if not self.store.delete_appointment(appointment_id):
            raise NotFoundError(f"Appointment {appointment_id} not found")
        logger.info(f"🗑️ Appointment {appointment_id} deleted")
        return {"message": "Appointment deleted"}

    def link_customer(self, appointment_id: int, customer_id: int) -> AppointmentRecord:
        """Attach a customer to an existing appointment"""
        self.get_appointment(appointment_id)
        self._require_customer(customer_id)

        record = self.store.update_appointment(appointment_id, {"customer_id": customer_id})
        if not record:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        logger.info(f"🔗 Appointment {appointment_id} linked to customer {customer_id}")
        return record
