"""SQL store - Database operations for appointments and customers"""

import logging
from datetime import datetime
from functools import wraps
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import StoreError
from ..models import Appointment, Customer
from .base import AppointmentInterval, AppointmentRecord, CustomerRecord, RecordStore

logger = logging.getLogger(__name__)


def _wrap_db_errors(func):
    """Roll back and re-raise database failures as StoreError"""

    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Database error in {func.__name__}: {e}")
            raise StoreError(f"Database error: {e}") from e

    return wrapper


class SqlStore(RecordStore):
    """Store backed by a SQLAlchemy session"""

    backend_name = "sql"

    def __init__(self, db: Session):
        self.db = db

    def _appointment_query(self, start: Optional[datetime], end: Optional[datetime]):
        query = self.db.query(Appointment)
        # Overlap condition: start < window_end AND end > window_start
        if end is not None:
            query = query.filter(Appointment.start < end)
        if start is not None:
            query = query.filter(Appointment.end > start)
        return query

    # Appointments

    @_wrap_db_errors
    def list_appointments(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[AppointmentRecord]:
        rows = (
            self._appointment_query(start, end)
            .order_by(Appointment.start, Appointment.created_at, Appointment.id)
            .all()
        )
        return [AppointmentRecord.model_validate(row) for row in rows]

    @_wrap_db_errors
    def list_appointment_intervals(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[AppointmentInterval]:
        rows = (
            self._appointment_query(start, end)
            .with_entities(Appointment.id, Appointment.start, Appointment.end)
            .all()
        )
        return [AppointmentInterval(id=row.id, start=row.start, end=row.end) for row in rows]

    @_wrap_db_errors
    def get_appointment(self, appointment_id: int) -> Optional[AppointmentRecord]:
        row = self.db.query(Appointment).filter(Appointment.id == appointment_id).first()
        return AppointmentRecord.model_validate(row) if row else None

    @_wrap_db_errors
    def create_appointment(self, data: dict[str, Any]) -> AppointmentRecord:
        row = Appointment(**data)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return AppointmentRecord.model_validate(row)

    @_wrap_db_errors
    def update_appointment(
        self, appointment_id: int, data: dict[str, Any]
    ) -> Optional[AppointmentRecord]:
        row = self.db.query(Appointment).filter(Appointment.id == appointment_id).first()
        if not row:
            return None
        for key, value in data.items():
            if hasattr(row, key):
                setattr(row, key, value)
        self.db.commit()
        self.db.refresh(row)
        return AppointmentRecord.model_validate(row)

    @_wrap_db_errors
    def delete_appointment(self, appointment_id: int) -> bool:
        row = self.db.query(Appointment).filter(Appointment.id == appointment_id).first()
        if not row:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    # Customers

    @_wrap_db_errors
    def list_customers(self) -> list[CustomerRecord]:
        rows = self.db.query(Customer).order_by(Customer.last_name, Customer.first_name).all()
        return [CustomerRecord.model_validate(row) for row in rows]

    @_wrap_db_errors
    def get_customer(self, customer_id: int) -> Optional[CustomerRecord]:
        row = self.db.query(Customer).filter(Customer.id == customer_id).first()
        return CustomerRecord.model_validate(row) if row else None

    @_wrap_db_errors
    def create_customer(self, data: dict[str, Any]) -> CustomerRecord:
        row = Customer(**data)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return CustomerRecord.model_validate(row)

    @_wrap_db_errors
    def update_customer(self, customer_id: int, data: dict[str, Any]) -> Optional[CustomerRecord]:
        row = self.db.query(Customer).filter(Customer.id == customer_id).first()
        if not row:
            return None
        for key, value in data.items():
            if hasattr(row, key):
                setattr(row, key, value)
        self.db.commit()
        self.db.refresh(row)
        return CustomerRecord.model_validate(row)

    @_wrap_db_errors
    def delete_customer(self, customer_id: int) -> bool:
        row = self.db.query(Customer).filter(Customer.id == customer_id).first()
        if not row:
            return False
        # SQLite does not enforce ON DELETE SET NULL without the foreign_keys pragma
        self.db.query(Appointment).filter(Appointment.customer_id == customer_id).update(
            {Appointment.customer_id: None}, synchronize_session=False
        )
        self.db.delete(row)
        self.db.commit()
        return True

    def close(self) -> None:
        self.db.close()
