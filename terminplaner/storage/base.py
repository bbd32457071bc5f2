"""
Record store interface

One abstract store covers appointments and customers. Backends:
- LocalFileStore: JSON file (the "local storage" flavour)
- SqlStore: SQLAlchemy session
- RemoteTableStore: hosted REST tables over httpx
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class AppointmentRecord(BaseModel):
    """Stored appointment as returned by every backend"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    start: datetime
    end: datetime
    status: str
    customer_id: Optional[int] = None
    created_at: Optional[datetime] = None


class AppointmentInterval(BaseModel):
    """The (id, start, end) triple the overlap validator reads"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    start: datetime
    end: datetime


class CustomerRecord(BaseModel):
    """Stored customer as returned by every backend"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: Optional[str] = None
    last_name: str
    first_name: str
    birth_date: Optional[str] = None
    street: str
    zip: str
    city: str
    phone: str
    mobile: Optional[str] = None
    email: str
    website: Optional[str] = None
    created_at: Optional[datetime] = None


def appointment_sort_key(record: AppointmentRecord) -> tuple:
    """Chronological order; created_at and id break ties"""
    return (record.start, record.created_at or datetime.min, record.id)


def intersects_window(
    start: datetime,
    end: datetime,
    window_start: Optional[datetime],
    window_end: Optional[datetime],
) -> bool:
    """True when [start, end) touches the half-open window; open bounds match everything"""
    if window_end is not None and not start < window_end:
        return False
    if window_start is not None and not end > window_start:
        return False
    return True


class RecordStore(ABC):
    """Persistence capability shared by all backends. Failures raise StoreError."""

    backend_name = "abstract"

    # Appointments

    @abstractmethod
    def list_appointments(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[AppointmentRecord]:
        """Appointments intersecting [start, end), in chronological order"""

    def list_appointment_intervals(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[AppointmentInterval]:
        """Existing intervals, optionally narrowed to those intersecting [start, end)"""
        return [
            AppointmentInterval(id=a.id, start=a.start, end=a.end)
            for a in self.list_appointments(start, end)
        ]

    @abstractmethod
    def get_appointment(self, appointment_id: int) -> Optional[AppointmentRecord]:
        pass

    @abstractmethod
    def create_appointment(self, data: dict[str, Any]) -> AppointmentRecord:
        pass

    @abstractmethod
    def update_appointment(
        self, appointment_id: int, data: dict[str, Any]
    ) -> Optional[AppointmentRecord]:
        """Apply the given fields; None when the appointment does not exist"""

    @abstractmethod
    def delete_appointment(self, appointment_id: int) -> bool:
        pass

    # Customers

    @abstractmethod
    def list_customers(self) -> list[CustomerRecord]:
        pass

    @abstractmethod
    def get_customer(self, customer_id: int) -> Optional[CustomerRecord]:
        pass

    @abstractmethod
    def create_customer(self, data: dict[str, Any]) -> CustomerRecord:
        pass

    @abstractmethod
    def update_customer(self, customer_id: int, data: dict[str, Any]) -> Optional[CustomerRecord]:
        pass

    @abstractmethod
    def delete_customer(self, customer_id: int) -> bool:
        """Delete a customer and unlink its appointments"""

    def close(self) -> None:
        """Release backend resources"""
        return None
