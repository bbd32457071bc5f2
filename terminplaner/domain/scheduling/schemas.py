"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class AppointmentStatus(str, Enum):
    OPEN = "open"
    PLANNED = "planned"
    COMPLETED = "completed"


# Placeholder the form shows before a status is picked; never valid to persist
UNSELECTED_STATUS = "unselected"


class AppointmentForm(BaseModel):
    """Appointment form state; date and time arrive as separate fields"""

    title: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    status: Optional[str] = UNSELECTED_STATUS
    customerId: Optional[int] = None


class AppointmentFieldErrors(BaseModel):
    """Per-field validation messages; None means the field is fine"""

    title: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    status: Optional[str] = None

    def has_errors(self) -> bool:
        return any(value is not None for value in self.model_dump().values())


class AppointmentResponse(BaseModel):
    """Schema for appointment response"""

    id: int
    title: str
    start: datetime
    end: datetime
    startDate: str
    endDate: str
    startTime: str
    endTime: str
    status: str
    customerId: Optional[int] = None
    created_at: Optional[datetime] = None


class CalendarDay(BaseModel):
    """Appointments starting on one civil day"""

    date: str
    appointments: list[AppointmentResponse]


class CalendarResponse(BaseModel):
    start: datetime
    end: datetime
    days: list[CalendarDay]


class LinkCustomerRequest(BaseModel):
    customerId: int = Field(..., gt=0)
