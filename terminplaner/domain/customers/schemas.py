"""Customer domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class CustomerForm(BaseModel):
    """Customer form state"""

    title: Optional[str] = None
    lastName: Optional[str] = None
    firstName: Optional[str] = None
    birthDate: Optional[str] = None
    street: Optional[str] = None
    zip: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None


class CustomerCreate(CustomerForm):
    """Create form; appointmentId links the appointment saved just before"""

    appointmentId: Optional[int] = None


class CustomerFieldErrors(BaseModel):
    """Per-field validation messages; None means the field is fine"""

    lastName: Optional[str] = None
    firstName: Optional[str] = None
    birthDate: Optional[str] = None
    street: Optional[str] = None
    zip: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    def has_errors(self) -> bool:
        return any(value is not None for value in self.model_dump().values())


class CustomerResponse(BaseModel):
    """Schema for customer response"""

    id: int
    title: Optional[str] = None
    lastName: str
    firstName: str
    birthDate: Optional[str] = None
    street: str
    zip: str
    city: str
    phone: str
    mobile: Optional[str] = None
    email: str
    website: Optional[str] = None
    created_at: Optional[datetime] = None


class CustomerSaveResponse(BaseModel):
    """Saved customer plus the outcome of the optional appointment link"""

    customer: CustomerResponse
    linkedAppointmentId: Optional[int] = None
    linkError: Optional[str] = None
