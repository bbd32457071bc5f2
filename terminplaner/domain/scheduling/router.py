"""Appointment router - FastAPI endpoints for appointment operations"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ... import config
from ...storage import get_store
from ...storage.base import RecordStore
from .schemas import (
    AppointmentForm,
    AppointmentResponse,
    CalendarResponse,
    LinkCustomerRequest,
)
from .service import AppointmentService, to_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_service(store: RecordStore = Depends(get_store)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(
        store,
        edit_checks=config.APPOINTMENT_EDIT_CHECKS,
        read_failure=config.OVERLAP_READ_FAILURE,
    )


@router.get("", response_model=list[AppointmentResponse])
async def list_appointments(
    start: Optional[datetime] = Query(None, description="Window start (inclusive)"),
    end: Optional[datetime] = Query(None, description="Window end (exclusive)"),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Home view listing, chronological"""
    return [to_response(a) for a in service.list_appointments(start, end)]


@router.get("/calendar", response_model=CalendarResponse)
async def get_calendar(
    start: datetime = Query(...),
    end: datetime = Query(...),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Appointments grouped by day for the calendar view"""
    return service.calendar(start, end)


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    service: AppointmentService = Depends(get_appointment_service),
):
    return to_response(service.get_appointment(appointment_id))


@router.post("", response_model=AppointmentResponse, status_code=201)
async def create_appointment(
    data: AppointmentForm,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Create a new appointment"""
    return to_response(service.create_appointment(data))


@router.put("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    data: AppointmentForm,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Update an appointment"""
    return to_response(service.update_appointment(appointment_id, data))


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: int,
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.delete_appointment(appointment_id)


@router.post("/{appointment_id}/customer", response_model=AppointmentResponse)
async def link_customer(
    appointment_id: int,
    data: LinkCustomerRequest,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Attach a customer to an appointment"""
    return to_response(service.link_customer(appointment_id, data.customerId))
