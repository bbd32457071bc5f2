"""Scheduling domain - Appointments, calendar listing and interval overlap validation"""

from .router import router

__all__ = ["router"]
