"""
Domain exceptions

Services raise these; main.py maps them to HTTP responses.
"""

from typing import Optional


class TerminplanerError(Exception):
    """Base class for all application errors"""

    pass


class AppointmentValidationError(TerminplanerError):
    """An appointment interval cannot be saved"""

    pass


class OrderingError(AppointmentValidationError):
    """End is not strictly after start, or a date/time did not parse"""

    pass


class OverlapError(AppointmentValidationError):
    """Candidate interval intersects one or more stored appointments"""

    def __init__(self, message: str, conflicting_ids: Optional[list[int]] = None):
        super().__init__(message)
        self.conflicting_ids = conflicting_ids or []


class FormValidationError(TerminplanerError):
    """Required form fields are missing or malformed"""

    def __init__(self, errors):
        super().__init__("Please fill in all required fields.")
        # Fixed per-field record (AppointmentFieldErrors / CustomerFieldErrors)
        self.errors = errors


class NotFoundError(TerminplanerError):
    """Requested record does not exist"""

    pass


class StoreError(TerminplanerError):
    """Persistence backend failed (file, database or remote table)"""

    pass
