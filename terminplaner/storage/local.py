"""
Local file store

Keeps appointments and customers in a single JSON document, the server-side
counterpart of the browser local-storage revision. A missing or unreadable
file is treated as an empty store.
"""

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Any, Optional

from pydantic import ValidationError

from ..errors import StoreError
from .base import (
    AppointmentRecord,
    CustomerRecord,
    RecordStore,
    appointment_sort_key,
    intersects_window,
)

logger = logging.getLogger(__name__)

APPOINTMENTS_KEY = "appointments"
CUSTOMERS_KEY = "customers"


class LocalFileStore(RecordStore):
    """JSON file backed store. Writes are serialised per process."""

    backend_name = "local"

    def __init__(self, path: str):
        self.path = Path(path)
        self._lock = Lock()

    # ------------------------------------------------------------------
    # File handling
    # ------------------------------------------------------------------

    def _empty(self) -> dict:
        return {APPOINTMENTS_KEY: [], CUSTOMERS_KEY: [], "next_id": {}}

    def _load(self) -> dict:
        if not self.path.exists():
            return self._empty()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"⚠️ Local store {self.path} unreadable, starting empty: {e}")
            return self._empty()

        if not isinstance(raw, dict):
            logger.warning(f"⚠️ Local store {self.path} has unexpected shape, starting empty")
            return self._empty()

        data = self._empty()
        for key in (APPOINTMENTS_KEY, CUSTOMERS_KEY):
            if isinstance(raw.get(key), list):
                data[key] = raw[key]
        if isinstance(raw.get("next_id"), dict):
            data["next_id"] = raw["next_id"]
        return data

    def _save(self, data: dict) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"❌ Failed to write local store {self.path}: {e}")
            raise StoreError(f"Could not write local store: {e}") from e

    def _next_id(self, data: dict, key: str) -> int:
        existing = [item.get("id", 0) for item in data[key] if isinstance(item.get("id"), int)]
        next_id = max([data["next_id"].get(key, 1), max(existing, default=0) + 1])
        data["next_id"][key] = next_id + 1
        return next_id

    @staticmethod
    def _parse_appointments(items: list) -> list[AppointmentRecord]:
        records = []
        for item in items:
            try:
                records.append(AppointmentRecord.model_validate(item))
            except ValidationError as e:
                logger.warning(f"⚠️ Skipping malformed appointment entry {item.get('id')}: {e}")
        return records

    @staticmethod
    def _parse_customers(items: list) -> list[CustomerRecord]:
        records = []
        for item in items:
            try:
                records.append(CustomerRecord.model_validate(item))
            except ValidationError as e:
                logger.warning(f"⚠️ Skipping malformed customer entry {item.get('id')}: {e}")
        return records

    # ------------------------------------------------------------------
    # Appointments
    # ------------------------------------------------------------------

    def list_appointments(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[AppointmentRecord]:
        with self._lock:
            data = self._load()
        records = [
            a
            for a in self._parse_appointments(data[APPOINTMENTS_KEY])
            if intersects_window(a.start, a.end, start, end)
        ]
        return sorted(records, key=appointment_sort_key)

    def get_appointment(self, appointment_id: int) -> Optional[AppointmentRecord]:
        with self._lock:
            data = self._load()
        for record in self._parse_appointments(data[APPOINTMENTS_KEY]):
            if record.id == appointment_id:
                return record
        return None

    def create_appointment(self, data: dict[str, Any]) -> AppointmentRecord:
        with self._lock:
            stored = self._load()
            record = AppointmentRecord(
                id=self._next_id(stored, APPOINTMENTS_KEY), created_at=datetime.now(), **data
            )
            stored[APPOINTMENTS_KEY].append(record.model_dump(mode="json"))
            self._save(stored)
        return record

    def update_appointment(
        self, appointment_id: int, data: dict[str, Any]
    ) -> Optional[AppointmentRecord]:
        with self._lock:
            stored = self._load()
            for index, item in enumerate(stored[APPOINTMENTS_KEY]):
                if item.get("id") == appointment_id:
                    record = AppointmentRecord.model_validate({**item, **data})
                    stored[APPOINTMENTS_KEY][index] = record.model_dump(mode="json")
                    self._save(stored)
                    return record
        return None

    def delete_appointment(self, appointment_id: int) -> bool:
        with self._lock:
            stored = self._load()
            remaining = [a for a in stored[APPOINTMENTS_KEY] if a.get("id") != appointment_id]
            if len(remaining) == len(stored[APPOINTMENTS_KEY]):
                return False
            stored[APPOINTMENTS_KEY] = remaining
            self._save(stored)
        return True

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    def list_customers(self) -> list[CustomerRecord]:
        with self._lock:
            data = self._load()
        return self._parse_customers(data[CUSTOMERS_KEY])

    def get_customer(self, customer_id: int) -> Optional[CustomerRecord]:
        for record in self.list_customers():
            if record.id == customer_id:
                return record
        return None

    def create_customer(self, data: dict[str, Any]) -> CustomerRecord:
        with self._lock:
            stored = self._load()
            record = CustomerRecord(
                id=self._next_id(stored, CUSTOMERS_KEY), created_at=datetime.now(), **data
            )
            stored[CUSTOMERS_KEY].append(record.model_dump(mode="json"))
            self._save(stored)
        return record

    def update_customer(self, customer_id: int, data: dict[str, Any]) -> Optional[CustomerRecord]:
        with self._lock:
            stored = self._load()
            for index, item in enumerate(stored[CUSTOMERS_KEY]):
                if item.get("id") == customer_id:
                    record = CustomerRecord.model_validate({**item, **data})
                    stored[CUSTOMERS_KEY][index] = record.model_dump(mode="json")
                    self._save(stored)
                    return record
        return None

    def delete_customer(self, customer_id: int) -> bool:
        with self._lock:
            stored = self._load()
            remaining = [c for c in stored[CUSTOMERS_KEY] if c.get("id") != customer_id]
            if len(remaining) == len(stored[CUSTOMERS_KEY]):
                return False
            stored[CUSTOMERS_KEY] = remaining
            for appointment in stored[APPOINTMENTS_KEY]:
                if appointment.get("customer_id") == customer_id:
                    appointment["customer_id"] = None
            self._save(stored)
        return True
