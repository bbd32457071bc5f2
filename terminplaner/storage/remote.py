"""
Remote table store

Thin client for a hosted relational backend that exposes its tables through a
PostgREST-style API (``/rest/v1/<table>``). Column names follow the
hosted German schema:

    termine:  id, grund, startzeitpkt, endzeitpkt, status, customer_id, created_at
    customer: id, titel, name, vorname, geburtstag, strasse, plz, city,
              festnetznr, handynr, email, website, created_at
"""

import logging
from datetime import datetime
from typing import Any, Optional

import httpx

from ..errors import StoreError
from .base import AppointmentInterval, AppointmentRecord, CustomerRecord, RecordStore

logger = logging.getLogger(__name__)

APPOINTMENTS_TABLE = "termine"
CUSTOMERS_TABLE = "customer"

# Local field name -> remote column name
APPOINTMENT_COLUMNS = {
    "id": "id",
    "title": "grund",
    "start": "startzeitpkt",
    "end": "endzeitpkt",
    "status": "status",
    "customer_id": "customer_id",
    "created_at": "created_at",
}

CUSTOMER_COLUMNS = {
    "id": "id",
    "title": "titel",
    "last_name": "name",
    "first_name": "vorname",
    "birth_date": "geburtstag",
    "street": "strasse",
    "zip": "plz",
    "city": "city",
    "phone": "festnetznr",
    "mobile": "handynr",
    "email": "email",
    "website": "website",
    "created_at": "created_at",
}


def to_timestamp_string(value: datetime) -> str:
    """Timestamp format the remote table stores: YYYY-MM-DDTHH:MM:SS without zone"""
    return value.replace(tzinfo=None).isoformat(timespec="seconds")


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        logger.error(f"❌ Unparseable timestamp from remote backend: {value!r}")
        raise StoreError(f"Unparseable timestamp from remote backend: {value}") from e
    # Civil times are compared naive throughout the application
    return parsed.replace(tzinfo=None)


class RemoteTableStore(RecordStore):
    """Store backed by remote REST tables"""

    backend_name = "remote"

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not base_url:
            raise ValueError("REMOTE_URL must be configured for the remote backend")

        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"

        self.client = httpx.Client(
            base_url=f"{base_url.rstrip('/')}/rest/v1",
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[dict] = None,
        json: Optional[Any] = None,
        return_rows: bool = True,
    ) -> list[dict]:
        headers = {"Prefer": "return=representation"} if return_rows else {}
        try:
            response = self.client.request(method, f"/{table}", params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"❌ Remote {method} {table} failed: {e}")
            raise StoreError(f"Remote backend unreachable: {e}") from e

        if response.status_code >= 400:
            message = response.text
            try:
                body = response.json()
                if isinstance(body, dict):
                    message = body.get("message", message)
            except ValueError:
                pass
            logger.error(f"❌ Remote {method} {table} returned {response.status_code}: {message}")
            raise StoreError(f"Remote backend error ({response.status_code}): {message}")

        if not return_rows or not response.content:
            return []
        rows = response.json()
        return rows if isinstance(rows, list) else [rows]

    @staticmethod
    def _select(columns: dict) -> str:
        return ",".join(columns.values())

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _appointment_from_row(row: dict) -> AppointmentRecord:
        if not row.get("startzeitpkt") or not row.get("endzeitpkt"):
            raise StoreError(f"Appointment {row.get('id')} has no complete interval")
        return AppointmentRecord(
            id=row["id"],
            title=row.get("grund") or "",
            start=_parse_timestamp(row.get("startzeitpkt")),
            end=_parse_timestamp(row.get("endzeitpkt")),
            status=row.get("status") or "",
            customer_id=row.get("customer_id"),
            created_at=_parse_timestamp(row.get("created_at")),
        )

    @staticmethod
    def _appointment_to_row(data: dict[str, Any]) -> dict[str, Any]:
        row = {}
        for key, value in data.items():
            if key not in APPOINTMENT_COLUMNS or key in ("id", "created_at"):
                continue
            if isinstance(value, datetime):
                value = to_timestamp_string(value)
            row[APPOINTMENT_COLUMNS[key]] = value
        return row

    @staticmethod
    def _customer_from_row(row: dict) -> CustomerRecord:
        values = {field: row.get(column) for field, column in CUSTOMER_COLUMNS.items()}
        # plz is a numeric column remotely
        if values["zip"] is not None:
            values["zip"] = str(values["zip"])
        values["created_at"] = _parse_timestamp(row.get("created_at"))
        for field in ("last_name", "first_name", "street", "zip", "city", "phone", "email"):
            values[field] = values[field] or ""
        return CustomerRecord(**values)

    @staticmethod
    def _customer_to_row(data: dict[str, Any]) -> dict[str, Any]:
        return {
            CUSTOMER_COLUMNS[key]: value
            for key, value in data.items()
            if key in CUSTOMER_COLUMNS and key not in ("id", "created_at")
        }

    # ------------------------------------------------------------------
    # Appointments
    # ------------------------------------------------------------------

    def _window_params(self, start: Optional[datetime], end: Optional[datetime]) -> dict:
        params = {}
        if end is not None:
            params["startzeitpkt"] = f"lt.{to_timestamp_string(end)}"
        if start is not None:
            params["endzeitpkt"] = f"gt.{to_timestamp_string(start)}"
        return params

    def list_appointments(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[AppointmentRecord]:
        params = {
            "select": self._select(APPOINTMENT_COLUMNS),
            "order": "startzeitpkt.asc,created_at.asc,id.asc",
            **self._window_params(start, end),
        }
        records = []
        for row in self._request("GET", APPOINTMENTS_TABLE, params):
            if not row.get("startzeitpkt") or not row.get("endzeitpkt"):
                logger.warning(f"⚠️ Appointment {row.get('id')} has no complete interval, ignoring")
                continue
            records.append(self._appointment_from_row(row))
        return records

    def list_appointment_intervals(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[AppointmentInterval]:
        params = {"select": "id,startzeitpkt,endzeitpkt", **self._window_params(start, end)}
        intervals = []
        for row in self._request("GET", APPOINTMENTS_TABLE, params):
            row_start = _parse_timestamp(row.get("startzeitpkt"))
            row_end = _parse_timestamp(row.get("endzeitpkt"))
            if row_start is None or row_end is None:
                logger.warning(f"⚠️ Appointment {row.get('id')} has no complete interval, ignoring")
                continue
            intervals.append(AppointmentInterval(id=row["id"], start=row_start, end=row_end))
        return intervals

    def get_appointment(self, appointment_id: int) -> Optional[AppointmentRecord]:
        params = {"select": self._select(APPOINTMENT_COLUMNS), "id": f"eq.{appointment_id}"}
        rows = self._request("GET", APPOINTMENTS_TABLE, params)
        return self._appointment_from_row(rows[0]) if rows else None

    def create_appointment(self, data: dict[str, Any]) -> AppointmentRecord:
        rows = self._request("POST", APPOINTMENTS_TABLE, json=self._appointment_to_row(data))
        if not rows:
            raise StoreError("Remote backend returned no row for the new appointment")
        return self._appointment_from_row(rows[0])

    def update_appointment(
        self, appointment_id: int, data: dict[str, Any]
    ) -> Optional[AppointmentRecord]:
        rows = self._request(
            "PATCH",
            APPOINTMENTS_TABLE,
            params={"id": f"eq.{appointment_id}"},
            json=self._appointment_to_row(data),
        )
        return self._appointment_from_row(rows[0]) if rows else None

    def delete_appointment(self, appointment_id: int) -> bool:
        rows = self._request("DELETE", APPOINTMENTS_TABLE, params={"id": f"eq.{appointment_id}"})
        return len(rows) > 0

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    def list_customers(self) -> list[CustomerRecord]:
        params = {"select": self._select(CUSTOMER_COLUMNS), "order": "name.asc,vorname.asc"}
        return [self._customer_from_row(row) for row in self._request("GET", CUSTOMERS_TABLE, params)]

    def get_customer(self, customer_id: int) -> Optional[CustomerRecord]:
        params = {"select": self._select(CUSTOMER_COLUMNS), "id": f"eq.{customer_id}"}
        rows = self._request("GET", CUSTOMERS_TABLE, params)
        return self._customer_from_row(rows[0]) if rows else None

    def create_customer(self, data: dict[str, Any]) -> CustomerRecord:
        rows = self._request("POST", CUSTOMERS_TABLE, json=self._customer_to_row(data))
        if not rows:
            raise StoreError("Remote backend returned no row for the new customer")
        return self._customer_from_row(rows[0])

    def update_customer(self, customer_id: int, data: dict[str, Any]) -> Optional[CustomerRecord]:
        rows = self._request(
            "PATCH",
            CUSTOMERS_TABLE,
            params={"id": f"eq.{customer_id}"},
            json=self._customer_to_row(data),
        )
        return self._customer_from_row(rows[0]) if rows else None

    def delete_customer(self, customer_id: int) -> bool:
        # Unlink only once the customer is known to exist
        if self.get_customer(customer_id) is None:
            return False
        self._request(
            "PATCH",
            APPOINTMENTS_TABLE,
            params={"customer_id": f"eq.{customer_id}"},
            json={"customer_id": None},
            return_rows=False,
        )
        rows = self._request("DELETE", CUSTOMERS_TABLE, params={"id": f"eq.{customer_id}"})
        return len(rows) > 0

    def close(self) -> None:
        self.client.close()
