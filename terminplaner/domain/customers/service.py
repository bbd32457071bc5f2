"""Customer service - Business logic for customer operations"""

import logging
from typing import Optional

from ...errors import FormValidationError, NotFoundError, StoreError
from ...shared.validators import parse_date, validate_email, validate_zip
from ...storage.base import CustomerRecord, RecordStore
from .schemas import CustomerCreate, CustomerFieldErrors, CustomerForm, CustomerResponse
from .search import search_customers, sort_key

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    """Trim a form value; empty becomes None"""
    if value is None:
        return None
    value = value.strip()
    return value or None


def to_response(record: CustomerRecord) -> CustomerResponse:
    return CustomerResponse(
        id=record.id,
        title=record.title,
        lastName=record.last_name,
        firstName=record.first_name,
        birthDate=record.birth_date,
        street=record.street,
        zip=record.zip,
        city=record.city,
        phone=record.phone,
        mobile=record.mobile,
        email=record.email,
        website=record.website,
        created_at=record.created_at,
    )


class CustomerService:
    """Service layer for customer business logic"""

    def __init__(self, store: RecordStore):
        self.store = store

    @staticmethod
    def validate_required(form: CustomerForm) -> CustomerFieldErrors:
        """Required fields plus postal code, email and birth date formats"""
        errors = CustomerFieldErrors(
            lastName=None if _clean(form.lastName) else "Please enter a last name.",
            firstName=None if _clean(form.firstName) else "Please enter a first name.",
            street=None if _clean(form.street) else "Please enter a street.",
            zip=None if _clean(form.zip) else "Please enter a postal code.",
            city=None if _clean(form.city) else "Please enter a city.",
            phone=None if _clean(form.phone) else "Please enter a phone number.",
            email=None if _clean(form.email) else "Please enter an email address.",
        )

        if errors.zip is None:
            try:
                validate_zip(form.zip)
            except ValueError as e:
                errors.zip = str(e)

        if errors.email is None:
            try:
                validate_email(form.email)
            except ValueError as e:
                errors.email = str(e)

        if _clean(form.birthDate) and parse_date(form.birthDate) is None:
            errors.birthDate = "Please enter a valid birth date."

        return errors

    def _payload(self, form: CustomerForm) -> dict:
        errors = self.validate_required(form)
        if errors.has_errors():
            logger.warning(f"⚠️ Customer form invalid: {errors.model_dump(exclude_none=True)}")
            raise FormValidationError(errors)

        return {
            "title": _clean(form.title),
            "last_name": _clean(form.lastName),
            "first_name": _clean(form.firstName),
            "birth_date": _clean(form.birthDate),
            "street": _clean(form.street),
            "zip": validate_zip(_clean(form.zip)),
            "city": _clean(form.city),
            "phone": _clean(form.phone),
            "mobile": _clean(form.mobile),
            "email": validate_email(form.email),
            "website": _clean(form.website),
        }

    def get_customers(self) -> list[CustomerRecord]:
        """All customers sorted by last name, then first name"""
        return sorted(self.store.list_customers(), key=sort_key)

    def get_customer(self, customer_id: int) -> CustomerRecord:
        customer = self.store.get_customer(customer_id)
        if not customer:
            raise NotFoundError(f"Customer {customer_id} not found")
        return customer

    def search(self, query: str) -> list[CustomerRecord]:
        """Case-insensitive first/last name search"""
        results = search_customers(self.store.list_customers(), query)
        logger.info(f"🔍 Customer search '{(query or '').strip()}' -> {len(results)} result(s)")
        return results

    def create_customer(self, data: CustomerCreate) -> dict:
        """
        Create a customer and optionally link the appointment saved just before.

        A failed link is reported alongside the saved customer; the customer
        insert is not rolled back.
        """
        customer = self.store.create_customer(self._payload(data))
        logger.info(f"✅ Customer {customer.id} saved")

        linked_id = None
        link_error = None
        if data.appointmentId is not None:
            try:
                updated = self.store.update_appointment(
                    data.appointmentId, {"customer_id": customer.id}
                )
                if updated:
                    linked_id = updated.id
                    logger.info(f"🔗 Appointment {linked_id} linked to customer {customer.id}")
                else:
                    link_error = f"Appointment {data.appointmentId} not found"
            except StoreError as e:
                link_error = str(e)

            if link_error:
                logger.warning(f"⚠️ Linking appointment to customer {customer.id} failed: {link_error}")

        return {
            "customer": to_response(customer),
            "linkedAppointmentId": linked_id,
            "linkError": link_error,
        }

    def update_customer(self, customer_id: int, data: CustomerForm) -> CustomerRecord:
        self.get_customer(customer_id)
        customer = self.store.update_customer(customer_id, self._payload(data))
        if not customer:
            raise NotFoundError(f"Customer {customer_id} not found")
        logger.info(f"✅ Customer {customer_id} updated")
        return customer

    def delete_customer(self, customer_id: int) -> dict:
        if not self.store.delete_customer(customer_id):
            raise NotFoundError(f"Customer {customer_id} not found")
        logger.info(f"🗑️ Customer {customer_id} deleted")
        return {"message": "Customer deleted"}
