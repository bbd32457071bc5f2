"""Customer router - FastAPI endpoints for customer operations"""

import logging

from fastapi import APIRouter, Depends, Query

from ...storage import get_store
from ...storage.base import RecordStore
from .schemas import CustomerCreate, CustomerForm, CustomerResponse, CustomerSaveResponse
from .service import CustomerService, to_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["Customers"])


def get_customer_service(store: RecordStore = Depends(get_store)) -> CustomerService:
    """Dependency injection for CustomerService"""
    return CustomerService(store)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[CustomerResponse])
async def get_customers(service: CustomerService = Depends(get_customer_service)):
    """Get all customers sorted by name"""
    return [to_response(c) for c in service.get_customers()]


@router.get("/search", response_model=list[CustomerResponse])
async def search_customers(
    query: str = Query("", description="Part of a first or last name"),
    service: CustomerService = Depends(get_customer_service),
):
    """Customer search view"""
    return [to_response(c) for c in service.search(query)]


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: int,
    service: CustomerService = Depends(get_customer_service),
):
    return to_response(service.get_customer(customer_id))


@router.post("", response_model=CustomerSaveResponse, status_code=201)
async def create_customer(
    data: CustomerCreate,
    service: CustomerService = Depends(get_customer_service),
):
    """Create a new customer, optionally linking an appointment"""
    return service.create_customer(data)


@router.put("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: int,
    data: CustomerForm,
    service: CustomerService = Depends(get_customer_service),
):
    """Update a customer"""
    return to_response(service.update_customer(customer_id, data))


@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: int,
    service: CustomerService = Depends(get_customer_service),
):
    """Delete a customer; linked appointments are kept and unlinked"""
    return service.delete_customer(customer_id)
