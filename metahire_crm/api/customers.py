"""
Customers API routes.
"""
import uuid
from typing import List
from fastapi import APIRouter, Depends

from metahire_crm.config import settings
from metahire_crm.core.session import CallerSession
from metahire_crm.repositories.store import Store
from metahire_crm.services.customer_service import CustomerService
from metahire_crm.schemas.customer import CustomerUpdate, CustomerResponse, PaymentResponse, PaymentSummary
from metahire_crm.api.deps import get_store, get_current_session

router = APIRouter(prefix=f"{settings.API_PREFIX}/customers", tags=["customers"])


@router.get("/", response_model=List[CustomerResponse])
async def list_customers(
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """List the customers the caller can see, most recently converted first."""
    return await CustomerService(store).list(caller)


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: uuid.UUID,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Get a customer by ID."""
    return await CustomerService(store).get(caller, customer_id)


@router.patch("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: uuid.UUID,
    customer_data: CustomerUpdate,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Update customer contact details."""
    return await CustomerService(store).update(caller, customer_id, customer_data)


@router.delete("/{customer_id}", status_code=204)
async def delete_customer(
    customer_id: uuid.UUID,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Delete a customer and its payments."""
    await CustomerService(store).delete(caller, customer_id)


@router.get("/{customer_id}/payments", response_model=List[PaymentResponse])
async def list_customer_payments(
    customer_id: uuid.UUID,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """List a customer's payments."""
    customer_service = CustomerService(store)
    await customer_service.get(caller, customer_id)
    return await customer_service.list_payments(caller, customer_id)


@router.get("/{customer_id}/payment-summary", response_model=PaymentSummary)
async def get_payment_summary(
    customer_id: uuid.UUID,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Per-currency payment totals for a customer."""
    return await CustomerService(store).payment_summary(caller, customer_id)
