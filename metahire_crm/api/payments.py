"""
Payments API routes.
"""
import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends

from metahire_crm.config import settings
from metahire_crm.core.session import CallerSession
from metahire_crm.repositories.store import Store
from metahire_crm.services.customer_service import CustomerService
from metahire_crm.schemas.customer import PaymentCreate, PaymentUpdate, PaymentResponse
from metahire_crm.api.deps import get_store, get_current_session

router = APIRouter(prefix=f"{settings.API_PREFIX}/payments", tags=["payments"])


@router.get("/", response_model=List[PaymentResponse])
async def list_payments(
    customer_id: Optional[uuid.UUID] = None,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """List visible payments, optionally for one customer."""
    return await CustomerService(store).list_payments(caller, customer_id)


@router.post("/", response_model=PaymentResponse, status_code=201)
async def create_payment(
    payment_data: PaymentCreate,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Record a payment."""
    return await CustomerService(store).create_payment(caller, payment_data)


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: uuid.UUID,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Get a payment by ID."""
    return await CustomerService(store).get_payment(caller, payment_id)


@router.patch("/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    payment_id: uuid.UUID,
    payment_data: PaymentUpdate,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Update a payment."""
    return await CustomerService(store).update_payment(caller, payment_id, payment_data)


@router.delete("/{payment_id}", status_code=204)
async def delete_payment(
    payment_id: uuid.UUID,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Delete a payment."""
    await CustomerService(store).delete_payment(caller, payment_id)
