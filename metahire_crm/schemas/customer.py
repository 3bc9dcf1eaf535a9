"""
Customer and payment schemas.
"""
import uuid
from typing import Dict, Optional
from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, EmailStr, Field

from metahire_crm.models.customer import PaymentStatus

CURRENCY_PATTERN = r"^[A-Z]{3}$"


class CustomerUpdate(BaseModel):
    """Update customer contact details."""
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    notes: Optional[str] = None


class CustomerResponse(BaseModel):
    """Customer response."""
    id: uuid.UUID
    lead_id: Optional[uuid.UUID]
    first_name: str
    last_name: str
    email: Optional[str]
    phone: Optional[str]
    company: Optional[str]
    position: Optional[str]
    notes: Optional[str]
    converted_at: datetime
    converted_by: Optional[uuid.UUID]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PaymentCreate(BaseModel):
    """Record a payment for a customer."""
    customer_id: uuid.UUID
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    currency: Optional[str] = Field(default=None, pattern=CURRENCY_PATTERN)  # defaults to DEFAULT_CURRENCY
    payment_date: Optional[date] = None
    due_date: Optional[date] = None
    status: PaymentStatus = PaymentStatus.PENDING
    payment_method: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": "5b0f7a1e-8a3c-4c8e-9a53-0d6f0e5b8d11",
                "amount": "1500.00",
                "currency": "AED",
                "due_date": "2026-11-01",
                "status": "pending",
                "payment_method": "bank_transfer"
            }
        }


class PaymentUpdate(BaseModel):
    """Edit a payment. created_by and customer_id never change."""
    amount: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    currency: Optional[str] = Field(default=None, pattern=CURRENCY_PATTERN)
    payment_date: Optional[date] = None
    due_date: Optional[date] = None
    status: Optional[PaymentStatus] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None


class PaymentResponse(BaseModel):
    """Payment response."""
    id: uuid.UUID
    customer_id: uuid.UUID
    amount: Decimal
    currency: str
    payment_date: Optional[date]
    due_date: Optional[date]
    status: str
    payment_method: Optional[str]
    notes: Optional[str]
    created_by: Optional[uuid.UUID]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CurrencyTotals(BaseModel):
    """Sums for one currency."""
    paid: Decimal = Decimal("0")
    pending: Decimal = Decimal("0")
    overdue: Decimal = Decimal("0")
    cancelled: Decimal = Decimal("0")
    outstanding: Decimal = Decimal("0")  # pending + overdue


class PaymentSummary(BaseModel):
    """Payment totals for a customer, per currency."""
    customer_id: uuid.UUID
    payment_count: int
    totals: Dict[str, CurrencyTotals]
