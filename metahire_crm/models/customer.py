"""
Customer and payment models.
"""
import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field

from metahire_crm.core.timeutils import UTCDateTime, utcnow


class Customer(SQLModel, table=True):
    """
    A lead that reached closed_won, materialized as a billable entity.
    lead_id is a weak back-reference and survives lead deletion as null.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    lead_id: Optional[uuid.UUID] = Field(default=None, foreign_key="lead.id", index=True, ondelete="SET NULL")

    first_name: str
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    notes: Optional[str] = None

    converted_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, index=True)
    converted_by: Optional[uuid.UUID] = Field(default=None, foreign_key="profile.id", ondelete="SET NULL")

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class Payment(SQLModel, table=True):
    """Money owed or received for a customer."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    customer_id: uuid.UUID = Field(foreign_key="customer.id", index=True, ondelete="CASCADE")

    amount: Decimal = Field(max_digits=12, decimal_places=2)
    currency: str = Field(default="USD", max_length=3)
    payment_date: Optional[date] = None
    due_date: Optional[date] = None
    status: str = Field(default=PaymentStatus.PENDING.value, index=True)
    payment_method: Optional[str] = None
    notes: Optional[str] = None

    created_by: Optional[uuid.UUID] = Field(default=None, foreign_key="profile.id", ondelete="SET NULL")

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
