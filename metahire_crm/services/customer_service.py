"""
Customer service - converted customers and their payments.

Customers are only ever created by the lead transition engine; this service
reads, edits and deletes them and manages payments.
"""
import logging
import uuid
from decimal import Decimal
from typing import List, Optional

from metahire_crm.config import settings
from metahire_crm.core.exceptions import NotFoundError
from metahire_crm.core.session import CallerSession
from metahire_crm.models.customer import Customer, Payment, PaymentStatus
from metahire_crm.repositories.store import Store
from metahire_crm.schemas.customer import (
    CustomerUpdate, PaymentCreate, PaymentUpdate, PaymentSummary, CurrencyTotals
)
from metahire_crm.services.access_scope import AccessScopeResolver

logger = logging.getLogger(__name__)


class CustomerService:
    """Service for customer and payment operations."""

    def __init__(self, store: Store):
        self.store = store
        self.scope = AccessScopeResolver(store)

    # Customers

    async def list(self, caller: CallerSession) -> List[Customer]:
        return await self.scope.visible_customers(caller.capability)

    async def get(self, caller: CallerSession, customer_id: uuid.UUID) -> Customer:
        customer = await self.store.customers.get(customer_id)
        if not customer or not await self.scope.can_see_customer(caller.capability, customer):
            raise NotFoundError("Customer", str(customer_id))
        return customer

    async def update(
        self,
        caller: CallerSession,
        customer_id: uuid.UUID,
        customer_data: CustomerUpdate
    ) -> Customer:
        await self.get(caller, customer_id)
        update_data = customer_data.model_dump(exclude_unset=True)
        if "first_name" in update_data and update_data["first_name"] is None:
            del update_data["first_name"]
        if "last_name" in update_data and update_data["last_name"] is None:
            update_data["last_name"] = ""

        customer = await self.store.customers.update(customer_id, update_data)
        if not customer:
            raise NotFoundError("Customer", str(customer_id))
        return customer

    async def delete(self, caller: CallerSession, customer_id: uuid.UUID) -> None:
        """Delete a customer and its payments."""
        await self.get(caller, customer_id)
        await self.store.customers.delete(customer_id)
        logger.info("Customer %s deleted by %s", customer_id, caller.profile_id)

    # Payments

    async def list_payments(
        self,
        caller: CallerSession,
        customer_id: Optional[uuid.UUID] = None
    ) -> List[Payment]:
        payments = await self.scope.visible_payments(caller.capability)
        if customer_id is not None:
            payments = [p for p in payments if p.customer_id == customer_id]
        return payments

    async def get_payment(self, caller: CallerSession, payment_id: uuid.UUID) -> Payment:
        payment = await self.store.payments.get(payment_id)
        if not payment:
            raise NotFoundError("Payment", str(payment_id))
        customer = await self.store.customers.get(payment.customer_id)
        if not customer or not await self.scope.can_see_customer(caller.capability, customer):
            raise NotFoundError("Payment", str(payment_id))
        return payment

    async def create_payment(self, caller: CallerSession, payment_data: PaymentCreate) -> Payment:
        await self.get(caller, payment_data.customer_id)

        data = payment_data.model_dump()
        data["currency"] = data["currency"] or settings.DEFAULT_CURRENCY
        data["status"] = payment_data.status.value
        data["created_by"] = caller.profile_id

        payment = await self.store.payments.create(data)
        logger.info(
            "Payment %s of %s %s recorded for customer %s",
            payment.id, payment.amount, payment.currency, payment.customer_id
        )
        return payment

    async def update_payment(
        self,
        caller: CallerSession,
        payment_id: uuid.UUID,
        payment_data: PaymentUpdate
    ) -> Payment:
        """Edit a payment; customer and creator stay as recorded."""
        await self.get_payment(caller, payment_id)

        update_data = payment_data.model_dump(exclude_unset=True)
        for field in ("amount", "currency", "status"):
            if field in update_data and update_data[field] is None:
                del update_data[field]
        if "status" in update_data:
            update_data["status"] = PaymentStatus(update_data["status"]).value

        payment = await self.store.payments.update(payment_id, update_data)
        if not payment:
            raise NotFoundError("Payment", str(payment_id))
        return payment

    async def delete_payment(self, caller: CallerSession, payment_id: uuid.UUID) -> None:
        await self.get_payment(caller, payment_id)
        await self.store.payments.delete(payment_id)

    async def payment_summary(self, caller: CallerSession, customer_id: uuid.UUID) -> PaymentSummary:
        """Per-currency totals by status; outstanding is pending plus overdue."""
        await self.get(caller, customer_id)
        payments = await self.store.payments.list({"customer_id": customer_id})

        totals = {}
        for payment in payments:
            bucket = totals.setdefault(payment.currency, CurrencyTotals())
            amount = Decimal(payment.amount)
            setattr(bucket, payment.status, getattr(bucket, payment.status) + amount)
            if payment.status in (PaymentStatus.PENDING.value, PaymentStatus.OVERDUE.value):
                bucket.outstanding += amount

        return PaymentSummary(customer_id=customer_id, payment_count=len(payments), totals=totals)
