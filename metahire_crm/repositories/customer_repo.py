"""
Customer and payment repositories.
"""
from sqlmodel.ext.asyncio.session import AsyncSession

from metahire_crm.models.customer import Customer, Payment
from metahire_crm.repositories.base import BaseRepository


class CustomerRepository(BaseRepository[Customer]):
    """Repository for Customer operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Customer, session)


class PaymentRepository(BaseRepository[Payment]):
    """Repository for Payment operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Payment, session)
