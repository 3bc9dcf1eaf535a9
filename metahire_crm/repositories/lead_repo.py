"""
Lead and lead status history repositories.
"""
from sqlmodel.ext.asyncio.session import AsyncSession

from metahire_crm.models.lead import Lead, LeadStatusHistory
from metahire_crm.repositories.base import BaseRepository


class LeadRepository(BaseRepository[Lead]):
    """Repository for Lead operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Lead, session)


class LeadStatusHistoryRepository(BaseRepository[LeadStatusHistory]):
    """Repository for the append-only lead history."""

    def __init__(self, session: AsyncSession):
        super().__init__(LeadStatusHistory, session)
