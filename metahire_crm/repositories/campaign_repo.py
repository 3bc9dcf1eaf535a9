"""
Campaign and campaign assignment repositories.
"""
from sqlmodel.ext.asyncio.session import AsyncSession

from metahire_crm.models.campaign import Campaign, CampaignAssignment
from metahire_crm.repositories.base import BaseRepository


class CampaignRepository(BaseRepository[Campaign]):
    """Repository for Campaign operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Campaign, session)


class CampaignAssignmentRepository(BaseRepository[CampaignAssignment]):
    """Repository for CampaignAssignment (junction table) operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(CampaignAssignment, session)
