"""
Campaign service - campaign management.
"""
import logging
import uuid
from typing import List

from metahire_crm.core.exceptions import NotFoundError
from metahire_crm.core.session import CallerSession, require_superadmin
from metahire_crm.models.campaign import Campaign
from metahire_crm.repositories.store import Store
from metahire_crm.schemas.campaign import CampaignCreate, CampaignUpdate
from metahire_crm.services.access_scope import AccessScopeResolver

logger = logging.getLogger(__name__)


class CampaignService:
    """Service for campaign operations."""

    def __init__(self, store: Store):
        self.store = store
        self.scope = AccessScopeResolver(store)

    async def create(self, caller: CallerSession, campaign_data: CampaignCreate) -> Campaign:
        """Create a new campaign."""
        require_superadmin(caller)
        data = campaign_data.model_dump()
        data["created_by"] = caller.profile_id

        campaign = await self.store.campaigns.create(data)
        logger.info("Campaign %s created by %s", campaign.id, caller.profile_id)
        return campaign

    async def get(self, caller: CallerSession, campaign_id: uuid.UUID) -> Campaign:
        """Get a campaign by ID. Campaigns outside the caller's scope do not exist."""
        campaign = await self.store.campaigns.get(campaign_id)
        if not campaign or not await self.scope.can_see_campaign(caller.capability, campaign):
            raise NotFoundError("Campaign", str(campaign_id))
        return campaign

    async def list(self, caller: CallerSession) -> List[Campaign]:
        return await self.scope.visible_campaigns(caller.capability)

    async def update(
        self,
        caller: CallerSession,
        campaign_id: uuid.UUID,
        campaign_data: CampaignUpdate
    ) -> Campaign:
        """Update a campaign."""
        require_superadmin(caller)
        update_data = {
            field: value
            for field, value in campaign_data.model_dump(exclude_unset=True).items()
            if value is not None or field == "description"
        }
        campaign = await self.store.campaigns.update(campaign_id, update_data)
        if not campaign:
            raise NotFoundError("Campaign", str(campaign_id))
        return campaign

    async def delete(self, caller: CallerSession, campaign_id: uuid.UUID) -> None:
        """Delete a campaign together with its leads and assignments."""
        require_superadmin(caller)
        if not await self.store.campaigns.delete(campaign_id):
            raise NotFoundError("Campaign", str(campaign_id))
        logger.info("Campaign %s deleted by %s", campaign_id, caller.profile_id)
