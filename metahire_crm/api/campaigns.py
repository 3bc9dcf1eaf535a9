"""
Campaigns API routes.
"""
import uuid
from typing import List
from fastapi import APIRouter, Depends

from metahire_crm.config import settings
from metahire_crm.core.session import CallerSession
from metahire_crm.repositories.store import Store
from metahire_crm.services.campaign_service import CampaignService
from metahire_crm.schemas.campaign import CampaignCreate, CampaignUpdate, CampaignResponse
from metahire_crm.api.deps import get_store, get_current_session

router = APIRouter(prefix=f"{settings.API_PREFIX}/campaigns", tags=["campaigns"])


@router.post("/", response_model=CampaignResponse, status_code=201)
async def create_campaign(
    campaign_data: CampaignCreate,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Create a new campaign."""
    return await CampaignService(store).create(caller, campaign_data)


@router.get("/", response_model=List[CampaignResponse])
async def list_campaigns(
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """List the campaigns the caller can see."""
    return await CampaignService(store).list(caller)


@router.get("/{campaign_id}", response_model=CampaignResponse)
async def get_campaign(
    campaign_id: uuid.UUID,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Get a campaign by ID."""
    return await CampaignService(store).get(caller, campaign_id)


@router.patch("/{campaign_id}", response_model=CampaignResponse)
async def update_campaign(
    campaign_id: uuid.UUID,
    campaign_data: CampaignUpdate,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Update a campaign."""
    return await CampaignService(store).update(caller, campaign_id, campaign_data)


@router.delete("/{campaign_id}", status_code=204)
async def delete_campaign(
    campaign_id: uuid.UUID,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Delete a campaign with its leads and assignments."""
    await CampaignService(store).delete(caller, campaign_id)
