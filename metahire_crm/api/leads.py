"""
Leads API routes.
"""
import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, UploadFile, File

from metahire_crm.config import settings
from metahire_crm.core.exceptions import ValidationError
from metahire_crm.core.pagination import PaginatedResponse
from metahire_crm.core.session import CallerSession
from metahire_crm.models.lead import LeadStatus
from metahire_crm.repositories.store import Store
from metahire_crm.services.lead_service import LeadService
from metahire_crm.schemas.lead import (
    LeadCreate, LeadUpdate, LeadResponse, LeadFilter, LeadImportResponse,
    LeadStatusUpdate, CommentCreate, LeadHistoryResponse, LeadTransitionResponse,
    LeadBulkDeleteRequest
)
from metahire_crm.api.deps import get_store, get_current_session

router = APIRouter(prefix=f"{settings.API_PREFIX}/leads", tags=["leads"])


@router.post("/", response_model=LeadResponse, status_code=201)
async def create_lead(
    lead_data: LeadCreate,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Create a new lead."""
    return await LeadService(store).create(caller, lead_data)


@router.get("/", response_model=PaginatedResponse[LeadResponse])
async def list_leads(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[LeadStatus] = None,
    campaign_id: Optional[uuid.UUID] = None,
    assigned_to: Optional[uuid.UUID] = None,
    search: Optional[str] = None,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """List visible leads with filtering and pagination."""
    filters = LeadFilter(
        status=status,
        campaign_id=campaign_id,
        assigned_to=assigned_to,
        search=search
    )
    return await LeadService(store).list(caller, filters, page, limit)


@router.post("/import", response_model=LeadImportResponse)
async def import_leads(
    file: UploadFile = File(...),
    campaign_id: Optional[uuid.UUID] = None,
    assigned_to: Optional[uuid.UUID] = None,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Import leads from CSV file."""
    content = await file.read()
    try:
        csv_content = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationError("CSV must be UTF-8", field="file")

    return await LeadService(store).import_csv(caller, csv_content, campaign_id, assigned_to)


@router.post("/bulk-delete")
async def bulk_delete_leads(
    request: LeadBulkDeleteRequest,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Delete several leads."""
    deleted = await LeadService(store).bulk_delete(caller, request.lead_ids)
    return {"deleted": deleted}


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: uuid.UUID,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Get a lead by ID."""
    return await LeadService(store).get(caller, lead_id)


@router.patch("/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_id: uuid.UUID,
    lead_data: LeadUpdate,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Update a lead."""
    return await LeadService(store).update(caller, lead_id, lead_data)


@router.delete("/{lead_id}", status_code=204)
async def delete_lead(
    lead_id: uuid.UUID,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Delete a lead."""
    await LeadService(store).delete(caller, lead_id)


@router.post("/{lead_id}/status", response_model=LeadTransitionResponse)
async def change_lead_status(
    lead_id: uuid.UUID,
    data: LeadStatusUpdate,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Move a lead to another status. Entering closed_won creates a customer."""
    result = await LeadService(store).change_status(caller, lead_id, data.status, data.notes)
    return LeadTransitionResponse.model_validate(result, from_attributes=True)


@router.post("/{lead_id}/comments", response_model=LeadHistoryResponse, status_code=201)
async def add_lead_comment(
    lead_id: uuid.UUID,
    data: CommentCreate,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Comment on a lead without changing its status."""
    return await LeadService(store).add_comment(caller, lead_id, data.text)


@router.get("/{lead_id}/history", response_model=List[LeadHistoryResponse])
async def get_lead_history(
    lead_id: uuid.UUID,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Status changes and comments, newest first."""
    return await LeadService(store).history(caller, lead_id)
