"""
Staff management API routes (superadmin only).
"""
import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends

from metahire_crm.config import settings
from metahire_crm.core.session import CallerSession
from metahire_crm.repositories.store import Store
from metahire_crm.services.staff_service import StaffService
from metahire_crm.schemas.profile import (
    ProfileResponse, StaffCreate, StaffUpdate, AssignmentCreate, AssignmentResponse
)
from metahire_crm.api.deps import get_store, get_current_session

router = APIRouter(prefix=f"{settings.API_PREFIX}/staff", tags=["staff"])


@router.get("/", response_model=List[ProfileResponse])
async def list_staff(
    search: Optional[str] = None,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """List staff members, optionally matching name or email."""
    return await StaffService(store).list_staff(caller, search)


@router.post("/", response_model=ProfileResponse, status_code=201)
async def add_staff(
    data: StaffCreate,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Add a staff member."""
    return await StaffService(store).add_staff(caller, data.email, data.password, data.full_name)


@router.patch("/{staff_id}", response_model=ProfileResponse)
async def edit_staff(
    staff_id: uuid.UUID,
    data: StaffUpdate,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Edit a staff member's name or email."""
    return await StaffService(store).edit_staff(caller, staff_id, data.full_name, data.email)


@router.delete("/{staff_id}", status_code=204)
async def remove_staff(
    staff_id: uuid.UUID,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Remove a staff member and their campaign assignments."""
    await StaffService(store).remove_staff(caller, staff_id)


@router.get("/{staff_id}/assignments", response_model=List[AssignmentResponse])
async def list_assignments(
    staff_id: uuid.UUID,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """List a staff member's campaign assignments."""
    return await StaffService(store).list_assignments(caller, staff_id)


@router.post("/{staff_id}/assignments", response_model=AssignmentResponse, status_code=201)
async def assign_campaign(
    staff_id: uuid.UUID,
    data: AssignmentCreate,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Assign a campaign to a staff member."""
    return await StaffService(store).assign_campaign(caller, staff_id, data.campaign_id)


@router.delete("/assignments/{assignment_id}", status_code=204)
async def unassign_campaign(
    assignment_id: uuid.UUID,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Remove a campaign assignment."""
    await StaffService(store).unassign_campaign(caller, assignment_id)
