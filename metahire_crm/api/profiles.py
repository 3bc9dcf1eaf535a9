"""
Current profile API routes.
"""
from fastapi import APIRouter, Depends

from metahire_crm.config import settings
from metahire_crm.core.session import CallerSession
from metahire_crm.repositories.store import Store
from metahire_crm.services.auth_service import AuthService
from metahire_crm.schemas.profile import ProfileResponse, ProfileUpdate
from metahire_crm.api.deps import get_store, get_current_session

router = APIRouter(prefix=f"{settings.API_PREFIX}/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Get the caller's profile."""
    return await AuthService(store).me(caller)


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    data: ProfileUpdate,
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Update the caller's display name."""
    return await AuthService(store).update_me(caller, data.full_name)
