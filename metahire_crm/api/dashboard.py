"""
Dashboard API routes.
"""
from fastapi import APIRouter, Depends

from metahire_crm.config import settings
from metahire_crm.core.session import CallerSession
from metahire_crm.repositories.store import Store
from metahire_crm.services.dashboard_service import DashboardService
from metahire_crm.schemas.dashboard import DashboardStats
from metahire_crm.api.deps import get_store, get_current_session

router = APIRouter(prefix=f"{settings.API_PREFIX}/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """Get dashboard statistics for the caller's role."""
    return await DashboardService(store).stats(caller)
