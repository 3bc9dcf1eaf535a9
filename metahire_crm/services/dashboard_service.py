"""
Dashboard service - role-dependent counters.
"""
from collections import Counter
from typing import Iterable

from metahire_crm.core.session import CallerSession, Staff
from metahire_crm.models import Lead, LeadStatus, LEAD_STATUSES, Role
from metahire_crm.repositories.store import Store
from metahire_crm.schemas.dashboard import DashboardStats
from metahire_crm.services.access_scope import AccessScopeResolver


def _by_status(leads: Iterable[Lead]) -> dict:
    counts = Counter(lead.status for lead in leads)
    return {status: counts.get(status, 0) for status in LEAD_STATUSES}


class DashboardService:
    """Service for dashboard statistics."""

    def __init__(self, store: Store):
        self.store = store
        self.scope = AccessScopeResolver(store)

    async def stats(self, caller: CallerSession) -> DashboardStats:
        if caller.is_superadmin:
            leads = await self.store.leads.list()
            return DashboardStats(
                role=Role.SUPERADMIN.value,
                total_staff=await self.store.profiles.count({"role": Role.STAFF.value}),
                total_campaigns=await self.store.campaigns.count(),
                total_leads=len(leads),
                total_customers=await self.store.customers.count(),
                leads_by_status=_by_status(leads),
            )

        if not isinstance(caller.capability, Staff):
            return DashboardStats(role="none", leads_by_status=_by_status([]))

        me = caller.capability.staff_id
        visible = await self.scope.visible_leads(caller.capability)
        return DashboardStats(
            role=Role.STAFF.value,
            my_leads=await self.store.leads.count({"assigned_to": me}),
            my_campaigns=await self.store.assignments.count({"staff_id": me}),
            new_leads=await self.store.leads.count({"assigned_to": me, "status": LeadStatus.NEW.value}),
            visible_leads=len(visible),
            leads_by_status=_by_status(visible),
        )
