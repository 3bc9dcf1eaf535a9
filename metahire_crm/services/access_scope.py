"""
Access scope resolver - which rows a caller may see.

Superadmins see everything. Staff see:
- campaigns they are assigned to,
- leads assigned to them OR belonging to one of those campaigns,
- customers converted from leads assigned to them (assignment only, the
  campaign route does not apply),
- payments of those customers.

A storage failure while resolving a staff scope yields an empty result.
"""
import logging
import uuid
from typing import List, Optional, Set

from metahire_crm.core.exceptions import StorageError
from metahire_crm.core.session import Capability, Superadmin, Staff
from metahire_crm.models import Campaign, Lead, Customer, Payment
from metahire_crm.repositories.store import Store

logger = logging.getLogger(__name__)


class AccessScopeResolver:
    """Computes visible campaigns, leads, customers and payments for a caller."""

    def __init__(self, store: Store):
        self.store = store

    async def visible_campaigns(self, caller: Optional[Capability]) -> List[Campaign]:
        if isinstance(caller, Superadmin):
            return await self.store.campaigns.list()
        if not isinstance(caller, Staff):
            return []
        try:
            campaign_ids = await self._assigned_campaign_ids(caller.staff_id)
            return await self.store.campaigns.list_in("id", campaign_ids)
        except StorageError:
            logger.warning("Campaign scope lookup failed for staff %s, returning nothing", caller.staff_id)
            return []

    async def visible_leads(self, caller: Optional[Capability]) -> List[Lead]:
        if isinstance(caller, Superadmin):
            return await self.store.leads.list()
        if not isinstance(caller, Staff):
            return []
        try:
            assigned = await self.store.leads.list({"assigned_to": caller.staff_id})
            campaign_ids = await self._assigned_campaign_ids(caller.staff_id)
            from_campaigns = await self.store.leads.list_in("campaign_id", campaign_ids)
        except StorageError:
            logger.warning("Lead scope lookup failed for staff %s, returning nothing", caller.staff_id)
            return []

        merged = {lead.id: lead for lead in assigned}
        for lead in from_campaigns:
            merged.setdefault(lead.id, lead)
        return sorted(merged.values(), key=lambda lead: lead.created_at, reverse=True)

    async def visible_customers(self, caller: Optional[Capability]) -> List[Customer]:
        if isinstance(caller, Superadmin):
            return await self.store.customers.list(order_by="converted_at")
        if not isinstance(caller, Staff):
            return []
        try:
            lead_ids = await self._assigned_lead_ids(caller.staff_id)
            return await self.store.customers.list_in("lead_id", lead_ids, order_by="converted_at")
        except StorageError:
            logger.warning("Customer scope lookup failed for staff %s, returning nothing", caller.staff_id)
            return []

    async def visible_payments(self, caller: Optional[Capability]) -> List[Payment]:
        if isinstance(caller, Superadmin):
            return await self.store.payments.list()
        if not isinstance(caller, Staff):
            return []
        customers = await self.visible_customers(caller)
        try:
            return await self.store.payments.list_in("customer_id", [c.id for c in customers])
        except StorageError:
            logger.warning("Payment scope lookup failed for staff %s, returning nothing", caller.staff_id)
            return []

    # Single-row checks

    async def can_see_campaign(self, caller: Optional[Capability], campaign: Campaign) -> bool:
        if isinstance(caller, Superadmin):
            return True
        if not isinstance(caller, Staff):
            return False
        try:
            return campaign.id in await self._assigned_campaign_ids(caller.staff_id)
        except StorageError:
            return False

    async def can_see_lead(self, caller: Optional[Capability], lead: Lead) -> bool:
        if isinstance(caller, Superadmin):
            return True
        if not isinstance(caller, Staff):
            return False
        if lead.assigned_to == caller.staff_id:
            return True
        if lead.campaign_id is None:
            return False
        try:
            return lead.campaign_id in await self._assigned_campaign_ids(caller.staff_id)
        except StorageError:
            return False

    async def can_see_customer(self, caller: Optional[Capability], customer: Customer) -> bool:
        if isinstance(caller, Superadmin):
            return True
        if not isinstance(caller, Staff) or customer.lead_id is None:
            return False
        try:
            lead = await self.store.leads.get(customer.lead_id)
        except StorageError:
            return False
        return lead is not None and lead.assigned_to == caller.staff_id

    async def _assigned_campaign_ids(self, staff_id: uuid.UUID) -> Set[uuid.UUID]:
        assignments = await self.store.assignments.list({"staff_id": staff_id}, order_by="assigned_at")
        return {a.campaign_id for a in assignments}

    async def _assigned_lead_ids(self, staff_id: uuid.UUID) -> Set[uuid.UUID]:
        leads = await self.store.leads.list({"assigned_to": staff_id})
        return {lead.id for lead in leads}
