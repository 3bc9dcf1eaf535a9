"""
Lead transition engine - status changes, comments and conversion to customer.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from metahire_crm.core.exceptions import (
    CRMException, NotFoundError, PartialFailureError, ValidationError
)
from metahire_crm.core.timeutils import utcnow
from metahire_crm.models import Customer, Lead, LeadStatusHistory, LeadStatus, LEAD_STATUSES
from metahire_crm.repositories.store import Store

logger = logging.getLogger(__name__)

# Contact fields carried from a lead onto its customer
CUSTOMER_FIELDS = ("first_name", "last_name", "email", "phone", "company", "position", "notes")


@dataclass
class TransitionResult:
    lead: Lead
    history: LeadStatusHistory
    customer: Optional[Customer] = None


class LeadTransitionEngine:
    """
    Applies status changes to leads.

    Every change updates the lead, then appends a history row. Entering
    closed_won also creates a Customer. That second write is not atomic with
    the first: if it fails the lead stays closed_won and PartialFailureError
    is raised with the updated lead.
    """

    def __init__(self, store: Store):
        self.store = store

    async def transition(
        self,
        lead_id: uuid.UUID,
        new_status: str,
        acting_profile_id: uuid.UUID,
        notes: Optional[str] = None
    ) -> TransitionResult:
        new_status = self._validate_status(new_status)
        lead = await self._get_lead(lead_id)
        await self._require_profile(acting_profile_id)

        now = utcnow()
        old_status = lead.status
        lead = await self.store.leads.update(lead.id, {"status": new_status, "updated_at": now})
        if lead is None:
            raise NotFoundError("Lead", str(lead_id))
        try:
            history = await self.store.history.create({
                "lead_id": lead_id,
                "old_status": old_status,
                "new_status": new_status,
                "changed_by": acting_profile_id,
                "changed_at": now,
                "notes": notes,
            })
        except CRMException:
            # no status change without its history row
            await self.store.leads.update(lead_id, {"status": old_status})
            raise

        logger.info("Lead %s moved %s -> %s by %s", lead_id, old_status, new_status, acting_profile_id)

        if new_status != LeadStatus.CLOSED_WON.value:
            return TransitionResult(lead=lead, history=history)

        try:
            customer = await self.store.customers.create(self._customer_data(lead, acting_profile_id, now))
        except CRMException as e:
            logger.error("Lead %s is closed_won but customer creation failed: %s", lead_id, e.message)
            # the failed write may have rolled the session back; reload what was committed
            lead = await self.store.leads.get(lead_id) or lead
            raise PartialFailureError(
                "Lead status updated but failed to create customer record",
                lead=lead,
                cause=e,
            ) from e

        logger.info("Lead %s converted to customer %s", lead_id, customer.id)
        return TransitionResult(lead=lead, history=history, customer=customer)

    async def add_comment(
        self,
        lead_id: uuid.UUID,
        acting_profile_id: uuid.UUID,
        text: Optional[str]
    ) -> LeadStatusHistory:
        """Append a comment; it records the current status as both old and new."""
        if text is None or not text.strip():
            raise ValidationError("Comment text is required", field="notes")
        lead = await self._get_lead(lead_id)
        await self._require_profile(acting_profile_id)

        return await self.store.history.create({
            "lead_id": lead.id,
            "old_status": lead.status,
            "new_status": lead.status,
            "changed_by": acting_profile_id,
            "notes": text.strip(),
        })

    async def history(self, lead_id: uuid.UUID) -> List[LeadStatusHistory]:
        await self._get_lead(lead_id)
        return await self.store.history.list({"lead_id": lead_id}, order_by="changed_at")

    @staticmethod
    def _validate_status(status) -> str:
        value = status.value if isinstance(status, LeadStatus) else status
        if value not in LEAD_STATUSES:
            raise ValidationError(
                f"'{value}' is not a lead status; expected one of {', '.join(LEAD_STATUSES)}",
                field="status"
            )
        return value

    async def _get_lead(self, lead_id: uuid.UUID) -> Lead:
        lead = await self.store.leads.get(lead_id)
        if not lead:
            raise NotFoundError("Lead", str(lead_id))
        return lead

    async def _require_profile(self, profile_id: uuid.UUID) -> None:
        if not await self.store.profiles.exists(profile_id):
            raise NotFoundError("Profile", str(profile_id))

    @staticmethod
    def _customer_data(lead: Lead, acting_profile_id: uuid.UUID, now: datetime) -> dict:
        data = {field: getattr(lead, field) for field in CUSTOMER_FIELDS}
        data.update({
            "lead_id": lead.id,
            "converted_by": acting_profile_id,
            "converted_at": now,
        })
        return data
