"""
Lead service - lead management, pipeline moves and CSV import.
"""
import csv
import io
import logging
import uuid
from typing import Optional, List

from metahire_crm.config import settings
from metahire_crm.core.exceptions import CRMException, ForbiddenError, NotFoundError
from metahire_crm.core.pagination import paginate
from metahire_crm.core.session import CallerSession, require_superadmin
from metahire_crm.models.lead import Lead, LeadStatus, LeadStatusHistory
from metahire_crm.repositories.store import Store
from metahire_crm.schemas.lead import LeadCreate, LeadUpdate, LeadFilter, LeadImportResponse
from metahire_crm.services.access_scope import AccessScopeResolver
from metahire_crm.services.lead_transition import LeadTransitionEngine, TransitionResult

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("first_name", "last_name", "email", "company", "phone")


class LeadService:
    """Service for lead operations."""

    def __init__(self, store: Store):
        self.store = store
        self.scope = AccessScopeResolver(store)
        self.engine = LeadTransitionEngine(store)

    async def create(self, caller: CallerSession, lead_data: LeadCreate) -> Lead:
        """Create a new lead in status `new`."""
        require_superadmin(caller)
        await self._check_references(lead_data.campaign_id, lead_data.assigned_to)

        data = lead_data.model_dump()
        data["status"] = LeadStatus.NEW.value
        lead = await self.store.leads.create(data)
        logger.info("Lead %s created by %s", lead.id, caller.profile_id)
        return lead

    async def get(self, caller: CallerSession, lead_id: uuid.UUID) -> Lead:
        """Get a lead by ID. Leads outside the caller's scope do not exist."""
        lead = await self.store.leads.get(lead_id)
        if not lead or not await self.scope.can_see_lead(caller.capability, lead):
            raise NotFoundError("Lead", str(lead_id))
        return lead

    async def list(
        self,
        caller: CallerSession,
        filters: Optional[LeadFilter] = None,
        page: int = 1,
        limit: int = 20
    ) -> dict:
        """List visible leads with filtering and pagination."""
        leads = await self.scope.visible_leads(caller.capability)
        if filters:
            leads = [lead for lead in leads if self._matches(lead, filters)]
        return paginate(leads, page, limit)

    async def update(
        self,
        caller: CallerSession,
        lead_id: uuid.UUID,
        lead_data: LeadUpdate
    ) -> Lead:
        """Update contact fields, campaign or assignee. Status is not touched here."""
        await self.get(caller, lead_id)

        update_data = lead_data.model_dump(exclude_unset=True)
        if "assigned_to" in update_data and not caller.is_superadmin:
            raise ForbiddenError("Only a superadmin can reassign leads")
        if "first_name" in update_data and update_data["first_name"] is None:
            del update_data["first_name"]
        if "last_name" in update_data and update_data["last_name"] is None:
            update_data["last_name"] = ""

        campaign_id = update_data.get("campaign_id")
        if "campaign_id" in update_data and campaign_id is None and not caller.is_superadmin:
            raise ForbiddenError("Only a superadmin can remove a lead from its campaign")
        if campaign_id is not None and not caller.is_superadmin:
            campaign = await self.store.campaigns.get(campaign_id)
            if not campaign or not await self.scope.can_see_campaign(caller.capability, campaign):
                raise NotFoundError("Campaign", str(campaign_id))
        await self._check_references(campaign_id, update_data.get("assigned_to"))

        lead = await self.store.leads.update(lead_id, update_data)
        if not lead:
            raise NotFoundError("Lead", str(lead_id))
        return lead

    async def delete(self, caller: CallerSession, lead_id: uuid.UUID) -> None:
        """Delete a lead; its history goes with it, its customer keeps existing."""
        require_superadmin(caller)
        if not await self.store.leads.delete(lead_id):
            raise NotFoundError("Lead", str(lead_id))
        logger.info("Lead %s deleted by %s", lead_id, caller.profile_id)

    async def bulk_delete(self, caller: CallerSession, lead_ids: List[uuid.UUID]) -> int:
        require_superadmin(caller)
        deleted = await self.store.leads.delete_in("id", set(lead_ids))
        logger.info("Bulk delete removed %d of %d lead(s)", deleted, len(set(lead_ids)))
        return deleted

    # Pipeline

    async def change_status(
        self,
        caller: CallerSession,
        lead_id: uuid.UUID,
        new_status: str,
        notes: Optional[str] = None
    ) -> TransitionResult:
        await self.get(caller, lead_id)
        return await self.engine.transition(lead_id, new_status, caller.profile_id, notes)

    async def add_comment(self, caller: CallerSession, lead_id: uuid.UUID, text: str) -> LeadStatusHistory:
        await self.get(caller, lead_id)
        return await self.engine.add_comment(lead_id, caller.profile_id, text)

    async def history(self, caller: CallerSession, lead_id: uuid.UUID) -> List[LeadStatusHistory]:
        await self.get(caller, lead_id)
        return await self.engine.history(lead_id)

    # Import

    async def import_csv(
        self,
        caller: CallerSession,
        csv_content: str,
        campaign_id: Optional[uuid.UUID] = None,
        assigned_to: Optional[uuid.UUID] = None
    ) -> LeadImportResponse:
        """
        Import leads from CSV content.

        Columns: first name, second name, phone label, phone. The first line is
        a header. Rows go in as batches of IMPORT_BATCH_SIZE; the first batch
        that fails stops the import and earlier batches stay saved.
        """
        require_superadmin(caller)
        await self._check_references(campaign_id, assigned_to)

        rows, errors = self._parse_csv(csv_content)
        for error in errors:
            logger.debug("Skipping CSV row %s: %s", error["row"], error["error"])

        batch_size = max(settings.IMPORT_BATCH_SIZE, 1)
        imported = 0
        batches_committed = 0
        failed_batch = None
        failure = None

        for index, start in enumerate(range(0, len(rows), batch_size), start=1):
            batch = [
                {**row, "campaign_id": campaign_id, "assigned_to": assigned_to, "status": LeadStatus.NEW.value}
                for row in rows[start:start + batch_size]
            ]
            try:
                created = await self.store.leads.create_many(batch)
            except CRMException as e:
                failed_batch, failure = index, e.message
                logger.error("CSV import stopped at batch %d: %s", index, e.message)
                break
            imported += len(created)
            batches_committed += 1

        logger.info(
            "CSV import by %s: %d imported, %d skipped, %d batch(es) committed",
            caller.profile_id, imported, len(errors), batches_committed
        )
        return LeadImportResponse(
            total_rows=len(rows) + len(errors),
            imported=imported,
            skipped=len(errors),
            batches_committed=batches_committed,
            failed_batch=failed_batch,
            error=failure,
            errors=errors,
        )

    @staticmethod
    def _parse_csv(csv_content: str):
        rows, errors = [], []
        reader = csv.reader(io.StringIO(csv_content))
        next(reader, None)  # header

        for line_no, record in enumerate(reader, start=2):
            cells = [cell.strip() for cell in record]
            if not any(cells):
                continue
            first_name, last_name, phone_label, phone = (cells + [""] * 4)[:4]
            if not first_name:
                errors.append({"row": line_no, "error": "First name is required"})
                continue

            notes = None
            if phone and phone_label:
                notes = f"{phone_label}: {phone}"
            rows.append({
                "first_name": first_name,
                "last_name": last_name,
                "phone": phone or None,
                "notes": notes,
            })
        return rows, errors

    @staticmethod
    def _matches(lead: Lead, filters: LeadFilter) -> bool:
        if filters.status is not None and lead.status != filters.status.value:
            return False
        if filters.campaign_id is not None and lead.campaign_id != filters.campaign_id:
            return False
        if filters.assigned_to is not None and lead.assigned_to != filters.assigned_to:
            return False
        if filters.search:
            needle = filters.search.strip().lower()
            haystack = " ".join(getattr(lead, field) or "" for field in SEARCH_FIELDS).lower()
            return needle in haystack
        return True

    async def _check_references(
        self,
        campaign_id: Optional[uuid.UUID],
        assigned_to: Optional[uuid.UUID]
    ) -> None:
        if campaign_id is not None and not await self.store.campaigns.exists(campaign_id):
            raise NotFoundError("Campaign", str(campaign_id))
        if assigned_to is not None and not await self.store.profiles.exists(assigned_to):
            raise NotFoundError("Profile", str(assigned_to))
