"""
Staff service - staff accounts and campaign assignments.

Every operation here is superadmin-only.
"""
import logging
import uuid
from typing import List, Optional

from metahire_crm.core.exceptions import ConflictError, NotFoundError, ValidationError
from metahire_crm.core.session import CallerSession, require_superadmin
from metahire_crm.models import Profile, CampaignAssignment, Role
from metahire_crm.repositories.store import Store
from metahire_crm.services.auth_service import AuthService

logger = logging.getLogger(__name__)


class StaffService:
    """Service for staff administration."""

    def __init__(self, store: Store):
        self.store = store
        self.auth = AuthService(store)

    async def list_staff(self, caller: CallerSession, search: Optional[str] = None) -> List[Profile]:
        """Staff profiles, newest first, optionally matched on name or email."""
        require_superadmin(caller)
        staff = await self.store.profiles.list({"role": Role.STAFF.value})
        if search:
            needle = search.strip().lower()
            staff = [
                p for p in staff
                if needle in p.email.lower() or needle in (p.full_name or "").lower()
            ]
        return staff

    async def add_staff(
        self,
        caller: CallerSession,
        email: str,
        password: str,
        full_name: Optional[str] = None
    ) -> Profile:
        require_superadmin(caller)
        profile = await self.auth.create_profile(email, password, full_name, role=Role.STAFF)
        logger.info("Superadmin %s added staff %s", caller.profile_id, profile.id)
        return profile

    async def edit_staff(
        self,
        caller: CallerSession,
        staff_id: uuid.UUID,
        full_name: Optional[str] = None,
        email: Optional[str] = None
    ) -> Profile:
        """Change name or email. Role is not editable here."""
        require_superadmin(caller)
        await self._get_staff(staff_id)

        update_data = {}
        if full_name is not None:
            update_data["full_name"] = full_name
        if email is not None:
            email = email.strip().lower()
            other = await self.store.profiles.get_by_field("email", email)
            if other and other.id != staff_id:
                raise ConflictError("Profile", "email", email)
            update_data["email"] = email

        profile = await self.store.profiles.update(staff_id, update_data)
        if not profile:
            raise NotFoundError("Staff", str(staff_id))
        return profile

    async def remove_staff(self, caller: CallerSession, staff_id: uuid.UUID) -> None:
        """Delete the staff member's assignments, then the profile."""
        require_superadmin(caller)
        profile = await self.store.profiles.get(staff_id)
        if not profile:
            raise NotFoundError("Staff", str(staff_id))
        if profile.role == Role.SUPERADMIN.value:
            raise ValidationError("A superadmin cannot be removed as staff", field="staff_id")

        removed = await self.store.assignments.delete_where({"staff_id": staff_id})
        await self.store.profiles.delete(staff_id)
        logger.info("Removed staff %s and %d campaign assignment(s)", staff_id, removed)

    async def list_assignments(self, caller: CallerSession, staff_id: uuid.UUID) -> List[CampaignAssignment]:
        require_superadmin(caller)
        await self._get_staff(staff_id)
        return await self.store.assignments.list({"staff_id": staff_id}, order_by="assigned_at")

    async def assign_campaign(
        self,
        caller: CallerSession,
        staff_id: uuid.UUID,
        campaign_id: uuid.UUID
    ) -> CampaignAssignment:
        """Assign a campaign; an existing (campaign, staff) pair is a conflict."""
        require_superadmin(caller)
        await self._get_staff(staff_id)
        if not await self.store.campaigns.exists(campaign_id):
            raise NotFoundError("Campaign", str(campaign_id))

        existing = await self.store.assignments.list({"staff_id": staff_id, "campaign_id": campaign_id})
        if existing:
            raise ConflictError("Campaign assignment", message="Campaign is already assigned to this staff member")

        # a concurrent duplicate is rejected by the unique (campaign_id, staff_id) constraint
        assignment = await self.store.assignments.create({
            "campaign_id": campaign_id,
            "staff_id": staff_id,
            "assigned_by": caller.profile_id,
        })
        logger.info("Campaign %s assigned to staff %s", campaign_id, staff_id)
        return assignment

    async def unassign_campaign(self, caller: CallerSession, assignment_id: uuid.UUID) -> None:
        require_superadmin(caller)
        if not await self.store.assignments.delete(assignment_id):
            raise NotFoundError("Campaign assignment", str(assignment_id))
        logger.info("Campaign assignment %s removed", assignment_id)

    async def _get_staff(self, staff_id: uuid.UUID) -> Profile:
        profile = await self.store.profiles.get(staff_id)
        if not profile or profile.role != Role.STAFF.value:
            raise NotFoundError("Staff", str(staff_id))
        return profile
