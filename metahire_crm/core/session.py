"""
Caller capabilities and the explicit per-request session.

Every scoped operation takes a capability instead of reading a role string:
`Superadmin` sees everything, `Staff` is scoped by campaign assignments and
direct lead assignment. Anything else resolves to nothing.
"""
import uuid
from dataclasses import dataclass
from typing import Optional, Union

from metahire_crm.core.exceptions import ForbiddenError
from metahire_crm.models.profile import Role


@dataclass(frozen=True)
class Superadmin:
    profile_id: uuid.UUID


@dataclass(frozen=True)
class Staff:
    staff_id: uuid.UUID

    @property
    def profile_id(self) -> uuid.UUID:
        return self.staff_id


Capability = Union[Superadmin, Staff]


def capability_for(profile_id: uuid.UUID, role: Optional[str]) -> Optional[Capability]:
    """Map a stored role onto a capability; unknown roles get none."""
    if role == Role.SUPERADMIN.value:
        return Superadmin(profile_id)
    if role == Role.STAFF.value:
        return Staff(profile_id)
    return None


@dataclass(frozen=True)
class CallerSession:
    """
    The authenticated caller for one request.
    Built from the bearer token and its AuthSession row; destroyed at logout.
    """
    session_id: uuid.UUID
    profile_id: uuid.UUID
    email: str
    full_name: Optional[str]
    capability: Optional[Capability]  # None for unknown roles: every scope resolves empty

    @property
    def is_superadmin(self) -> bool:
        return isinstance(self.capability, Superadmin)


def require_superadmin(caller: CallerSession) -> None:
    """Raise ForbiddenError unless the caller is a superadmin."""
    if not caller.is_superadmin:
        raise ForbiddenError("Superadmin access required")
