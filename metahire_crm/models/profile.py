"""
Profile model - one per authenticated identity.
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field

from metahire_crm.core.timeutils import UTCDateTime, utcnow


class Role(str, Enum):
    SUPERADMIN = "superadmin"
    STAFF = "staff"


class Profile(SQLModel, table=True):
    """
    User profile with role and credentials.
    Role is set at creation and is not editable through the staff surface.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # Auth
    email: str = Field(unique=True, index=True)
    password_hash: str

    # Profile
    full_name: Optional[str] = None
    role: str = Field(default=Role.STAFF.value, index=True)  # superadmin, staff

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class AuthSession(SQLModel, table=True):
    """
    Server-side record of a login session.
    The access token's jti names the row; logout revokes it.
    """
    __tablename__ = "auth_session"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    profile_id: uuid.UUID = Field(foreign_key="profile.id", index=True, ondelete="CASCADE")
    jti: str = Field(unique=True, index=True)

    # Status
    revoked_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    expires_at: datetime = Field(sa_type=UTCDateTime)
