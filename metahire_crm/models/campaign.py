"""
Campaign and campaign assignment models.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint

from metahire_crm.core.timeutils import UTCDateTime, utcnow


class Campaign(SQLModel, table=True):
    """
    Campaign entity - a named grouping of leads.
    Deleting a campaign deletes its leads and assignments.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # Basic info
    name: str = Field(index=True)
    description: Optional[str] = None
    status: str = Field(default="active", index=True)  # active, paused, completed

    created_by: Optional[uuid.UUID] = Field(default=None, foreign_key="profile.id", ondelete="SET NULL")

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class CampaignAssignment(SQLModel, table=True):
    """
    Grants a staff member visibility into a campaign's leads.
    A staff member is assigned to a campaign at most once.
    """
    __tablename__ = "campaign_assignment"
    __table_args__ = (UniqueConstraint("campaign_id", "staff_id", name="uq_campaign_assignment_pair"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    campaign_id: uuid.UUID = Field(foreign_key="campaign.id", index=True, ondelete="CASCADE")
    staff_id: uuid.UUID = Field(foreign_key="profile.id", index=True, ondelete="CASCADE")
    assigned_by: Optional[uuid.UUID] = Field(default=None, foreign_key="profile.id", ondelete="SET NULL")

    assigned_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
