"""
Lead model and its status history.
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field

from metahire_crm.core.timeutils import UTCDateTime, utcnow


class LeadStatus(str, Enum):
    """Pipeline statuses. Any status may move to any other."""
    NEW = "new"
    CONTACTED = "contacted"
    INTERESTED = "interested"
    NOT_INTERESTED = "not_interested"
    POTENTIAL = "potential"
    NOT_ATTENDED = "not_attended"
    BUSY_CALL_BACK = "busy_call_back"
    PAY_LATER = "pay_later"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    CLOSED_WON = "closed_won"
    CLOSED_LOST = "closed_lost"


LEAD_STATUSES = tuple(s.value for s in LeadStatus)


class Lead(SQLModel, table=True):
    """
    Lead entity - a prospective contact in the sales pipeline.
    Optionally belongs to a campaign and is optionally assigned to a staff member.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    campaign_id: Optional[uuid.UUID] = Field(default=None, foreign_key="campaign.id", index=True, ondelete="CASCADE")

    # Basic info
    first_name: str = Field(index=True)
    last_name: str = ""

    # Contact info
    email: Optional[str] = Field(default=None, index=True)
    phone: Optional[str] = None
    company: Optional[str] = Field(default=None, index=True)
    position: Optional[str] = None

    status: str = Field(default=LeadStatus.NEW.value, index=True)
    notes: Optional[str] = None

    assigned_to: Optional[uuid.UUID] = Field(default=None, foreign_key="profile.id", index=True, ondelete="SET NULL")

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class LeadStatusHistory(SQLModel, table=True):
    """
    Append-only audit and comment log for a lead.
    A row with old_status == new_status is a comment, not a transition.
    """
    __tablename__ = "lead_status_history"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    lead_id: uuid.UUID = Field(foreign_key="lead.id", index=True, ondelete="CASCADE")

    old_status: Optional[str] = None
    new_status: str
    changed_by: Optional[uuid.UUID] = Field(default=None, foreign_key="profile.id", ondelete="SET NULL")
    notes: Optional[str] = None

    changed_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, index=True)
