"""
Lead schemas.
"""
import uuid
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from metahire_crm.models.lead import LeadStatus
from metahire_crm.schemas.customer import CustomerResponse


class LeadCreate(BaseModel):
    """Create a new lead."""
    first_name: str = Field(min_length=1)
    last_name: str = ""
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    notes: Optional[str] = None
    campaign_id: Optional[uuid.UUID] = None
    assigned_to: Optional[uuid.UUID] = None

    class Config:
        json_schema_extra = {
            "example": {
                "first_name": "John",
                "last_name": "Doe",
                "email": "john@techcorp.com",
                "phone": "+971 50 000 0000",
                "company": "TechCorp"
            }
        }


class LeadUpdate(BaseModel):
    """
    Update an existing lead.
    Status is not here: it changes only through the status endpoint.
    """
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    notes: Optional[str] = None
    campaign_id: Optional[uuid.UUID] = None
    assigned_to: Optional[uuid.UUID] = None


class LeadResponse(BaseModel):
    """Lead response."""
    id: uuid.UUID
    campaign_id: Optional[uuid.UUID]
    first_name: str
    last_name: str
    email: Optional[str]
    phone: Optional[str]
    company: Optional[str]
    position: Optional[str]
    status: str
    notes: Optional[str]
    assigned_to: Optional[uuid.UUID]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LeadFilter(BaseModel):
    """Lead filtering options."""
    status: Optional[LeadStatus] = None
    campaign_id: Optional[uuid.UUID] = None
    assigned_to: Optional[uuid.UUID] = None
    search: Optional[str] = None  # Search in name, email, company, phone


class LeadStatusUpdate(BaseModel):
    """Move a lead to another pipeline status."""
    status: LeadStatus
    notes: Optional[str] = None


class CommentCreate(BaseModel):
    """Free-text comment on a lead."""
    text: str


class LeadHistoryResponse(BaseModel):
    """One status change or comment."""
    id: uuid.UUID
    lead_id: uuid.UUID
    old_status: Optional[str]
    new_status: str
    changed_by: Optional[uuid.UUID]
    changed_at: datetime
    notes: Optional[str]

    class Config:
        from_attributes = True


class LeadTransitionResponse(BaseModel):
    """Result of a status change."""
    lead: LeadResponse
    history: LeadHistoryResponse
    customer: Optional[CustomerResponse] = None

    class Config:
        from_attributes = True


class LeadImportResponse(BaseModel):
    """CSV import result."""
    total_rows: int
    imported: int
    skipped: int
    batches_committed: int
    failed_batch: Optional[int] = None
    error: Optional[str] = None
    errors: List[dict] = []


class LeadBulkDeleteRequest(BaseModel):
    """Delete several leads at once."""
    lead_ids: List[uuid.UUID] = Field(min_length=1)
