"""
Profile, staff and campaign assignment schemas.
"""
import uuid
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field


class ProfileResponse(BaseModel):
    """Profile details (never includes credentials)."""
    id: uuid.UUID
    email: str
    full_name: Optional[str] = None
    role: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """Self-service profile update. Email and role are not editable here."""
    full_name: Optional[str] = None


class StaffCreate(BaseModel):
    """Add a staff member."""
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "email": "agent@company.com",
                "password": "changeme123",
                "full_name": "Jane Agent"
            }
        }


class StaffUpdate(BaseModel):
    """Edit a staff member's name or email."""
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None


class AssignmentCreate(BaseModel):
    """Assign a campaign to a staff member."""
    campaign_id: uuid.UUID


class AssignmentResponse(BaseModel):
    """Campaign assignment."""
    id: uuid.UUID
    campaign_id: uuid.UUID
    staff_id: uuid.UUID
    assigned_by: Optional[uuid.UUID]
    assigned_at: datetime

    class Config:
        from_attributes = True
