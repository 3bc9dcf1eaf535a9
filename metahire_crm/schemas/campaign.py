"""
Campaign schemas.
"""
import uuid
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class CampaignCreate(BaseModel):
    """Create a new campaign."""
    name: str = Field(min_length=1)
    description: Optional[str] = None
    status: str = "active"

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Spring Open House",
                "description": "Walk-in leads from the April event"
            }
        }


class CampaignUpdate(BaseModel):
    """Update an existing campaign."""
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[str] = None


class CampaignResponse(BaseModel):
    """Campaign response."""
    id: uuid.UUID
    name: str
    description: Optional[str]
    status: str
    created_by: Optional[uuid.UUID]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
