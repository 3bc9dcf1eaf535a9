"""
Dashboard schemas.
"""
from typing import Dict, Optional
from pydantic import BaseModel


class DashboardStats(BaseModel):
    """Role-dependent dashboard counters; fields not relevant to the role stay null."""
    role: str

    # Superadmin
    total_staff: Optional[int] = None
    total_campaigns: Optional[int] = None
    total_leads: Optional[int] = None
    total_customers: Optional[int] = None

    # Staff
    my_leads: Optional[int] = None
    my_campaigns: Optional[int] = None
    new_leads: Optional[int] = None
    visible_leads: Optional[int] = None

    leads_by_status: Dict[str, int] = {}
