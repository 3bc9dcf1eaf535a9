"""
Entity store - one repository per table, behind a backend-neutral interface.
"""
from abc import ABC

from sqlmodel.ext.asyncio.session import AsyncSession

from metahire_crm.models import (
    Profile, AuthSession, Campaign, CampaignAssignment,
    Lead, LeadStatusHistory, Customer, Payment
)
from metahire_crm.repositories.base import Repository
from metahire_crm.repositories.profile_repo import ProfileRepository, AuthSessionRepository
from metahire_crm.repositories.campaign_repo import CampaignRepository, CampaignAssignmentRepository
from metahire_crm.repositories.lead_repo import LeadRepository, LeadStatusHistoryRepository
from metahire_crm.repositories.customer_repo import CustomerRepository, PaymentRepository


class Store(ABC):
    """The set of repositories a request works against."""

    profiles: Repository[Profile]
    sessions: Repository[AuthSession]
    campaigns: Repository[Campaign]
    assignments: Repository[CampaignAssignment]
    leads: Repository[Lead]
    history: Repository[LeadStatusHistory]
    customers: Repository[Customer]
    payments: Repository[Payment]


class SQLStore(Store):
    """Store backed by one async SQLModel session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.profiles = ProfileRepository(session)
        self.sessions = AuthSessionRepository(session)
        self.campaigns = CampaignRepository(session)
        self.assignments = CampaignAssignmentRepository(session)
        self.leads = LeadRepository(session)
        self.history = LeadStatusHistoryRepository(session)
        self.customers = CustomerRepository(session)
        self.payments = PaymentRepository(session)
