# Models package - CRM database models
from metahire_crm.models.profile import Profile, AuthSession, Role
from metahire_crm.models.campaign import Campaign, CampaignAssignment
from metahire_crm.models.lead import Lead, LeadStatusHistory, LeadStatus, LEAD_STATUSES
from metahire_crm.models.customer import Customer, Payment, PaymentStatus
