import uuid
from datetime import timedelta
from decimal import Decimal

import pytest

from metahire_crm.core.exceptions import ConflictError
from metahire_crm.core.timeutils import as_utc, utcnow
from metahire_crm.models import LeadStatus
from metahire_crm.services.lead_transition import LeadTransitionEngine


async def test_deleting_campaign_removes_its_leads_and_assignments(store, seed):
    staff = await seed.staff()
    campaign = await seed.campaign()
    other = await seed.campaign("Other")
    await seed.assign(staff.id, campaign.id)
    doomed = await seed.lead("Doomed", campaign_id=campaign.id)
    kept = await seed.lead("Kept", campaign_id=other.id)

    assert await store.campaigns.delete(campaign.id)

    assert await store.leads.get(doomed.id) is None
    assert await store.leads.get(kept.id) is not None
    assert await store.assignments.count({"campaign_id": campaign.id}) == 0


async def test_deleting_lead_keeps_customer_and_drops_history(store, seed):
    admin = await seed.superadmin()
    lead = await seed.lead()
    result = await LeadTransitionEngine(store).transition(lead.id, LeadStatus.CLOSED_WON, admin.id)

    assert await store.leads.delete(lead.id)

    customer = await store.customers.get(result.customer.id)
    assert customer is not None
    assert customer.lead_id is None
    assert await store.history.count({"lead_id": lead.id}) == 0


async def test_deleting_customer_removes_payments(store, seed):
    admin = await seed.superadmin()
    lead = await seed.lead()
    result = await LeadTransitionEngine(store).transition(lead.id, LeadStatus.CLOSED_WON, admin.id)
    for amount in ("10.00", "20.00"):
        await store.payments.create({"customer_id": result.customer.id, "amount": Decimal(amount)})

    assert await store.customers.delete(result.customer.id)

    assert await store.payments.count({"customer_id": result.customer.id}) == 0


async def test_deleting_profile_nulls_references(store, seed):
    staff = await seed.staff()
    lead = await seed.lead(assigned_to=staff.id)

    assert await store.profiles.delete(staff.id)

    assert (await store.leads.get(lead.id)).assigned_to is None


async def test_duplicate_email_conflicts(store, seed):
    await seed.staff(email="same@example.com")

    with pytest.raises(ConflictError):
        await seed.staff(email="same@example.com")
    assert await store.profiles.count({"email": "same@example.com"}) == 1


async def test_duplicate_assignment_pair_conflicts(store, seed):
    staff = await seed.staff()
    campaign = await seed.campaign()
    staff_id, campaign_id = staff.id, campaign.id
    await seed.assign(staff_id, campaign_id)

    with pytest.raises(ConflictError):
        await seed.assign(staff_id, campaign_id)
    assert await store.assignments.count({"staff_id": staff_id}) == 1


async def test_reference_to_missing_row_conflicts(store, seed):
    with pytest.raises(ConflictError):
        await seed.lead(campaign_id=uuid.uuid4())
    assert await store.leads.count() == 0


async def test_create_many_is_all_or_nothing(store, seed):
    rows = [{"first_name": "Ok"}, {"first_name": "Broken", "campaign_id": uuid.uuid4()}]

    with pytest.raises(ConflictError):
        await store.leads.create_many(rows)
    assert await store.leads.count() == 0


async def test_update_that_conflicts_leaves_row_unchanged(store, seed):
    await seed.staff(email="taken@example.com")
    other = await seed.staff(email="free@example.com")
    other_id = other.id

    with pytest.raises(ConflictError):
        await store.profiles.update(other_id, {"email": "taken@example.com"})
    assert (await store.profiles.get(other_id)).email == "free@example.com"


async def test_list_filters_and_list_in(store, seed):
    campaign = await seed.campaign()
    first = await seed.lead("One", campaign_id=campaign.id)
    await seed.lead("Two", campaign_id=campaign.id, status=LeadStatus.QUALIFIED.value)
    third = await seed.lead("Three")

    qualified = await store.leads.list({"campaign_id": campaign.id, "status": LeadStatus.QUALIFIED.value})
    assert [lead.first_name for lead in qualified] == ["Two"]
    assert {lead.id for lead in await store.leads.list_in("id", [first.id, third.id])} == {first.id, third.id}
    assert await store.leads.list_in("id", []) == []


async def test_delete_where_requires_a_filter(store):
    with pytest.raises(ValueError):
        await store.assignments.delete_where({"staff_id": None})


async def test_timestamps_are_utc(store, seed):
    before = utcnow()
    lead = await seed.lead()

    updated = await store.leads.update(lead.id, {"company": "Initech"})

    assert as_utc(updated.created_at) >= before - timedelta(seconds=1)
    assert as_utc(updated.updated_at) >= as_utc(updated.created_at)
    assert as_utc(updated.updated_at) <= utcnow()
