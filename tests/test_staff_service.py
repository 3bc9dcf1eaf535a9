import uuid

import pytest

from metahire_crm.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from metahire_crm.models import Role
from metahire_crm.services.staff_service import StaffService


@pytest.fixture()
async def admin(seed):
    return seed.caller(await seed.superadmin())


async def test_add_staff_creates_staff_profile(store, admin):
    profile = await StaffService(store).add_staff(admin, "New.Agent@Example.com", "changeme123", "New Agent")

    assert profile.role == Role.STAFF.value
    assert profile.email == "new.agent@example.com"
    assert profile.password_hash != "changeme123"


async def test_add_staff_with_taken_email_conflicts(store, seed, admin):
    await seed.staff(email="agent@example.com")

    with pytest.raises(ConflictError):
        await StaffService(store).add_staff(admin, "agent@example.com", "changeme123")


async def test_staff_cannot_administer(store, seed):
    staff = seed.caller(await seed.staff())
    service = StaffService(store)

    with pytest.raises(ForbiddenError):
        await service.add_staff(staff, "x@example.com", "changeme123")
    with pytest.raises(ForbiddenError):
        await service.list_staff(staff)
    with pytest.raises(ForbiddenError):
        await service.remove_staff(staff, staff.profile_id)


async def test_edit_staff_updates_name_and_email_only(store, seed, admin):
    staff = await seed.staff(full_name="Old Name")

    updated = await StaffService(store).edit_staff(admin, staff.id, full_name="New Name", email="new@example.com")

    assert updated.full_name == "New Name"
    assert updated.email == "new@example.com"
    assert updated.role == Role.STAFF.value


async def test_edit_staff_email_conflict(store, seed, admin):
    await seed.staff(email="taken@example.com")
    staff = await seed.staff()

    with pytest.raises(ConflictError):
        await StaffService(store).edit_staff(admin, staff.id, email="taken@example.com")


async def test_edit_unknown_staff(store, admin):
    with pytest.raises(NotFoundError):
        await StaffService(store).edit_staff(admin, uuid.uuid4(), full_name="Nobody")


async def test_remove_staff_removes_assignments_first(store, seed, admin):
    staff = await seed.staff()
    for name in ("A", "B"):
        campaign = await seed.campaign(name)
        await seed.assign(staff.id, campaign.id)

    await StaffService(store).remove_staff(admin, staff.id)

    assert await store.profiles.get(staff.id) is None
    assert await store.assignments.count({"staff_id": staff.id}) == 0


async def test_superadmin_cannot_be_removed_as_staff(store, admin):
    with pytest.raises(ValidationError):
        await StaffService(store).remove_staff(admin, admin.profile_id)
    assert await store.profiles.get(admin.profile_id) is not None


async def test_assign_same_pair_twice_conflicts(store, seed, admin):
    staff = await seed.staff()
    campaign = await seed.campaign()
    service = StaffService(store)

    await service.assign_campaign(admin, staff.id, campaign.id)
    with pytest.raises(ConflictError):
        await service.assign_campaign(admin, staff.id, campaign.id)

    assert len(await service.list_assignments(admin, staff.id)) == 1


async def test_assign_records_who_assigned(store, seed, admin):
    staff = await seed.staff()
    campaign = await seed.campaign()

    assignment = await StaffService(store).assign_campaign(admin, staff.id, campaign.id)

    assert assignment.assigned_by == admin.profile_id


async def test_assign_unknown_campaign_or_staff(store, seed, admin):
    staff = await seed.staff()
    campaign = await seed.campaign()
    service = StaffService(store)

    with pytest.raises(NotFoundError):
        await service.assign_campaign(admin, staff.id, uuid.uuid4())
    with pytest.raises(NotFoundError):
        await service.assign_campaign(admin, uuid.uuid4(), campaign.id)


async def test_unassign(store, seed, admin):
    staff = await seed.staff()
    campaign = await seed.campaign()
    service = StaffService(store)
    assignment = await service.assign_campaign(admin, staff.id, campaign.id)

    await service.unassign_campaign(admin, assignment.id)

    assert await service.list_assignments(admin, staff.id) == []
    with pytest.raises(NotFoundError):
        await service.unassign_campaign(admin, assignment.id)


async def test_list_staff_search(store, seed, admin):
    await seed.staff(full_name="Maria Lopez", email="maria@example.com")
    await seed.staff(full_name="Omar Haddad", email="omar@example.com")

    service = StaffService(store)
    everyone = await service.list_staff(admin)
    found = await service.list_staff(admin, search="LOPEZ")
    by_email = await service.list_staff(admin, search="omar@")

    assert len(everyone) == 2
    assert [p.full_name for p in found] == ["Maria Lopez"]
    assert [p.full_name for p in by_email] == ["Omar Haddad"]
