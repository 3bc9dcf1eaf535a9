import uuid

import pytest
from sqlmodel.ext.asyncio.session import AsyncSession

from metahire_crm.api import deps
from metahire_crm.config import settings
from metahire_crm.core.exceptions import StorageError
from metahire_crm.models import Role
from metahire_crm.repositories.customer_repo import CustomerRepository
from metahire_crm.repositories.memory import MemoryStore
from metahire_crm.repositories.store import SQLStore
from metahire_crm.services.auth_service import AuthService

PASSWORD = "changeme123"


async def _create_profile(engine, email: str, role: Role):
    async with AsyncSession(engine, expire_on_commit=False) as session:
        return await AuthService(SQLStore(session)).create_profile(email, PASSWORD, email.split("@")[0], role=role)


async def _login(client, email: str) -> dict:
    response = await client.post("/api/auth/login", data={"username": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
async def admin_headers(engine, client):
    await _create_profile(engine, "root@example.com", Role.SUPERADMIN)
    return await _login(client, "root@example.com")


@pytest.fixture()
async def staff(engine, client):
    profile = await _create_profile(engine, "agent@example.com", Role.STAFF)
    return {"id": str(profile.id), "headers": await _login(client, "agent@example.com")}


async def _campaign(client, headers, name="Spring Open House") -> dict:
    response = await client.post("/api/campaigns/", json={"name": name}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def _lead(client, headers, **fields) -> dict:
    response = await client.post("/api/leads/", json={"first_name": "Ada", **fields}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_register_login_me_logout(client):
    response = await client.post(
        "/api/auth/register",
        json={"email": "new@example.com", "password": PASSWORD, "full_name": "New Agent"},
    )
    assert response.status_code == 201
    assert response.json()["role"] == "staff"
    assert "password_hash" not in response.json()

    headers = await _login(client, "new@example.com")
    me = await client.get("/api/profiles/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["email"] == "new@example.com"

    assert (await client.post("/api/auth/logout", headers=headers)).status_code == 200
    after = await client.get("/api/profiles/me", headers=headers)
    assert after.status_code == 401
    assert after.headers["www-authenticate"] == "Bearer"


async def test_json_login_and_bad_credentials(client, staff):
    ok = await client.post("/api/auth/login/json", json={"email": "agent@example.com", "password": PASSWORD})
    bad = await client.post("/api/auth/login/json", json={"email": "agent@example.com", "password": "nope"})

    assert ok.status_code == 200
    assert bad.status_code == 401


async def test_requests_without_token_are_rejected(client):
    assert (await client.get("/api/leads/")).status_code == 401


async def test_staff_cannot_create_campaigns(client, staff):
    response = await client.post("/api/campaigns/", json={"name": "Mine"}, headers=staff["headers"])

    assert response.status_code == 403


async def test_conversion_visibility_end_to_end(client, admin_headers, staff):
    campaign = await _campaign(client, admin_headers)
    assigned = await client.post(
        f"/api/staff/{staff['id']}/assignments", json={"campaign_id": campaign["id"]}, headers=admin_headers
    )
    assert assigned.status_code == 201
    lead = await _lead(client, admin_headers, campaign_id=campaign["id"])

    visible = await client.get("/api/leads/", headers=staff["headers"])
    assert [item["id"] for item in visible.json()["items"]] == [lead["id"]]

    moved = await client.post(
        f"/api/leads/{lead['id']}/status", json={"status": "closed_won", "notes": "signed"}, headers=staff["headers"]
    )
    assert moved.status_code == 200, moved.text
    body = moved.json()
    assert body["lead"]["status"] == "closed_won"
    assert body["history"]["old_status"] == "new"
    assert body["customer"]["lead_id"] == lead["id"]

    staff_customers = await client.get("/api/customers/", headers=staff["headers"])
    admin_customers = await client.get("/api/customers/", headers=admin_headers)
    assert staff_customers.json() == []
    assert [c["id"] for c in admin_customers.json()] == [body["customer"]["id"]]


async def test_duplicate_assignment_is_conflict(client, admin_headers, staff):
    campaign = await _campaign(client, admin_headers)
    url = f"/api/staff/{staff['id']}/assignments"

    first = await client.post(url, json={"campaign_id": campaign["id"]}, headers=admin_headers)
    second = await client.post(url, json={"campaign_id": campaign["id"]}, headers=admin_headers)

    assert first.status_code == 201
    assert second.status_code == 409
    assert len((await client.get(url, headers=admin_headers)).json()) == 1


async def test_unknown_status_is_rejected(client, admin_headers):
    lead = await _lead(client, admin_headers)

    response = await client.post(f"/api/leads/{lead['id']}/status", json={"status": "archived"}, headers=admin_headers)

    assert response.status_code == 422
    assert (await client.get(f"/api/leads/{lead['id']}", headers=admin_headers)).json()["status"] == "new"


async def test_hidden_lead_is_not_found(client, admin_headers, staff):
    lead = await _lead(client, admin_headers)

    assert (await client.get(f"/api/leads/{lead['id']}", headers=staff["headers"])).status_code == 404
    assert (await client.get(f"/api/leads/{uuid.uuid4()}", headers=admin_headers)).status_code == 404


async def test_failed_conversion_returns_multi_status(client, admin_headers, monkeypatch):
    lead = await _lead(client, admin_headers)

    async def broken_create(self, obj_in):
        raise StorageError("customer table unavailable")

    monkeypatch.setattr(CustomerRepository, "create", broken_create)
    response = await client.post(f"/api/leads/{lead['id']}/status", json={"status": "closed_won"}, headers=admin_headers)

    assert response.status_code == 207
    assert response.json()["lead"]["status"] == "closed_won"
    assert "customer" in response.json()["detail"]


async def test_comments_and_history(client, admin_headers):
    lead = await _lead(client, admin_headers)

    empty = await client.post(f"/api/leads/{lead['id']}/comments", json={"text": "  "}, headers=admin_headers)
    added = await client.post(f"/api/leads/{lead['id']}/comments", json={"text": "called back"}, headers=admin_headers)
    history = await client.get(f"/api/leads/{lead['id']}/history", headers=admin_headers)

    assert empty.status_code == 422
    assert added.status_code == 201
    assert [(h["old_status"], h["new_status"], h["notes"]) for h in history.json()] == [("new", "new", "called back")]


async def test_csv_import(client, admin_headers):
    campaign = await _campaign(client, admin_headers)
    content = "First Name,Second Name,Phone Label,Phone\nAda,Lovelace,Mobile,+971500000001\nGrace,Hopper,,\n"

    response = await client.post(
        "/api/leads/import",
        params={"campaign_id": campaign["id"]},
        files={"file": ("leads.csv", content.encode(), "text/csv")},
        headers=admin_headers,
    )

    assert response.status_code == 200, response.text
    assert response.json()["imported"] == 2
    listed = await client.get("/api/leads/", params={"campaign_id": campaign["id"]}, headers=admin_headers)
    assert listed.json()["total"] == 2


async def test_csv_import_rejects_non_utf8(client, admin_headers):
    content = "First Name,Second Name,Phone Label,Phone\nJos\xe9,,,\n".encode("latin-1") + b"\xff"

    response = await client.post(
        "/api/leads/import",
        files={"file": ("leads.csv", content, "text/csv")},
        headers=admin_headers,
    )

    assert response.status_code == 422
    assert "UTF-8" in response.json()["detail"]
    assert (await client.get("/api/leads/", headers=admin_headers)).json()["total"] == 0


async def test_bulk_delete(client, admin_headers):
    ids = [(await _lead(client, admin_headers, first_name=name))["id"] for name in ("A", "B")]

    response = await client.post("/api/leads/bulk-delete", json={"lead_ids": ids}, headers=admin_headers)

    assert response.json() == {"deleted": 2}
    assert (await client.get("/api/leads/", headers=admin_headers)).json()["total"] == 0


async def test_payments_and_summary(client, admin_headers):
    lead = await _lead(client, admin_headers)
    moved = await client.post(f"/api/leads/{lead['id']}/status", json={"status": "closed_won"}, headers=admin_headers)
    customer_id = moved.json()["customer"]["id"]

    created = await client.post(
        "/api/payments/", json={"customer_id": customer_id, "amount": "120.00", "status": "overdue"}, headers=admin_headers
    )
    invalid = await client.post(
        "/api/payments/", json={"customer_id": customer_id, "amount": "-5", "currency": "usd"}, headers=admin_headers
    )
    summary = await client.get(f"/api/customers/{customer_id}/payment-summary", headers=admin_headers)

    assert created.status_code == 201, created.text
    assert created.json()["currency"] == "USD"
    assert invalid.status_code == 422
    assert summary.json()["payment_count"] == 1
    assert float(summary.json()["totals"]["USD"]["outstanding"]) == 120.0


async def test_dashboard_depends_on_role(client, admin_headers, staff):
    admin_stats = await client.get("/api/dashboard/stats", headers=admin_headers)
    staff_stats = await client.get("/api/dashboard/stats", headers=staff["headers"])

    assert admin_stats.json()["role"] == "superadmin"
    assert admin_stats.json()["total_staff"] == 1
    assert staff_stats.json()["role"] == "staff"
    assert staff_stats.json()["my_leads"] == 0


async def test_memory_backend_opens_no_database_session(monkeypatch):
    def no_sessions():
        raise AssertionError("memory backend opened a database session")

    monkeypatch.setattr(settings, "STORAGE_BACKEND", "memory")
    monkeypatch.setattr(deps, "async_session_factory", no_sessions)

    stores = deps.get_store()
    store = await stores.__anext__()
    await stores.aclose()

    assert isinstance(store, MemoryStore)
