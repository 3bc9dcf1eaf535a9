import uuid
from collections.abc import AsyncGenerator
from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from metahire_crm.core.session import CallerSession, capability_for
from metahire_crm.database import create_engine
from metahire_crm.models import Campaign, Lead, Profile, Role
from metahire_crm.repositories.memory import MemoryStore
from metahire_crm.repositories.store import SQLStore, Store


class Seed:
    """Writes fixture rows straight through a store."""

    def __init__(self, store: Store):
        self.store = store

    async def profile(
        self,
        role: Role = Role.STAFF,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> Profile:
        return await self.store.profiles.create({
            "email": email or f"{uuid.uuid4().hex[:10]}@example.com",
            "password_hash": "not-a-bcrypt-hash",
            "full_name": full_name,
            "role": role.value,
        })

    async def superadmin(self, **kwargs) -> Profile:
        return await self.profile(Role.SUPERADMIN, **kwargs)

    async def staff(self, **kwargs) -> Profile:
        return await self.profile(Role.STAFF, **kwargs)

    async def campaign(self, name: str = "Spring Open House", created_by: Optional[uuid.UUID] = None) -> Campaign:
        return await self.store.campaigns.create({"name": name, "created_by": created_by})

    async def lead(
        self,
        first_name: str = "Ada",
        campaign_id: Optional[uuid.UUID] = None,
        assigned_to: Optional[uuid.UUID] = None,
        **fields,
    ) -> Lead:
        data = {
            "first_name": first_name,
            "last_name": "Lovelace",
            "email": f"{first_name.lower()}@example.com",
            "phone": "+971500000000",
            "company": "Analytical Engines",
            "position": "Founder",
            "notes": "met at the expo",
            "campaign_id": campaign_id,
            "assigned_to": assigned_to,
        }
        data.update(fields)
        return await self.store.leads.create(data)

    async def assign(self, staff_id: uuid.UUID, campaign_id: uuid.UUID):
        return await self.store.assignments.create({"staff_id": staff_id, "campaign_id": campaign_id})

    @staticmethod
    def caller(profile: Profile) -> CallerSession:
        return CallerSession(
            session_id=uuid.uuid4(),
            profile_id=profile.id,
            email=profile.email,
            full_name=profile.full_name,
            capability=capability_for(profile.id, profile.role),
        )


@pytest.fixture()
async def engine():
    engine = create_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture(params=["sql", "memory"])
def store(request, db_session) -> Store:
    """Each test using this runs once per storage backend."""
    if request.param == "memory":
        return MemoryStore()
    return SQLStore(db_session)


@pytest.fixture()
def sql_store(db_session) -> Store:
    return SQLStore(db_session)


@pytest.fixture()
def seed(store) -> Seed:
    return Seed(store)


@pytest.fixture()
async def client(engine) -> AsyncGenerator[AsyncClient, None]:
    from metahire_crm.api.deps import get_store
    from metahire_crm.main import app

    async def override_get_store():
        async with AsyncSession(engine, expire_on_commit=False) as session:
            yield SQLStore(session)

    app.dependency_overrides[get_store] = override_get_store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
