from datetime import timedelta

import pytest

from metahire_crm.core.exceptions import ConflictError, UnauthorizedError
from metahire_crm.core.security import create_access_token
from metahire_crm.core.session import Staff, Superadmin
from metahire_crm.core.timeutils import utcnow
from metahire_crm.models import Role
from metahire_crm.services.auth_service import AuthService


async def test_register_login_resolve_logout(store):
    service = AuthService(store)
    profile = await service.register("Agent@Example.com", "changeme123", "Agent")

    tokens = await service.login("agent@example.com", "changeme123")
    caller = await service.resolve_session(tokens["access_token"])

    assert profile.role == Role.STAFF.value
    assert caller.profile_id == profile.id
    assert caller.capability == Staff(profile.id)
    assert not caller.is_superadmin

    assert await service.logout(caller)
    with pytest.raises(UnauthorizedError):
        await service.resolve_session(tokens["access_token"])


async def test_register_duplicate_email(store):
    service = AuthService(store)
    await service.register("agent@example.com", "changeme123")

    with pytest.raises(ConflictError):
        await service.register("AGENT@example.com", "changeme123")


async def test_login_with_wrong_password(store):
    service = AuthService(store)
    await service.register("agent@example.com", "changeme123")

    with pytest.raises(UnauthorizedError):
        await service.login("agent@example.com", "wrong-password")
    with pytest.raises(UnauthorizedError):
        await service.login("nobody@example.com", "changeme123")


async def test_token_without_session_is_rejected(store, seed):
    profile = await seed.staff()
    token, _ = create_access_token({"sub": profile.email, "profile_id": str(profile.id)})

    with pytest.raises(UnauthorizedError):
        await AuthService(store).resolve_session(token)
    with pytest.raises(UnauthorizedError):
        await AuthService(store).resolve_session("not-a-jwt")


async def test_unknown_role_gets_no_capability(store, seed):
    service = AuthService(store)
    profile = await service.register("odd@example.com", "changeme123")
    await store.profiles.update(profile.id, {"role": "auditor"})

    tokens = await service.login("odd@example.com", "changeme123")
    caller = await service.resolve_session(tokens["access_token"])

    assert caller.capability is None


async def test_update_me_changes_only_name(store):
    service = AuthService(store)
    await service.register("agent@example.com", "changeme123", "Old")
    caller = await service.resolve_session((await service.login("agent@example.com", "changeme123"))["access_token"])

    profile = await service.update_me(caller, "New")

    assert profile.full_name == "New"
    assert profile.email == "agent@example.com"


async def test_ensure_superadmin_is_idempotent(store):
    service = AuthService(store)

    first = await service.ensure_superadmin("root@example.com", "changeme123")
    second = await service.ensure_superadmin("root@example.com", "changeme123")
    caller = await service.resolve_session((await service.login("root@example.com", "changeme123"))["access_token"])

    assert first.id == second.id
    assert caller.capability == Superadmin(first.id)


async def test_expired_session_is_rejected(store, seed):
    profile = await seed.staff()
    token, _ = create_access_token({"sub": profile.email, "profile_id": str(profile.id)}, jti="stale")
    await store.sessions.create({
        "profile_id": profile.id,
        "jti": "stale",
        "expires_at": utcnow() - timedelta(minutes=1),
    })

    with pytest.raises(UnauthorizedError):
        await AuthService(store).resolve_session(token)
