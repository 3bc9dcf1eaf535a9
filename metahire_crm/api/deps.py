"""
API dependencies - shared across all routes.
"""
from typing import AsyncGenerator

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from metahire_crm.database import async_session_factory
from metahire_crm.config import settings
from metahire_crm.core.session import CallerSession
from metahire_crm.repositories.memory import get_memory_store
from metahire_crm.repositories.store import Store, SQLStore
from metahire_crm.services.auth_service import AuthService


oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login")


async def get_store() -> AsyncGenerator[Store, None]:
    """Store for this request, chosen by STORAGE_BACKEND. Only the SQL backend opens a session."""
    if settings.STORAGE_BACKEND == "memory":
        yield get_memory_store()
        return
    async with async_session_factory() as session:
        yield SQLStore(session)


async def get_current_session(
    token: str = Depends(oauth2_scheme),
    store: Store = Depends(get_store)
) -> CallerSession:
    """Resolve the bearer token into the explicit caller session."""
    return await AuthService(store).resolve_session(token)
