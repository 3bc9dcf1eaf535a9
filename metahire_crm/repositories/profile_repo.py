"""
Profile and login-session repositories.
"""
from sqlmodel.ext.asyncio.session import AsyncSession

from metahire_crm.models.profile import Profile, AuthSession
from metahire_crm.repositories.base import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    """Repository for Profile operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Profile, session)


class AuthSessionRepository(BaseRepository[AuthSession]):
    """Repository for AuthSession operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(AuthSession, session)
