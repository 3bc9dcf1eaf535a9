"""
Authentication service - registration, login sessions and the caller session.
"""
import logging
import uuid
from typing import Optional

from metahire_crm.config import settings
from metahire_crm.core.security import get_password_hash, verify_password, create_access_token, verify_token
from metahire_crm.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from metahire_crm.core.session import CallerSession, capability_for
from metahire_crm.core.timeutils import as_utc, utcnow
from metahire_crm.models.profile import Profile, Role
from metahire_crm.repositories.store import Store

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, store: Store):
        self.store = store

    async def register(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None
    ) -> Profile:
        """Self-registration always creates a staff profile."""
        return await self.create_profile(email, password, full_name, role=Role.STAFF)

    async def create_profile(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        role: Role = Role.STAFF
    ) -> Profile:
        """Create a profile with a hashed password."""
        email = email.strip().lower()
        if await self.store.profiles.get_by_field("email", email):
            raise ConflictError("Profile", "email", email)

        profile = await self.store.profiles.create({
            "email": email,
            "password_hash": get_password_hash(password),
            "full_name": full_name,
            "role": role.value,
        })
        logger.info("Created %s profile %s", role.value, profile.id)
        return profile

    async def login(self, email: str, password: str) -> dict:
        """Check credentials, open an AuthSession and return its access token."""
        profile = await self.store.profiles.get_by_field("email", email.strip().lower())
        if not profile or not verify_password(password, profile.password_hash):
            raise UnauthorizedError("Incorrect email or password")

        jti = uuid.uuid4().hex
        access_token, expires_at = create_access_token(
            {"sub": profile.email, "profile_id": str(profile.id)},
            jti=jti
        )
        await self.store.sessions.create({
            "profile_id": profile.id,
            "jti": jti,
            "expires_at": expires_at,
        })
        logger.info("Profile %s logged in", profile.id)

        return {
            "access_token": access_token,
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        }

    async def logout(self, caller: CallerSession) -> bool:
        """Revoke the caller's AuthSession; its token stops working."""
        revoked = await self.store.sessions.update(caller.session_id, {"revoked_at": utcnow()})
        if revoked:
            logger.info("Profile %s logged out", caller.profile_id)
        return revoked is not None

    async def resolve_session(self, token: str) -> CallerSession:
        """Build the explicit caller session for a bearer token."""
        payload = verify_token(token)
        if not payload or not payload.get("jti"):
            raise UnauthorizedError()

        auth_session = await self.store.sessions.get_by_field("jti", payload["jti"])
        if not auth_session or auth_session.revoked_at is not None:
            raise UnauthorizedError("Session has ended")
        if as_utc(auth_session.expires_at) < utcnow():
            raise UnauthorizedError("Session has expired")

        profile = await self.store.profiles.get(auth_session.profile_id)
        if not profile:
            raise UnauthorizedError("Profile no longer exists")

        return CallerSession(
            session_id=auth_session.id,
            profile_id=profile.id,
            email=profile.email,
            full_name=profile.full_name,
            capability=capability_for(profile.id, profile.role),
        )

    async def me(self, caller: CallerSession) -> Profile:
        profile = await self.store.profiles.get(caller.profile_id)
        if not profile:
            raise NotFoundError("Profile", str(caller.profile_id))
        return profile

    async def update_me(self, caller: CallerSession, full_name: Optional[str]) -> Profile:
        """Only the display name is self-editable."""
        profile = await self.store.profiles.update(caller.profile_id, {"full_name": full_name})
        if not profile:
            raise NotFoundError("Profile", str(caller.profile_id))
        return profile

    async def ensure_superadmin(self, email: str, password: str) -> Profile:
        """Create the bootstrap superadmin unless the email is already taken."""
        existing = await self.store.profiles.get_by_field("email", email.strip().lower())
        if existing:
            if existing.role != Role.SUPERADMIN.value:
                logger.warning("Bootstrap email %s belongs to a %s profile; left unchanged", email, existing.role)
            return existing
        return await self.create_profile(email, password, "Administrator", role=Role.SUPERADMIN)
