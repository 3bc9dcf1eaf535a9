"""
Authentication API routes.
"""
from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm

from metahire_crm.config import settings
from metahire_crm.core.session import CallerSession
from metahire_crm.repositories.store import Store
from metahire_crm.services.auth_service import AuthService
from metahire_crm.schemas.auth import RegisterRequest, LoginRequest, TokenResponse
from metahire_crm.schemas.common import MessageResponse
from metahire_crm.schemas.profile import ProfileResponse
from metahire_crm.api.deps import get_store, get_current_session

router = APIRouter(prefix=f"{settings.API_PREFIX}/auth", tags=["auth"])


@router.post("/register", response_model=ProfileResponse, status_code=201)
async def register(
    request: RegisterRequest,
    store: Store = Depends(get_store)
):
    """Register a new staff account."""
    auth_service = AuthService(store)
    return await auth_service.register(
        email=request.email,
        password=request.password,
        full_name=request.full_name
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    store: Store = Depends(get_store)
):
    """Login with form fields (username = email) and get an access token."""
    auth_service = AuthService(store)
    return await auth_service.login(email=form_data.username, password=form_data.password)


@router.post("/login/json", response_model=TokenResponse)
async def login_json(
    request: LoginRequest,
    store: Store = Depends(get_store)
):
    """Login with a JSON body."""
    auth_service = AuthService(store)
    return await auth_service.login(email=request.email, password=request.password)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    caller: CallerSession = Depends(get_current_session),
    store: Store = Depends(get_store)
):
    """End the current session; its token is rejected afterwards."""
    auth_service = AuthService(store)
    await auth_service.logout(caller)
    return {"message": "Logged out"}
