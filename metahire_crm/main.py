"""
MetaHire CRM Backend - FastAPI Application
Main entry point with all routes configured.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from metahire_crm.config import settings
from metahire_crm.core.exceptions import CRMException, PartialFailureError, UnauthorizedError
from metahire_crm.core.logging_config import configure_logging
from metahire_crm.database import init_db, async_session_factory
from metahire_crm.repositories.memory import get_memory_store
from metahire_crm.repositories.store import SQLStore
from metahire_crm.schemas.common import HealthResponse
from metahire_crm.schemas.lead import LeadResponse
from metahire_crm.services.auth_service import AuthService

# Import all API routers
from metahire_crm.api import auth, profiles, staff, campaigns, leads, customers, payments, dashboard

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


async def bootstrap_superadmin():
    """Create the configured superadmin account when it is missing."""
    if not (settings.SUPERADMIN_EMAIL and settings.SUPERADMIN_PASSWORD):
        return
    if settings.STORAGE_BACKEND == "memory":
        await AuthService(get_memory_store()).ensure_superadmin(
            settings.SUPERADMIN_EMAIL, settings.SUPERADMIN_PASSWORD
        )
        return
    async with async_session_factory() as session:
        await AuthService(SQLStore(session)).ensure_superadmin(
            settings.SUPERADMIN_EMAIL, settings.SUPERADMIN_PASSWORD
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    configure_logging()
    if settings.STORAGE_BACKEND == "sql":
        await init_db()
    await bootstrap_superadmin()
    logger.info("MetaHire CRM started with %s storage", settings.STORAGE_BACKEND)
    yield
    # Shutdown


app = FastAPI(
    title="MetaHire CRM API",
    description="Campaigns, lead pipeline, customers and payments for small teams",
    version=VERSION,
    lifespan=lifespan
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.DEV_MODE else [settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PartialFailureError)
async def partial_failure_handler(request: Request, exc: PartialFailureError):
    content = {"detail": exc.message, "lead": None}
    if exc.lead is not None:
        content["lead"] = LeadResponse.model_validate(exc.lead).model_dump(mode="json")
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(CRMException)
async def crm_exception_handler(request: Request, exc: CRMException):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


# Include all routers
app.include_router(auth.router)
app.include_router(profiles.router)
app.include_router(staff.router)
app.include_router(campaigns.router)
app.include_router(leads.router)
app.include_router(customers.router)
app.include_router(payments.router)
app.include_router(dashboard.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "message": "MetaHire CRM API is running",
        "version": VERSION,
        "docs": "/docs"
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    """Detailed health check."""
    return HealthResponse(status="healthy", version=VERSION)
