import logging

from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker

from metahire_crm.config import settings

logger = logging.getLogger(__name__)


def create_engine(url: str = settings.DATABASE_URL, **kwargs) -> AsyncEngine:
    """Create the async engine; SQLite connections get foreign keys switched on."""
    engine = create_async_engine(url, echo=settings.SQL_ECHO, future=True, **kwargs)
    if engine.dialect.name == "sqlite":
        enable_sqlite_foreign_keys(engine.sync_engine)
    return engine


def enable_sqlite_foreign_keys(sync_engine: Engine) -> None:
    # Cascades are declared on the foreign keys; SQLite ignores them unless asked.
    @event.listens_for(sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Create Async Engine
engine = create_engine()

async_session_factory = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def init_db(bind: AsyncEngine = engine):
    # Import models so every table is registered on the metadata
    import metahire_crm.models  # noqa: F401

    async with bind.begin() as conn:
        if settings.RECREATE_TABLES:
            logger.warning("RECREATE_TABLES is set, dropping all tables")
            await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
