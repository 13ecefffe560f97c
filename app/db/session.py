"""Database session and engine configuration."""

from dotenv import load_dotenv
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.config import settings
from app.db.base import Base

# Load environment variables
load_dotenv()


def build_engine(database_url: str, echo: bool = False, **kwargs) -> AsyncEngine:
    """Create an async engine; pool sizing only applies to PostgreSQL."""
    if database_url.startswith("postgresql"):
        kwargs.setdefault("pool_size", settings.DATABASE_POOL_SIZE)
        kwargs.setdefault("max_overflow", settings.DATABASE_MAX_OVERFLOW)
        kwargs.setdefault("pool_pre_ping", True)

    async_engine = create_async_engine(database_url, echo=echo, **kwargs)

    if database_url.startswith("sqlite"):
        @event.listens_for(async_engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.close()

    return async_engine


def build_session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Create async engine
engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Create async session factory
AsyncSessionLocal = build_session_factory(engine)


async def init_db():
    """Initialize database tables."""
    # Import all models to register them
    from app.models import application, comment, course, selected_application, user  # noqa: F401

    async with engine.begin() as conn:
        # Create tables (in production, use Alembic migrations)
        if settings.DEBUG:
            await conn.run_sync(Base.metadata.create_all)
