from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker


# -------------------------------------------------------------
# ✅ Database Configuration
# Automatically adapts to SQLite (local) or PostgreSQL (production)
# -------------------------------------------------------------

# Declarative Base class for ORM models
Base = declarative_base()


def async_database_url(url: str) -> str:
    """Rewrite plain driver URLs to their async equivalents."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


def build_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(
        async_database_url(database_url),
        echo=False,          # Set True for SQL debug logs
        future=True,
        pool_pre_ping=True,  # Detect broken connections
    )


def build_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    # models must be imported so their tables are registered on Base.metadata
    from seo_reports.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# -------------------------------------------------------------
# Dependency Injection for FastAPI routes
# -------------------------------------------------------------
async def get_db(request: Request):
    """
    Dependency that provides a database session per request.
    Closes the session automatically after use.
    """
    async with request.app.state.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
