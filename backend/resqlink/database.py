"""Database setup with SQLAlchemy async and PostGIS support."""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from resqlink.config import get_settings

settings = get_settings()


def _connect_args(database_url: str) -> dict:
    """Driver-level timeouts so no store call can block indefinitely."""
    if "+asyncpg" in database_url:
        return {
            "timeout": settings.db_connect_timeout_seconds,
            "command_timeout": settings.db_command_timeout_seconds,
        }
    return {}


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
    pool_size=5,
    max_overflow=10,
    pool_timeout=settings.db_connect_timeout_seconds,
    connect_args=_connect_args(settings.database_url),
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def check_db_ready() -> None:
    """
    Verify database connectivity and expected schema.

    Checks that PostGIS is enabled and the incidents table exists.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))

        # PostGIS is required for the proximity query.
        postgis = await conn.execute(
            text("SELECT 1 FROM pg_extension WHERE extname = 'postgis' LIMIT 1")
        )
        if postgis.first() is None:
            raise RuntimeError("PostGIS extension is not installed.")

        table = await conn.execute(text("SELECT to_regclass('public.incidents')"))
        if table.scalar() is None:
            raise RuntimeError(
                "Database schema is missing table: incidents "
                "(run database init or check migrations)."
            )


async def ping_db(session: AsyncSession) -> bool:
    """Return True when the store answers a trivial query."""
    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        await session.rollback()
        return False
    return True
