"""
Database engine and session management.
Uses SQLAlchemy 2.0 async pattern.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from pubflow.config import get_settings

settings = get_settings()


def create_engine_for_url(database_url: str, echo: bool = False) -> AsyncEngine:
    """Engine with pool settings suited to the database type."""
    if database_url.startswith("sqlite"):
        # One connection per session; job and status writes use separate sessions
        sqlite_engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )

        @event.listens_for(sqlite_engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.close()

        return sqlite_engine

    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def create_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = create_engine_for_url(settings.database_url, echo=settings.debug)
async_session_maker = create_session_maker(engine)


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Dependency for stores that open their own short sessions."""
    return async_session_maker


async def init_db() -> None:
    """Create tables (development and tests; production uses alembic)."""
    from pubflow.kernel.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
