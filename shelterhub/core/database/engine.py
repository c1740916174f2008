"""
Database engine and per-request sessions.

The URL comes from DATABASE_URL; the default is a local aiosqlite file.
Each request gets one AsyncSession from get_db and runs in a single
transaction.
"""
from collections.abc import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from shelterhub.core import config

engine = create_async_engine(
    config.SQLALCHEMY_DATABASE_URL,
    # SQLite connections are cheap; don't pool them across event loops
    poolclass=NullPool if config.SQLALCHEMY_DATABASE_URL.startswith("sqlite") else None,
    echo=False,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting async database sessions.

    The whole request shares one session: cascades flush step by step and
    everything is committed when the handler returns, or rolled back if it
    raises.

    Usage in FastAPI routes:
        @router.get("/shelters")
        async def list_shelters(db: AsyncSession = Depends(get_db)):
            result = await db.execute(select(Shelter))
            return result.scalars().all()
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    """Create any missing tables. Runs on application startup."""
    from shelterhub.core.database.base import Base

    # Register every model on Base.metadata
    from shelterhub.features.users.models import User  # noqa: F401
    from shelterhub.features.shelters.models import Shelter, shelter_memberships  # noqa: F401
    from shelterhub.features.animals.models import Animal  # noqa: F401
    from shelterhub.features.tasks.models import Task, TaskComment  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
