"""Pytest configuration for async testing.

Every test gets its own in-memory SQLite database (StaticPool keeps the one
connection alive for the test), a session for arranging and inspecting
state, and an HTTP client wired to the app with get_db overridden to the
same database.
"""
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["TOKEN_SECRET"] = "test-secret"
os.environ["RATE_LIMIT"] = "10000/minute"

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from shelterhub.core.database.base import Base
from shelterhub.core.database.engine import get_db
from shelterhub.features.animals.models import Animal, Gender
from shelterhub.features.shelters import store
from shelterhub.features.shelters.models import MembershipRole, Shelter
from shelterhub.features.tasks.models import Task, TaskComment
from shelterhub.features.users.models import User
from shelterhub.main import app


# Test helper functions

def make_token(user_id: str, claim: str = "_id") -> str:
    return jwt.encode({claim: user_id}, "test-secret", algorithm="HS256")


def auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


async def make_user(db: AsyncSession, user_id: str, username: str | None = None) -> User:
    username = username or user_id
    user = User(id=user_id, username=username, email=f"{username}@example.com", name=username)
    db.add(user)
    await db.commit()
    return user


async def make_shelter(
    db: AsyncSession,
    shelter_id: str,
    admins: list[str],
    members: list[str] = (),
) -> Shelter:
    shelter = Shelter(id=shelter_id, name=f"Shelter {shelter_id}", handle=shelter_id)
    db.add(shelter)
    await db.flush()
    for user_id in admins:
        await store.add_membership(db, shelter_id, user_id, MembershipRole.ADMIN)
    for user_id in members:
        await store.add_membership(db, shelter_id, user_id, MembershipRole.MEMBER)
    await db.commit()
    return shelter


async def make_animal(db: AsyncSession, animal_id: str, shelter_id: str, created_by: str | None = None) -> Animal:
    animal = Animal(
        id=animal_id, name=f"Animal {animal_id}", gender=Gender.FEMALE,
        shelter_id=shelter_id, created_by_id=created_by,
    )
    db.add(animal)
    await db.commit()
    return animal


async def make_task(
    db: AsyncSession,
    task_id: str,
    shelter_id: str,
    created_by: str | None = None,
    comments: list[tuple[str, str]] = (),
) -> Task:
    task = Task(id=task_id, title=f"Task {task_id}", shelter_id=shelter_id, created_by_id=created_by)
    for author_id, content in comments:
        task.comments.append(TaskComment(author_id=author_id, content=content))
    db.add(task)
    await db.commit()
    return task


async def exists(db: AsyncSession, model, entity_id: str) -> bool:
    """Check the database directly, bypassing the session identity map."""
    result = await db.execute(select(model.id).where(model.id == entity_id))
    return result.first() is not None


# Fixtures

@pytest_asyncio.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


@pytest.fixture
def statements(engine):
    """Collect the SQL statements run against the test database."""
    executed: list[str] = []

    def record(conn, cursor, statement, parameters, context, executemany):
        executed.append(statement)

    event.listen(engine.sync_engine, "before_cursor_execute", record)
    yield executed
    event.remove(engine.sync_engine, "before_cursor_execute", record)


@pytest_asyncio.fixture
async def shelter_graph(db):
    """
    u1 is the only admin of org1 (member u2) and co-admin of org2 with u3.
    org1 owns animals r1, r2 and task t1.
    """
    for user_id in ("u1", "u2", "u3", "u4"):
        await make_user(db, user_id)
    await make_shelter(db, "org1", admins=["u1"], members=["u2"])
    await make_shelter(db, "org2", admins=["u1", "u3"], members=["u4"])
    await make_animal(db, "r1", "org1", created_by="u1")
    await make_animal(db, "r2", "org1", created_by="u1")
    await make_task(db, "t1", "org1", created_by="u1", comments=[("u2", "Fed the dogs")])
    return db
