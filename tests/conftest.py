from types import SimpleNamespace

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from concerndesk.db import crud
from concerndesk.models import Base
from concerndesk.services.auth import AuthSession


@pytest_asyncio.fixture
async def db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


@pytest_asyncio.fixture
async def people(db):
    """An admin and two students, each with a ready-made AuthSession."""
    admin = await crud.create_user(db, "admin@test.com", "x", display_name="Ada Admin", role="admin")
    alice = await crud.create_user(db, "alice@test.com", "x", display_name="Alice Reyes")
    bob = await crud.create_user(db, "bob@test.com", "x", display_name="Bob Santos")
    return SimpleNamespace(
        admin=admin,
        alice=alice,
        bob=bob,
        as_admin=AuthSession(user_id=admin.id, is_admin=True, token="admin-token", display_name="Ada Admin"),
        as_alice=AuthSession(user_id=alice.id, is_admin=False, token="alice-token", display_name="Alice Reyes"),
        as_bob=AuthSession(user_id=bob.id, is_admin=False, token="bob-token", display_name="Bob Santos"),
    )
