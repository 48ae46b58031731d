"""
Transaction scope for one service call.

Each registry operation runs inside exactly one write transaction: the
session is committed when the block exits cleanly and rolled back when it
raises, so a failed operation leaves no partial rows behind.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from registry.exceptions import RegistryError
from registry.models.base import AsyncSessionFactory


@asynccontextmanager
async def transaction(
    factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> AsyncIterator[AsyncSession]:
    async with (factory or AsyncSessionFactory)() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def add_or_raise(session: AsyncSession, instance: object, error: RegistryError) -> None:
    """
    Insert ``instance`` inside a SAVEPOINT, translating a unique-constraint
    violation from the store into the given domain error. Only the savepoint
    is rolled back; earlier work in the caller's transaction is kept.
    """
    try:
        async with session.begin_nested():
            session.add(instance)
    except IntegrityError as exc:
        raise error from exc
