# prizebot/database/tx.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession


@asynccontextmanager
async def transactional(session: AsyncSession) -> AsyncIterator[None]:
    """
    Safe transactional context for SQLAlchemy 2.x autobegin.

    The work always runs inside a SAVEPOINT (begin_nested), so a failure
    only discards what the block itself changed; objects the caller loaded
    earlier are not expired.

    - If a transaction is already active, the commit is left to whoever owns it
    - Otherwise this call owns the outer transaction and commits it on exit,
      also after a failed block (the SAVEPOINT already dropped its writes)
    """
    if session.in_transaction():
        async with session.begin_nested():
            yield
        return

    try:
        async with session.begin_nested():
            yield
    except Exception:
        await _end_outer(session)
        raise
    await session.commit()


async def _end_outer(session: AsyncSession) -> None:
    try:
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()


async def insert_once(session: AsyncSession, row: object) -> bool:
    """
    Adds `row` inside a SAVEPOINT and flushes it.

    Returns False (and leaves the outer transaction intact) when a unique
    constraint rejects the row.
    """
    try:
        async with session.begin_nested():
            session.add(row)
            await session.flush()
    except IntegrityError:
        return False
    return True
