# prizebot/database/repo/plays_repo.py
from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from prizebot.database.models import PlayRecord


async def count_plays(session: AsyncSession, *, user_id: int, game_id: int) -> int:
    res = await session.execute(
        select(func.count(PlayRecord.id)).where(
            PlayRecord.user_id == user_id,
            PlayRecord.game_id == game_id,
        )
    )
    return int(res.scalar_one())


async def last_attempt_no(session: AsyncSession, *, user_id: int, game_id: int) -> int:
    """
    Highest slot taken so far (0 when the user never played this game).
    """
    res = await session.execute(
        select(func.coalesce(func.max(PlayRecord.attempt_no), 0)).where(
            PlayRecord.user_id == user_id,
            PlayRecord.game_id == game_id,
        )
    )
    return int(res.scalar_one())


async def list_plays(session: AsyncSession, *, user_id: int, game_id: int) -> list[PlayRecord]:
    res = await session.execute(
        select(PlayRecord)
        .where(PlayRecord.user_id == user_id, PlayRecord.game_id == game_id)
        .order_by(PlayRecord.attempt_no)
    )
    return list(res.scalars().all())
