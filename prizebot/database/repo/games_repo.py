# prizebot/database/repo/games_repo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import distinct, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from prizebot.database.models import GameDefinition, GameKind, GameOutcome, OutcomeKind, PlayRecord


@dataclass(frozen=True, slots=True)
class GameStats:
    game_id: int
    plays: int
    wins: int
    players: int


def _open_at(now: datetime):
    return (
        GameDefinition.is_active.is_(True),
        or_(GameDefinition.start_at.is_(None), GameDefinition.start_at <= now),
        or_(GameDefinition.end_at.is_(None), GameDefinition.end_at >= now),
    )


def _with_outcomes(q):
    # refresh outcomes + prize coupons even for objects already in the session
    return q.options(
        selectinload(GameDefinition.outcomes).selectinload(GameOutcome.coupon)
    ).execution_options(populate_existing=True)


async def get_game(session: AsyncSession, game_id: int) -> GameDefinition | None:
    res = await session.execute(_with_outcomes(select(GameDefinition).where(GameDefinition.id == game_id)))
    return res.scalar_one_or_none()


async def find_active_game(session: AsyncSession, kind: GameKind, now: datetime) -> GameDefinition | None:
    """
    Newest open game of a kind (the storefront only ever shows one per kind).
    """
    res = await session.execute(
        _with_outcomes(
            select(GameDefinition)
            .where(GameDefinition.kind == kind, *_open_at(now))
            .order_by(GameDefinition.created_at.desc(), GameDefinition.id.desc())
            .limit(1)
        )
    )
    return res.scalar_one_or_none()


async def list_open_games(session: AsyncSession, now: datetime) -> list[GameDefinition]:
    res = await session.execute(
        select(GameDefinition)
        .where(*_open_at(now))
        .order_by(GameDefinition.kind, GameDefinition.created_at.desc(), GameDefinition.id.desc())
    )
    return list(res.scalars().all())


async def list_games(session: AsyncSession) -> list[GameDefinition]:
    res = await session.execute(select(GameDefinition).order_by(GameDefinition.id))
    return list(res.scalars().all())


async def set_game_active(session: AsyncSession, game_id: int, active: bool) -> bool:
    res = await session.execute(
        update(GameDefinition).where(GameDefinition.id == game_id).values(is_active=active)
    )
    return (res.rowcount or 0) > 0


async def ended_active_game_ids(session: AsyncSession, now: datetime) -> list[int]:
    res = await session.execute(
        select(GameDefinition.id).where(
            GameDefinition.is_active.is_(True),
            GameDefinition.end_at.is_not(None),
            GameDefinition.end_at < now,
        )
    )
    return [row[0] for row in res.all()]


async def get_game_stats(session: AsyncSession, game_id: int) -> GameStats:
    res = await session.execute(
        select(
            func.count(PlayRecord.id),
            func.count(PlayRecord.id).filter(PlayRecord.outcome_kind == OutcomeKind.WIN),
            func.count(distinct(PlayRecord.user_id)),
        ).where(PlayRecord.game_id == game_id)
    )
    plays, wins, players = res.one()
    return GameStats(game_id=game_id, plays=int(plays), wins=int(wins or 0), players=int(players))
