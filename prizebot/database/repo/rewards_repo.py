# prizebot/database/repo/rewards_repo.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prizebot.database.models import IssuedReward


async def get_reward(session: AsyncSession, *, user_id: int, coupon_id: int) -> IssuedReward | None:
    res = await session.execute(
        select(IssuedReward).where(
            IssuedReward.user_id == user_id,
            IssuedReward.coupon_id == coupon_id,
        )
    )
    return res.scalar_one_or_none()


async def count_rewards(session: AsyncSession, *, user_id: int, coupon_id: int) -> int:
    res = await session.execute(
        select(IssuedReward.id).where(
            IssuedReward.user_id == user_id,
            IssuedReward.coupon_id == coupon_id,
        )
    )
    return len(res.all())


async def list_user_rewards(
    session: AsyncSession,
    *,
    user_id: int,
    now: datetime,
    include_used: bool = False,
) -> list[IssuedReward]:
    q = select(IssuedReward).where(IssuedReward.user_id == user_id)
    if not include_used:
        q = q.where(IssuedReward.is_used.is_(False), IssuedReward.expires_at >= now)
    res = await session.execute(q.order_by(IssuedReward.issued_at.desc(), IssuedReward.id.desc()))
    return list(res.scalars().all())
