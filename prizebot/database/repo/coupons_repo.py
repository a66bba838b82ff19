# prizebot/database/repo/coupons_repo.py
from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prizebot.database.models import Coupon, DiscountType


async def get_coupon_by_code(session: AsyncSession, code: str) -> Coupon | None:
    return await session.scalar(select(Coupon).where(Coupon.code == code.strip().upper()))


async def get_coupons(session: AsyncSession, coupon_ids: Iterable[int]) -> dict[int, Coupon]:
    ids = {int(i) for i in coupon_ids}
    if not ids:
        return {}
    res = await session.execute(select(Coupon).where(Coupon.id.in_(ids)))
    return {c.id: c for c in res.scalars().all()}


async def get_or_create_coupon(
    session: AsyncSession,
    *,
    code: str,
    name: str,
    discount_type: DiscountType,
    discount_value: Decimal,
) -> tuple[Coupon, bool]:
    """
    Returns (coupon, created). An existing code is returned untouched.
    """
    existing = await get_coupon_by_code(session, code)
    if existing:
        return existing, False

    coupon = Coupon(
        code=code.strip().upper(),
        name=name,
        discount_type=discount_type,
        discount_value=discount_value,
        is_active=True,
    )
    session.add(coupon)
    await session.flush()
    return coupon, True
