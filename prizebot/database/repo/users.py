# prizebot/database/repo/users.py
from __future__ import annotations

from typing import Optional

from aiogram.types import TelegramObject, User as TgUser
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prizebot.database.models import User


def _extract_from_user(event: TelegramObject) -> TgUser | None:
    """
    Best-effort extract aiogram `from_user` from different update types.
    Works for Message, CallbackQuery, InlineQuery, etc.
    """
    u = getattr(event, "from_user", None)
    if u:
        return u

    for attr in ("message", "callback_query"):
        nested = getattr(event, attr, None)
        if nested and getattr(nested, "from_user", None):
            return nested.from_user

    return None


async def upsert_user(session: AsyncSession, tg: TgUser) -> User:
    user = await session.scalar(select(User).where(User.telegram_id == tg.id))

    if user is None:
        user = User(
            telegram_id=tg.id,
            username=tg.username,
            first_name=tg.first_name,
            last_name=tg.last_name,
        )
        session.add(user)
        await session.flush()  # ensures `user.id` exists before handlers use it
        return user

    # Keep profile fields fresh
    user.username = tg.username
    user.first_name = tg.first_name
    user.last_name = tg.last_name
    return user


async def upsert_user_from_event(session: AsyncSession, event: TelegramObject) -> Optional[User]:
    tg = _extract_from_user(event)
    if tg is None:
        return None
    return await upsert_user(session, tg)


async def get_user_by_telegram_id(session: AsyncSession, telegram_id: int) -> Optional[User]:
    return await session.scalar(select(User).where(User.telegram_id == telegram_id))
