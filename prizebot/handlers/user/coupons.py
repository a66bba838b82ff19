# prizebot/handlers/user/coupons.py
from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from prizebot.database.models import User
from prizebot.keyboards.main import BTN_COUPONS
from prizebot.services.rewards import RewardService
from prizebot.utils.dates import fmt_day
from prizebot.utils.reply import reply_safe

router = Router()


@router.message(Command("mycoupons"))
@router.message(F.text == BTN_COUPONS)
async def my_coupons_cmd(message: Message, session: AsyncSession, db_user: User) -> None:
    rewards = await RewardService.list_rewards(session, db_user.id)
    if not rewards:
        await reply_safe(message, "🎁 You have no coupons yet. Try a game!")
        return

    lines = ["🎁 <b>Your coupons</b>"]
    for r in rewards:
        lines.append(
            f"• <code>{r.code}</code> {r.coupon.describe()} — valid until {fmt_day(r.expires_at)}"
        )
    await reply_safe(message, "\n".join(lines))
