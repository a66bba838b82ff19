# prizebot/handlers/user/start.py
from __future__ import annotations

import html

from aiogram import Router
from aiogram.filters import CommandStart
from aiogram.types import Message

from prizebot.database.models import User
from prizebot.utils.reply import reply_safe

router = Router()


@router.message(CommandStart())
async def start_cmd(message: Message, db_user: User) -> None:
    await reply_safe(
        message,
        f"👋 Welcome, {html.escape(db_user.display_name)}!\n\n"
        "Play our mini-games to win discount coupons:\n"
        "/scratch — scratch card\n"
        "/wheel — wheel of fortune\n"
        "/flip — card flip\n\n"
        "/games shows what is running and how many plays you have left.",
    )
