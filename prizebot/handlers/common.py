# prizebot/handlers/common.py
from __future__ import annotations

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

router = Router(name="common")


@router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    await message.answer(
        "📌 Available commands:\n"
        "/start — welcome\n"
        "/games — running games and your plays left\n"
        "/scratch, /wheel, /flip — play\n"
        "/mycoupons — coupons you won\n"
        "/help — this help"
    )
