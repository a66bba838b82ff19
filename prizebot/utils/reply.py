# prizebot/utils/reply.py
from __future__ import annotations

from aiogram.types import Message

from prizebot.keyboards.main import main_menu_kb


async def reply_safe(message: Message, text: str, **kwargs) -> None:
    """
    Attach the games menu only in private chats; groups get plain replies.
    """
    if message.chat.type == "private":
        kwargs.setdefault("reply_markup", main_menu_kb())
    else:
        kwargs.setdefault("reply_markup", None)

    await message.answer(text, **kwargs)
