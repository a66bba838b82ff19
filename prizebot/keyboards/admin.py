# prizebot/keyboards/admin.py
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup, KeyboardButton, ReplyKeyboardMarkup

from prizebot.database.models import GameDefinition

BTN_GAMES_ADMIN = "🛠 Games admin"
BTN_BACK = "⬅️ Back to Menu"


def admin_panel_kb() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[
            [KeyboardButton(text=BTN_GAMES_ADMIN)],
            [KeyboardButton(text=BTN_BACK)],
        ],
        resize_keyboard=True,
        input_field_placeholder="Admin panel…",
        selective=False,
        one_time_keyboard=False,
    )


def game_row_kb(game: GameDefinition) -> InlineKeyboardMarkup:
    toggle = (
        InlineKeyboardButton(text="⏸ Deactivate", callback_data=f"ga:off:{game.id}")
        if game.is_active
        else InlineKeyboardButton(text="▶️ Activate", callback_data=f"ga:on:{game.id}")
    )
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [toggle, InlineKeyboardButton(text="📊 Stats", callback_data=f"ga:stats:{game.id}")],
        ]
    )
