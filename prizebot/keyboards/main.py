# prizebot/keyboards/main.py
from aiogram.types import KeyboardButton, ReplyKeyboardMarkup

from prizebot.database.models import GameKind

BTN_SCRATCH = "🎟 Scratch card"
BTN_WHEEL = "🎡 Wheel"
BTN_FLIP = "🃏 Card flip"
BTN_GAMES = "🎮 Games"
BTN_COUPONS = "🎁 My coupons"

GAME_BUTTONS: dict[str, GameKind] = {
    BTN_SCRATCH: GameKind.SCRATCH,
    BTN_WHEEL: GameKind.WHEEL,
    BTN_FLIP: GameKind.FLIP,
}


def main_menu_kb() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[
            [KeyboardButton(text=BTN_SCRATCH), KeyboardButton(text=BTN_WHEEL), KeyboardButton(text=BTN_FLIP)],
            [KeyboardButton(text=BTN_GAMES), KeyboardButton(text=BTN_COUPONS)],
        ],
        resize_keyboard=True,
        input_field_placeholder="Pick a game…",
        selective=False,
        one_time_keyboard=False,
    )
