# prizebot/handlers/user/games.py
from __future__ import annotations

import html

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from prizebot.database.models import GameKind, User, format_discount
from prizebot.keyboards.main import BTN_GAMES, GAME_BUTTONS
from prizebot.services.errors import GameError
from prizebot.services.play import PlayResult, PlayService
from prizebot.utils.dates import fmt_day
from prizebot.utils.reply import reply_safe

router = Router()

KIND_TITLES = {
    GameKind.SCRATCH: "🎟 Scratch card",
    GameKind.WHEEL: "🎡 Wheel of fortune",
    GameKind.FLIP: "🃏 Card flip",
}

COMMAND_KINDS = {
    "scratch": GameKind.SCRATCH,
    "wheel": GameKind.WHEEL,
    "flip": GameKind.FLIP,
}


def render_play_result(res: PlayResult) -> str:
    title = KIND_TITLES[res.game_kind]
    label = html.escape(res.outcome_label)
    left = f"\n\n🎮 Plays left: <b>{res.plays_left}</b>"

    if not res.won:
        return f"{title}\n😅 <b>{label}</b>\nNo luck this time.{left}"

    if res.reward is None:
        return f"{title}\n🎉 <b>{label}</b>{left}"

    discount = format_discount(res.reward.discount_type, res.reward.discount_value)
    if res.already_owned:
        return (
            f"{title}\n🎉 <b>{label}</b> again!\n"
            f"You already own this prize: <code>{res.reward.code}</code> ({discount}).{left}"
        )
    return (
        f"{title}\n🎉 <b>You won {label}!</b>\n"
        f"Your code: <code>{res.reward.code}</code> ({discount})\n"
        f"Valid until <b>{fmt_day(res.reward.expires_at)}</b> (UTC).{left}"
    )


async def _play(
    message: Message,
    session: AsyncSession,
    play_service: PlayService,
    db_user: User,
    kind: GameKind,
) -> None:
    try:
        res = await play_service.play_active(session, user_id=db_user.id, kind=kind)
    except GameError as e:
        await reply_safe(message, e.user_message)
        return
    await reply_safe(message, render_play_result(res))


@router.message(Command(*COMMAND_KINDS))
async def play_cmd(
    message: Message,
    command: CommandObject,
    session: AsyncSession,
    play_service: PlayService,
    db_user: User,
) -> None:
    await _play(message, session, play_service, db_user, COMMAND_KINDS[command.command.lower()])


@router.message(F.text.in_(GAME_BUTTONS))
async def play_button(
    message: Message,
    session: AsyncSession,
    play_service: PlayService,
    db_user: User,
) -> None:
    await _play(message, session, play_service, db_user, GAME_BUTTONS[message.text])


@router.message(Command("games"))
@router.message(F.text == BTN_GAMES)
async def games_cmd(
    message: Message,
    session: AsyncSession,
    play_service: PlayService,
    db_user: User,
) -> None:
    statuses = await play_service.open_games(session, user_id=db_user.id)
    if not statuses:
        await reply_safe(message, "😴 No game is running right now. Check back soon!")
        return

    lines = ["🎮 <b>Games running now</b>"]
    for st in statuses:
        g = st.game
        line = f"\n{KIND_TITLES[g.kind]} — <b>{html.escape(g.name)}</b>"
        if g.description:
            line += f"\n<i>{html.escape(g.description)}</i>"
        if g.end_at:
            line += f"\nEnds {fmt_day(g.end_at)} (UTC)"
        line += f"\nPlays left: <b>{st.plays_left}</b>/{g.max_plays_per_user}"
        lines.append(line)

    await reply_safe(message, "\n".join(lines))
