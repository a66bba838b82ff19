# prizebot/handlers/admin/games_admin.py
from __future__ import annotations

import html
import logging

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, Message
from sqlalchemy.ext.asyncio import AsyncSession

from prizebot.config.settings import Settings
from prizebot.database.models import GameDefinition, User
from prizebot.database.repo.games_repo import GameStats
from prizebot.handlers.admin.panel import is_admin, require_admin_or_reply
from prizebot.keyboards.admin import BTN_GAMES_ADMIN, game_row_kb
from prizebot.services.errors import GameError
from prizebot.services.games import GameService
from prizebot.utils.dates import fmt_day

log = logging.getLogger(__name__)
router = Router()


def _window(g: GameDefinition) -> str:
    start = fmt_day(g.start_at) if g.start_at else "no start"
    end = fmt_day(g.end_at) if g.end_at else "no end"
    return f"{start} → {end}"


def render_game(g: GameDefinition) -> str:
    status = "🟢 active" if g.is_active else "⚪️ inactive"
    lines = [
        f"#{g.id} <b>{html.escape(g.name)}</b> ({g.kind.value}) — {status}",
        f"📅 {_window(g)} · max {g.max_plays_per_user} play(s)/user",
    ]
    for o in g.outcomes:
        prize = f" → <code>{o.coupon.code}</code>" if o.coupon else ""
        lines.append(f"  • {o.weight:g}% {html.escape(o.label)} [{o.kind.value}]{prize}")
    return "\n".join(lines)


def render_stats(g: GameDefinition, st: GameStats) -> str:
    rate = f"{st.wins / st.plays:.0%}" if st.plays else "—"
    return (
        f"📊 <b>{html.escape(g.name)}</b> (#{g.id})\n"
        f"Plays: <b>{st.plays}</b>\n"
        f"Wins: <b>{st.wins}</b> ({rate})\n"
        f"Players: <b>{st.players}</b>"
    )


def _parse_id(command: CommandObject) -> int | None:
    raw = (command.args or "").strip().lstrip("#")
    return int(raw) if raw.isdigit() else None


@router.message(Command("games_admin"))
@router.message(F.text == BTN_GAMES_ADMIN)
async def games_admin_cmd(message: Message, settings: Settings, session: AsyncSession, db_user: User) -> None:
    if not await require_admin_or_reply(message, settings, session, db_user):
        return

    games = await GameService.list_games(session)
    if not games:
        await message.answer(
            "No games yet.\nSeed some with <code>python -m prizebot.scripts.seed_games games.json</code>"
        )
        return

    for g in games:
        await message.answer(render_game(g), reply_markup=game_row_kb(g))


@router.message(Command("game_on", "game_off"))
async def game_toggle_cmd(
    message: Message,
    command: CommandObject,
    settings: Settings,
    session: AsyncSession,
    db_user: User,
) -> None:
    if not await require_admin_or_reply(message, settings, session, db_user):
        return

    game_id = _parse_id(command)
    if game_id is None:
        await message.answer(f"Usage: <code>/{command.command} &lt;game id&gt;</code>")
        return

    active = command.command == "game_on"
    try:
        await GameService.set_active(session, game_id, active, actor_user_id=db_user.id)
    except GameError as e:
        await message.answer(f"❌ {html.escape(str(e))}")
        return
    await message.answer(f"✅ Game #{game_id} {'activated' if active else 'deactivated'}.")


@router.message(Command("game_stats"))
async def game_stats_cmd(
    message: Message,
    command: CommandObject,
    settings: Settings,
    session: AsyncSession,
    db_user: User,
) -> None:
    if not await require_admin_or_reply(message, settings, session, db_user):
        return

    game_id = _parse_id(command)
    if game_id is None:
        await message.answer("Usage: <code>/game_stats &lt;game id&gt;</code>")
        return

    try:
        game, st = await GameService.stats(session, game_id)
    except GameError as e:
        await message.answer(f"❌ {html.escape(str(e))}")
        return
    await message.answer(render_stats(game, st))


@router.callback_query(F.data.startswith("ga:"))
async def game_admin_action(
    cb: CallbackQuery,
    settings: Settings,
    session: AsyncSession,
    db_user: User,
) -> None:
    if not await is_admin(session, settings, db_user):
        await cb.answer("⛔ You are not allowed.", show_alert=True)
        return

    # ga:<action>:<game_id>
    parts = (cb.data or "").split(":")
    if len(parts) != 3 or not parts[2].isdigit():
        await cb.answer()
        return
    _, action, gid = parts
    game_id = int(gid)

    try:
        if action in ("on", "off"):
            await GameService.set_active(session, game_id, action == "on", actor_user_id=db_user.id)
            game, _ = await GameService.stats(session, game_id)
            await cb.answer("Activated" if game.is_active else "Deactivated")
            if cb.message:
                await cb.message.edit_text(render_game(game), reply_markup=game_row_kb(game))
        elif action == "stats":
            game, st = await GameService.stats(session, game_id)
            await cb.answer()
            if cb.message:
                await cb.message.answer(render_stats(game, st))
        else:
            await cb.answer()
    except GameError as e:
        log.info("Admin action %s on game %s failed: %s", action, game_id, e)
        await cb.answer(str(e), show_alert=True)
