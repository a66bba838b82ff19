# prizebot/handlers/admin/panel.py
from __future__ import annotations

import html
import logging

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from prizebot.config.settings import Settings
from prizebot.database.models import AdminRole, AuditAction, User
from prizebot.database.repo.audit_repo import log_action
from prizebot.database.repo.users import get_user_by_telegram_id
from prizebot.keyboards.admin import BTN_BACK, admin_panel_kb
from prizebot.services.auth import AuthService
from prizebot.utils.reply import reply_safe

log = logging.getLogger(__name__)
router = Router()


async def is_admin(session: AsyncSession, settings: Settings, user: User | None) -> bool:
    if user is None:
        return False
    authz = await AuthService(settings).resolve(session, user)
    return authz.is_admin


async def require_admin_or_reply(
    message: Message,
    settings: Settings,
    session: AsyncSession,
    db_user: User | None,
) -> bool:
    if not await is_admin(session, settings, db_user):
        await message.answer("⛔ You are not allowed to use admin commands.")
        return False
    return True


@router.message(Command("admin"))
async def admin_cmd(message: Message, settings: Settings, session: AsyncSession, db_user: User) -> None:
    if not await require_admin_or_reply(message, settings, session, db_user):
        return
    await message.answer(
        "🛠 <b>Admin panel</b>\n\n"
        "/games_admin — all games\n"
        "/game_on &lt;id&gt; · /game_off &lt;id&gt; — toggle a game\n"
        "/game_stats &lt;id&gt; — plays and wins\n"
        "/grant_admin &lt;telegram id&gt; — root only",
        reply_markup=admin_panel_kb(),
    )


@router.message(Command("grant_admin"))
async def grant_admin_cmd(
    message: Message,
    command: CommandObject,
    settings: Settings,
    session: AsyncSession,
    db_user: User,
) -> None:
    auth = AuthService(settings)
    if not (await auth.resolve(session, db_user)).is_root:
        await message.answer("⛔ Only root admins can grant admin rights.")
        return

    raw = (command.args or "").strip()
    if not raw.isdigit():
        await message.answer("Usage: <code>/grant_admin &lt;telegram id&gt;</code>")
        return

    target = await get_user_by_telegram_id(session, int(raw))
    if target is None:
        await message.answer("❌ That user has not talked to the bot yet.")
        return

    await auth.grant(session, target, AdminRole.ADMIN)
    await log_action(
        session,
        action=AuditAction.ADMIN_GRANT,
        target_type="user",
        target_id=target.id,
        actor_user_id=db_user.id,
    )
    log.info("User %s granted admin to telegram_id=%s", db_user.id, target.telegram_id)
    await message.answer(f"✅ {html.escape(target.display_name)} is now an admin.")


@router.message(F.text == BTN_BACK)
async def back_to_menu(message: Message) -> None:
    await reply_safe(message, "Back to the games menu 👇")
