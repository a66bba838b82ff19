# prizebot/services/auth.py
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prizebot.config.settings import Settings
from prizebot.database.models import Admin, AdminRole, User


@dataclass(frozen=True, slots=True)
class AuthResult:
    is_root: bool
    is_admin: bool
    role: str  # "root" | "admin" | "user"


class AuthService:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    async def resolve(self, session: AsyncSession, user: User) -> AuthResult:
        # Root admins come from env, always takes precedence.
        if user.telegram_id in self.settings.root_admin_ids:
            return AuthResult(is_root=True, is_admin=True, role=AdminRole.ROOT.value)

        admin = await session.scalar(select(Admin).where(Admin.user_id == user.id))
        if admin is None:
            return AuthResult(is_root=False, is_admin=False, role="user")

        return AuthResult(
            is_root=admin.role == AdminRole.ROOT,
            is_admin=True,
            role=admin.role.value,
        )

    async def grant(self, session: AsyncSession, user: User, role: AdminRole = AdminRole.ADMIN) -> Admin:
        admin = await session.scalar(select(Admin).where(Admin.user_id == user.id))
        if admin is None:
            admin = Admin(user_id=user.id, role=role)
            session.add(admin)
        else:
            admin.role = role
        await session.flush()
        return admin
