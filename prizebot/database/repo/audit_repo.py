# prizebot/database/repo/audit_repo.py
from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from prizebot.database.models import AuditAction, AuditLog


async def log_action(
    session: AsyncSession,
    *,
    action: AuditAction,
    target_type: str,
    target_id: int,
    actor_user_id: int | None = None,
    payload: dict[str, Any] | None = None,
) -> None:
    session.add(
        AuditLog(
            actor_user_id=actor_user_id,
            action=action,
            target_type=target_type,
            target_id=target_id,
            payload=payload,
        )
    )
    await session.flush()
