# prizebot/database/models/audit.py
from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Index, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from prizebot.database.base import Base


class AuditAction(str, enum.Enum):
    COUPON_CREATE = "coupon_create"
    GAME_CREATE = "game_create"
    GAME_ACTIVATE = "game_activate"
    GAME_DEACTIVATE = "game_deactivate"
    GAME_EXPIRE = "game_expire"  # scheduler turned off a game past its end_at
    ADMIN_GRANT = "admin_grant"


class AuditLog(Base):
    """
    Who changed which game/coupon, and how. actor_user_id is NULL for
    scheduler and seed-script actions.
    """
    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_target", "target_type", "target_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    actor_user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    action: Mapped[AuditAction] = mapped_column(Enum(AuditAction, native_enum=False), index=True)
    target_type: Mapped[str] = mapped_column()  # "game" | "coupon" | "user"
    target_id: Mapped[int] = mapped_column(Integer)
    payload: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), server_default=func.now())
