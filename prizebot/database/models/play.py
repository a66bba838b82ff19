# prizebot/database/models/play.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Index, Integer, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from prizebot.database.base import Base
from prizebot.database.models.game import GameKind, OutcomeKind


class PlayRecord(Base):
    """
    Append-only play ledger.

    attempt_no is the play's slot in the (user, game) ledger. The unique
    constraint means two concurrent plays can never take the same slot, and
    the gate never hands out a slot above max_plays_per_user, so a user can
    never hold more rows than the game allows.
    """
    __tablename__ = "play_records"
    __table_args__ = (
        UniqueConstraint("user_id", "game_id", "attempt_no", name="uq_play_records_user_game_slot"),
        CheckConstraint("attempt_no >= 1", name="ck_play_records_attempt_no"),
        Index("ix_play_records_game_kind", "game_id", "outcome_kind"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id", ondelete="CASCADE"), index=True)
    game_kind: Mapped[GameKind] = mapped_column(Enum(GameKind, native_enum=False))
    attempt_no: Mapped[int] = mapped_column(Integer)

    outcome_id: Mapped[int | None] = mapped_column(
        ForeignKey("game_outcomes.id", ondelete="SET NULL"),
        nullable=True,
    )
    outcome_kind: Mapped[OutcomeKind] = mapped_column(Enum(OutcomeKind, native_enum=False))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), server_default=func.now())
