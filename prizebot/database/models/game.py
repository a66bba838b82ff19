# prizebot/database/models/game.py
from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prizebot.database.base import Base
from prizebot.database.models.coupon import Coupon


class GameKind(str, enum.Enum):
    SCRATCH = "scratch"
    WHEEL = "wheel"
    FLIP = "flip"


class OutcomeKind(str, enum.Enum):
    WIN = "win"
    LOSE = "lose"


class GameDefinition(Base):
    """
    A promotional mini-game authored by an admin.

    Outcomes are drawn in `position` order; their weights are percentage
    points and sum to <= 100 (checked by GameService, not the DB).
    """
    __tablename__ = "games"
    __table_args__ = (
        CheckConstraint("max_plays_per_user >= 1", name="ck_games_max_plays"),
        Index("ix_games_kind_active", "kind", "is_active"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    kind: Mapped[GameKind] = mapped_column(Enum(GameKind, native_enum=False))

    name: Mapped[str] = mapped_column(String(128))
    description: Mapped[str] = mapped_column(String(1000), default="")

    is_active: Mapped[bool] = mapped_column(Boolean, default=False)
    start_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    end_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    max_plays_per_user: Mapped[int] = mapped_column(Integer, default=1)

    # colours / card texture for whatever renders the game
    design_json: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.now(),
        onupdate=func.now(),
    )

    outcomes: Mapped[list["GameOutcome"]] = relationship(
        back_populates="game",
        order_by="GameOutcome.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def is_open(self, now: datetime) -> bool:
        if not self.is_active:
            return False
        if self.start_at is not None and now < self.start_at:
            return False
        if self.end_at is not None and now > self.end_at:
            return False
        return True


class GameOutcome(Base):
    __tablename__ = "game_outcomes"
    __table_args__ = (
        UniqueConstraint("game_id", "position", name="uq_game_outcomes_game_position"),
        CheckConstraint("weight >= 0", name="ck_game_outcomes_weight"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id", ondelete="CASCADE"), index=True)
    position: Mapped[int] = mapped_column(Integer)

    label: Mapped[str] = mapped_column(String(128))
    kind: Mapped[OutcomeKind] = mapped_column(Enum(OutcomeKind, native_enum=False))
    coupon_id: Mapped[int | None] = mapped_column(
        ForeignKey("coupons.id", ondelete="RESTRICT"),
        nullable=True,
    )
    weight: Mapped[float] = mapped_column(Float)
    color: Mapped[str | None] = mapped_column(String(16), nullable=True)  # wheel segments only

    game: Mapped[GameDefinition] = relationship(back_populates="outcomes")
    coupon: Mapped[Coupon | None] = relationship(lazy="selectin")

    @property
    def is_win(self) -> bool:
        return self.kind == OutcomeKind.WIN and self.coupon_id is not None
