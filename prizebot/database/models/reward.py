# prizebot/database/models/reward.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prizebot.database.base import Base
from prizebot.database.models.coupon import Coupon


class IssuedReward(Base):
    """
    A coupon won by a user. At most one per (user, coupon): winning the same
    prize twice does not hand out a second code.
    """
    __tablename__ = "issued_rewards"
    __table_args__ = (
        UniqueConstraint("user_id", "coupon_id", name="uq_issued_rewards_user_coupon"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    coupon_id: Mapped[int] = mapped_column(ForeignKey("coupons.id", ondelete="CASCADE"), index=True)

    # personal code handed to the player, e.g. "SPRING10-LZ3K8Q2A-7"
    code: Mapped[str] = mapped_column(String(96), unique=True)
    source: Mapped[str] = mapped_column(String(32))  # game kind that produced it

    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=False))
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), index=True)

    is_used: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    coupon: Mapped[Coupon] = relationship(lazy="selectin")
