# prizebot/database/models/coupon.py
from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, DateTime, Enum, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from prizebot.database.base import Base


class DiscountType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def format_discount(discount_type: DiscountType, value: Decimal) -> str:
    if discount_type == DiscountType.PERCENTAGE:
        return f"-{value.normalize():f}%"
    return f"-{value:.2f}€"


class Coupon(Base):
    """
    Coupon catalog entry. Game outcomes point here; players receive an
    IssuedReward carrying a personal code derived from `code`.
    """
    __tablename__ = "coupons"
    __table_args__ = (
        CheckConstraint("discount_value > 0", name="ck_coupons_value_positive"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(128), default="")

    discount_type: Mapped[DiscountType] = mapped_column(Enum(DiscountType, native_enum=False))
    discount_value: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), server_default=func.now())

    def describe(self) -> str:
        return format_discount(self.discount_type, self.discount_value)
