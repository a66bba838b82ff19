from .user import User, Admin, AdminRole
from .coupon import Coupon, DiscountType, format_discount
from .game import GameDefinition, GameKind, GameOutcome, OutcomeKind
from .play import PlayRecord
from .reward import IssuedReward
from .audit import AuditAction, AuditLog

__all__ = [
    "User",
    "Admin",
    "AdminRole",
    "Coupon",
    "DiscountType",
    "format_discount",
    "GameDefinition",
    "GameKind",
    "GameOutcome",
    "OutcomeKind",
    "PlayRecord",
    "IssuedReward",
    "AuditAction",
    "AuditLog",
]
