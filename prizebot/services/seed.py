# prizebot/services/seed.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from prizebot.database.models import AuditAction, DiscountType, GameKind, OutcomeKind
from prizebot.database.repo.audit_repo import log_action
from prizebot.database.repo.coupons_repo import get_coupon_by_code, get_or_create_coupon
from prizebot.database.tx import transactional
from prizebot.services.errors import InvalidGameDefinition
from prizebot.services.games import (
    DEFAULT_FLIP_WIN_PROBABILITY,
    GameService,
    OutcomeSpec,
    card_flip_outcomes,
)
from prizebot.utils.dates import parse_dt

log = logging.getLogger(__name__)


@dataclass(slots=True)
class SeedReport:
    coupons_created: list[str] = field(default_factory=list)
    games_created: list[int] = field(default_factory=list)


def _enum(enum_cls, raw: Any, what: str):
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidGameDefinition(f"invalid {what} {raw!r} (expected one of: {allowed})") from e


async def _coupon_id(session: AsyncSession, code: str | None) -> int | None:
    if code is None:
        return None
    coupon = await get_coupon_by_code(session, code)
    if coupon is None:
        raise InvalidGameDefinition(f"unknown coupon code {code!r}")
    return coupon.id


async def _outcomes(session: AsyncSession, kind: GameKind, entry: dict[str, Any]) -> list[OutcomeSpec]:
    if kind == GameKind.FLIP and "outcomes" not in entry:
        coupon_id = await _coupon_id(session, entry.get("coupon"))
        if coupon_id is None:
            raise InvalidGameDefinition(f"card flip {entry.get('name')!r} needs a coupon")
        return card_flip_outcomes(
            coupon_id,
            float(entry.get("win_probability", DEFAULT_FLIP_WIN_PROBABILITY)),
        )

    out: list[OutcomeSpec] = []
    for raw in entry.get("outcomes") or []:
        out.append(
            OutcomeSpec(
                label=str(raw.get("label", "")),
                kind=_enum(OutcomeKind, raw.get("kind", "lose"), "outcome kind"),
                weight=float(raw.get("weight", 0)),
                coupon_id=await _coupon_id(session, raw.get("coupon")),
                color=raw.get("color"),
            )
        )
    return out


async def seed_games(session: AsyncSession, data: dict[str, Any]) -> SeedReport:
    """
    Loads coupons and games from a dict shaped like games.example.json.
    Existing coupon codes are reused; games are always created.
    Everything is written in one transaction.
    """
    report = SeedReport()

    async with transactional(session):
        for raw in data.get("coupons") or []:
            try:
                value = Decimal(str(raw["discount_value"]))
            except (KeyError, InvalidOperation) as e:
                raise InvalidGameDefinition(f"coupon {raw.get('code')!r} has no valid discount_value") from e
            if value <= 0:
                raise InvalidGameDefinition(f"coupon {raw.get('code')!r} discount must be > 0")

            coupon, created = await get_or_create_coupon(
                session,
                code=str(raw["code"]),
                name=str(raw.get("name", "")),
                discount_type=_enum(DiscountType, raw.get("discount_type", "percentage"), "discount type"),
                discount_value=value,
            )
            if created:
                report.coupons_created.append(coupon.code)
                await log_action(
                    session,
                    action=AuditAction.COUPON_CREATE,
                    target_type="coupon",
                    target_id=coupon.id,
                    payload={"code": coupon.code, "source": "seed"},
                )

        for entry in data.get("games") or []:
            kind = _enum(GameKind, entry.get("kind"), "game kind")
            game = await GameService.create_game(
                session,
                kind=kind,
                name=str(entry.get("name", "")),
                description=str(entry.get("description", "")),
                outcomes=await _outcomes(session, kind, entry),
                max_plays_per_user=int(entry.get("max_plays_per_user", 1)),
                is_active=bool(entry.get("is_active", False)),
                start_at=parse_dt(entry.get("start_at")),
                end_at=parse_dt(entry.get("end_at")),
                design=entry.get("design"),
            )
            report.games_created.append(game.id)

    log.info(
        "Seeded %s coupon(s) and %s game(s)",
        len(report.coupons_created),
        len(report.games_created),
    )
    return report
