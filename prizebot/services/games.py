# prizebot/services/games.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from prizebot.database.models import AuditAction, GameDefinition, GameKind, GameOutcome, OutcomeKind
from prizebot.database.repo.audit_repo import log_action
from prizebot.database.repo.coupons_repo import get_coupons
from prizebot.database.repo.games_repo import (
    GameStats,
    ended_active_game_ids,
    get_game,
    get_game_stats,
    list_games,
    set_game_active,
)
from prizebot.database.tx import transactional
from prizebot.services.draw import TOTAL_WEIGHT, validate_weights
from prizebot.services.errors import GameNotFound, InvalidGameDefinition

log = logging.getLogger(__name__)

WHEEL_MIN_SEGMENTS = 4
WHEEL_MAX_SEGMENTS = 12
DEFAULT_FLIP_WIN_PROBABILITY = 33.33


@dataclass(frozen=True, slots=True)
class OutcomeSpec:
    label: str
    kind: OutcomeKind
    weight: float
    coupon_id: int | None = None
    color: str | None = None


def card_flip_outcomes(
    coupon_id: int,
    win_probability: float = DEFAULT_FLIP_WIN_PROBABILITY,
    *,
    win_label: str = "You win!",
    lose_label: str = "Try again",
) -> list[OutcomeSpec]:
    """
    A card flip is one prize with a win chance; the losing card takes the rest.
    """
    p = float(win_probability)
    if not 0 < p <= TOTAL_WEIGHT:
        raise InvalidGameDefinition(f"win probability must be in (0, 100], got {p:g}")
    return [
        OutcomeSpec(label=win_label, kind=OutcomeKind.WIN, weight=p, coupon_id=coupon_id),
        OutcomeSpec(label=lose_label, kind=OutcomeKind.LOSE, weight=round(TOTAL_WEIGHT - p, 6)),
    ]


def validate_outcomes(kind: GameKind, outcomes: Sequence[OutcomeSpec]) -> None:
    if not outcomes:
        raise InvalidGameDefinition("a game needs at least one outcome")

    if kind == GameKind.WHEEL and not WHEEL_MIN_SEGMENTS <= len(outcomes) <= WHEEL_MAX_SEGMENTS:
        raise InvalidGameDefinition(
            f"a wheel needs {WHEEL_MIN_SEGMENTS}-{WHEEL_MAX_SEGMENTS} segments, got {len(outcomes)}"
        )

    validate_weights(o.weight for o in outcomes)

    for i, o in enumerate(outcomes):
        if not o.label.strip():
            raise InvalidGameDefinition(f"outcome #{i + 1} has no label")
        if o.kind == OutcomeKind.WIN and o.coupon_id is None:
            raise InvalidGameDefinition(f"winning outcome {o.label!r} has no coupon")
        if o.kind == OutcomeKind.LOSE and o.coupon_id is not None:
            raise InvalidGameDefinition(f"losing outcome {o.label!r} must not carry a coupon")


class GameService:
    @staticmethod
    async def create_game(
        session: AsyncSession,
        *,
        kind: GameKind,
        name: str,
        outcomes: Sequence[OutcomeSpec],
        description: str = "",
        max_plays_per_user: int = 1,
        is_active: bool = False,
        start_at: datetime | None = None,
        end_at: datetime | None = None,
        design: dict[str, Any] | None = None,
        actor_user_id: int | None = None,
    ) -> GameDefinition:
        if not name.strip():
            raise InvalidGameDefinition("game name is required")
        if max_plays_per_user < 1:
            raise InvalidGameDefinition("max plays per user must be >= 1")
        if start_at and end_at and start_at >= end_at:
            raise InvalidGameDefinition("start date must be before end date")
        validate_outcomes(kind, outcomes)

        async with transactional(session):
            coupons = await get_coupons(session, (o.coupon_id for o in outcomes if o.coupon_id is not None))
            for o in outcomes:
                if o.coupon_id is not None and o.coupon_id not in coupons:
                    raise InvalidGameDefinition(f"coupon {o.coupon_id} does not exist")

            game = GameDefinition(
                kind=kind,
                name=name.strip(),
                description=description.strip(),
                is_active=is_active,
                start_at=start_at,
                end_at=end_at,
                max_plays_per_user=max_plays_per_user,
                design_json=design,
                outcomes=[
                    GameOutcome(
                        position=i,
                        label=o.label.strip(),
                        kind=o.kind,
                        weight=float(o.weight),
                        coupon=coupons.get(o.coupon_id) if o.coupon_id is not None else None,
                        color=o.color,
                    )
                    for i, o in enumerate(outcomes)
                ],
            )
            session.add(game)
            await session.flush()

            await log_action(
                session,
                action=AuditAction.GAME_CREATE,
                target_type="game",
                target_id=game.id,
                actor_user_id=actor_user_id,
                payload={"kind": kind.value, "name": game.name, "outcomes": len(outcomes)},
            )

        log.info("Created %s game #%s %r (%s outcomes)", kind.value, game.id, game.name, len(outcomes))
        return game

    @staticmethod
    async def set_active(
        session: AsyncSession,
        game_id: int,
        active: bool,
        *,
        actor_user_id: int | None = None,
    ) -> None:
        async with transactional(session):
            if not await set_game_active(session, game_id, active):
                raise GameNotFound(f"game {game_id} does not exist")
            await log_action(
                session,
                action=AuditAction.GAME_ACTIVATE if active else AuditAction.GAME_DEACTIVATE,
                target_type="game",
                target_id=game_id,
                actor_user_id=actor_user_id,
            )
        log.info("Game #%s %s by user=%s", game_id, "activated" if active else "deactivated", actor_user_id)

    @staticmethod
    async def deactivate_ended(session: AsyncSession, now: datetime) -> list[int]:
        """
        Turns off every active game whose end_at has passed.
        """
        async with transactional(session):
            ids = await ended_active_game_ids(session, now)
            for game_id in ids:
                await set_game_active(session, game_id, False)
                await log_action(
                    session,
                    action=AuditAction.GAME_EXPIRE,
                    target_type="game",
                    target_id=game_id,
                    payload={"at": now.isoformat()},
                )
        return ids

    @staticmethod
    async def list_games(session: AsyncSession) -> list[GameDefinition]:
        return await list_games(session)

    @staticmethod
    async def stats(session: AsyncSession, game_id: int) -> tuple[GameDefinition, GameStats]:
        game = await get_game(session, game_id)
        if game is None:
            raise GameNotFound(f"game {game_id} does not exist")
        return game, await get_game_stats(session, game_id)
