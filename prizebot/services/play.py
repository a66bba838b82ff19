# prizebot/services/play.py
from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from prizebot.config.settings import Settings
from prizebot.database.models import DiscountType, GameDefinition, GameKind, IssuedReward
from prizebot.database.repo.games_repo import find_active_game, get_game, list_open_games
from prizebot.database.tx import transactional
from prizebot.services.draw import draw
from prizebot.services.errors import (
    GameError,
    GameInactive,
    GameNotFound,
    MaxPlaysReached,
    PersistenceFailure,
)
from prizebot.services.gate import PlayGate
from prizebot.services.rewards import RewardService
from prizebot.utils.dates import utc_now

log = logging.getLogger(__name__)


class PlayState(str, enum.Enum):
    IDLE = "idle"
    GATED = "gated"
    DRAWING = "drawing"
    RESOLVED_WIN = "resolved_win"
    RESOLVED_LOSE = "resolved_lose"
    CLOSED = "closed"


@dataclass(frozen=True, slots=True)
class RewardView:
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    expires_at: datetime

    @classmethod
    def from_reward(cls, reward: IssuedReward) -> "RewardView":
        return cls(
            code=reward.code,
            discount_type=reward.coupon.discount_type,
            discount_value=reward.coupon.discount_value,
            expires_at=reward.expires_at,
        )


@dataclass(frozen=True, slots=True)
class PlayResult:
    game_id: int
    game_kind: GameKind
    won: bool
    outcome_label: str
    plays_left: int
    reward: RewardView | None = None
    already_owned: bool = False
    states: tuple[PlayState, ...] = ()

    @property
    def state(self) -> PlayState:
        return self.states[-1] if self.states else PlayState.IDLE


@dataclass(frozen=True, slots=True)
class GameStatus:
    game: GameDefinition
    plays_left: int


class PlayService:
    """
    Runs one play: gate -> draw -> ledger write -> reward.

    `debug` comes from configuration (GAMES_DEBUG) and only lets inactive or
    out-of-window games be played for previews. It never skips the
    play-count gate.
    """

    def __init__(
        self,
        *,
        debug: bool = False,
        rng: random.Random | None = None,
        gate: PlayGate | None = None,
        rewards: RewardService | None = None,
    ) -> None:
        self.debug = debug
        self.rng = rng
        self.gate = gate or PlayGate()
        self.rewards = rewards or RewardService()
        if debug:
            log.warning("PlayService running in debug mode: game activity windows are ignored")

    @classmethod
    def from_settings(cls, settings: Settings, *, rng: random.Random | None = None) -> "PlayService":
        return cls(
            debug=settings.games_debug,
            rng=rng,
            gate=PlayGate(slot_retries=settings.play_slot_retries),
            rewards=RewardService(validity_days=settings.reward_validity_days),
        )

    async def play_game(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        game_id: int,
        now: datetime | None = None,
    ) -> PlayResult:
        now = now or utc_now()
        try:
            async with transactional(session):
                game = await get_game(session, game_id)
                if game is None:
                    raise GameNotFound(f"game {game_id} does not exist")
                return await self._play(session, user_id=user_id, game=game, now=now)
        except GameError:
            raise
        except SQLAlchemyError as e:
            log.exception("Play failed to persist (user=%s game=%s)", user_id, game_id)
            raise PersistenceFailure(str(e)) from e

    async def play_active(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        kind: GameKind,
        now: datetime | None = None,
    ) -> PlayResult:
        now = now or utc_now()
        try:
            async with transactional(session):
                game = await find_active_game(session, kind, now)
                if game is None:
                    raise GameNotFound(f"no active {kind.value} game")
                return await self._play(session, user_id=user_id, game=game, now=now)
        except GameError:
            raise
        except SQLAlchemyError as e:
            log.exception("Play failed to persist (user=%s kind=%s)", user_id, kind.value)
            raise PersistenceFailure(str(e)) from e

    async def open_games(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        now: datetime | None = None,
    ) -> list[GameStatus]:
        games = await list_open_games(session, now or utc_now())
        out: list[GameStatus] = []
        for game in games:
            left = await self.gate.remaining(
                session,
                user_id=user_id,
                game_id=game.id,
                max_plays=game.max_plays_per_user,
            )
            out.append(GameStatus(game=game, plays_left=left))
        return out

    def _ensure_playable(self, game: GameDefinition, now: datetime) -> None:
        if not self.debug and not game.is_open(now):
            raise GameInactive(f"game {game.id} is not open")
        if not game.outcomes:
            raise GameInactive(f"game {game.id} has no outcomes")
        for outcome in game.outcomes:
            if outcome.is_win and (outcome.coupon is None or not outcome.coupon.is_active):
                raise GameInactive(f"game {game.id}: prize coupon of outcome {outcome.id} is unavailable")

    async def _play(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        game: GameDefinition,
        now: datetime,
    ) -> PlayResult:
        states = [PlayState.IDLE]
        self._ensure_playable(game, now)

        # 1) Gate
        allowed = await self.gate.can_play(
            session,
            user_id=user_id,
            game_id=game.id,
            max_plays=game.max_plays_per_user,
        )
        if not allowed:
            log.info("Gate refused user=%s game=%s (max=%s)", user_id, game.id, game.max_plays_per_user)
            raise MaxPlaysReached(game_id=game.id, max_plays=game.max_plays_per_user)
        states.append(PlayState.GATED)

        # 2) Draw exactly once; a storage failure below never re-rolls
        states.append(PlayState.DRAWING)
        outcome = draw(game.outcomes, self.rng)

        # 3) Ledger (authoritative slot claim)
        record = await self.gate.record_play(session, user_id=user_id, game=game, outcome=outcome)
        plays_left = max(0, game.max_plays_per_user - record.attempt_no)

        if not outcome.is_win:
            states += [PlayState.RESOLVED_LOSE, PlayState.CLOSED]
            log.info("Play user=%s game=%s slot=%s -> lose", user_id, game.id, record.attempt_no)
            return PlayResult(
                game_id=game.id,
                game_kind=game.kind,
                won=False,
                outcome_label=outcome.label,
                plays_left=plays_left,
                states=tuple(states),
            )

        # 4) Reward
        states.append(PlayState.RESOLVED_WIN)
        issued = await self.rewards.issue_reward(
            session,
            user_id=user_id,
            outcome=outcome,
            source=game.kind.value,
            now=now,
        )
        states.append(PlayState.CLOSED)
        log.info(
            "Play user=%s game=%s slot=%s -> win %s%s",
            user_id,
            game.id,
            record.attempt_no,
            outcome.label,
            " (already owned)" if issued.already_owned else "",
        )
        return PlayResult(
            game_id=game.id,
            game_kind=game.kind,
            won=True,
            outcome_label=outcome.label,
            plays_left=plays_left,
            reward=RewardView.from_reward(issued.reward) if issued.reward else None,
            already_owned=issued.already_owned,
            states=tuple(states),
        )
