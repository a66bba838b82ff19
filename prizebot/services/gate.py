# prizebot/services/gate.py
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from prizebot.database.models import GameDefinition, GameOutcome, PlayRecord
from prizebot.database.repo.plays_repo import count_plays, last_attempt_no
from prizebot.database.tx import insert_once
from prizebot.services.errors import MaxPlaysReached, PersistenceFailure

log = logging.getLogger(__name__)


class PlayGate:
    """
    Play-count gate over the play ledger.

    can_play()/remaining() are read-only previews. record_play() is the
    authoritative check: it claims the next attempt slot and relies on the
    (user, game, attempt_no) unique constraint, so a slot lost to a
    concurrent play is re-read instead of double-booked.
    """

    def __init__(self, *, slot_retries: int = 3) -> None:
        self.slot_retries = max(1, int(slot_retries))

    @staticmethod
    async def can_play(session: AsyncSession, *, user_id: int, game_id: int, max_plays: int) -> bool:
        plays = await count_plays(session, user_id=user_id, game_id=game_id)
        return plays < max_plays

    @staticmethod
    async def remaining(session: AsyncSession, *, user_id: int, game_id: int, max_plays: int) -> int:
        plays = await count_plays(session, user_id=user_id, game_id=game_id)
        return max(0, max_plays - plays)

    async def record_play(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        game: GameDefinition,
        outcome: GameOutcome,
    ) -> PlayRecord:
        for _ in range(self.slot_retries):
            slot = await last_attempt_no(session, user_id=user_id, game_id=game.id) + 1
            if slot > game.max_plays_per_user:
                raise MaxPlaysReached(game_id=game.id, max_plays=game.max_plays_per_user)

            record = PlayRecord(
                user_id=user_id,
                game_id=game.id,
                game_kind=game.kind,
                attempt_no=slot,
                outcome_id=outcome.id,
                outcome_kind=outcome.kind,
            )
            if await insert_once(session, record):
                return record

            log.info("Play slot %s taken concurrently (user=%s game=%s), retrying", slot, user_id, game.id)

        raise PersistenceFailure(f"could not claim a play slot for user {user_id} on game {game.id}")
