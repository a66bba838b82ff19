# prizebot/services/rewards.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from prizebot.database.models import Coupon, GameOutcome, IssuedReward
from prizebot.database.repo.rewards_repo import get_reward, list_user_rewards
from prizebot.database.tx import insert_once
from prizebot.services.errors import GameInactive, PersistenceFailure
from prizebot.utils.dates import utc_now

log = logging.getLogger(__name__)

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _base36(n: int) -> str:
    if n <= 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_BASE36[r])
    return "".join(reversed(out))


def personal_code(coupon_code: str, *, user_id: int, issued_at: datetime) -> str:
    ms = int(issued_at.replace(tzinfo=timezone.utc).timestamp() * 1000)
    return f"{coupon_code}-{_base36(ms)}-{_base36(user_id)}"


@dataclass(frozen=True, slots=True)
class IssueResult:
    reward: IssuedReward | None
    already_owned: bool = False

    @property
    def issued(self) -> bool:
        return self.reward is not None and not self.already_owned


class RewardService:
    VALIDITY_DAYS = 30

    def __init__(self, *, validity_days: int = VALIDITY_DAYS) -> None:
        self.validity_days = validity_days

    async def issue_reward(
        self,
        session: AsyncSession,
        *,
        user_id: int,
        outcome: GameOutcome,
        source: str,
        now: datetime | None = None,
    ) -> IssueResult:
        """
        Turn a winning outcome into an IssuedReward, at most once per
        (user, coupon). Losing outcomes are a no-op.
        """
        if not outcome.is_win:
            return IssueResult(reward=None)

        coupon: Coupon | None = outcome.coupon
        if coupon is None:
            raise GameInactive(f"outcome {outcome.id} points to a missing coupon")

        existing = await get_reward(session, user_id=user_id, coupon_id=coupon.id)
        if existing is not None:
            return IssueResult(reward=existing, already_owned=True)

        issued_at = now or utc_now()
        reward = IssuedReward(
            user_id=user_id,
            coupon=coupon,
            code=personal_code(coupon.code, user_id=user_id, issued_at=issued_at),
            source=source,
            issued_at=issued_at,
            expires_at=issued_at + timedelta(days=self.validity_days),
            is_used=False,
        )

        if await insert_once(session, reward):
            log.info("Issued reward %s (coupon=%s) to user=%s", reward.code, coupon.code, user_id)
            return IssueResult(reward=reward)

        # Lost a race with another win for the same coupon
        existing = await get_reward(session, user_id=user_id, coupon_id=coupon.id)
        if existing is None:
            raise PersistenceFailure(f"reward insert rejected for user {user_id}, coupon {coupon.id}")
        return IssueResult(reward=existing, already_owned=True)

    @staticmethod
    async def list_rewards(
        session: AsyncSession,
        user_id: int,
        *,
        include_used: bool = False,
        now: datetime | None = None,
    ) -> list[IssuedReward]:
        return await list_user_rewards(
            session,
            user_id=user_id,
            now=now or utc_now(),
            include_used=include_used,
        )
