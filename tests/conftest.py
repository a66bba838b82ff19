"""
Shared fixtures for the prizebot test suite.

Integration tests run against a throwaway SQLite file per test, created
through the same Database class the bot uses, so the BEGIN IMMEDIATE
locking and the unique constraints behave exactly as in production.
"""

from __future__ import annotations

import os
from decimal import Decimal
from typing import AsyncIterator, Awaitable, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from prizebot.database.models import Coupon, DiscountType, GameDefinition, GameKind, OutcomeKind, User
from prizebot.database.session import Database
from prizebot.services.games import GameService, OutcomeSpec


def pytest_configure(config):
    """Keep Settings.load() usable without a real .env."""
    os.environ.setdefault("BOT_TOKEN", "123456:TEST")


class FixedRandom:
    """Stands in for random.Random: always returns the same roll."""

    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


# win occupies [0, 30) of a 30/70 game, lose the rest
WIN_ROLL = FixedRandom(0.10)
LOSE_ROLL = FixedRandom(0.90)


@pytest_asyncio.fixture
async def db(tmp_path) -> AsyncIterator[Database]:
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await database.init_models()
    yield database
    await database.close()


@pytest_asyncio.fixture
async def session(db: Database) -> AsyncIterator[AsyncSession]:
    async with db.session() as s:
        yield s


@pytest.fixture
def make_user(session: AsyncSession) -> Callable[..., Awaitable[User]]:
    counter = {"next": 1000}

    async def _make(telegram_id: int | None = None, username: str | None = None) -> User:
        if telegram_id is None:
            counter["next"] += 1
            telegram_id = counter["next"]
        user = User(telegram_id=telegram_id, username=username)
        session.add(user)
        await session.commit()
        return user

    return _make


@pytest.fixture
def make_coupon(session: AsyncSession) -> Callable[..., Awaitable[Coupon]]:
    async def _make(
        code: str = "WIN10",
        *,
        discount_type: DiscountType = DiscountType.PERCENTAGE,
        value: str = "10",
        is_active: bool = True,
    ) -> Coupon:
        coupon = Coupon(
            code=code,
            name=code,
            discount_type=discount_type,
            discount_value=Decimal(value),
            is_active=is_active,
        )
        session.add(coupon)
        await session.commit()
        return coupon

    return _make


@pytest.fixture
def make_game(session: AsyncSession) -> Callable[..., Awaitable[GameDefinition]]:
    """
    Scratch game with a 30% win (coupon) and a 70% lose outcome unless
    `outcomes` is given.
    """

    async def _make(
        coupon: Coupon,
        *,
        kind: GameKind = GameKind.SCRATCH,
        max_plays: int = 3,
        is_active: bool = True,
        outcomes: list[OutcomeSpec] | None = None,
        **kwargs,
    ) -> GameDefinition:
        if outcomes is None:
            outcomes = [
                OutcomeSpec(label="-10%", kind=OutcomeKind.WIN, weight=30, coupon_id=coupon.id),
                OutcomeSpec(label="Try again", kind=OutcomeKind.LOSE, weight=70),
            ]
        game = await GameService.create_game(
            session,
            kind=kind,
            name=kwargs.pop("name", f"{kind.value} test"),
            outcomes=outcomes,
            max_plays_per_user=max_plays,
            is_active=is_active,
            **kwargs,
        )
        await session.commit()
        return game

    return _make
