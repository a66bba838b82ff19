"""
Integration tests for PlayService against a real SQLite database.

Covers the full gate -> draw -> ledger -> reward flow, limit enforcement,
activity checks and concurrent plays from the same user.
"""

import asyncio
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from prizebot.database.models import GameKind, OutcomeKind
from prizebot.database.repo.plays_repo import count_plays, list_plays
from prizebot.database.repo.rewards_repo import count_rewards
from prizebot.services.errors import GameInactive, GameNotFound, MaxPlaysReached, PersistenceFailure
from prizebot.services.play import PlayService, PlayState
from prizebot.services.rewards import RewardService
from prizebot.utils.dates import utc_now
from tests.conftest import LOSE_ROLL, WIN_ROLL


class TestWinningPlay:
    async def test_first_play_wins_and_issues_reward(self, session, make_user, make_coupon, make_game):
        user = await make_user()
        coupon = await make_coupon("WIN10")
        game = await make_game(coupon, max_plays=3)
        now = utc_now()

        res = await PlayService(rng=WIN_ROLL).play_game(session, user_id=user.id, game_id=game.id, now=now)

        assert res.won
        assert res.outcome_label == "-10%"
        assert res.plays_left == 2
        assert res.reward is not None
        assert res.reward.code.startswith("WIN10-")
        assert res.reward.expires_at == now + timedelta(days=30)
        assert not res.already_owned
        assert res.states == (
            PlayState.IDLE,
            PlayState.GATED,
            PlayState.DRAWING,
            PlayState.RESOLVED_WIN,
            PlayState.CLOSED,
        )

        plays = await list_plays(session, user_id=user.id, game_id=game.id)
        assert [(p.attempt_no, p.outcome_kind) for p in plays] == [(1, OutcomeKind.WIN)]
        assert await count_rewards(session, user_id=user.id, coupon_id=coupon.id) == 1

    async def test_winning_same_prize_twice_keeps_one_reward(self, session, make_user, make_coupon, make_game):
        user = await make_user()
        coupon = await make_coupon("WIN10")
        game = await make_game(coupon, max_plays=3)
        service = PlayService(rng=WIN_ROLL)

        first = await service.play_game(session, user_id=user.id, game_id=game.id)
        second = await service.play_game(session, user_id=user.id, game_id=game.id)

        assert second.won
        assert second.already_owned
        assert second.reward.code == first.reward.code
        assert await count_plays(session, user_id=user.id, game_id=game.id) == 2
        assert await count_rewards(session, user_id=user.id, coupon_id=coupon.id) == 1


class TestLosingPlay:
    async def test_loss_records_play_without_reward(self, session, make_user, make_coupon, make_game):
        user = await make_user()
        coupon = await make_coupon()
        game = await make_game(coupon, max_plays=3)

        res = await PlayService(rng=LOSE_ROLL).play_game(session, user_id=user.id, game_id=game.id)

        assert not res.won
        assert res.reward is None
        assert res.state == PlayState.CLOSED
        assert PlayState.RESOLVED_LOSE in res.states
        assert await count_plays(session, user_id=user.id, game_id=game.id) == 1
        assert await count_rewards(session, user_id=user.id, coupon_id=coupon.id) == 0


class TestPlayLimit:
    async def test_exhausted_user_is_refused_and_nothing_written(
        self, session, make_user, make_coupon, make_game
    ):
        user = await make_user()
        coupon = await make_coupon()
        game = await make_game(coupon, max_plays=3)
        service = PlayService(rng=LOSE_ROLL)
        for _ in range(3):
            await service.play_game(session, user_id=user.id, game_id=game.id)

        with pytest.raises(MaxPlaysReached) as exc:
            await PlayService(rng=WIN_ROLL).play_game(session, user_id=user.id, game_id=game.id)

        assert exc.value.max_plays == 3
        assert await count_plays(session, user_id=user.id, game_id=game.id) == 3
        assert await count_rewards(session, user_id=user.id, coupon_id=coupon.id) == 0

    async def test_refused_play_keeps_session_usable(self, session, make_user, make_coupon, make_game):
        user = await make_user()
        telegram_id = user.telegram_id
        coupon = await make_coupon()
        game = await make_game(coupon, max_plays=1)
        service = PlayService(rng=LOSE_ROLL)
        await service.play_game(session, user_id=user.id, game_id=game.id)

        for _ in range(2):
            with pytest.raises(MaxPlaysReached):
                await service.play_game(session, user_id=user.id, game_id=game.id)

        # objects loaded before the refusals are still readable without a reload
        assert (user.telegram_id, game.max_plays_per_user, coupon.code) == (telegram_id, 1, "WIN10")
        assert await count_plays(session, user_id=user.id, game_id=game.id) == 1

    async def test_five_attempts_with_limit_three(self, session, make_user, make_coupon, make_game):
        user = await make_user()
        coupon = await make_coupon()
        game = await make_game(coupon, max_plays=3)
        service = PlayService(rng=LOSE_ROLL)

        left, refused = [], 0
        for _ in range(5):
            try:
                left.append((await service.play_game(session, user_id=user.id, game_id=game.id)).plays_left)
            except MaxPlaysReached:
                refused += 1

        assert left == [2, 1, 0]
        assert refused == 2
        plays = await list_plays(session, user_id=user.id, game_id=game.id)
        assert [p.attempt_no for p in plays] == [1, 2, 3]

    async def test_limits_are_per_user(self, session, make_user, make_coupon, make_game):
        alice, bob = await make_user(), await make_user()
        coupon = await make_coupon()
        game = await make_game(coupon, max_plays=1)
        service = PlayService(rng=LOSE_ROLL)

        await service.play_game(session, user_id=alice.id, game_id=game.id)
        res = await service.play_game(session, user_id=bob.id, game_id=game.id)

        assert res.plays_left == 0

    async def test_concurrent_plays_never_exceed_limit(self, db, make_user, make_coupon, make_game):
        user = await make_user()
        coupon = await make_coupon()
        game = await make_game(coupon, max_plays=2)
        service = PlayService(rng=LOSE_ROLL)

        async def one_play():
            async with db.session() as s:
                return await service.play_game(s, user_id=user.id, game_id=game.id)

        results = await asyncio.gather(*(one_play() for _ in range(5)), return_exceptions=True)

        played = [r for r in results if not isinstance(r, BaseException)]
        refused = [r for r in results if isinstance(r, MaxPlaysReached)]
        assert len(played) == 2
        assert len(refused) == 3

        async with db.session() as s:
            assert await count_plays(s, user_id=user.id, game_id=game.id) == 2


class TestActivity:
    async def test_inactive_game_is_refused(self, session, make_user, make_coupon, make_game):
        user = await make_user()
        coupon = await make_coupon()
        game = await make_game(coupon, is_active=False)

        with pytest.raises(GameInactive):
            await PlayService(rng=WIN_ROLL).play_game(session, user_id=user.id, game_id=game.id)
        assert await count_plays(session, user_id=user.id, game_id=game.id) == 0

    async def test_game_outside_window_is_refused(self, session, make_user, make_coupon, make_game):
        user = await make_user()
        coupon = await make_coupon()
        now = utc_now()
        game = await make_game(coupon, start_at=now + timedelta(days=1), end_at=now + timedelta(days=2))

        with pytest.raises(GameInactive):
            await PlayService().play_game(session, user_id=user.id, game_id=game.id, now=now)

    async def test_unknown_game(self, session, make_user):
        user = await make_user()
        with pytest.raises(GameNotFound):
            await PlayService().play_game(session, user_id=user.id, game_id=9999)

    async def test_disabled_prize_coupon_blocks_play(self, session, make_user, make_coupon, make_game):
        user = await make_user()
        coupon = await make_coupon()
        game = await make_game(coupon)
        coupon.is_active = False
        await session.commit()

        with pytest.raises(GameInactive):
            await PlayService(rng=LOSE_ROLL).play_game(session, user_id=user.id, game_id=game.id)

    async def test_debug_previews_inactive_game_but_keeps_limit(
        self, session, make_user, make_coupon, make_game
    ):
        user = await make_user()
        coupon = await make_coupon()
        game = await make_game(coupon, is_active=False, max_plays=1)
        service = PlayService(debug=True, rng=LOSE_ROLL)

        res = await service.play_game(session, user_id=user.id, game_id=game.id)
        assert res.plays_left == 0

        with pytest.raises(MaxPlaysReached):
            await service.play_game(session, user_id=user.id, game_id=game.id)


class TestPlayActive:
    async def test_plays_newest_open_game_of_kind(self, session, make_user, make_coupon, make_game):
        user = await make_user()
        coupon = await make_coupon()
        await make_game(coupon, name="old")
        newest = await make_game(coupon, name="new")

        res = await PlayService(rng=LOSE_ROLL).play_active(session, user_id=user.id, kind=GameKind.SCRATCH)

        assert res.game_id == newest.id

    async def test_no_open_game_of_kind(self, session, make_user, make_coupon, make_game):
        user = await make_user()
        coupon = await make_coupon()
        await make_game(coupon)

        with pytest.raises(GameNotFound):
            await PlayService().play_active(session, user_id=user.id, kind=GameKind.WHEEL)

    async def test_open_games_report_plays_left(self, session, make_user, make_coupon, make_game):
        user = await make_user()
        coupon = await make_coupon()
        game = await make_game(coupon, max_plays=2)
        await make_game(coupon, is_active=False)
        service = PlayService(rng=LOSE_ROLL)
        await service.play_game(session, user_id=user.id, game_id=game.id)

        statuses = await service.open_games(session, user_id=user.id)

        assert [(st.game.id, st.plays_left) for st in statuses] == [(game.id, 1)]


class BrokenRewardService(RewardService):
    """Fails the reward write after the draw has already happened."""

    async def issue_reward(self, session, **kwargs):
        raise OperationalError("INSERT INTO issued_rewards", {}, Exception("disk I/O error"))


class TestStorageFailure:
    async def test_failed_reward_write_rolls_back_the_play(self, session, make_user, make_coupon, make_game):
        user = await make_user()
        coupon = await make_coupon()
        game = await make_game(coupon, max_plays=3)

        with pytest.raises(PersistenceFailure):
            await PlayService(rng=WIN_ROLL, rewards=BrokenRewardService()).play_game(
                session, user_id=user.id, game_id=game.id
            )

        assert await count_plays(session, user_id=user.id, game_id=game.id) == 0
        assert await count_rewards(session, user_id=user.id, coupon_id=coupon.id) == 0

        res = await PlayService(rng=LOSE_ROLL).play_game(session, user_id=user.id, game_id=game.id)
        assert res.plays_left == 2

    async def test_failed_reward_write_inside_open_transaction(
        self, session, make_user, make_coupon, make_game
    ):
        user = await make_user()
        coupon = await make_coupon()
        game = await make_game(coupon, max_plays=3)
        # an earlier read opens the transaction, as the session middleware does
        assert await count_plays(session, user_id=user.id, game_id=game.id) == 0
        assert session.in_transaction()

        with pytest.raises(PersistenceFailure):
            await PlayService(rng=WIN_ROLL, rewards=BrokenRewardService()).play_game(
                session, user_id=user.id, game_id=game.id
            )

        assert session.in_transaction()
        assert await count_plays(session, user_id=user.id, game_id=game.id) == 0

        res = await PlayService(rng=LOSE_ROLL).play_game(session, user_id=user.id, game_id=game.id)
        await session.commit()
        assert res.plays_left == 2
        assert await count_plays(session, user_id=user.id, game_id=game.id) == 1
