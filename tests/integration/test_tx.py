"""
Integration tests for the transactional() helper.
"""

import pytest

from prizebot.database.models import User
from prizebot.database.repo.users import get_user_by_telegram_id
from prizebot.database.tx import transactional


class TestTransactional:
    async def test_commits_when_it_owns_the_transaction(self, session):
        async with transactional(session):
            session.add(User(telegram_id=501))

        assert not session.in_transaction()
        assert await get_user_by_telegram_id(session, 501) is not None

    async def test_failed_block_discards_its_writes_only(self, session, make_user):
        user = await make_user(telegram_id=502, username="kept")

        with pytest.raises(RuntimeError):
            async with transactional(session):
                session.add(User(telegram_id=503))
                await session.flush()
                raise RuntimeError("refused")

        assert not session.in_transaction()
        # loaded before the failure, not expired by it
        assert user.username == "kept"
        assert await get_user_by_telegram_id(session, 503) is None

    async def test_nested_block_leaves_commit_to_the_caller(self, session):
        await get_user_by_telegram_id(session, 0)
        assert session.in_transaction()

        async with transactional(session):
            session.add(User(telegram_id=504))

        assert session.in_transaction()
        await session.rollback()
        assert await get_user_by_telegram_id(session, 504) is None
