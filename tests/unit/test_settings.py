"""
Unit tests for environment-driven settings.
"""

import pytest

from prizebot.config.settings import Settings

_KEYS = (
    "BOT_TOKEN",
    "DATABASE_URL",
    "ROOT_ADMIN_IDS",
    "ENVIRONMENT",
    "GAMES_DEBUG",
    "REWARD_VALIDITY_DAYS",
    "PLAY_SLOT_RETRIES",
)


@pytest.fixture
def env(monkeypatch):
    for key in _KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("BOT_TOKEN", "123:abc")
    return monkeypatch


class TestSettingsLoad:
    def test_defaults(self, env):
        s = Settings.load()
        assert s.bot_token == "123:abc"
        assert s.database_url.startswith("sqlite+aiosqlite")
        assert s.root_admin_ids == ()
        assert s.games_debug is False
        assert s.reward_validity_days == 30
        assert s.play_slot_retries == 3
        assert not s.is_dev

    def test_missing_token_fails_fast(self, env):
        env.delenv("BOT_TOKEN")
        with pytest.raises(RuntimeError, match="BOT_TOKEN"):
            Settings.load()

    @pytest.mark.parametrize("raw", ["1,2", "1 2", "[1, 2]", "'1', '2'"])
    def test_root_admin_ids_formats(self, env, raw):
        env.setenv("ROOT_ADMIN_IDS", raw)
        assert Settings.load().root_admin_ids == (1, 2)

    def test_invalid_admin_id(self, env):
        env.setenv("ROOT_ADMIN_IDS", "1,abc")
        with pytest.raises(RuntimeError, match="ROOT_ADMIN_IDS"):
            Settings.load()

    @pytest.mark.parametrize("raw,expected", [("1", True), ("yes", True), ("false", False), ("", False)])
    def test_games_debug_flag(self, env, raw, expected):
        env.setenv("GAMES_DEBUG", raw)
        assert Settings.load().games_debug is expected

    def test_reward_validity_must_be_positive(self, env):
        env.setenv("REWARD_VALIDITY_DAYS", "0")
        with pytest.raises(RuntimeError):
            Settings.load()

    def test_development_environment(self, env):
        env.setenv("ENVIRONMENT", "development")
        assert Settings.load().is_dev
