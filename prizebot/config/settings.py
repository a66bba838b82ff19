# prizebot/config/settings.py
from __future__ import annotations

import os
import re
from dataclasses import dataclass

from dotenv import load_dotenv


def _require(env: dict[str, str], key: str) -> str:
    v = env.get(key)
    if v is None or not v.strip():
        raise RuntimeError(f"Missing required environment variable: {key}")
    return v.strip()


def _to_int(value: str, key_name: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise RuntimeError(f"Invalid integer for {key_name}: {value!r}") from e


def _to_bool(value: str | None, default: bool = False) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_int_list(raw: str | None, key_name: str) -> list[int]:
    """
    Parses comma/space/newline separated ints.
    Accepts:
      "951258732"
      "951258732,123"
      "951258732 123"
      "[951258732, 123]"  (brackets ignored)
    """
    if not raw:
        return []

    cleaned = raw.strip().strip("[](){}").strip()
    if not cleaned:
        return []

    out: list[int] = []
    for p in re.split(r"[,\s]+", cleaned):
        p2 = p.strip().strip("'\"")
        if not p2:
            continue
        out.append(_to_int(p2, key_name))
    return out


@dataclass(frozen=True, slots=True)
class Settings:
    # --- required ---
    bot_token: str

    # --- optional ---
    database_url: str = "sqlite+aiosqlite:///./prizebot.db"

    # --- security / admin ---
    root_admin_ids: tuple[int, ...] = ()

    # --- environment ---
    environment: str = "production"  # production | development

    # --- games ---
    # preview inactive / out-of-window games; never bypasses the play-count gate
    games_debug: bool = False
    reward_validity_days: int = 30
    play_slot_retries: int = 3

    @property
    def is_dev(self) -> bool:
        return self.environment.lower() in {"dev", "development", "local"}

    @classmethod
    def load(cls) -> "Settings":
        """
        Loads from process env (and .env if present).
        Fails fast for required fields.
        """
        load_dotenv()
        env = os.environ

        bot_token = _require(env, "BOT_TOKEN")
        database_url = (env.get("DATABASE_URL") or "sqlite+aiosqlite:///./prizebot.db").strip()
        root_admin_ids = tuple(_parse_int_list(env.get("ROOT_ADMIN_IDS"), "ROOT_ADMIN_IDS"))
        environment = (env.get("ENVIRONMENT") or "production").strip() or "production"

        validity_raw = (env.get("REWARD_VALIDITY_DAYS") or "").strip()
        reward_validity_days = _to_int(validity_raw, "REWARD_VALIDITY_DAYS") if validity_raw else 30
        if reward_validity_days < 1:
            raise RuntimeError("REWARD_VALIDITY_DAYS must be >= 1")

        retries_raw = (env.get("PLAY_SLOT_RETRIES") or "").strip()
        play_slot_retries = _to_int(retries_raw, "PLAY_SLOT_RETRIES") if retries_raw else 3
        if play_slot_retries < 1:
            raise RuntimeError("PLAY_SLOT_RETRIES must be >= 1")

        return cls(
            bot_token=bot_token,
            database_url=database_url,
            root_admin_ids=root_admin_ids,
            environment=environment,
            games_debug=_to_bool(env.get("GAMES_DEBUG")),
            reward_validity_days=reward_validity_days,
            play_slot_retries=play_slot_retries,
        )
