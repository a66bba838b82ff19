# prizebot/services/errors.py
from __future__ import annotations


class GameError(Exception):
    """Base class for every error a play or a game edit can end with."""

    user_message = "⚠️ Something went wrong. Please try again later."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)


class MaxPlaysReached(GameError):
    user_message = "🎟 You have used all your plays for this game."

    def __init__(self, *, game_id: int, max_plays: int) -> None:
        self.game_id = game_id
        self.max_plays = max_plays
        super().__init__(f"max plays reached for game {game_id} ({max_plays})")


class GameNotFound(GameError):
    user_message = "😴 No game is running right now. Check back soon!"


class GameInactive(GameError):
    user_message = "😴 This game can't be played right now."


class PersistenceFailure(GameError):
    """A ledger or reward write failed; the play did not happen."""


class InvalidGameDefinition(GameError):
    user_message = "❌ Invalid game definition."
