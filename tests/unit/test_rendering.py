"""
Unit tests for personal codes and chat rendering of play results.
"""

from datetime import datetime
from decimal import Decimal

from prizebot.database.models import DiscountType, GameKind, format_discount
from prizebot.handlers.user.games import render_play_result
from prizebot.services.play import PlayResult, PlayState, RewardView
from prizebot.services.rewards import personal_code


class TestPersonalCode:
    def test_format(self):
        # 1000 ms -> "RS", user 36 -> "10"
        code = personal_code("SPRING10", user_id=36, issued_at=datetime(1970, 1, 1, 0, 0, 1))
        assert code == "SPRING10-RS-10"

    def test_differs_per_user(self):
        at = datetime(2026, 5, 1, 12, 0)
        assert personal_code("X", user_id=1, issued_at=at) != personal_code("X", user_id=2, issued_at=at)


class TestFormatDiscount:
    def test_percentage(self):
        assert format_discount(DiscountType.PERCENTAGE, Decimal("10.00")) == "-10%"

    def test_fixed(self):
        assert format_discount(DiscountType.FIXED, Decimal("5")) == "-5.00€"


class TestRenderPlayResult:
    def _result(self, **kw) -> PlayResult:
        base = dict(
            game_id=1,
            game_kind=GameKind.WHEEL,
            won=False,
            outcome_label="Try <again>",
            plays_left=2,
            states=(PlayState.IDLE, PlayState.CLOSED),
        )
        base.update(kw)
        return PlayResult(**base)

    def test_loss_escapes_label(self):
        text = render_play_result(self._result())
        assert "Try &lt;again&gt;" in text
        assert "Plays left: <b>2</b>" in text

    def test_win_shows_code_and_expiry(self):
        reward = RewardView(
            code="WIN10-ABC-1",
            discount_type=DiscountType.PERCENTAGE,
            discount_value=Decimal("10"),
            expires_at=datetime(2026, 6, 1),
        )
        text = render_play_result(self._result(won=True, outcome_label="-10%", reward=reward))
        assert "<code>WIN10-ABC-1</code>" in text
        assert "2026-06-01" in text
        assert "-10%" in text

    def test_already_owned(self):
        reward = RewardView(
            code="WIN10-ABC-1",
            discount_type=DiscountType.FIXED,
            discount_value=Decimal("5"),
            expires_at=datetime(2026, 6, 1),
        )
        text = render_play_result(self._result(won=True, reward=reward, already_owned=True))
        assert "already own" in text

    def test_state_is_last_transition(self):
        assert self._result().state == PlayState.CLOSED
        assert self._result(states=()).state == PlayState.IDLE
