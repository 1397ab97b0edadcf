"""Tests for Vo2RecencyRule: VO2 is due after 4 hours without one."""

from __future__ import annotations

from datetime import timedelta

from microdose_engine.models.context import UserContext
from microdose_engine.models.enums import MicrodoseCategory
from microdose_engine.models.session import ShownButSkipped
from microdose_engine.rules.vo2_recency import Vo2RecencyRule


class TestVo2RecencyRule:
    def setup_method(self) -> None:
        self.rule = Vo2RecencyRule()

    def test_fires_on_empty_history(self, empty_context: UserContext) -> None:
        rec = self.rule.evaluate(empty_context, [])
        assert rec is not None
        assert rec.category == MicrodoseCategory.VO2

    def test_fires_when_last_vo2_is_old(self, now, make_session) -> None:
        history = [make_session("emom_burpee_5m", hours_ago=5)]
        rec = self.rule.evaluate(UserContext(now=now, recent_sessions=tuple(history)), history)
        assert rec is not None
        assert rec.category == MicrodoseCategory.VO2

    def test_quiet_when_vo2_is_recent(self, now, make_session) -> None:
        history = [make_session("emom_kb_swing_5m", hours_ago=2)]
        assert self.rule.evaluate(UserContext(now=now), history) is None

    def test_boundary_at_four_hours(self, now, make_session) -> None:
        # Strictly older than 4h is required
        history = [make_session("emom_kb_swing_5m", hours_ago=4)]
        assert self.rule.evaluate(UserContext(now=now), history) is None

    def test_fires_when_only_other_categories(self, now, make_session) -> None:
        history = [make_session("gtg_pullup_band", hours_ago=0.5)]
        assert self.rule.evaluate(UserContext(now=now), history) is not None

    def test_recent_skip_counts_as_vo2(self, now, make_session) -> None:
        history = [ShownButSkipped("emom_burpee_5m", now - timedelta(minutes=1))]
        assert self.rule.evaluate(UserContext(now=now), history) is None
