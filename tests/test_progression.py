"""Tests for progression rules and increase_intensity."""

from __future__ import annotations

from datetime import datetime

from microdose_engine.config import ProgressionConfig
from microdose_engine.models.catalog import Catalog
from microdose_engine.models.enums import BurpeeStyle
from microdose_engine.models.movement import Band
from microdose_engine.models.progression_state import ProgressionState, UserMicrodoseState
from microdose_engine.progression import (
    increase_intensity,
    initial_progression,
    upgrade_burpee,
    upgrade_kb_swing,
    upgrade_pullup,
)


class TestUpgradeBurpee:
    def test_adds_rep_below_ceiling(self, now: datetime) -> None:
        state = ProgressionState(reps=3, style=BurpeeStyle.FOUR_COUNT)
        upgraded = upgrade_burpee(state, 10, now)
        assert upgraded.reps == 4
        assert upgraded.style == BurpeeStyle.FOUR_COUNT
        assert upgraded.level == 1
        assert upgraded.last_upgraded == now

    def test_style_steps_up_at_ceiling(self, now: datetime) -> None:
        state = ProgressionState(reps=10, style=BurpeeStyle.FOUR_COUNT, level=7)
        upgraded = upgrade_burpee(state, 10, now)
        assert upgraded.style == BurpeeStyle.SIX_COUNT
        assert upgraded.reps == 6
        assert upgraded.level == 8

    def test_full_ladder(self) -> None:
        expected = [
            (BurpeeStyle.SIX_COUNT, 6),
            (BurpeeStyle.SIX_COUNT_TWO_PUMP, 5),
            (BurpeeStyle.SEAL, 4),
        ]
        state = ProgressionState(reps=10, style=BurpeeStyle.FOUR_COUNT)
        for style, reps in expected:
            state = upgrade_burpee(state, 10)
            assert (state.style, state.reps) == (style, reps)
            state = ProgressionState(reps=10, style=state.style, level=state.level)

    def test_seal_at_ceiling_is_noop(self) -> None:
        state = ProgressionState(reps=10, style=BurpeeStyle.SEAL, level=20)
        assert upgrade_burpee(state, 10) == state

    def test_seal_below_ceiling_still_adds_reps(self) -> None:
        state = ProgressionState(reps=4, style=BurpeeStyle.SEAL)
        assert upgrade_burpee(state, 10).reps == 5

    def test_level_is_monotonic(self) -> None:
        state = ProgressionState(reps=3, style=BurpeeStyle.FOUR_COUNT)
        levels = []
        for _ in range(40):
            state = upgrade_burpee(state, 10)
            levels.append(state.level)
        assert levels == sorted(levels)

    def test_reset_reps_capped_by_low_ceiling(self) -> None:
        state = ProgressionState(reps=5, style=BurpeeStyle.FOUR_COUNT)
        assert upgrade_burpee(state, 5).reps == 5


class TestUpgradeKbSwing:
    def test_linear_from_base(self) -> None:
        state = ProgressionState(reps=5)
        upgraded = upgrade_kb_swing(state, base_reps=5, max_reps=15)
        assert upgraded.reps == 6
        assert upgraded.level == 1

    def test_capped_at_max(self) -> None:
        state = ProgressionState(reps=14, level=9)
        assert upgrade_kb_swing(state, base_reps=5, max_reps=15).reps == 15

    def test_noop_at_max(self) -> None:
        state = ProgressionState(reps=15, level=10)
        assert upgrade_kb_swing(state, base_reps=5, max_reps=15) == state


class TestUpgradePullup:
    def test_adds_rep_keeps_band(self) -> None:
        state = ProgressionState(reps=3, style=Band("red"))
        upgraded = upgrade_pullup(state, max_reps=8)
        assert upgraded.reps == 4
        assert upgraded.style == Band("red")

    def test_noop_at_max(self) -> None:
        state = ProgressionState(reps=8, style=Band("red"), level=5)
        assert upgrade_pullup(state, max_reps=8) == state


class TestIncreaseIntensity:
    def test_seeds_from_definition_defaults(self, catalog: Catalog, now: datetime) -> None:
        updated = increase_intensity("emom_burpee_5m", UserMicrodoseState(), catalog=catalog, now=now)
        progression = updated.progressions["emom_burpee_5m"]
        assert progression.reps == 4
        assert progression.style == BurpeeStyle.FOUR_COUNT
        assert progression.level == 1

    def test_swing_uses_definition_base(self, catalog: Catalog) -> None:
        updated = increase_intensity("emom_kb_swing_5m", UserMicrodoseState(), catalog=catalog)
        assert updated.progressions["emom_kb_swing_5m"].reps == 6

    def test_respects_config_ceiling(self, catalog: Catalog) -> None:
        state = UserMicrodoseState(
            progressions={"gtg_pullup_band": ProgressionState(reps=5, style=Band("red"))}
        )
        updated = increase_intensity(
            "gtg_pullup_band", state, ProgressionConfig(pullup_max_reps=5), catalog
        )
        assert updated.progressions["gtg_pullup_band"].reps == 5

    def test_unknown_definition_unchanged(self, catalog: Catalog) -> None:
        state = UserMicrodoseState(last_mobility_def_id="mobility_hip_cars")
        assert increase_intensity("nope", state, catalog=catalog) is state

    def test_mobility_definition_unchanged(self, catalog: Catalog) -> None:
        state = UserMicrodoseState()
        assert increase_intensity("mobility_hip_cars", state, catalog=catalog) is state

    def test_input_state_not_mutated(self, catalog: Catalog) -> None:
        state = UserMicrodoseState()
        increase_intensity("emom_burpee_5m", state, catalog=catalog)
        assert state.progressions == {}

    def test_initial_progression(self, catalog: Catalog) -> None:
        definition = catalog.microdoses["gtg_pullup_band"]
        assert initial_progression(definition) == ProgressionState(reps=3, style=Band("red"))
