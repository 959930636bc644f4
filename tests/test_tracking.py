"""Tests for attention evolution and habit tracking."""

from datetime import date, datetime, timedelta

import pytest

from attune.contracts import (
    AttentionEvolution,
    DistractionCategory,
    HabitCategory,
    HabitState,
    RecoveryStyle,
    SessionSnapshot,
    Trend,
)
from attune.tracking import attention, habits


def session(minutes: float, ok: bool = True) -> SessionSnapshot:
    return SessionSnapshot(duration_minutes=minutes, was_successful=ok)


class TestAttentionEvolution:
    def test_success_grows_recommendation(self):
        updated = attention.record_focus_session(AttentionEvolution(), session(30))

        assert updated.expected_focus_time == 30
        assert updated.success_rate == 1.0
        assert updated.growth_factor == 1.08
        assert updated.recommended_session_length == pytest.approx(32.4)

    def test_failure_shrinks_recommendation(self):
        updated = attention.record_focus_session(AttentionEvolution(), session(30, ok=False))
        assert updated.recommended_session_length == pytest.approx(27.0)

    def test_mixed_results_hold(self):
        state = attention.record_focus_session(AttentionEvolution(), session(20))
        state = attention.record_focus_session(state, session(30, ok=False))

        assert state.success_rate == 0.5
        assert state.growth_factor == 1.0
        assert state.recommended_session_length == pytest.approx(25.0)

    @pytest.mark.parametrize("minutes,expected", [(5, 10.0), (120, 90.0)])
    def test_recommendation_clamped(self, minutes, expected):
        updated = attention.record_focus_session(AttentionEvolution(), session(minutes))
        assert updated.recommended_session_length == expected

    def test_history_capped(self):
        state = AttentionEvolution()
        for _ in range(60):
            state = attention.record_focus_session(state, session(25))
        assert len(state.session_history) == 50

    def test_default_length_without_history(self):
        assert attention.recommended_session_length(AttentionEvolution()) == 25.0

    def test_improving_trend(self):
        state = AttentionEvolution()
        for minutes in [20] * 5 + [30] * 5:
            state = attention.record_focus_session(state, session(minutes))
        assert state.trend == Trend.IMPROVING

    def test_declining_trend(self):
        history = tuple(session(m) for m in [40] * 5 + [20] * 5)
        assert attention.compute_attention_trend(history) == Trend.DECLINING

    def test_short_history_is_stable(self):
        history = tuple(session(m) for m in [10, 50, 90])
        assert attention.compute_attention_trend(history) == Trend.STABLE


class TestStreaks:
    def test_first_day(self):
        state = habits.record_focus_day(HabitState(), date(2026, 3, 2), 25)

        assert state.current_streak == 1
        assert state.longest_streak == 1
        assert state.total_focus_days == 1
        assert state.weekly_focus_minutes[-1] == 25

    def test_same_day_accumulates(self):
        today = date(2026, 3, 2)
        state = habits.record_focus_day(HabitState(), today, 25)
        state = habits.record_focus_day(state, today, 15)

        assert state.current_streak == 1
        assert state.total_focus_days == 1
        assert state.weekly_focus_minutes[-1] == 40

    def test_consecutive_day_extends(self):
        state = habits.record_focus_day(HabitState(), date(2026, 3, 2), 30)
        state = habits.record_focus_day(state, date(2026, 3, 3), 20)

        assert state.current_streak == 2
        assert state.weekly_focus_minutes[-2:] == (30, 20)

    def test_gap_restarts_streak_and_shifts_week(self):
        state = habits.record_focus_day(HabitState(), date(2026, 3, 2), 30)
        state = habits.record_focus_day(state, date(2026, 3, 3), 20)
        state = habits.record_focus_day(state, date(2026, 3, 6), 10)

        assert state.current_streak == 1
        assert state.longest_streak == 2
        assert state.weekly_focus_minutes == (0, 0, 30, 20, 0, 0, 10)
        assert habits.weekly_minutes(state) == 60

    def test_long_gap_clears_week(self):
        state = habits.record_focus_day(HabitState(), date(2026, 3, 2), 30)
        state = habits.record_focus_day(state, date(2026, 3, 20), 10)
        assert state.weekly_focus_minutes == (0, 0, 0, 0, 0, 0, 10)

    def test_streak_survives_grace_day(self):
        state = HabitState(current_streak=4, last_focus_date=date(2026, 3, 1))
        assert habits.check_streak_broken(state, date(2026, 3, 2)).current_streak == 4

    def test_streak_broken_after_missed_day(self):
        state = HabitState(current_streak=4, longest_streak=4, last_focus_date=date(2026, 3, 1))
        broken = habits.check_streak_broken(state, date(2026, 3, 3))

        assert broken.current_streak == 0
        assert broken.longest_streak == 4


class TestSuggestions:
    def test_low_readiness_suggests_recovery(self):
        suggestions = habits.habit_suggestions(DistractionCategory.SOCIAL_MEDIA, 0.2, 5)

        assert len(suggestions) == 3
        assert all(s.category == HabitCategory.RECOVERY for s in suggestions)
        assert suggestions[0].id == "hb_walk"

    def test_no_streak_suggests_pre_focus_with_boost(self):
        suggestions = habits.habit_suggestions(DistractionCategory.SOCIAL_MEDIA, 0.8, 0)

        assert [s.id for s in suggestions] == ["hb_phone", "hb_intent", "hb_water"]
        assert suggestions[0].priority == 1.0

    def test_rumination_boosts_breathing(self):
        suggestions = habits.habit_suggestions(DistractionCategory.MENTAL_RUMINATION, 0.8, 3)

        assert suggestions[0].id == "hb_breathe"
        assert suggestions[0].priority == pytest.approx(0.75)

    def test_sorted_by_priority(self):
        suggestions = habits.habit_suggestions(DistractionCategory.GAMING, 0.8, 0)
        priorities = [s.priority for s in suggestions]
        assert priorities == sorted(priorities, reverse=True)


class TestRecoveryProtocol:
    @pytest.mark.parametrize("binge,ess,crs,style", [
        ("none", 0.5, 0.2, RecoveryStyle.MEDITATION),
        ("none", 0.5, 0.5, RecoveryStyle.REFLECTION),
        ("long-session", 0.7, 0.5, RecoveryStyle.BREATHING),
        ("long-session", 0.3, 0.5, RecoveryStyle.WALK),
        ("switch-burst", 0.6, 0.5, RecoveryStyle.BREATHING),
        ("switch-burst", 0.3, 0.5, RecoveryStyle.COLD_EXPOSURE),
    ])
    def test_protocol_selection(self, binge, ess, crs, style):
        protocol = habits.select_recovery_protocol(binge, ess, crs)
        assert protocol.style == style
        assert protocol.message

    def test_catalog_durations(self):
        assert habits.recovery_protocol(RecoveryStyle.WALK).duration_minutes == 5
        assert habits.recovery_protocol(RecoveryStyle.BREATHING).duration_minutes == 2


class TestMessages:
    @pytest.mark.parametrize("streak,fragment", [
        (0, "Start your focus streak"),
        (1, "Day 1 done"),
        (2, "Building momentum"),
        (5, "forming a habit"),
        (10, "rewiring"),
        (20, "second nature"),
        (45, "focus machine"),
    ])
    def test_streak_message(self, streak, fragment):
        assert fragment in habits.streak_message(streak)

    def test_greeting_combines_streak_and_trend(self, state):
        greeting = habits.personalized_greeting(state)
        assert greeting.startswith("Start your focus streak today!")
        assert greeting.endswith("Steady progress, keep going.")
