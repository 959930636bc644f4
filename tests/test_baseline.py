"""Tests for the baseline initializer."""

import pytest

from attune.contracts import (
    AdjustmentDirection,
    DistractionCategory,
    InterventionType,
    MotivationType,
    NudgeTone,
    OnboardingProfile,
    ResponsePredictionMatrix,
)
from attune.personalization.baseline import (
    compute_goal_drive_score,
    compute_intervention_tolerance,
    initialize_baseline_state,
    map_to_focus_length,
    map_to_strictness_level,
)


class TestStrictnessMapping:
    @pytest.mark.parametrize("scs,level", [
        (0.0, 1),
        (0.39, 1),
        (0.40, 2),
        (0.55, 3),
        (0.69, 3),
        (0.70, 4),
        (0.80, 4),
        (0.85, 5),
        (1.0, 5),
    ])
    def test_threshold_table(self, scs, level):
        assert map_to_strictness_level(scs) == level


class TestFocusLength:
    @pytest.mark.parametrize("focus,minutes", [
        (0.9, 45.0),
        (0.65, 45.0),
        (0.5, 25.0),
        (0.35, 25.0),
        (0.1, 15.0),
    ])
    def test_tiers(self, focus, minutes):
        assert map_to_focus_length(focus) == minutes


class TestScores:
    def test_goal_drive_score(self):
        profile = OnboardingProfile(
            goal_urgency_score=0.5,
            self_efficacy_score=0.5,
            motivation_type=MotivationType.INTRINSIC,
            baseline_focus_estimate=0.5,
        )
        # 0.2 + 0.2 + 0.15 + 0.05
        assert compute_goal_drive_score(profile) == pytest.approx(0.60)

    def test_goal_drive_score_clamped(self):
        profile = OnboardingProfile(
            goal_urgency_score=1.0,
            self_efficacy_score=1.0,
            motivation_type=MotivationType.INTRINSIC,
            baseline_focus_estimate=1.0,
        )
        assert compute_goal_drive_score(profile) == 1.0

    def test_intervention_tolerance(self):
        # 0.5 + 0.24 - 0.05 - 0.05
        assert compute_intervention_tolerance(0.2, 0.8, 0.5) == pytest.approx(0.64)

    def test_intervention_tolerance_clamped(self):
        assert compute_intervention_tolerance(1.0, 0.0, 1.0) == pytest.approx(0.15)
        assert 0.0 <= compute_intervention_tolerance(1.0, 0.0, 1.0) <= 1.0


class TestInitializeBaselineState:
    def test_high_compatibility_profile(self, now):
        predicted = ResponsePredictionMatrix(reflective=0.8, soft_delay=0.6, hard_block=0.3)
        profile = OnboardingProfile(
            strictness_compatibility=0.80,
            predicted_response_matrix=predicted,
        )

        state = initialize_baseline_state(profile, now=now)

        assert state.baseline_strictness == 4
        assert state.strictness.current_level == 4
        assert state.strictness.direction == AdjustmentDirection.HOLD
        assert state.compliance_matrix.probabilities() == {
            InterventionType.REFLECTIVE: 0.8,
            InterventionType.SOFT_DELAY: 0.6,
            InterventionType.HARD_BLOCK: 0.3,
        }

    def test_zero_history(self, now):
        state = initialize_baseline_state(OnboardingProfile(), now=now)

        for _, tracking in state.compliance_matrix.items():
            assert tracking.attempts == 0
            assert tracking.successes == 0
        assert state.total_interactions == 0
        assert state.attention.session_history == ()
        assert state.habits.current_streak == 0
        assert state.fatigue.fatigue_score == 0.0
        assert state.last_daily_update == now
        assert state.recent_window_started == now

    def test_effectiveness_favors_onboarding_tone(self, now):
        profile = OnboardingProfile(nudge_tone=NudgeTone.CHALLENGE)
        state = initialize_baseline_state(profile, now=now)

        assert state.nudge_effectiveness[NudgeTone.CHALLENGE] == 0.7
        assert state.nudge_effectiveness[NudgeTone.SUPPORTIVE] == 0.5
        assert state.baseline_nudge_tone == NudgeTone.CHALLENGE

    def test_focus_length_seeds_attention(self, now):
        profile = OnboardingProfile(baseline_focus_estimate=0.7)
        state = initialize_baseline_state(profile, now=now)

        assert state.baseline_focus_length == 45.0
        assert state.attention.expected_focus_time == 45.0
        assert state.attention.recommended_session_length == 45.0

    def test_primary_distraction_carried(self, now):
        profile = OnboardingProfile(distraction_type_vector={DistractionCategory.GAMING: 0.9})
        state = initialize_baseline_state(profile, now=now)
        assert state.primary_distraction == DistractionCategory.GAMING
