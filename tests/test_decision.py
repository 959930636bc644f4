"""Tests for the contextual decision engine."""

import pytest

from attune.contracts import (
    InterventionFatigueState,
    InterventionType,
    PersonalizationContext,
    PersonalizationState,
    RecoveryStyle,
    TimeOfDay,
    ToneBucket,
)
from attune.personalization.decision import (
    build_context,
    compute_intervention_suitability,
    compute_personalization_profile,
    compute_stress_proxy,
    compute_uninstall_risk,
    select_intervention_policy,
    select_recovery_recommendation,
    tone_bucket,
)


def make_context(**overrides) -> PersonalizationContext:
    values = dict(
        time_of_day=TimeOfDay.AFTERNOON,
        goal_conflict=0.5,
        distraction_severity=0.5,
        cognitive_readiness_score=0.5,
    )
    values.update(overrides)
    return PersonalizationContext(**values)


def with_fatigue(state: PersonalizationState, score: float) -> PersonalizationState:
    return state.model_copy(update={"fatigue": InterventionFatigueState(fatigue_score=score)})


class TestInterventionSuitability:
    def test_weighted_score(self):
        result = compute_intervention_suitability(make_context(), PersonalizationState())
        assert result.score == pytest.approx(0.5)
        assert result.recommended_type == InterventionType.SOFT_DELAY
        assert result.time_modifier == 1.0

    def test_time_modifier(self):
        result = compute_intervention_suitability(
            make_context(time_of_day=TimeOfDay.NIGHT), PersonalizationState(),
        )
        assert result.score == pytest.approx(0.35)
        assert result.time_modifier == 0.70

    def test_focus_session_boost(self):
        result = compute_intervention_suitability(
            make_context(goal_conflict=0.6, is_in_focus_session=True), PersonalizationState(),
        )
        assert result.score == pytest.approx(0.69)
        assert result.recommended_type == InterventionType.HARD_BLOCK

    def test_low_score_is_reflective(self):
        context = make_context(goal_conflict=0.1, distraction_severity=0.1, cognitive_readiness_score=0.1)
        result = compute_intervention_suitability(context, PersonalizationState())
        assert result.recommended_type == InterventionType.REFLECTIVE

    def test_score_bounded(self):
        context = make_context(
            goal_conflict=1.0,
            distraction_severity=1.0,
            cognitive_readiness_score=1.0,
            time_of_day=TimeOfDay.EVENING,
            is_in_focus_session=True,
        )
        result = compute_intervention_suitability(context, PersonalizationState())
        assert result.score == 1.0

    def test_authority_resistance_downgrades_outside_focus(self):
        state = PersonalizationState(authority_resistance_score=0.8)
        context = make_context(goal_conflict=1.0, distraction_severity=1.0, cognitive_readiness_score=1.0)

        result = compute_intervention_suitability(context, state)
        assert result.recommended_type == InterventionType.SOFT_DELAY

        in_focus = compute_intervention_suitability(
            context.model_copy(update={"is_in_focus_session": True}), state,
        )
        assert in_focus.recommended_type == InterventionType.HARD_BLOCK

    @pytest.mark.parametrize("conflict,severity,focus", [
        (1.0, 1.0, True),
        (0.5, 0.5, False),
        (0.0, 0.0, False),
    ])
    def test_critical_fatigue_forces_reflective(self, conflict, severity, focus):
        state = with_fatigue(PersonalizationState(), 0.95)
        context = make_context(
            goal_conflict=conflict,
            distraction_severity=severity,
            is_in_focus_session=focus,
        )
        result = compute_intervention_suitability(context, state)
        assert result.recommended_type == InterventionType.REFLECTIVE

    def test_high_fatigue_downgrades_hard_block(self):
        state = with_fatigue(PersonalizationState(), 0.75)
        context = make_context(goal_conflict=1.0, distraction_severity=1.0, cognitive_readiness_score=1.0)
        result = compute_intervention_suitability(context, state)
        assert result.recommended_type == InterventionType.SOFT_DELAY

    def test_should_delay_on_low_readiness(self):
        context = make_context(goal_conflict=1.0, distraction_severity=1.0, cognitive_readiness_score=0.1)
        result = compute_intervention_suitability(context, PersonalizationState())
        assert result.recommended_type != InterventionType.REFLECTIVE
        assert result.should_delay is True

    def test_no_delay_for_reflective(self):
        context = make_context(goal_conflict=0.0, distraction_severity=0.0, cognitive_readiness_score=0.1)
        result = compute_intervention_suitability(context, PersonalizationState())
        assert result.recommended_type == InterventionType.REFLECTIVE
        assert result.should_delay is False


class TestPolicy:
    @pytest.mark.parametrize("ess,bucket", [
        (0.8, ToneBucket.SUPPORTIVE),
        (0.5, ToneBucket.BALANCED),
        (0.2, ToneBucket.CHALLENGE),
    ])
    def test_tone_bucket(self, ess, bucket):
        assert tone_bucket(ess) == bucket

    def test_policy_message_matches_type(self):
        state = PersonalizationState(emotional_sensitivity_score=0.2)
        iss = compute_intervention_suitability(make_context(), state)
        policy = select_intervention_policy(iss, state)

        assert policy.intervention_type == InterventionType.SOFT_DELAY
        assert policy.tone == ToneBucket.CHALLENGE
        assert "10 seconds" in policy.message


class TestRecovery:
    @pytest.mark.parametrize("ess,crs,stress,style", [
        (0.9, 0.1, 0.9, RecoveryStyle.MEDITATION),
        (0.7, 0.5, 0.7, RecoveryStyle.BREATHING),
        (0.3, 0.5, 0.6, RecoveryStyle.WALK),
        (0.7, 0.5, 0.3, RecoveryStyle.REFLECTION),
        (0.45, 0.5, 0.3, RecoveryStyle.WALK),
    ])
    def test_decision_tree(self, ess, crs, stress, style):
        recommendation = select_recovery_recommendation(ess, crs, stress)
        assert recommendation.style == style
        assert recommendation.message
        assert recommendation.duration_minutes > 0

    def test_stress_proxy(self):
        assert compute_stress_proxy(1.0, 1.0) == 0.0
        assert compute_stress_proxy(0.0, 0.0) == pytest.approx(1.0)
        assert compute_stress_proxy(0.5, 0.5) == pytest.approx(0.5)


class TestBuildContext:
    def test_derives_time_and_stress(self):
        context = build_context(
            hour_of_day=19,
            cognitive_readiness_score=0.6,
            recent_afi=0.5,
            hrv_normalized=0.0,
            goal_conflict=0.3,
        )
        assert context.time_of_day == TimeOfDay.EVENING
        # 0.6 * 1.0 + 0.4 * 0.5
        assert context.stress_proxy == pytest.approx(0.8)
        assert context.goal_conflict == 0.3


class TestUninstallRisk:
    def test_new_user(self):
        # Only the short-streak penalty plus authority resistance
        state = PersonalizationState(authority_resistance_score=0.3)
        assert compute_uninstall_risk(state) == pytest.approx(0.15 + 0.03)

    def test_bounded(self):
        state = with_fatigue(PersonalizationState(authority_resistance_score=1.0), 1.0)
        state = state.model_copy(update={
            "strictness": state.strictness.model_copy(update={"override_frequency": 1.0}),
        })
        assert 0.0 <= compute_uninstall_risk(state) <= 1.0


class TestPersonalizationProfile:
    def test_bundles_decisions(self, state):
        context = build_context(
            hour_of_day=15,
            cognitive_readiness_score=0.3,
            recent_afi=0.4,
        )
        profile = compute_personalization_profile(state, context)

        assert profile.strictness_level == state.strictness.current_level
        assert profile.cognitive_readiness == 0.3
        assert profile.focus_session_length == 25.0
        assert len(profile.habit_suggestions) == 3
        assert profile.habit_suggestions[0].category.value == "recovery"
        assert profile.compliance_snapshot == state.compliance_matrix.probabilities()
        assert 0.0 <= profile.uninstall_risk <= 1.0
        assert profile.suitability.recommended_type == profile.intervention_policy.intervention_type
