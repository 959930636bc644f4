"""Contextual decision engine.

Fuses real-time context with the evolving state into an Intervention
Suitability Score (ISS), an intervention policy and a recovery
recommendation.
"""

import logging

from attune.contracts.orchestrator import (
    InterventionPolicy,
    InterventionSuitabilityResult,
    PersonalizationProfile,
    RecoveryRecommendation,
    RecoveryStyle,
    ToneBucket,
)
from attune.contracts.signals import PersonalizationContext, TimeOfDay
from attune.contracts.state import InterventionType, PersonalizationState
from attune.personalization.adaptation import select_best_nudge_tone
from attune.personalization.constants import (
    AUTHORITY_RESISTANCE_CAP_THRESHOLD,
    CHALLENGE_ESS_MAX,
    CRITICAL_FATIGUE_THRESHOLD,
    DELAY_READINESS_THRESHOLD,
    HIGH_FATIGUE_THRESHOLD,
    ISS_FOCUS_SESSION_BOOST,
    ISS_REFLECTIVE_MAX,
    ISS_SOFT_DELAY_MAX,
    ISS_WEIGHT_DISTRACTION,
    ISS_WEIGHT_GOAL_CONFLICT,
    ISS_WEIGHT_READINESS,
    SUPPORTIVE_ESS_MIN,
    TIME_MODIFIERS,
    UNINSTALL_AUTHORITY_WEIGHT,
    UNINSTALL_FATIGUE_WEIGHT,
    UNINSTALL_LOW_COMPLIANCE_MAX,
    UNINSTALL_LOW_COMPLIANCE_PENALTY,
    UNINSTALL_LOW_STREAK_DAYS,
    UNINSTALL_LOW_STREAK_PENALTY,
    UNINSTALL_OVERRIDE_WEIGHT,
    clamp,
)
from attune.tracking.attention import recommended_session_length
from attune.tracking.habits import habit_suggestions, recovery_protocol

logger = logging.getLogger(__name__)


POLICY_MESSAGES: dict[InterventionType, dict[ToneBucket, str]] = {
    InterventionType.REFLECTIVE: {
        ToneBucket.SUPPORTIVE: "You're doing well. Is this app aligned with what matters most right now?",
        ToneBucket.CHALLENGE: "Quick check: is this moving you closer to your goal, or further away?",
        ToneBucket.BALANCED: "Pause. Is this helping you reach your goal right now?",
    },
    InterventionType.SOFT_DELAY: {
        ToneBucket.SUPPORTIVE: "Let's pause for a moment. You've got this, redirect your energy.",
        ToneBucket.CHALLENGE: "You know you're better than this. 10 seconds to reconsider.",
        ToneBucket.BALANCED: "Taking a brief pause before opening this app.",
    },
    InterventionType.HARD_BLOCK: {
        ToneBucket.SUPPORTIVE: "This app is paused during your focus time. You're building real momentum.",
        ToneBucket.CHALLENGE: "Blocked. Stay locked in, your future self is counting on you.",
        ToneBucket.BALANCED: "This app is blocked during your focus session.",
    },
}


def compute_intervention_suitability(
    context: PersonalizationContext,
    state: PersonalizationState,
) -> InterventionSuitabilityResult:
    """ISS and the intervention kind it maps to.

    Overrides applied after the threshold mapping, in order:
    1. High authority resistance outside a focus session: hard_block -> soft_delay
    2. Critical fatigue: always reflective
    3. High fatigue: hard_block -> soft_delay
    ``should_delay`` is decided before the fatigue gates.
    """
    raw = (
        context.goal_conflict * ISS_WEIGHT_GOAL_CONFLICT
        + context.distraction_severity * ISS_WEIGHT_DISTRACTION
        + context.cognitive_readiness_score * ISS_WEIGHT_READINESS
    )
    time_modifier = TIME_MODIFIERS.get(context.time_of_day, 1.0)
    score = clamp(raw * time_modifier)
    if context.is_in_focus_session:
        score = clamp(score + ISS_FOCUS_SESSION_BOOST)

    if score < ISS_REFLECTIVE_MAX:
        kind = InterventionType.REFLECTIVE
    elif score < ISS_SOFT_DELAY_MAX:
        kind = InterventionType.SOFT_DELAY
    else:
        kind = InterventionType.HARD_BLOCK

    if (
        state.authority_resistance_score > AUTHORITY_RESISTANCE_CAP_THRESHOLD
        and kind == InterventionType.HARD_BLOCK
        and not context.is_in_focus_session
    ):
        kind = InterventionType.SOFT_DELAY

    should_delay = (
        context.cognitive_readiness_score < DELAY_READINESS_THRESHOLD
        and kind != InterventionType.REFLECTIVE
    )

    fatigue = state.fatigue.fatigue_score
    if fatigue >= CRITICAL_FATIGUE_THRESHOLD:
        kind = InterventionType.REFLECTIVE
    elif fatigue >= HIGH_FATIGUE_THRESHOLD and kind == InterventionType.HARD_BLOCK:
        kind = InterventionType.SOFT_DELAY

    return InterventionSuitabilityResult(
        score=score,
        recommended_type=kind,
        should_delay=should_delay,
        time_modifier=time_modifier,
        goal_conflict=context.goal_conflict,
        distraction_severity=context.distraction_severity,
        cognitive_readiness=context.cognitive_readiness_score,
    )


def tone_bucket(emotional_sensitivity: float) -> ToneBucket:
    if emotional_sensitivity > SUPPORTIVE_ESS_MIN:
        return ToneBucket.SUPPORTIVE
    if emotional_sensitivity < CHALLENGE_ESS_MAX:
        return ToneBucket.CHALLENGE
    return ToneBucket.BALANCED


def select_intervention_policy(
    iss: InterventionSuitabilityResult,
    state: PersonalizationState,
) -> InterventionPolicy:
    """Pair the recommended intervention with wording for the user's temperament."""
    bucket = tone_bucket(state.emotional_sensitivity_score)
    return InterventionPolicy(
        intervention_type=iss.recommended_type,
        tone=bucket,
        message=POLICY_MESSAGES[iss.recommended_type][bucket],
    )


def select_recovery_recommendation(
    ess: float,
    crs: float,
    stress_proxy: float,
) -> RecoveryRecommendation:
    """Decision tree over readiness, stress and emotional sensitivity."""
    if crs < 0.20:
        style = RecoveryStyle.MEDITATION
    elif stress_proxy > 0.6 and ess > 0.5:
        style = RecoveryStyle.BREATHING
    elif stress_proxy > 0.5 and ess < 0.4:
        style = RecoveryStyle.WALK
    elif ess > 0.5:
        style = RecoveryStyle.REFLECTION
    else:
        style = RecoveryStyle.WALK
    return recovery_protocol(style)


def compute_stress_proxy(hrv_normalized: float, recent_afi: float) -> float:
    """0.6 (1 - HRV) + 0.4 (1 - AFI), clamped."""
    hrv_stress = 1 - clamp(hrv_normalized)
    fragmentation_stress = clamp(1 - recent_afi)
    return clamp(hrv_stress * 0.6 + fragmentation_stress * 0.4)


def build_context(
    hour_of_day: int,
    cognitive_readiness_score: float,
    recent_afi: float,
    hrv_normalized: float = 0.5,
    **kwargs,
) -> PersonalizationContext:
    """Build a context from raw signals, deriving time-of-day and the stress proxy."""
    return PersonalizationContext(
        time_of_day=TimeOfDay.from_hour(hour_of_day),
        hour_of_day=hour_of_day,
        cognitive_readiness_score=cognitive_readiness_score,
        recent_afi=recent_afi,
        stress_proxy=compute_stress_proxy(hrv_normalized, recent_afi),
        **kwargs,
    )


def compute_uninstall_risk(state: PersonalizationState) -> float:
    """Heuristic probability that the user abandons the app."""
    probabilities = state.compliance_matrix.probabilities().values()
    mean_compliance = sum(probabilities) / len(probabilities)

    risk = (
        state.strictness.override_frequency * UNINSTALL_OVERRIDE_WEIGHT
        + state.fatigue.fatigue_score * UNINSTALL_FATIGUE_WEIGHT
        + (UNINSTALL_LOW_STREAK_PENALTY
           if state.habits.current_streak < UNINSTALL_LOW_STREAK_DAYS else 0.0)
        + (UNINSTALL_LOW_COMPLIANCE_PENALTY
           if mean_compliance < UNINSTALL_LOW_COMPLIANCE_MAX else 0.0)
        + state.authority_resistance_score * UNINSTALL_AUTHORITY_WEIGHT
    )
    return clamp(risk)


def compute_personalization_profile(
    state: PersonalizationState,
    context: PersonalizationContext,
) -> PersonalizationProfile:
    """Everything the engine decides for this moment, in one record."""
    iss = compute_intervention_suitability(context, state)
    policy = select_intervention_policy(iss, state)
    recovery = select_recovery_recommendation(
        state.emotional_sensitivity_score,
        context.cognitive_readiness_score,
        context.stress_proxy,
    )

    profile = PersonalizationProfile(
        strictness_level=state.strictness.current_level,
        nudge_tone=select_best_nudge_tone(state.nudge_effectiveness, state.baseline_nudge_tone),
        intervention_policy=policy,
        focus_session_length=recommended_session_length(state.attention),
        recovery=recovery,
        habit_suggestions=tuple(habit_suggestions(
            state.primary_distraction,
            context.cognitive_readiness_score,
            state.habits.current_streak,
        )),
        compliance_snapshot=state.compliance_matrix.probabilities(),
        uninstall_risk=compute_uninstall_risk(state),
        cognitive_readiness=context.cognitive_readiness_score,
        attention_trend=state.attention.trend,
        suitability=iss,
        fatigue_level=state.fatigue.fatigue_score,
        current_streak=state.habits.current_streak,
    )

    logger.debug(
        f"ISS={iss.score:.2f} -> {iss.recommended_type.value} "
        f"(delay={iss.should_delay}), recovery={recovery.style.value}"
    )
    return profile
