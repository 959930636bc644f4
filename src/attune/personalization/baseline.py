"""Baseline initializer - cold start from an onboarding profile.

Maps the static onboarding profile to a fully populated
PersonalizationState with zero interaction history. The compliance
matrix is seeded from the predicted response matrix so the first
real-time decision is already personalized.
"""

import logging
from datetime import datetime

from attune.contracts.profile import NudgeTone, OnboardingProfile
from attune.contracts.state import (
    AdaptiveStrictnessState,
    AdjustmentDirection,
    AttentionEvolution,
    ComplianceMatrix,
    HabitState,
    InterventionFatigueState,
    InterventionTracking,
    PersonalizationState,
)
from attune.personalization.constants import (
    BASELINE_TONE_EFFECTIVENESS,
    DEFAULT_TONE_EFFECTIVENESS,
    FOCUS_LENGTH_TIERS,
    MOTIVATION_BONUS,
    STRICTNESS_THRESHOLDS,
    clamp,
)

logger = logging.getLogger(__name__)


def compute_goal_drive_score(profile: OnboardingProfile) -> float:
    """GDS = 0.4 urgency + 0.4 self-efficacy + motivation bonus + 0.1 focus."""
    gds = (
        profile.goal_urgency_score * 0.40
        + profile.self_efficacy_score * 0.40
        + MOTIVATION_BONUS.get(profile.motivation_type, 0.0)
        + profile.baseline_focus_estimate * 0.10
    )
    return clamp(gds)


def map_to_strictness_level(scs: float) -> int:
    """Largest level whose threshold the SCS reaches (level 1 otherwise)."""
    level = 1
    for index, threshold in enumerate(STRICTNESS_THRESHOLDS[1:], start=2):
        if scs >= threshold:
            level = index
    return level


def map_to_focus_length(baseline_focus: float) -> float:
    """Initial focus-session length in minutes."""
    for minimum, minutes in FOCUS_LENGTH_TIERS:
        if baseline_focus >= minimum:
            return minutes
    return FOCUS_LENGTH_TIERS[-1][1]


def compute_intervention_tolerance(ars: float, scs: float, ess: float) -> float:
    """How much intervention the user tolerates before fatiguing."""
    return clamp(0.50 + scs * 0.30 - ars * 0.25 - ess * 0.10)


def initialize_baseline_state(
    profile: OnboardingProfile,
    now: datetime | None = None,
) -> PersonalizationState:
    """Create the initial PersonalizationState for a freshly onboarded user."""
    now = now or datetime.now()

    ars = clamp(profile.authority_resistance_score)
    ess = clamp(profile.emotional_reactivity_score)
    strictness_level = map_to_strictness_level(profile.strictness_compatibility)
    focus_length = map_to_focus_length(profile.baseline_focus_estimate)

    predicted = profile.predicted_response_matrix
    matrix = ComplianceMatrix(
        reflective=InterventionTracking(probability=predicted.reflective, last_updated=now),
        soft_delay=InterventionTracking(probability=predicted.soft_delay, last_updated=now),
        hard_block=InterventionTracking(probability=predicted.hard_block, last_updated=now),
    )

    effectiveness = {tone: DEFAULT_TONE_EFFECTIVENESS for tone in NudgeTone}
    effectiveness[profile.nudge_tone] = BASELINE_TONE_EFFECTIVENESS

    state = PersonalizationState(
        baseline_strictness=strictness_level,
        baseline_nudge_tone=profile.nudge_tone,
        baseline_focus_length=focus_length,
        baseline_intervention_tolerance=compute_intervention_tolerance(
            ars, profile.strictness_compatibility, ess
        ),
        goal_drive_score=compute_goal_drive_score(profile),
        authority_resistance_score=ars,
        emotional_sensitivity_score=ess,
        impulsivity_index=clamp(profile.impulsivity_index),
        primary_distraction=profile.primary_distraction,
        compliance_matrix=matrix,
        strictness=AdaptiveStrictnessState(
            current_level=strictness_level,
            baseline_level=strictness_level,
            compliance_rate=0.5,
            override_frequency=0.0,
            session_success_rate=0.5,
            last_adjustment=now,
            direction=AdjustmentDirection.HOLD,
        ),
        fatigue=InterventionFatigueState(),
        nudge_effectiveness=effectiveness,
        attention=AttentionEvolution(
            expected_focus_time=focus_length,
            success_rate=0.5,
            recommended_session_length=focus_length,
            growth_factor=1.0,
        ),
        habits=HabitState(),
        last_daily_update=now,
        recent_window_started=now,
        created_at=now,
        updated_at=now,
    )

    logger.info(
        f"Initialized baseline: strictness={strictness_level}, "
        f"focus={focus_length:.0f}min, tone={profile.nudge_tone.value}"
    )
    return state
