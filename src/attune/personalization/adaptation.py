"""Behavioral adaptation layer.

Four update functions evolve the adaptive part of PersonalizationState:

- Bayesian compliance tracking per intervention kind
- Strictness escalation / de-escalation with a cooldown
- Intervention fatigue accumulation and daily decay
- Nudge-tone effectiveness learning

``process_compliance_event`` composes all four and is the only path by
which a ComplianceEvent reaches persisted state.
"""

import logging
from datetime import datetime, timedelta

from attune.contracts.profile import NudgeTone
from attune.contracts.signals import ComplianceEvent
from attune.contracts.state import (
    AdaptiveStrictnessState,
    AdjustmentDirection,
    ComplianceMatrix,
    InterventionFatigueState,
    InterventionTracking,
    InterventionType,
    PersonalizationState,
    Trend,
)
from attune.contracts.orchestrator import ThrottleSeverity
from attune.personalization.constants import (
    AUTHORITY_RESISTANCE_CAP_THRESHOLD,
    AUTHORITY_RESISTANCE_MAX_LEVEL,
    BAYESIAN_PRIOR_ALPHA,
    BAYESIAN_PRIOR_BETA,
    COMPLIANCE_TREND_DELTA,
    CRITICAL_FATIGUE_THRESHOLD,
    DEESCALATE_OVERRIDE_MIN,
    DEESCALATE_SESSION_SUCCESS_MAX,
    DISMISSAL_COMPOUND_MULTIPLIER,
    EFFECTIVENESS_PSEUDO_COUNT,
    ESCALATE_COMPLIANCE_MIN,
    ESCALATE_OVERRIDE_MAX,
    ESCALATE_SESSION_SUCCESS_MIN,
    FATIGUE_DAILY_DECAY_RATE,
    FATIGUE_PER_DISMISSAL,
    FATIGUE_PER_NUDGE,
    HIGH_FATIGUE_THRESHOLD,
    MAX_STRICTNESS,
    MIN_ATTEMPTS_FOR_TRUST,
    MIN_RECENT_ATTEMPTS_FOR_TREND,
    MIN_STRICTNESS,
    OVERRIDE_EMA_BUMP,
    OVERRIDE_EMA_KEEP,
    OVERRIDE_EMA_KEEP_ON_OVERRIDE,
    STRICTNESS_COOLDOWN_DAYS,
    clamp,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Bayesian compliance
# =============================================================================


def smoothed_probability(successes: int, attempts: int) -> float:
    """(successes + alpha) / (attempts + alpha + beta)."""
    return (successes + BAYESIAN_PRIOR_ALPHA) / (
        attempts + BAYESIAN_PRIOR_ALPHA + BAYESIAN_PRIOR_BETA
    )


def update_compliance(
    tracking: InterventionTracking,
    was_successful: bool,
    now: datetime | None = None,
) -> InterventionTracking:
    """Record one outcome in both the lifetime and recent counters."""
    hit = 1 if was_successful else 0
    successes = tracking.successes + hit
    attempts = tracking.attempts + 1

    return InterventionTracking(
        successes=successes,
        attempts=attempts,
        probability=smoothed_probability(successes, attempts),
        recent_successes=tracking.recent_successes + hit,
        recent_attempts=tracking.recent_attempts + 1,
        last_updated=now or datetime.now(),
    )


def update_compliance_matrix(
    matrix: ComplianceMatrix,
    event: ComplianceEvent,
    now: datetime | None = None,
) -> ComplianceMatrix:
    """Apply an event to the tracking record of its intervention kind."""
    kind = event.intervention_type
    updated = update_compliance(matrix.get(kind), event.was_successful, now=now)
    return matrix.model_copy(update={kind.value: updated})


def reset_recent_window(matrix: ComplianceMatrix) -> ComplianceMatrix:
    """Zero the recent counters of every intervention kind."""
    return matrix.model_copy(update={
        kind.value: tracking.model_copy(update={"recent_successes": 0, "recent_attempts": 0})
        for kind, tracking in matrix.items()
    })


def compliance_trend(tracking: InterventionTracking) -> Trend:
    """Recent vs lifetime compliance, once there is enough data to trust."""
    if (
        tracking.attempts < MIN_ATTEMPTS_FOR_TRUST
        or tracking.recent_attempts < MIN_RECENT_ATTEMPTS_FOR_TREND
    ):
        return Trend.STABLE

    overall = smoothed_probability(tracking.successes, tracking.attempts)
    recent = smoothed_probability(tracking.recent_successes, tracking.recent_attempts)
    delta = recent - overall

    if delta > COMPLIANCE_TREND_DELTA:
        return Trend.IMPROVING
    if delta < -COMPLIANCE_TREND_DELTA:
        return Trend.DECLINING
    return Trend.STABLE


def most_effective_intervention(matrix: ComplianceMatrix) -> InterventionType:
    """Intervention kind with the highest compliance probability.

    Ties resolve to the milder kind.
    """
    best = InterventionType.REFLECTIVE
    best_p = -1.0
    for kind, tracking in matrix.items():
        if tracking.probability > best_p:
            best_p = tracking.probability
            best = kind
    return best


# =============================================================================
# Strictness evolution
# =============================================================================


def evolve_strictness(
    state: AdaptiveStrictnessState,
    compliance_rate: float,
    override_frequency: float,
    session_success_rate: float,
    authority_resistance: float,
    now: datetime | None = None,
) -> AdaptiveStrictnessState:
    """Escalate or de-escalate strictness by one level.

    Escalation is checked first and de-escalation second, each from the
    current level, so a call that qualifies for both ends up one level
    below the current level.
    """
    now = now or datetime.now()
    rates = {
        "compliance_rate": clamp(compliance_rate),
        "override_frequency": clamp(override_frequency),
        "session_success_rate": clamp(session_success_rate),
    }

    if now - state.last_adjustment < timedelta(days=STRICTNESS_COOLDOWN_DAYS):
        level = state.current_level
        if authority_resistance > AUTHORITY_RESISTANCE_CAP_THRESHOLD:
            level = min(level, AUTHORITY_RESISTANCE_MAX_LEVEL)
        return state.model_copy(update={**rates, "current_level": level})

    level = state.current_level
    direction = AdjustmentDirection.HOLD

    if (
        compliance_rate >= ESCALATE_COMPLIANCE_MIN
        and session_success_rate >= ESCALATE_SESSION_SUCCESS_MIN
        and override_frequency < ESCALATE_OVERRIDE_MAX
        and state.current_level < MAX_STRICTNESS
    ):
        level = state.current_level + 1
        direction = AdjustmentDirection.UP

    if (
        override_frequency >= DEESCALATE_OVERRIDE_MIN
        or session_success_rate < DEESCALATE_SESSION_SUCCESS_MAX
    ) and state.current_level > MIN_STRICTNESS:
        level = state.current_level - 1
        direction = AdjustmentDirection.DOWN

    if authority_resistance > AUTHORITY_RESISTANCE_CAP_THRESHOLD:
        level = min(level, AUTHORITY_RESISTANCE_MAX_LEVEL)

    if direction != AdjustmentDirection.HOLD:
        logger.info(f"Strictness {direction.value}: {state.current_level} -> {level}")

    return AdaptiveStrictnessState(
        current_level=level,
        baseline_level=state.baseline_level,
        last_adjustment=now if direction != AdjustmentDirection.HOLD else state.last_adjustment,
        direction=direction,
        **rates,
    )


# =============================================================================
# Intervention fatigue
# =============================================================================


def record_nudge_fatigue(
    state: InterventionFatigueState,
    was_dismissed: bool,
    now: datetime | None = None,
) -> InterventionFatigueState:
    """Add fatigue for one delivered nudge.

    Dismissals compound: the delta is multiplied by 1.5^(n-1) for the
    n-th consecutive dismissal before clamping.
    """
    delta = FATIGUE_PER_NUDGE
    consecutive = state.consecutive_dismissals + 1 if was_dismissed else 0

    if was_dismissed:
        delta += FATIGUE_PER_DISMISSAL
        delta *= DISMISSAL_COMPOUND_MULTIPLIER ** (consecutive - 1)

    return InterventionFatigueState(
        fatigue_score=clamp(state.fatigue_score + delta),
        nudges_delivered_today=state.nudges_delivered_today + 1,
        dismissals_today=state.dismissals_today + (1 if was_dismissed else 0),
        last_nudge_time=now or datetime.now(),
        consecutive_dismissals=consecutive,
    )


def decay_fatigue(state: InterventionFatigueState) -> InterventionFatigueState:
    """Daily decay; also zeroes today's counters."""
    return state.model_copy(update={
        "fatigue_score": clamp(state.fatigue_score * (1 - FATIGUE_DAILY_DECAY_RATE)),
        "nudges_delivered_today": 0,
        "dismissals_today": 0,
        "consecutive_dismissals": 0,
    })


def throttle_severity(state: InterventionFatigueState) -> ThrottleSeverity:
    """How hard fatigue should throttle interventions."""
    if state.fatigue_score >= CRITICAL_FATIGUE_THRESHOLD:
        return ThrottleSeverity.CRITICAL
    if state.fatigue_score >= HIGH_FATIGUE_THRESHOLD:
        return ThrottleSeverity.REDUCE
    return ThrottleSeverity.NONE


# =============================================================================
# Nudge tone effectiveness
# =============================================================================


def update_nudge_effectiveness(
    current: dict[NudgeTone, float],
    tone: NudgeTone,
    was_effective: bool,
) -> dict[NudgeTone, float]:
    """(2p + outcome) / 3 for the tone that was used."""
    p = current.get(tone, 0.5)
    outcome = 1.0 if was_effective else 0.0
    posterior = (p * EFFECTIVENESS_PSEUDO_COUNT + outcome) / (EFFECTIVENESS_PSEUDO_COUNT + 1)
    return {**current, tone: clamp(posterior)}


def select_best_nudge_tone(
    effectiveness: dict[NudgeTone, float],
    baseline_tone: NudgeTone,
) -> NudgeTone:
    """Most effective tone; earlier tones win ties."""
    best = baseline_tone
    best_score = -1.0
    for tone in NudgeTone:
        score = effectiveness.get(tone, 0.5)
        if score > best_score:
            best_score = score
            best = tone
    return best


# =============================================================================
# Composition
# =============================================================================


def process_compliance_event(
    state: PersonalizationState,
    event: ComplianceEvent,
    now: datetime | None = None,
) -> PersonalizationState:
    """Apply a ComplianceEvent to every adaptive sub-state."""
    now = now or datetime.now()

    matrix = update_compliance_matrix(state.compliance_matrix, event, now=now)

    trackings = [tracking for _, tracking in matrix.items()]
    total_successes = sum(t.successes for t in trackings)
    total_attempts = sum(t.attempts for t in trackings)
    compliance_rate = total_successes / total_attempts if total_attempts > 0 else 0.5

    previous = state.strictness.override_frequency
    if event.was_override:
        override_frequency = clamp(previous * OVERRIDE_EMA_KEEP_ON_OVERRIDE + OVERRIDE_EMA_BUMP)
    else:
        override_frequency = clamp(previous * OVERRIDE_EMA_KEEP)

    strictness = evolve_strictness(
        state.strictness,
        compliance_rate,
        override_frequency,
        state.attention.success_rate,
        state.authority_resistance_score,
        now=now,
    )
    fatigue = record_nudge_fatigue(state.fatigue, not event.was_successful, now=now)
    effectiveness = update_nudge_effectiveness(
        state.nudge_effectiveness,
        state.baseline_nudge_tone,
        event.was_successful,
    )

    logger.debug(
        f"Compliance event {event.intervention_type.value} "
        f"success={event.was_successful} override={event.was_override}: "
        f"p={matrix.get(event.intervention_type).probability:.2f}, "
        f"fatigue={fatigue.fatigue_score:.2f}"
    )

    return state.model_copy(update={
        "compliance_matrix": matrix,
        "strictness": strictness,
        "fatigue": fatigue,
        "nudge_effectiveness": effectiveness,
        "total_interactions": state.total_interactions + 1,
        "updated_at": now,
    })
