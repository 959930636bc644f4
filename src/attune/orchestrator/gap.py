"""Stage 3 - behavioral gap between stated goals and observed behavior."""

from attune.contracts.orchestrator import (
    BehavioralGapScore,
    GapBreakdown,
    GapLevel,
    UserState,
)
from attune.personalization.constants import clamp

GAP_WEIGHTS = {
    "goal_vs_focus": 0.30,
    "distraction_deviation": 0.25,
    "compliance_gap": 0.20,
    "session_skip_rate": 0.15,
    "recovery_neglect": 0.10,
}

TENSION_LABELS = {
    "goal_vs_focus": "Not investing enough time toward goals",
    "distraction_deviation": "Higher distraction than expected",
    "compliance_gap": "Low compliance with interventions",
    "session_skip_rate": "Too many skipped or failed sessions",
    "recovery_neglect": "Pushing through without adequate recovery",
}


def goal_vs_focus(state: UserState) -> float:
    """High urgency with little weekly focus time is a large gap."""
    urgency = state.semi_dynamic.goal_urgency
    expected_minutes = 60 + urgency * 200
    ratio = min(state.semi_dynamic.weekly_focus_minutes / expected_minutes, 1.0)
    return clamp(urgency * (1 - ratio))


def distraction_deviation(state: UserState) -> float:
    """How much more distracted than personality predicts."""
    expected = state.static.impulsivity_index * 0.5 + 0.2
    return clamp(state.behavioral.distraction_rate - expected)


def compliance_gap(state: UserState) -> float:
    expected = 0.5 + state.static.conscientiousness / 14
    return clamp(expected - state.behavioral.compliance_rate)


def session_skip_rate(state: UserState) -> float:
    skip_penalty = min(state.behavioral.days_since_last_focus / 7, 1.0) * 0.3
    return clamp((1 - state.behavioral.session_survival_rate) * 0.7 + skip_penalty)


def recovery_neglect(state: UserState) -> float:
    """Pushing through fatigue and stress; only counts while still active."""
    d = state.dynamic
    if state.behavioral.days_since_last_focus > 1:
        return 0.0
    fatigue_pressure = (d.fatigue_level - 2) / 3
    stress_pressure = (d.stress_level - 2) / 3
    return clamp(fatigue_pressure * 0.4 + stress_pressure * 0.3 + (1 - d.cognitive_readiness) * 0.3)


def gap_level(overall: float) -> GapLevel:
    if overall < 0.2:
        return GapLevel.LOW
    if overall < 0.45:
        return GapLevel.MODERATE
    if overall < 0.7:
        return GapLevel.HIGH
    return GapLevel.CRITICAL


def compute_behavioral_gap(state: UserState) -> BehavioralGapScore:
    """Stage 3: weighted gap, its level and the dominant tension."""
    breakdown = GapBreakdown(
        goal_vs_focus=goal_vs_focus(state),
        distraction_deviation=distraction_deviation(state),
        compliance_gap=compliance_gap(state),
        session_skip_rate=session_skip_rate(state),
        recovery_neglect=recovery_neglect(state),
    )
    components = breakdown.model_dump()
    overall = clamp(sum(components[key] * weight for key, weight in GAP_WEIGHTS.items()))

    # max() keeps the first of equal components
    primary = max(GAP_WEIGHTS, key=lambda key: components[key])

    return BehavioralGapScore(
        overall=overall,
        level=gap_level(overall),
        breakdown=breakdown,
        primary_tension=TENSION_LABELS[primary],
    )
