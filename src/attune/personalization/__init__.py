"""Personalization - baseline, behavioral adaptation and contextual decisions."""

from attune.personalization.adaptation import (
    compliance_trend,
    decay_fatigue,
    evolve_strictness,
    most_effective_intervention,
    record_nudge_fatigue,
    select_best_nudge_tone,
    throttle_severity,
    update_compliance,
    update_compliance_matrix,
    update_nudge_effectiveness,
)
from attune.personalization.baseline import initialize_baseline_state
from attune.personalization.decision import (
    build_context,
    compute_intervention_suitability,
    compute_personalization_profile,
    compute_stress_proxy,
    compute_uninstall_risk,
    select_intervention_policy,
    select_recovery_recommendation,
)
from attune.personalization.engine import (
    initialize,
    perform_daily_update,
    process_compliance_event,
    record_focus_session,
)

__all__ = [
    "compliance_trend",
    "decay_fatigue",
    "evolve_strictness",
    "most_effective_intervention",
    "record_nudge_fatigue",
    "select_best_nudge_tone",
    "throttle_severity",
    "update_compliance",
    "update_compliance_matrix",
    "update_nudge_effectiveness",
    "initialize_baseline_state",
    "build_context",
    "compute_intervention_suitability",
    "compute_personalization_profile",
    "compute_stress_proxy",
    "compute_uninstall_risk",
    "select_intervention_policy",
    "select_recovery_recommendation",
    "initialize",
    "perform_daily_update",
    "process_compliance_event",
    "record_focus_session",
]
