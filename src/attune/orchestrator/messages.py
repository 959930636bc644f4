"""Rule-based per-module messages for the dashboard, focus, meditation and health screens.

These are the first-pass wording; enrichment may replace them.
"""

from attune.contracts.orchestrator import ModuleMessages, UserState
from attune.contracts.signals import CollaboratorSignals

MAX_APP_NAMES = 5
MAX_HEALTH_FLAGS = 3


def dashboard_message(state: UserState, signals: CollaboratorSignals) -> str:
    streak = state.semi_dynamic.habit_streak
    compliance = state.behavioral.compliance_rate
    apps = signals.activity.distractive_app_names[:MAX_APP_NAMES] if signals.activity else []

    if streak == 0:
        parts = ["No streak yet. You haven't started."]
    elif streak < 3:
        parts = [f"{streak}-day streak, barely a start."]
    else:
        parts = [f"{streak}-day streak. Don't ruin it."]

    if compliance < 0.3:
        parts.append(
            f"Compliance at {compliance * 100:.0f}%. You're ignoring your own commitments."
        )
    if apps:
        parts.append(f"Time lost to: {', '.join(apps)}.")

    return " ".join(parts)


def focus_message(state: UserState, signals: CollaboratorSignals) -> str:
    activity = signals.activity
    completed = activity.completed_sessions_today if activity else 0
    goal_name = activity.active_goal_name if activity else None
    distraction = state.behavioral.distraction_rate

    if completed == 0:
        prefix = "You have no streak. " if state.semi_dynamic.habit_streak == 0 else ""
        return (
            f"{prefix}Zero focus sessions today. "
            f"Your distraction rate is {distraction * 100:.0f}%. What's your excuse?"
        )
    if distraction > 0.5:
        return (
            f"{completed} sessions but {distraction * 100:.0f}% distraction rate. "
            "Are you even trying?"
        )
    if state.dynamic.current_afi > 0.6:
        return (
            f"Your attention is heavily fragmented ({state.dynamic.current_afi * 100:.0f}%). "
            "Stop switching between apps and focus."
        )
    goal_part = f'Goal: "{goal_name}" needs more effort.' if goal_name else "Set a real goal."
    return f"{completed} sessions done. {goal_part}"


def meditation_message(state: UserState, signals: CollaboratorSignals) -> str:
    meditation = signals.meditation
    sessions = meditation.session_count if meditation else 0
    minutes = meditation.total_minutes if meditation else 0.0
    stress = state.dynamic.stress_level

    if sessions == 0:
        return f"Zero meditation sessions so far. Your stress is {stress}/5 and nothing is easing it."
    if minutes < 10:
        return f"Only {minutes:g} minutes of meditation total. Stress: {stress}/5."
    if stress >= 4 and sessions < 3:
        return (
            f"Stress at {stress}/5 but only {sessions} meditation sessions. "
            "You know what you need to do."
        )
    closing = "Your stress says you need more." if stress >= 3 else "Keep it up."
    return (
        f"{sessions} sessions, {minutes:g} min total. "
        f"Avg rating: {state.semi_dynamic.average_meditation_rating:.1f}/5. {closing}"
    )


def health_message(state: UserState, signals: CollaboratorSignals) -> str:
    d = state.dynamic
    readiness = d.cognitive_readiness * 100
    flags = signals.health.health_flags[:MAX_HEALTH_FLAGS] if signals.health else []

    warnings = []
    if d.sleep_hours < 6:
        warnings.append(f"{d.sleep_hours:g}h sleep is sabotaging you.")
    if d.stress_level >= 4:
        warnings.append(f"Stress at {d.stress_level}/5 is unsustainable.")
    if d.fatigue_level >= 4:
        warnings.append(f"Fatigue at {d.fatigue_level}/5. Your body is asking for rest.")
    if readiness < 40:
        warnings.append(f"Cognitive readiness at {readiness:.0f}%.")
    if flags:
        warnings.append(f"Health flags: {', '.join(flags)}.")

    if warnings:
        return " ".join(warnings)
    return (
        f"Readiness at {readiness:.0f}%, sleep {d.sleep_hours:g}h. "
        "Acceptable, but don't get complacent."
    )


def generate_module_messages(state: UserState, signals: CollaboratorSignals) -> ModuleMessages:
    return ModuleMessages(
        dashboard=dashboard_message(state, signals),
        focus=focus_message(state, signals),
        meditation=meditation_message(state, signals),
        health=health_message(state, signals),
    )
