"""Stage 2 - context inference: what kind of day is this?

Each rule inspects the UserState and either abstains or proposes a mode
with a confidence. Candidates above 0.3 are ranked by confidence; ties
keep rule order, which puts safety rules first.
"""

from dataclasses import dataclass, field
from typing import Callable

from attune.contracts.orchestrator import ContextMode, ContextState, UserState
from attune.contracts.state import Trend

MIN_CONFIDENCE = 0.3
MAINTENANCE_CONFIDENCE = 0.5


@dataclass
class ContextCandidate:
    mode: ContextMode
    confidence: float
    signals: list[str] = field(default_factory=list)


ContextRule = Callable[[UserState], ContextCandidate | None]


def _pct(value: float) -> str:
    return f"{value * 100:.0f}%"


def check_overloaded(s: UserState) -> ContextCandidate | None:
    stress, fatigue = s.dynamic.stress_level, s.dynamic.fatigue_level
    if stress >= 4 and fatigue >= 4:
        signals = [f"Stress at {stress}/5", f"Fatigue at {fatigue}/5"]
        if s.dynamic.cognitive_readiness < 0.4:
            signals.append(f"CRS critically low ({_pct(s.dynamic.cognitive_readiness)})")
        return ContextCandidate(
            ContextMode.OVERLOADED,
            min(0.6 + (stress + fatigue - 8) * 0.1, 0.95),
            signals,
        )
    return None


def check_emotionally_reactive(s: UserState) -> ContextCandidate | None:
    stress = s.dynamic.stress_level
    neuroticism = s.static.neuroticism
    reactivity = s.static.emotional_reactivity
    if stress >= 4 and (neuroticism >= 5 or reactivity > 0.6):
        signals = [f"Stress {stress}/5"]
        if neuroticism >= 5:
            signals.append(f"High neuroticism ({neuroticism:g}/7)")
        signals.append(f"Emotional reactivity {_pct(reactivity)}")
        return ContextCandidate(
            ContextMode.EMOTIONALLY_REACTIVE,
            0.5 + reactivity * 0.3,
            signals,
        )
    return None


def check_fatigued(s: UserState) -> ContextCandidate | None:
    crs = s.dynamic.cognitive_readiness
    fatigue = s.dynamic.fatigue_level
    if crs >= 0.4 and fatigue < 4:
        return None

    signals = []
    confidence = 0.5
    if crs < 0.3:
        signals.append("CRS very low")
        confidence += 0.2
    elif crs < 0.4:
        signals.append("CRS below threshold")
        confidence += 0.1
    if fatigue >= 4:
        signals.append(f"Fatigue {fatigue}/5")
        confidence += 0.15
    if s.dynamic.sleep_hours < 6:
        signals.append(f"Only {s.dynamic.sleep_hours:g}h sleep")
        confidence += 0.1

    return ContextCandidate(ContextMode.COGNITIVELY_FATIGUED, min(confidence, 0.9), signals)


def check_drifting(s: UserState) -> ContextCandidate | None:
    compliance = s.behavioral.compliance_rate
    distraction = s.behavioral.distraction_rate
    days = s.behavioral.days_since_last_focus
    declining = s.semi_dynamic.compliance_trend == Trend.DECLINING

    if (compliance < 0.4 and distraction > 0.6) or (declining and days >= 2):
        signals = [f"Compliance at {_pct(compliance)}", f"Distraction rate {_pct(distraction)}"]
        if days >= 2:
            signals.append(f"{days} days without focus")
        if declining:
            signals.append("Compliance declining")
        return ContextCandidate(ContextMode.DRIFTING, 0.6 + distraction * 0.2, signals)
    return None


def check_recovering(s: UserState) -> ContextCandidate | None:
    crs = s.dynamic.cognitive_readiness
    fatigue = s.dynamic.fatigue_level
    if s.behavioral.last_session_was_successful and crs < 0.6 and fatigue >= 3:
        return ContextCandidate(ContextMode.RECOVERING, 0.6, [
            "Recent session completed",
            f"CRS dipped to {_pct(crs)}",
            f"Fatigue at {fatigue}/5",
        ])
    return None


def check_performance_ready(s: UserState) -> ContextCandidate | None:
    d = s.dynamic
    if d.cognitive_readiness > 0.7 and d.sleep_hours >= 7 and d.fatigue_level <= 2 and d.current_afi < 0.3:
        return ContextCandidate(ContextMode.PERFORMANCE_READY, 0.6 + d.cognitive_readiness * 0.2, [
            f"CRS {_pct(d.cognitive_readiness)}",
            f"{d.sleep_hours:g}h sleep",
            f"Low fatigue ({d.fatigue_level}/5)",
            f"AFI {_pct(d.current_afi)} (focused)",
        ])
    return None


def check_opportunity_window(s: UserState) -> ContextCandidate | None:
    crs = s.dynamic.cognitive_readiness
    weekly = s.semi_dynamic.weekly_focus_minutes
    streak = s.semi_dynamic.habit_streak
    if crs > 0.6 and s.dynamic.current_afi < 0.4 and weekly < 120:
        return ContextCandidate(ContextMode.OPPORTUNITY_WINDOW, 0.5 + crs * 0.2, [
            f"CRS good ({_pct(crs)})",
            f"Only {weekly:.0f} min focused this week",
            "No streak, great time to start" if streak == 0 else f"{streak}-day streak to extend",
        ])
    return None


# Priority order: safety first
RULES: list[ContextRule] = [
    check_overloaded,
    check_emotionally_reactive,
    check_fatigued,
    check_drifting,
    check_recovering,
    check_performance_ready,
    check_opportunity_window,
]


def infer_context(state: UserState) -> ContextState:
    """Stage 2: classify the UserState into one context mode."""
    candidates = []
    for rule in RULES:
        candidate = rule(state)
        if candidate is not None and candidate.confidence > MIN_CONFIDENCE:
            candidates.append(candidate)

    if not candidates:
        return ContextState(
            mode=ContextMode.MAINTENANCE,
            confidence=MAINTENANCE_CONFIDENCE,
            signals=("No strong signals detected, normal day",),
        )

    # sorted() is stable, so equal confidences keep rule priority
    ranked = sorted(candidates, key=lambda c: c.confidence, reverse=True)
    primary = ranked[0]

    return ContextState(
        mode=primary.mode,
        confidence=primary.confidence,
        signals=tuple(primary.signals),
        secondary_mode=ranked[1].mode if len(ranked) > 1 else None,
        scores={c.mode: c.confidence for c in candidates},
    )
