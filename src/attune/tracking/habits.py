"""Habit tracking - focus streaks, weekly minutes and habit suggestions."""

from datetime import date, timedelta
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml

from attune.contracts.orchestrator import (
    HabitCategory,
    HabitSuggestion,
    RecoveryRecommendation,
    RecoveryStyle,
)
from attune.contracts.profile import DistractionCategory
from attune.contracts.state import HabitState, PersonalizationState, Trend

CATALOG_PATH = Path(__file__).parent.parent / "data" / "habits.yaml"

WEEK_DAYS = 7
MAX_SUGGESTIONS = 3
LOW_READINESS_FOR_RECOVERY = 0.4

BingeType = Literal["none", "long-session", "switch-burst"]


@lru_cache(maxsize=1)
def load_catalog() -> dict:
    """Load habit suggestions and recovery protocols from YAML."""
    with open(CATALOG_PATH) as f:
        return yaml.safe_load(f)


def recovery_protocol(style: RecoveryStyle) -> RecoveryRecommendation:
    """Look up the protocol for a recovery style."""
    entry = load_catalog()["recovery_protocols"][style.value]
    return RecoveryRecommendation(style=style, **entry)


# =============================================================================
# Streaks
# =============================================================================


def _shift_weekly_minutes(minutes: tuple[float, ...], day_gap: int) -> list[float]:
    if day_gap >= WEEK_DAYS:
        return [0.0] * WEEK_DAYS
    shifted = list(minutes[day_gap:]) + [0.0] * day_gap
    return shifted[-WEEK_DAYS:]


def record_focus_day(state: HabitState, today: date, focus_minutes: float) -> HabitState:
    """Record focus minutes for a calendar day.

    The same day only accumulates minutes. A new day extends the streak
    when the last focus day was yesterday and restarts it at 1 otherwise.
    """
    if state.last_focus_date == today:
        weekly = list(state.weekly_focus_minutes)
        weekly[-1] += focus_minutes
        return state.model_copy(update={"weekly_focus_minutes": tuple(weekly)})

    consecutive = state.last_focus_date == today - timedelta(days=1)
    streak = state.current_streak + 1 if consecutive else 1

    if state.last_focus_date is None:
        day_gap = WEEK_DAYS
    else:
        day_gap = max(0, (today - state.last_focus_date).days)

    weekly = _shift_weekly_minutes(state.weekly_focus_minutes, day_gap)
    weekly[-1] = focus_minutes

    return HabitState(
        current_streak=streak,
        longest_streak=max(state.longest_streak, streak),
        last_focus_date=today,
        total_focus_days=state.total_focus_days + 1,
        weekly_focus_minutes=tuple(weekly),
    )


def check_streak_broken(state: HabitState, today: date) -> HabitState:
    """End-of-day check with a one-day grace period."""
    if state.last_focus_date in (today, today - timedelta(days=1)):
        return state
    return state.model_copy(update={"current_streak": 0})


def weekly_minutes(state: HabitState) -> float:
    return sum(state.weekly_focus_minutes)


# =============================================================================
# Suggestions
# =============================================================================


def habit_suggestions(
    primary_distraction: DistractionCategory,
    crs: float,
    current_streak: int,
) -> list[HabitSuggestion]:
    """Top three habit suggestions for the user's situation.

    Low readiness favors recovery habits, no streak favors pre-focus
    rituals, otherwise during-focus habits.
    """
    if crs < LOW_READINESS_FOR_RECOVERY:
        category = HabitCategory.RECOVERY
    elif current_streak == 0:
        category = HabitCategory.PRE_FOCUS
    else:
        category = HabitCategory.DURING_FOCUS

    catalog = load_catalog()
    boost = catalog.get("distraction_boosts", {}).get(primary_distraction.value)

    suggestions = []
    for entry in catalog["habit_suggestions"][category.value]:
        priority = entry["priority"]
        if boost and entry["id"] == boost["id"]:
            priority = min(1.0, priority + boost["amount"])
        suggestions.append(HabitSuggestion(
            id=entry["id"],
            title=entry["title"],
            description=entry["description"],
            category=category,
            priority=priority,
        ))

    suggestions.sort(key=lambda s: s.priority, reverse=True)
    return suggestions[:MAX_SUGGESTIONS]


def select_recovery_protocol(
    binge_type: BingeType,
    emotional_sensitivity: float,
    cognitive_readiness: float,
) -> RecoveryRecommendation:
    """Recovery protocol after a binge of distracting usage."""
    if binge_type == "none":
        if cognitive_readiness < 0.3:
            return recovery_protocol(RecoveryStyle.MEDITATION)
        return recovery_protocol(RecoveryStyle.REFLECTION)

    if binge_type == "long-session":
        if emotional_sensitivity > 0.6:
            return recovery_protocol(RecoveryStyle.BREATHING)
        return recovery_protocol(RecoveryStyle.WALK)

    # switch-burst
    if emotional_sensitivity > 0.5:
        return recovery_protocol(RecoveryStyle.BREATHING)
    return recovery_protocol(RecoveryStyle.COLD_EXPOSURE)


# =============================================================================
# Messages
# =============================================================================


def streak_message(streak: int) -> str:
    if streak == 0:
        return "Start your focus streak today!"
    if streak == 1:
        return "Day 1 done! Let's keep it going."
    if streak < 3:
        return f"{streak}-day streak. Building momentum!"
    if streak < 7:
        return f"{streak} days strong! You're forming a habit."
    if streak < 14:
        return f"{streak}-day streak! Your brain is rewiring itself."
    if streak < 30:
        return f"{streak} days of focus! This is becoming second nature."
    return f"{streak}-day streak! You're a focus machine."


TREND_MESSAGES = {
    Trend.IMPROVING: "Your focus is getting sharper!",
    Trend.DECLINING: "Let's get back on track today.",
    Trend.STABLE: "Steady progress, keep going.",
}


def personalized_greeting(state: PersonalizationState) -> str:
    """Streak message followed by an attention-trend sentence."""
    return f"{streak_message(state.habits.current_streak)} {TREND_MESSAGES[state.attention.trend]}"
