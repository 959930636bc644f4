"""Attention evolution and habit tracking."""

from attune.tracking.attention import (
    compute_attention_trend,
    record_focus_session,
    recommended_session_length,
)
from attune.tracking.habits import (
    check_streak_broken,
    habit_suggestions,
    personalized_greeting,
    record_focus_day,
    select_recovery_protocol,
    streak_message,
)

__all__ = [
    "compute_attention_trend",
    "record_focus_session",
    "recommended_session_length",
    "check_streak_broken",
    "habit_suggestions",
    "personalized_greeting",
    "record_focus_day",
    "select_recovery_protocol",
    "streak_message",
]
