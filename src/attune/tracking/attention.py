"""Attention evolution - moving-average model of focus-session length."""

from attune.contracts.state import AttentionEvolution, SessionSnapshot, Trend

MAX_HISTORY = 50
WINDOW_SIZE = 10
DEFAULT_SESSION_MINUTES = 25.0
MIN_SESSION_MINUTES = 10.0
MAX_SESSION_MINUTES = 90.0

SUCCESS_THRESHOLD = 0.80
FAILURE_THRESHOLD = 0.50
GROWTH_FACTOR = 1.08
SHRINK_FACTOR = 0.90

TREND_MIN_SESSIONS = 6
TREND_SLICE = 5
TREND_MIN_SLICE = 3
TREND_DELTA = 0.10


def record_focus_session(
    state: AttentionEvolution,
    session: SessionSnapshot,
) -> AttentionEvolution:
    """Fold a completed session into the attention model.

    Success rate >= 80% grows the next recommendation by 8%, below 50%
    shrinks it by 10%, otherwise it holds at the expected focus time.
    """
    history = (*state.session_history, session)[-MAX_HISTORY:]
    recent = history[-WINDOW_SIZE:]

    expected = sum(s.duration_minutes for s in recent) / len(recent)
    success_rate = sum(1 for s in recent if s.was_successful) / len(recent)

    if success_rate >= SUCCESS_THRESHOLD:
        growth = GROWTH_FACTOR
    elif success_rate < FAILURE_THRESHOLD:
        growth = SHRINK_FACTOR
    else:
        growth = 1.0

    recommended = min(MAX_SESSION_MINUTES, max(MIN_SESSION_MINUTES, expected * growth))

    return AttentionEvolution(
        expected_focus_time=expected,
        success_rate=success_rate,
        session_history=history,
        trend=compute_attention_trend(history),
        recommended_session_length=recommended,
        growth_factor=growth,
    )


def compute_attention_trend(history: tuple[SessionSnapshot, ...]) -> Trend:
    """Compare the latest five sessions against five from the middle of history."""
    if len(history) < TREND_MIN_SESSIONS:
        return Trend.STABLE

    mid = len(history) // 2
    earlier = history[max(0, mid - TREND_SLICE):mid]
    later = history[-TREND_SLICE:]
    if len(earlier) < TREND_MIN_SLICE or len(later) < TREND_MIN_SLICE:
        return Trend.STABLE

    earlier_avg = sum(s.duration_minutes for s in earlier) / len(earlier)
    later_avg = sum(s.duration_minutes for s in later) / len(later)
    change = (later_avg - earlier_avg) / (earlier_avg or 1)

    if change > TREND_DELTA:
        return Trend.IMPROVING
    if change < -TREND_DELTA:
        return Trend.DECLINING
    return Trend.STABLE


def recommended_session_length(state: AttentionEvolution) -> float:
    """Next session length in minutes; 25 until there is any history."""
    if not state.session_history:
        return DEFAULT_SESSION_MINUTES
    return state.recommended_session_length
