"""Personalization engine - the state-passing API over all layers.

Every function takes the old state and returns a new one; nothing is
mutated in place.
"""

import logging
from datetime import datetime, timedelta

from attune.contracts.profile import OnboardingProfile
from attune.contracts.signals import ComplianceEvent
from attune.contracts.state import PersonalizationState, SessionSnapshot
from attune.personalization import adaptation
from attune.personalization.baseline import initialize_baseline_state
from attune.personalization.constants import RECENT_WINDOW_DAYS
from attune.tracking import attention, habits

logger = logging.getLogger(__name__)


def initialize(profile: OnboardingProfile, now: datetime | None = None) -> PersonalizationState:
    """Cold start: build the initial state from an onboarding profile."""
    return initialize_baseline_state(profile, now=now)


def process_compliance_event(
    state: PersonalizationState,
    event: ComplianceEvent,
    now: datetime | None = None,
) -> PersonalizationState:
    """Apply the user's response to an intervention."""
    return adaptation.process_compliance_event(state, event, now=now)


def record_focus_session(
    state: PersonalizationState,
    session: SessionSnapshot,
    now: datetime | None = None,
) -> PersonalizationState:
    """Record a completed focus session for attention and streak tracking.

    The session counts toward the calendar day of its own timestamp.
    """
    return state.model_copy(update={
        "attention": attention.record_focus_session(state.attention, session),
        "habits": habits.record_focus_day(
            state.habits,
            session.timestamp.date(),
            session.duration_minutes,
        ),
        "updated_at": now or datetime.now(),
    })


def perform_daily_update(
    state: PersonalizationState,
    now: datetime | None = None,
) -> PersonalizationState:
    """Once-a-day maintenance.

    Decays fatigue, checks the streak, refreshes days since onboarding and
    resets the recent compliance window once it is a week old. Calls after
    the first one on a calendar day return the state unchanged.
    """
    now = now or datetime.now()

    if state.last_daily_update.date() == now.date():
        logger.debug("Daily update already ran today")
        return state

    matrix = state.compliance_matrix
    window_started = state.recent_window_started
    if now - window_started >= timedelta(days=RECENT_WINDOW_DAYS):
        matrix = adaptation.reset_recent_window(matrix)
        window_started = now
        logger.info("Reset recent compliance window")

    updated = state.model_copy(update={
        "fatigue": adaptation.decay_fatigue(state.fatigue),
        "habits": habits.check_streak_broken(state.habits, now.date()),
        "compliance_matrix": matrix,
        "recent_window_started": window_started,
        "days_since_onboarding": max(0, (now - state.created_at).days),
        "last_daily_update": now,
        "updated_at": now,
    })

    logger.info(
        f"Daily update: fatigue {state.fatigue.fatigue_score:.2f} -> "
        f"{updated.fatigue.fatigue_score:.2f}, streak={updated.habits.current_streak}"
    )
    return updated
