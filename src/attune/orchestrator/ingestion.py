"""Stage 1 - state ingestion.

Assembles a point-in-time UserState from whichever inputs exist. Every
field has a neutral default, so a missing collaborator never fails the
stage.
"""

from datetime import datetime

from attune.contracts.orchestrator import (
    BehavioralSignals,
    DynamicSignals,
    SemiDynamicSignals,
    StaticTraits,
    UserState,
)
from attune.contracts.profile import OnboardingProfile
from attune.contracts.signals import (
    CollaboratorSignals,
    PersonalizationContext,
    TimeOfDay,
)
from attune.contracts.state import PersonalizationState, Trend
from attune.tracking.habits import weekly_minutes

HABIT_BENCHMARK_DAYS = 21
COMPLIANCE_TREND_DELTA = 0.05
NO_FOCUS_DAYS = 999


def extract_static_traits(profile: OnboardingProfile | None) -> StaticTraits:
    if profile is None:
        return StaticTraits()

    big_five = profile.big_five
    return StaticTraits(
        conscientiousness=big_five.conscientiousness,
        neuroticism=big_five.neuroticism,
        openness=big_five.openness,
        agreeableness=big_five.agreeableness,
        extraversion=big_five.extraversion,
        impulsivity_index=profile.impulsivity_index,
        authority_resistance=profile.authority_resistance_score,
        self_efficacy=profile.self_efficacy_score,
        emotional_reactivity=profile.emotional_reactivity_score,
        motivation_type=profile.motivation_type,
        goal_category=profile.goal_category,
        nudge_tone=profile.nudge_tone,
    )


def overall_compliance_trend(state: PersonalizationState) -> Trend:
    """Mean raw recent rate vs mean raw lifetime rate across intervention kinds."""
    recent_rates = []
    overall_rates = []
    for _, tracking in state.compliance_matrix.items():
        recent_rates.append(
            tracking.recent_successes / tracking.recent_attempts
            if tracking.recent_attempts > 0 else 0.5
        )
        overall_rates.append(
            tracking.successes / tracking.attempts if tracking.attempts > 0 else 0.5
        )

    diff = sum(recent_rates) / len(recent_rates) - sum(overall_rates) / len(overall_rates)
    if diff > COMPLIANCE_TREND_DELTA:
        return Trend.IMPROVING
    if diff < -COMPLIANCE_TREND_DELTA:
        return Trend.DECLINING
    return Trend.STABLE


def extract_semi_dynamic_signals(
    state: PersonalizationState | None,
    signals: CollaboratorSignals,
) -> SemiDynamicSignals:
    meditation = signals.meditation
    session_count = meditation.session_count if meditation else 0
    average_rating = (meditation.average_rating if meditation else 0.0) or 3.0

    if state is None:
        return SemiDynamicSignals(
            total_session_count=session_count,
            average_meditation_rating=average_rating,
        )

    streak = state.habits.current_streak
    return SemiDynamicSignals(
        goal_urgency=state.goal_drive_score,
        habit_streak=streak,
        habit_strength=min(streak / HABIT_BENCHMARK_DAYS, 1.0),
        attention_trend=state.attention.trend,
        compliance_trend=overall_compliance_trend(state),
        weekly_focus_minutes=weekly_minutes(state.habits),
        total_session_count=session_count,
        average_meditation_rating=average_rating,
    )


def extract_dynamic_signals(
    context: PersonalizationContext | None,
    signals: CollaboratorSignals,
    now: datetime,
) -> DynamicSignals:
    """Real-time signals; readiness and fragmentation come from the context."""
    values: dict = {}

    if context is not None:
        values.update(
            cognitive_readiness=context.cognitive_readiness_score,
            current_afi=context.recent_afi,
            time_of_day=context.time_of_day,
            hour_of_day=context.hour_of_day,
        )
    else:
        values.update(time_of_day=TimeOfDay.from_hour(now.hour), hour_of_day=now.hour)

    if signals.meditation is not None:
        values["meditation_suitability"] = signals.meditation.suitability

    health = signals.health
    if health is not None:
        values.update(
            hrv_rmssd_ms=health.hrv_rmssd_ms if health.hrv_rmssd_ms is not None else -1.0,
            hrv_normalized=health.hrv_normalized,
            stress_level=health.stress_level,
            fatigue_level=health.fatigue_level,
            sleep_hours=health.sleep_hours,
            sleep_quality=health.sleep_quality,
        )

    return DynamicSignals(**values)


def extract_behavioral_signals(
    state: PersonalizationState | None,
    now: datetime,
) -> BehavioralSignals:
    if state is None:
        return BehavioralSignals()

    fatigue = state.fatigue
    attention = state.attention
    last_focus = state.habits.last_focus_date

    return BehavioralSignals(
        distraction_rate=1 - attention.success_rate,
        compliance_rate=state.strictness.compliance_rate,
        override_frequency=state.strictness.override_frequency,
        session_survival_rate=attention.success_rate,
        nudge_dismiss_rate=(
            fatigue.dismissals_today / fatigue.nudges_delivered_today
            if fatigue.nudges_delivered_today > 0 else 0.0
        ),
        consecutive_dismissals=fatigue.consecutive_dismissals,
        intervention_fatigue=fatigue.fatigue_score,
        last_session_was_successful=(
            attention.session_history[-1].was_successful if attention.session_history else True
        ),
        days_since_last_focus=(
            max(0, (now.date() - last_focus).days) if last_focus else NO_FOCUS_DAYS
        ),
    )


def build_user_state(
    profile: OnboardingProfile | None,
    state: PersonalizationState | None,
    context: PersonalizationContext | None = None,
    signals: CollaboratorSignals | None = None,
    now: datetime | None = None,
) -> UserState:
    """Stage 1: unified snapshot of the user."""
    now = now or datetime.now()
    signals = signals or CollaboratorSignals()

    return UserState(
        timestamp=now,
        static=extract_static_traits(profile),
        semi_dynamic=extract_semi_dynamic_signals(state, signals),
        dynamic=extract_dynamic_signals(context, signals, now),
        behavioral=extract_behavioral_signals(state, now),
    )
