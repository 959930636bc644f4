"""Personalization state contracts - the single persisted record per user.

Every record here is frozen. State transitions build new instances with
``model_copy(update=...)`` so an old state is never changed underneath a
caller that still holds it.
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field

from attune.contracts.profile import DistractionCategory, NudgeTone


class InterventionType(str, Enum):
    """Kinds of intervention, mildest first."""
    REFLECTIVE = "reflective"
    SOFT_DELAY = "soft_delay"
    HARD_BLOCK = "hard_block"


class Trend(str, Enum):
    """Direction of a tracked signal."""
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class AdjustmentDirection(str, Enum):
    """Last strictness adjustment."""
    UP = "up"
    DOWN = "down"
    HOLD = "hold"


class InterventionTracking(BaseModel):
    """Beta-Binomial compliance tracking for one intervention kind."""

    model_config = {"frozen": True}

    successes: int = Field(default=0, ge=0)
    attempts: int = Field(default=0, ge=0)
    probability: float = Field(default=0.5, ge=0.0, le=1.0)
    recent_successes: int = Field(default=0, ge=0)
    recent_attempts: int = Field(default=0, ge=0)
    last_updated: datetime = Field(default_factory=datetime.now)


class ComplianceMatrix(BaseModel):
    """Compliance tracking for every intervention kind."""

    model_config = {"frozen": True}

    reflective: InterventionTracking = Field(default_factory=InterventionTracking)
    soft_delay: InterventionTracking = Field(default_factory=InterventionTracking)
    hard_block: InterventionTracking = Field(default_factory=InterventionTracking)

    def get(self, kind: InterventionType) -> InterventionTracking:
        return getattr(self, kind.value)

    def items(self) -> list[tuple[InterventionType, InterventionTracking]]:
        return [(kind, self.get(kind)) for kind in InterventionType]

    def probabilities(self) -> dict[InterventionType, float]:
        """Snapshot of current compliance probabilities."""
        return {kind: tracking.probability for kind, tracking in self.items()}


class AdaptiveStrictnessState(BaseModel):
    """Current strictness and the rates that drove it."""

    model_config = {"frozen": True}

    current_level: int = Field(default=3, ge=1, le=5)
    baseline_level: int = Field(default=3, ge=1, le=5)
    compliance_rate: float = Field(default=0.5, ge=0.0, le=1.0)
    override_frequency: float = Field(default=0.0, ge=0.0, le=1.0)
    session_success_rate: float = Field(default=0.5, ge=0.0, le=1.0)
    last_adjustment: datetime = Field(default_factory=datetime.now)
    direction: AdjustmentDirection = AdjustmentDirection.HOLD


class InterventionFatigueState(BaseModel):
    """How worn out the user is by interventions."""

    model_config = {"frozen": True}

    fatigue_score: float = Field(default=0.0, ge=0.0, le=1.0)
    nudges_delivered_today: int = Field(default=0, ge=0)
    dismissals_today: int = Field(default=0, ge=0)
    last_nudge_time: datetime | None = None
    consecutive_dismissals: int = Field(default=0, ge=0)


class SessionSnapshot(BaseModel):
    """A completed focus session."""

    model_config = {"frozen": True}

    timestamp: datetime = Field(default_factory=datetime.now)
    duration_minutes: float = Field(ge=0.0, description="Actual focused minutes")
    planned_minutes: float = Field(default=25.0, ge=0.0)
    was_successful: bool = True


class AttentionEvolution(BaseModel):
    """Moving-average model of how long the user can focus."""

    model_config = {"frozen": True}

    expected_focus_time: float = Field(default=25.0, ge=0.0, description="E[T] in minutes")
    success_rate: float = Field(default=0.5, ge=0.0, le=1.0)
    session_history: tuple[SessionSnapshot, ...] = ()
    trend: Trend = Trend.STABLE
    recommended_session_length: float = Field(default=25.0, ge=0.0)
    growth_factor: float = 1.0


class HabitState(BaseModel):
    """Focus streak bookkeeping."""

    model_config = {"frozen": True}

    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_focus_date: date | None = None
    total_focus_days: int = Field(default=0, ge=0)
    weekly_focus_minutes: tuple[float, ...] = Field(
        default=(0.0,) * 7,
        min_length=7,
        max_length=7,
        description="Oldest first, today last"
    )


def _default_effectiveness() -> dict[NudgeTone, float]:
    return {tone: 0.5 for tone in NudgeTone}


class PersonalizationState(BaseModel):
    """Mutable-by-replacement behavioral adaptation state for one user."""

    model_config = {"frozen": True}

    # Baseline (set at onboarding, rarely changes)
    baseline_strictness: int = Field(default=3, ge=1, le=5)
    baseline_nudge_tone: NudgeTone = NudgeTone.SUPPORTIVE
    baseline_focus_length: float = Field(default=25.0, ge=0.0, description="Minutes")
    baseline_intervention_tolerance: float = Field(default=0.5, ge=0.0, le=1.0)

    # Derived static indices
    goal_drive_score: float = Field(default=0.5, ge=0.0, le=1.0)
    authority_resistance_score: float = Field(default=0.3, ge=0.0, le=1.0)
    emotional_sensitivity_score: float = Field(default=0.5, ge=0.0, le=1.0)
    impulsivity_index: float = Field(default=0.5, ge=0.0, le=1.0)
    primary_distraction: DistractionCategory = DistractionCategory.SOCIAL_MEDIA

    # Adaptive
    compliance_matrix: ComplianceMatrix = Field(default_factory=ComplianceMatrix)
    strictness: AdaptiveStrictnessState = Field(default_factory=AdaptiveStrictnessState)
    fatigue: InterventionFatigueState = Field(default_factory=InterventionFatigueState)
    nudge_effectiveness: dict[NudgeTone, float] = Field(default_factory=_default_effectiveness)

    # Tracking
    attention: AttentionEvolution = Field(default_factory=AttentionEvolution)
    habits: HabitState = Field(default_factory=HabitState)

    # Meta
    total_interactions: int = Field(default=0, ge=0)
    days_since_onboarding: int = Field(default=0, ge=0)
    last_daily_update: datetime = Field(default_factory=datetime.now)
    recent_window_started: datetime = Field(default_factory=datetime.now)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
