"""Orchestrator contracts - the five pipeline stages and their output.

Stage 1 produces a UserState, stage 2 a ContextState, stage 3 a
BehavioralGapScore, stage 4 an InterventionStrategy and stage 5 the
PersonalizationDirective handed to the UI.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from attune.contracts.profile import GoalCategory, MotivationType, NudgeTone
from attune.contracts.signals import TimeOfDay
from attune.contracts.state import InterventionType, Trend


# =============================================================================
# Decision engine outputs
# =============================================================================


class RecoveryStyle(str, Enum):
    """Recovery protocols the engine can recommend."""
    BREATHING = "breathing"
    REFLECTION = "reflection"
    WALK = "walk"
    MEDITATION = "meditation"
    COLD_EXPOSURE = "cold_exposure"


class HabitCategory(str, Enum):
    """When a habit suggestion applies."""
    PRE_FOCUS = "pre_focus"
    DURING_FOCUS = "during_focus"
    POST_FOCUS = "post_focus"
    RECOVERY = "recovery"


class ToneBucket(str, Enum):
    """Coarse tone used for intervention policy wording."""
    SUPPORTIVE = "supportive"
    CHALLENGE = "challenge"
    BALANCED = "balanced"


class ThrottleSeverity(str, Enum):
    """How hard intervention fatigue should throttle delivery."""
    NONE = "none"
    REDUCE = "reduce"
    CRITICAL = "critical"


class RecoveryRecommendation(BaseModel):
    """A recovery protocol with its instructions."""

    model_config = {"frozen": True}

    style: RecoveryStyle
    message: str
    duration_minutes: float = Field(ge=0.0)
    priority: float = Field(ge=0.0, le=1.0)


class HabitSuggestion(BaseModel):
    """A small ritual to reinforce."""

    model_config = {"frozen": True}

    id: str
    title: str
    description: str
    category: HabitCategory
    priority: float = Field(ge=0.0, le=1.0)


class InterventionSuitabilityResult(BaseModel):
    """Intervention Suitability Score and the kind it maps to."""

    model_config = {"frozen": True}

    score: float = Field(ge=0.0, le=1.0)
    recommended_type: InterventionType
    should_delay: bool = Field(
        default=False,
        description="Readiness too low to act now; the type is left unchanged"
    )
    time_modifier: float = 1.0
    goal_conflict: float = Field(default=0.0, ge=0.0, le=1.0)
    distraction_severity: float = Field(default=0.0, ge=0.0, le=1.0)
    cognitive_readiness: float = Field(default=0.5, ge=0.0, le=1.0)


class InterventionPolicy(BaseModel):
    """Intervention kind plus the wording that goes with it."""

    model_config = {"frozen": True}

    intervention_type: InterventionType
    tone: ToneBucket
    message: str


class PersonalizationProfile(BaseModel):
    """Everything the decision engine knows about this moment."""

    model_config = {"frozen": True}

    strictness_level: int = Field(ge=1, le=5)
    nudge_tone: NudgeTone
    intervention_policy: InterventionPolicy
    focus_session_length: float = Field(ge=0.0, description="Minutes")
    recovery: RecoveryRecommendation
    habit_suggestions: tuple[HabitSuggestion, ...] = ()
    compliance_snapshot: dict[InterventionType, float] = Field(default_factory=dict)
    uninstall_risk: float = Field(ge=0.0, le=1.0)
    cognitive_readiness: float = Field(ge=0.0, le=1.0)
    attention_trend: Trend = Trend.STABLE
    suitability: InterventionSuitabilityResult
    fatigue_level: float = Field(ge=0.0, le=1.0)
    current_streak: int = Field(default=0, ge=0)


# =============================================================================
# Stage 1 - UserState
# =============================================================================


class StaticTraits(BaseModel):
    """Personality traits; rarely change after onboarding."""

    conscientiousness: float = 4.0
    neuroticism: float = 4.0
    openness: float = 4.0
    agreeableness: float = 4.0
    extraversion: float = 4.0
    impulsivity_index: float = 0.5
    authority_resistance: float = 0.3
    self_efficacy: float = 0.5
    emotional_reactivity: float = 0.5
    motivation_type: MotivationType = MotivationType.MIXED
    goal_category: GoalCategory = GoalCategory.PERSONAL
    nudge_tone: NudgeTone = NudgeTone.SUPPORTIVE


class SemiDynamicSignals(BaseModel):
    """Signals that move over days or weeks."""

    goal_urgency: float = 0.5
    habit_streak: int = 0
    habit_strength: float = 0.0
    attention_trend: Trend = Trend.STABLE
    compliance_trend: Trend = Trend.STABLE
    weekly_focus_minutes: float = 0.0
    total_session_count: int = 0
    average_meditation_rating: float = 3.0


class DynamicSignals(BaseModel):
    """Signals that move throughout the day."""

    cognitive_readiness: float = 0.5
    meditation_suitability: float = 50.0
    hrv_rmssd_ms: float = Field(default=-1.0, description="-1 when unavailable")
    hrv_normalized: float = 0.5
    stress_level: int = 2
    fatigue_level: int = 2
    sleep_hours: float = 7.0
    sleep_quality: int = 3
    current_afi: float = 0.5
    time_of_day: TimeOfDay = TimeOfDay.MORNING
    hour_of_day: int = 9


class BehavioralSignals(BaseModel):
    """Signals derived from what the user actually did."""

    distraction_rate: float = 0.3
    compliance_rate: float = 0.7
    override_frequency: float = 0.1
    session_survival_rate: float = 0.7
    nudge_dismiss_rate: float = 0.2
    consecutive_dismissals: int = 0
    intervention_fatigue: float = 0.1
    last_session_was_successful: bool = True
    days_since_last_focus: int = 0


class UserState(BaseModel):
    """Point-in-time snapshot of everything known about the user."""

    timestamp: datetime = Field(default_factory=datetime.now)
    static: StaticTraits = Field(default_factory=StaticTraits)
    semi_dynamic: SemiDynamicSignals = Field(default_factory=SemiDynamicSignals)
    dynamic: DynamicSignals = Field(default_factory=DynamicSignals)
    behavioral: BehavioralSignals = Field(default_factory=BehavioralSignals)


# =============================================================================
# Stage 2 - ContextState
# =============================================================================


class ContextMode(str, Enum):
    """What kind of day this is."""
    OVERLOADED = "overloaded"
    COGNITIVELY_FATIGUED = "cognitively-fatigued"
    EMOTIONALLY_REACTIVE = "emotionally-reactive"
    RECOVERING = "recovering"
    PERFORMANCE_READY = "performance-ready"
    OPPORTUNITY_WINDOW = "opportunity-window"
    DRIFTING = "drifting"
    MAINTENANCE = "maintenance"


class ContextState(BaseModel):
    """Inferred context mode."""

    model_config = {"frozen": True}

    mode: ContextMode
    confidence: float = Field(ge=0.0, le=1.0)
    signals: tuple[str, ...] = ()
    secondary_mode: ContextMode | None = None
    scores: dict[ContextMode, float] = Field(
        default_factory=dict,
        description="Confidence of every rule that fired"
    )


# =============================================================================
# Stage 3 - BehavioralGapScore
# =============================================================================


class GapLevel(str, Enum):
    """How far behavior is from intention."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class GapBreakdown(BaseModel):
    """Components of the behavioral gap, each 0-1."""

    model_config = {"frozen": True}

    goal_vs_focus: float = Field(default=0.0, ge=0.0, le=1.0)
    distraction_deviation: float = Field(default=0.0, ge=0.0, le=1.0)
    compliance_gap: float = Field(default=0.0, ge=0.0, le=1.0)
    session_skip_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    recovery_neglect: float = Field(default=0.0, ge=0.0, le=1.0)


class BehavioralGapScore(BaseModel):
    """Tension between stated goals and observed behavior."""

    model_config = {"frozen": True}

    overall: float = Field(ge=0.0, le=1.0)
    level: GapLevel
    breakdown: GapBreakdown = Field(default_factory=GapBreakdown)
    primary_tension: str = ""


# =============================================================================
# Stage 4 - InterventionStrategy
# =============================================================================


class StrategyType(str, Enum):
    """Intervention strategies."""
    REFLECTIVE = "reflective"
    SUPPORTIVE = "supportive"
    ENFORCING = "enforcing"
    RECOVERY_FIRST = "recovery-first"
    OPPORTUNITY_DRIVEN = "opportunity-driven"


class Timing(str, Enum):
    """When to act on a strategy."""
    IMMEDIATE = "immediate"
    DELAYED = "delayed"
    SCHEDULED = "scheduled"


class InterventionStrategy(BaseModel):
    """Selected strategy with its tone, strictness, timing and modality."""

    model_config = {"frozen": True}

    type: StrategyType
    tone: NudgeTone
    strictness: int = Field(ge=1, le=5)
    timing: Timing
    modality: InterventionType
    rationale: str = ""


# =============================================================================
# Stage 5 - PersonalizationDirective
# =============================================================================


class NudgePriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class NudgeActionKind(str, Enum):
    """What pressing a nudge button does."""
    ACCEPT = "accept"
    SNOOZE = "snooze"
    DISMISS = "dismiss"
    NAVIGATE = "navigate"


class MeditationType(str, Enum):
    MINDFULNESS = "mindfulness"
    BODY_SCAN = "body-scan"
    BREATHING = "breathing"
    YOGA_NIDRA = "yoga-nidra"


class FocusType(str, Enum):
    DEEP_WORK = "deep-work"
    LIGHT_TASK = "light-task"
    TRAINING = "training"
    SKIP = "skip"


class PlannerAdjustment(str, Enum):
    PROCEED = "proceed"
    DELAY = "delay"
    REDUCE_LOAD = "reduce-load"
    RESCHEDULE = "reschedule"


class DirectiveSource(str, Enum):
    """Provenance of directive wording."""
    RULES = "rules"
    HYBRID = "hybrid"


class NudgeAction(BaseModel):
    """One button on a nudge."""

    model_config = {"frozen": True}

    label: str
    action: NudgeActionKind
    target: str | None = Field(default=None, description="Screen for navigate actions")
    is_primary: bool = False


class NudgePayload(BaseModel):
    """A user-facing prompt derived from a directive."""

    model_config = {"frozen": True}

    id: str
    title: str
    message: str
    tone: NudgeTone
    icon: str = ""
    actions: tuple[NudgeAction, ...] = ()
    priority: NudgePriority = NudgePriority.LOW
    context_mode: ContextMode = ContextMode.MAINTENANCE
    expires_at: datetime | None = None


class FocusRecommendation(BaseModel):
    """Recommended focus-session parameters."""

    model_config = {"frozen": True}

    session_length: float = Field(ge=0.0, description="Minutes")
    type: FocusType
    reason: str = ""


class ModuleMessages(BaseModel):
    """Per-screen messages for dashboard, focus, meditation and health."""

    model_config = {"frozen": True}

    dashboard: str = ""
    focus: str = ""
    meditation: str = ""
    health: str = ""


class PersonalizationDirective(BaseModel):
    """The single recommendation emitted by one orchestration cycle.

    Structural decisions (strictness, modality, timing) come from rules
    only. Enrichment may replace wording and flips ``source`` to hybrid.
    """

    model_config = {"frozen": True}

    context_state: ContextState
    behavioral_gap: BehavioralGapScore
    strategy: InterventionStrategy
    strictness: int = Field(ge=1, le=5)
    tone: NudgeTone

    # Decision engine snapshot (policy, recovery, habits, compliance, risk)
    personalization: PersonalizationProfile

    # Module recommendations
    recommended_focus: FocusRecommendation
    recovery_flag: bool = False
    recovery_action: RecoveryStyle | None = None
    meditation_type: MeditationType = MeditationType.MINDFULNESS
    meditation_duration: float = Field(default=5.0, ge=0.0, description="Minutes")
    planner_adjustment: PlannerAdjustment = PlannerAdjustment.PROCEED
    habit_focus: str = ""
    module_messages: ModuleMessages = Field(default_factory=ModuleMessages)

    nudge: NudgePayload | None = None
    nudge_suppressed_reason: str | None = None

    rationale: str = ""
    generated_at: datetime = Field(default_factory=datetime.now)
    source: DirectiveSource = DirectiveSource.RULES

    @property
    def intervention_policy(self) -> InterventionPolicy:
        return self.personalization.intervention_policy

    @property
    def uninstall_risk(self) -> float:
        return self.personalization.uninstall_risk

    @property
    def compliance_snapshot(self) -> dict[InterventionType, float]:
        return self.personalization.compliance_snapshot


# =============================================================================
# Enrichment
# =============================================================================


class EnrichmentResponse(BaseModel):
    """Fields the enrichment service may return. All optional.

    Empty strings are normalized to None so they never overwrite rule text.
    """

    nudge_title: str | None = Field(default=None, alias="nudgeTitle")
    nudge_message: str | None = Field(default=None, alias="nudgeMessage")
    dashboard_message: str | None = Field(default=None, alias="dashboardMessage")
    focus_message: str | None = Field(default=None, alias="focusMessage")
    meditation_message: str | None = Field(default=None, alias="meditationMessage")
    health_message: str | None = Field(default=None, alias="healthMessage")
    meditation_suggestion: str | None = Field(default=None, alias="meditationSuggestion")
    focus_recommendation: str | None = Field(default=None, alias="focusRecommendation")
    rationale: str | None = None

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        if value is not None and not isinstance(value, str):
            return str(value)
        return value
