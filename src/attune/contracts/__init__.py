"""Attune contracts - all typed schemas for the engine."""

from attune.contracts.profile import (
    BigFiveScores,
    DistractionCategory,
    GoalCategory,
    MotivationType,
    NudgeTone,
    OnboardingProfile,
    ResponsePredictionMatrix,
)
from attune.contracts.state import (
    AdaptiveStrictnessState,
    AdjustmentDirection,
    AttentionEvolution,
    ComplianceMatrix,
    HabitState,
    InterventionFatigueState,
    InterventionTracking,
    InterventionType,
    PersonalizationState,
    SessionSnapshot,
    Trend,
)
from attune.contracts.signals import (
    ActivitySnapshot,
    CollaboratorSignals,
    ComplianceEvent,
    HealthSnapshot,
    MeditationSummary,
    PersonalizationContext,
    TimeOfDay,
)
from attune.contracts.orchestrator import (
    BehavioralGapScore,
    BehavioralSignals,
    ContextMode,
    ContextState,
    DirectiveSource,
    DynamicSignals,
    EnrichmentResponse,
    FocusRecommendation,
    FocusType,
    GapBreakdown,
    GapLevel,
    HabitCategory,
    HabitSuggestion,
    InterventionPolicy,
    InterventionStrategy,
    InterventionSuitabilityResult,
    MeditationType,
    ModuleMessages,
    NudgeAction,
    NudgeActionKind,
    NudgePayload,
    NudgePriority,
    PersonalizationDirective,
    PersonalizationProfile,
    PlannerAdjustment,
    RecoveryRecommendation,
    RecoveryStyle,
    SemiDynamicSignals,
    StaticTraits,
    StrategyType,
    ThrottleSeverity,
    Timing,
    ToneBucket,
    UserState,
)

__all__ = [
    # Profile
    "BigFiveScores",
    "DistractionCategory",
    "GoalCategory",
    "MotivationType",
    "NudgeTone",
    "OnboardingProfile",
    "ResponsePredictionMatrix",
    # State
    "AdaptiveStrictnessState",
    "AdjustmentDirection",
    "AttentionEvolution",
    "ComplianceMatrix",
    "HabitState",
    "InterventionFatigueState",
    "InterventionTracking",
    "InterventionType",
    "PersonalizationState",
    "SessionSnapshot",
    "Trend",
    # Signals
    "ActivitySnapshot",
    "CollaboratorSignals",
    "ComplianceEvent",
    "HealthSnapshot",
    "MeditationSummary",
    "PersonalizationContext",
    "TimeOfDay",
    # Decision engine
    "HabitCategory",
    "HabitSuggestion",
    "InterventionPolicy",
    "InterventionSuitabilityResult",
    "PersonalizationProfile",
    "RecoveryRecommendation",
    "RecoveryStyle",
    "ThrottleSeverity",
    "ToneBucket",
    # Orchestrator
    "BehavioralGapScore",
    "BehavioralSignals",
    "ContextMode",
    "ContextState",
    "DirectiveSource",
    "DynamicSignals",
    "EnrichmentResponse",
    "FocusRecommendation",
    "FocusType",
    "GapBreakdown",
    "GapLevel",
    "InterventionStrategy",
    "MeditationType",
    "ModuleMessages",
    "NudgeAction",
    "NudgeActionKind",
    "NudgePayload",
    "NudgePriority",
    "PersonalizationDirective",
    "PlannerAdjustment",
    "SemiDynamicSignals",
    "StaticTraits",
    "StrategyType",
    "Timing",
    "UserState",
]
