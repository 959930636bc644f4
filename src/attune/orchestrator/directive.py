"""Stage 5 - directive assembly and enrichment merge.

The rule-based directive is always complete on its own. Enrichment only
ever replaces wording via ``merge_enrichment``; it never touches
strictness, modality or timing.
"""

import uuid
from datetime import datetime

from attune.contracts.orchestrator import (
    BehavioralGapScore,
    ContextMode,
    ContextState,
    DirectiveSource,
    EnrichmentResponse,
    FocusRecommendation,
    FocusType,
    GapLevel,
    InterventionStrategy,
    MeditationType,
    ModuleMessages,
    NudgeAction,
    NudgeActionKind,
    NudgePayload,
    NudgePriority,
    PersonalizationDirective,
    PersonalizationProfile,
    PlannerAdjustment,
    RecoveryStyle,
    StrategyType,
    UserState,
)

MAX_DEEP_WORK_MINUTES = 60

PRIORITY_BY_GAP = {
    GapLevel.CRITICAL: NudgePriority.URGENT,
    GapLevel.HIGH: NudgePriority.HIGH,
    GapLevel.MODERATE: NudgePriority.MEDIUM,
    GapLevel.LOW: NudgePriority.LOW,
}

NUDGE_ACTIONS = {
    StrategyType.RECOVERY_FIRST: (
        NudgeAction(label="Start Recovery", action=NudgeActionKind.NAVIGATE,
                    target="Meditate", is_primary=True),
        NudgeAction(label="Later", action=NudgeActionKind.SNOOZE),
    ),
    StrategyType.ENFORCING: (
        NudgeAction(label="Start Focus", action=NudgeActionKind.NAVIGATE,
                    target="FocusSession", is_primary=True),
        NudgeAction(label="Not Now", action=NudgeActionKind.DISMISS),
    ),
    StrategyType.OPPORTUNITY_DRIVEN: (
        NudgeAction(label="Let's Go", action=NudgeActionKind.NAVIGATE,
                    target="Training", is_primary=True),
        NudgeAction(label="Remind Later", action=NudgeActionKind.SNOOZE),
    ),
    StrategyType.REFLECTIVE: (
        NudgeAction(label="Reflect", action=NudgeActionKind.ACCEPT, is_primary=True),
        NudgeAction(label="Skip", action=NudgeActionKind.DISMISS),
    ),
}
DEFAULT_NUDGE_ACTIONS = (
    NudgeAction(label="OK", action=NudgeActionKind.ACCEPT, is_primary=True),
    NudgeAction(label="Later", action=NudgeActionKind.SNOOZE),
)

VALID_MEDITATION_SUGGESTIONS = {m.value for m in MeditationType}


# =============================================================================
# Module recommendations
# =============================================================================


def select_focus_recommendation(state: UserState, context: ContextState) -> FocusRecommendation:
    mode = context.mode

    if mode in (ContextMode.OVERLOADED, ContextMode.COGNITIVELY_FATIGUED):
        return FocusRecommendation(
            session_length=0, type=FocusType.SKIP,
            reason="Cognitive readiness too low, recover first",
        )
    if mode == ContextMode.EMOTIONALLY_REACTIVE:
        return FocusRecommendation(
            session_length=10, type=FocusType.LIGHT_TASK,
            reason="Keep it light until stress subsides",
        )
    if mode == ContextMode.RECOVERING:
        return FocusRecommendation(
            session_length=15, type=FocusType.LIGHT_TASK,
            reason="Easy session to maintain momentum",
        )
    if mode == ContextMode.PERFORMANCE_READY:
        length = min(25 + state.semi_dynamic.habit_streak * 2, MAX_DEEP_WORK_MINUTES)
        return FocusRecommendation(
            session_length=length, type=FocusType.DEEP_WORK,
            reason=f"Peak state, push for {length} min deep work",
        )
    if mode == ContextMode.OPPORTUNITY_WINDOW:
        return FocusRecommendation(
            session_length=25, type=FocusType.TRAINING,
            reason="Good window for cognitive training",
        )
    if mode == ContextMode.DRIFTING:
        return FocusRecommendation(
            session_length=15, type=FocusType.TRAINING,
            reason="Short session to rebuild focus habit",
        )
    return FocusRecommendation(
        session_length=25, type=FocusType.DEEP_WORK, reason="Standard focus session",
    )


def should_flag_recovery(context: ContextState, state: UserState) -> bool:
    return (
        context.mode in (
            ContextMode.OVERLOADED,
            ContextMode.COGNITIVELY_FATIGUED,
            ContextMode.RECOVERING,
        )
        or state.dynamic.fatigue_level >= 4
        or state.dynamic.stress_level >= 4
    )


def select_recovery_action(context: ContextState, state: UserState) -> RecoveryStyle | None:
    if not should_flag_recovery(context, state):
        return None
    if state.dynamic.stress_level >= 4:
        return RecoveryStyle.BREATHING
    if state.dynamic.fatigue_level >= 4:
        return RecoveryStyle.MEDITATION
    if state.static.emotional_reactivity > 0.6:
        return RecoveryStyle.REFLECTION
    if state.static.extraversion > 5:
        return RecoveryStyle.WALK
    return RecoveryStyle.BREATHING


def select_meditation_type(
    context: ContextState,
    state: UserState,
    gap: BehavioralGapScore,
) -> MeditationType:
    if state.dynamic.stress_level >= 4:
        return MeditationType.BREATHING
    if context.mode in (ContextMode.COGNITIVELY_FATIGUED, ContextMode.OVERLOADED):
        return MeditationType.YOGA_NIDRA
    if context.mode == ContextMode.EMOTIONALLY_REACTIVE:
        return MeditationType.BODY_SCAN
    if context.mode == ContextMode.PERFORMANCE_READY:
        return MeditationType.MINDFULNESS
    if gap.level in (GapLevel.HIGH, GapLevel.CRITICAL):
        return MeditationType.BREATHING
    return MeditationType.MINDFULNESS


def select_meditation_duration(context: ContextState, state: UserState) -> float:
    """Minutes; scales with meditation experience outside the special modes."""
    if context.mode == ContextMode.OVERLOADED:
        return 5
    if context.mode == ContextMode.COGNITIVELY_FATIGUED:
        return 10
    if context.mode == ContextMode.PERFORMANCE_READY:
        return 15

    sessions = state.semi_dynamic.total_session_count
    if sessions > 20:
        return 15
    if sessions > 5:
        return 10
    return 5


def select_planner_adjustment(context: ContextState, gap: BehavioralGapScore) -> PlannerAdjustment:
    if context.mode == ContextMode.OVERLOADED:
        return PlannerAdjustment.REDUCE_LOAD
    if context.mode == ContextMode.COGNITIVELY_FATIGUED:
        return PlannerAdjustment.DELAY
    if gap.level == GapLevel.CRITICAL and gap.breakdown.session_skip_rate > 0.5:
        return PlannerAdjustment.RESCHEDULE
    return PlannerAdjustment.PROCEED


def select_habit_focus(state: UserState, gap: BehavioralGapScore) -> str:
    """First matching habit to reinforce today."""
    streak = state.semi_dynamic.habit_streak

    if state.behavioral.days_since_last_focus >= 3:
        return "Re-establish daily focus habit"
    if gap.breakdown.recovery_neglect > 0.5:
        return "Build a recovery routine after intense work"
    if gap.breakdown.distraction_deviation > 0.5:
        return "Reduce distraction triggers with pre-focus rituals"
    if streak >= 7:
        return "Extend focus session length for progressive growth"
    if streak == 0:
        return "Start a 1-day streak with any focus session"
    return f"Maintain your {streak}-day streak"


# =============================================================================
# Nudge
# =============================================================================


def nudge_content(
    context: ContextState,
    gap: BehavioralGapScore,
    state: UserState,
) -> tuple[str, str, str]:
    """(icon, title, message) for the context mode."""
    mode = context.mode

    if mode == ContextMode.OVERLOADED:
        return (
            "🛑", "Time to Recharge",
            "Your stress and fatigue are both high. A short breathing session will help you reset.",
        )
    if mode == ContextMode.COGNITIVELY_FATIGUED:
        return (
            "😴", "Low on Energy",
            "Your cognitive readiness is low right now. Try a short meditation or take a break.",
        )
    if mode == ContextMode.EMOTIONALLY_REACTIVE:
        return (
            "🌊", "Take a Breath",
            "You seem stressed. A body scan or breathing exercise can help ground you.",
        )
    if mode == ContextMode.DRIFTING:
        title = "You Can Do This" if state.static.self_efficacy > 0.5 else "Small Step Forward"
        return "🧭", title, gap.primary_tension
    if mode == ContextMode.PERFORMANCE_READY:
        return (
            "🚀", "Peak Mode",
            "You're in great shape today. Perfect time for a challenging focus session!",
        )
    if mode == ContextMode.OPPORTUNITY_WINDOW:
        minutes = state.semi_dynamic.weekly_focus_minutes
        return (
            "🌟", "Opportunity",
            f"Your readiness is up and you've only done {minutes:.0f} min this week. "
            "Let's build some momentum!",
        )
    if mode == ContextMode.RECOVERING:
        return (
            "🌿", "Recovery Time",
            "Nice work on your last session. Take it easy before the next one.",
        )
    return "✨", "Stay on Track", select_habit_focus(state, gap)


def generate_nudge(
    context: ContextState,
    gap: BehavioralGapScore,
    strategy: InterventionStrategy,
    state: UserState,
) -> NudgePayload:
    icon, title, message = nudge_content(context, gap, state)
    return NudgePayload(
        id=f"nudge_{uuid.uuid4().hex[:8]}",
        title=title,
        message=message,
        tone=strategy.tone,
        icon=icon,
        actions=NUDGE_ACTIONS.get(strategy.type, DEFAULT_NUDGE_ACTIONS),
        priority=PRIORITY_BY_GAP[gap.level],
        context_mode=context.mode,
    )


# =============================================================================
# Assembly
# =============================================================================


def build_directive(
    state: UserState,
    context: ContextState,
    gap: BehavioralGapScore,
    strategy: InterventionStrategy,
    personalization: PersonalizationProfile,
    module_messages: ModuleMessages,
    now: datetime | None = None,
) -> PersonalizationDirective:
    """Combine strategy and module rule tables into one rule-based directive."""
    return PersonalizationDirective(
        context_state=context,
        behavioral_gap=gap,
        strategy=strategy,
        strictness=strategy.strictness,
        tone=strategy.tone,
        personalization=personalization,
        recommended_focus=select_focus_recommendation(state, context),
        recovery_flag=should_flag_recovery(context, state),
        recovery_action=select_recovery_action(context, state),
        meditation_type=select_meditation_type(context, state, gap),
        meditation_duration=select_meditation_duration(context, state),
        planner_adjustment=select_planner_adjustment(context, gap),
        habit_focus=select_habit_focus(state, gap),
        module_messages=module_messages,
        nudge=generate_nudge(context, gap, strategy, state),
        rationale=strategy.rationale,
        generated_at=now or datetime.now(),
        source=DirectiveSource.RULES,
    )


def merge_enrichment(
    directive: PersonalizationDirective,
    response: EnrichmentResponse,
) -> PersonalizationDirective:
    """Overlay enrichment wording on a rule-based directive.

    Absent fields keep the rule text. Meditation suggestions outside the
    known types are ignored.
    """
    update: dict = {"source": DirectiveSource.HYBRID}

    if directive.nudge is not None:
        nudge_update = {}
        if response.nudge_title:
            nudge_update["title"] = response.nudge_title
        if response.nudge_message:
            nudge_update["message"] = response.nudge_message
        if nudge_update:
            update["nudge"] = directive.nudge.model_copy(update=nudge_update)

    messages = directive.module_messages
    update["module_messages"] = ModuleMessages(
        dashboard=response.dashboard_message or messages.dashboard,
        focus=response.focus_message or messages.focus,
        meditation=response.meditation_message or messages.meditation,
        health=response.health_message or messages.health,
    )

    if response.meditation_suggestion in VALID_MEDITATION_SUGGESTIONS:
        update["meditation_type"] = MeditationType(response.meditation_suggestion)

    if response.rationale:
        update["rationale"] = f"[AI] {response.rationale} | [Rules] {directive.rationale}"

    if response.focus_recommendation:
        update["recommended_focus"] = directive.recommended_focus.model_copy(
            update={"reason": response.focus_recommendation}
        )

    return directive.model_copy(update=update)
