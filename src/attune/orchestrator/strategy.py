"""Stage 4 - strategy selection.

A decision table over (context mode, gap level, static traits). Safety
modes short-circuit before the gap is considered. Tone, strictness,
timing and modality are then derived by small independent rule tables.
"""

from attune.contracts.orchestrator import (
    BehavioralGapScore,
    ContextMode,
    ContextState,
    GapLevel,
    InterventionStrategy,
    StrategyType,
    Timing,
    UserState,
)
from attune.contracts.profile import NudgeTone
from attune.contracts.state import InterventionType

RECOVERY_MODES = {
    ContextMode.OVERLOADED,
    ContextMode.COGNITIVELY_FATIGUED,
    ContextMode.RECOVERING,
}
OPPORTUNITY_MODES = {ContextMode.PERFORMANCE_READY, ContextMode.OPPORTUNITY_WINDOW}

BASE_STRICTNESS = {
    StrategyType.RECOVERY_FIRST: 1,
    StrategyType.SUPPORTIVE: 2,
    StrategyType.REFLECTIVE: 2,
    StrategyType.OPPORTUNITY_DRIVEN: 2,
    StrategyType.ENFORCING: 4,
}

STRATEGY_LABELS = {
    StrategyType.REFLECTIVE: "Gentle awareness to encourage self-correction",
    StrategyType.SUPPORTIVE: "Warm encouragement to maintain momentum",
    StrategyType.ENFORCING: "Firm accountability to close the behavioral gap",
    StrategyType.RECOVERY_FIRST: "Prioritizing rest and recovery before pushing further",
    StrategyType.OPPORTUNITY_DRIVEN: "Capitalizing on a strong cognitive state for growth",
}


def select_strategy_type(
    context: ContextState,
    gap: BehavioralGapScore,
    state: UserState,
) -> StrategyType:
    authority_resistance = state.static.authority_resistance

    # Safety short-circuits
    if context.mode in RECOVERY_MODES:
        return StrategyType.RECOVERY_FIRST
    if context.mode == ContextMode.EMOTIONALLY_REACTIVE:
        return StrategyType.REFLECTIVE if authority_resistance > 0.6 else StrategyType.SUPPORTIVE

    # Gap-driven
    if gap.level == GapLevel.CRITICAL:
        if state.dynamic.cognitive_readiness > 0.5:
            return StrategyType.ENFORCING
        return StrategyType.SUPPORTIVE
    if gap.level == GapLevel.HIGH:
        return StrategyType.REFLECTIVE if authority_resistance > 0.6 else StrategyType.ENFORCING
    if gap.level == GapLevel.MODERATE:
        return StrategyType.REFLECTIVE

    if context.mode in OPPORTUNITY_MODES:
        return StrategyType.OPPORTUNITY_DRIVEN
    return StrategyType.SUPPORTIVE


def select_tone(strategy: StrategyType, state: UserState) -> NudgeTone:
    traits = state.static

    if strategy in (StrategyType.RECOVERY_FIRST, StrategyType.SUPPORTIVE):
        if traits.emotional_reactivity > 0.6:
            return NudgeTone.SUPPORTIVE
        if traits.self_efficacy < 0.4:
            return NudgeTone.CONFIDENCE_BUILDING
        return NudgeTone.SUPPORTIVE

    if strategy == StrategyType.REFLECTIVE:
        return NudgeTone.CHALLENGE if traits.self_efficacy > 0.7 else NudgeTone.SUPPORTIVE

    if strategy == StrategyType.ENFORCING:
        if traits.authority_resistance > 0.6:
            return NudgeTone.CHALLENGE
        if traits.self_efficacy > 0.6:
            return NudgeTone.SHARP
        return NudgeTone.CHALLENGE

    if strategy == StrategyType.OPPORTUNITY_DRIVEN:
        return NudgeTone.CHALLENGE if traits.self_efficacy > 0.6 else NudgeTone.CONFIDENCE_BUILDING

    return traits.nudge_tone


def select_strictness(
    strategy: StrategyType,
    gap: BehavioralGapScore,
    state: UserState,
) -> int:
    level = BASE_STRICTNESS[strategy]

    if gap.level == GapLevel.CRITICAL:
        level = min(level + 1, 5)
    elif gap.level == GapLevel.HIGH:
        level = min(level + 1, 4)
    if state.static.authority_resistance > 0.6:
        level = max(level - 1, 1)
    if state.static.impulsivity_index > 0.7:
        level = min(level + 1, 5)
    if state.behavioral.intervention_fatigue > 0.6:
        level = max(level - 1, 1)

    return max(1, min(5, level))


def select_timing(
    context: ContextState,
    gap: BehavioralGapScore,
    state: UserState,
) -> Timing:
    if context.mode in (ContextMode.RECOVERING, ContextMode.COGNITIVELY_FATIGUED):
        return Timing.DELAYED
    if gap.level == GapLevel.CRITICAL:
        return Timing.IMMEDIATE
    if state.behavioral.intervention_fatigue > 0.7:
        return Timing.DELAYED
    if gap.level == GapLevel.LOW:
        return Timing.SCHEDULED
    return Timing.IMMEDIATE


def select_modality(strategy: StrategyType, strictness: int) -> InterventionType:
    if strategy == StrategyType.ENFORCING:
        return InterventionType.HARD_BLOCK if strictness >= 4 else InterventionType.SOFT_DELAY
    return InterventionType.REFLECTIVE


def build_rationale(
    strategy: StrategyType,
    context: ContextState,
    gap: BehavioralGapScore,
) -> str:
    parts = [f"Context: {context.mode.value} ({context.confidence * 100:.0f}% confidence)"]
    if gap.level != GapLevel.LOW:
        parts.append(f"Gap: {gap.level.value}, {gap.primary_tension}")
    parts.append(f"Strategy: {STRATEGY_LABELS[strategy]}")
    return ". ".join(parts)


def select_strategy(
    state: UserState,
    context: ContextState,
    gap: BehavioralGapScore,
) -> InterventionStrategy:
    """Stage 4: pick a strategy and derive its parameters."""
    strategy_type = select_strategy_type(context, gap, state)
    strictness = select_strictness(strategy_type, gap, state)

    return InterventionStrategy(
        type=strategy_type,
        tone=select_tone(strategy_type, state),
        strictness=strictness,
        timing=select_timing(context, gap, state),
        modality=select_modality(strategy_type, strictness),
        rationale=build_rationale(strategy_type, context, gap),
    )
