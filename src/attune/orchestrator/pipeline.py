"""Orchestrator pipeline - five rule stages plus optional enrichment.

    ingestion -> inference -> gap -> strategy -> directive [-> enrichment]

``run_pipeline`` is one uncached pass. ``Orchestrator`` wraps it per user
with a cooldown, single-flight protection and nudge rate limiting.
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Callable

import httpx

from attune.config import get_config
from attune.contracts.orchestrator import NudgePayload, PersonalizationDirective
from attune.contracts.profile import OnboardingProfile
from attune.contracts.signals import CollaboratorSignals, PersonalizationContext
from attune.contracts.state import PersonalizationState
from attune.orchestrator.directive import build_directive, merge_enrichment
from attune.orchestrator.gap import compute_behavioral_gap
from attune.orchestrator.inference import infer_context
from attune.orchestrator.ingestion import build_user_state
from attune.orchestrator.messages import generate_module_messages
from attune.orchestrator.strategy import select_strategy
from attune.personalization.decision import compute_personalization_profile
from attune.proactive.rate_limiter import NudgeRateLimiter, NudgeRateState
from attune.providers.groq import GroqClient

logger = logging.getLogger(__name__)

NUDGE_HISTORY_LIMIT = 20


async def run_pipeline(
    state: PersonalizationState,
    context: PersonalizationContext | None = None,
    profile: OnboardingProfile | None = None,
    signals: CollaboratorSignals | None = None,
    client: GroqClient | None = None,
    now: datetime | None = None,
    timeout_s: float | None = None,
) -> PersonalizationDirective:
    """Run all stages once and return a directive.

    Args:
        state: Current personalization state
        context: Momentary decision inputs (defaults when absent)
        profile: Onboarding profile for static traits and prompt text
        signals: Optional health, meditation and activity collaborators
        client: Enrichment client; None keeps the directive rule-based
        now: Clock override
        timeout_s: Enrichment timeout override

    Returns:
        A complete directive. Enrichment failures never propagate.
    """
    now = now or datetime.now()
    context = context or PersonalizationContext()
    signals = signals or CollaboratorSignals()

    user_state = build_user_state(profile, state, context, signals, now=now)
    context_state = infer_context(user_state)
    gap = compute_behavioral_gap(user_state)
    strategy = select_strategy(user_state, context_state, gap)

    directive = build_directive(
        user_state,
        context_state,
        gap,
        strategy,
        compute_personalization_profile(state, context),
        generate_module_messages(user_state, signals),
        now=now,
    )
    logger.debug(
        f"Directive: mode={context_state.mode.value} gap={gap.level.value} "
        f"strategy={strategy.type.value} strictness={strategy.strictness}"
    )

    config = get_config()
    if client is None or not config.ENRICHMENT_ENABLED:
        return directive

    timeout = timeout_s if timeout_s is not None else config.ENRICHMENT_TIMEOUT_S
    try:
        response = await asyncio.wait_for(
            client.enrich(user_state, context_state, gap, strategy, profile, signals),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.warning(f"Enrichment timed out after {timeout}s, using rules")
        return directive
    except httpx.HTTPError as e:
        logger.warning(f"Enrichment request failed: {e}")
        return directive
    except (ValueError, KeyError) as e:
        logger.warning(f"Malformed enrichment response: {e}")
        return directive

    if response is None:
        return directive
    return merge_enrichment(directive, response)


class Orchestrator:
    """Per-user cycle runner.

    A request while a run is in flight, or within the cooldown after the
    last completed run, returns the previous directive object unchanged.
    Without an explicit client it enriches through a default GroqClient,
    which stays idle until GROQ_API_KEY is configured.
    """

    def __init__(
        self,
        user_id: str = "default",
        client: GroqClient | None = None,
        limiter: NudgeRateLimiter | None = None,
        cooldown_s: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.user_id = user_id
        self.client = client or GroqClient()
        self.limiter = limiter or NudgeRateLimiter()
        self.cooldown_s = cooldown_s if cooldown_s is not None else get_config().CYCLE_COOLDOWN_S
        self._clock = clock

        self.rate_state = NudgeRateState()
        self.current_nudge: NudgePayload | None = None
        self.nudge_history: list[NudgePayload] = []

        self._directive: PersonalizationDirective | None = None
        self._last_completed: float | None = None
        self._in_flight = False
        self._run_count = 0

    @property
    def directive(self) -> PersonalizationDirective | None:
        return self._directive

    @property
    def is_running(self) -> bool:
        return self._in_flight

    @property
    def run_count(self) -> int:
        return self._run_count

    def in_cooldown(self) -> bool:
        if self._last_completed is None:
            return False
        return self._clock() - self._last_completed < self.cooldown_s

    async def run_cycle(
        self,
        state: PersonalizationState,
        context: PersonalizationContext | None = None,
        profile: OnboardingProfile | None = None,
        signals: CollaboratorSignals | None = None,
        now: datetime | None = None,
    ) -> PersonalizationDirective | None:
        """Run the pipeline unless gated; None only before the first run."""
        if self._in_flight:
            logger.debug(f"Cycle for {self.user_id} already in flight, skipping")
            return self._directive
        if self.in_cooldown():
            logger.debug(f"Cycle for {self.user_id} in cooldown, skipping")
            return self._directive

        self._in_flight = True
        try:
            now = now or datetime.now()
            directive = await run_pipeline(
                state, context, profile, signals, client=self.client, now=now,
            )
            directive = self._apply_rate_limit(directive, now)
        finally:
            self._in_flight = False

        self._directive = directive
        self._last_completed = self._clock()
        self._run_count += 1
        return directive

    def _apply_rate_limit(
        self,
        directive: PersonalizationDirective,
        now: datetime,
    ) -> PersonalizationDirective:
        if directive.nudge is None:
            return directive

        decision = self.limiter.can_deliver(self.rate_state, now)
        if not decision.allowed:
            logger.info(f"Nudge suppressed for {self.user_id}: {decision.reason}")
            return directive.model_copy(update={
                "nudge": None,
                "nudge_suppressed_reason": decision.reason,
            })

        self.rate_state = self.limiter.record_delivery(self.rate_state, now)
        self.current_nudge = directive.nudge
        self.nudge_history = [*self.nudge_history[-(NUDGE_HISTORY_LIMIT - 1):], directive.nudge]
        return directive

    def record_dismissal(self, now: datetime | None = None) -> None:
        self.rate_state = self.limiter.record_dismissal(self.rate_state, now)

    def clear(self) -> None:
        """Forget the last directive and nudge; the next request runs immediately."""
        self._directive = None
        self._last_completed = None
        self.current_nudge = None


_orchestrators: dict[str, Orchestrator] = {}


def get_orchestrator(user_id: str = "default", client: GroqClient | None = None) -> Orchestrator:
    """Get or create the orchestrator for a user."""
    orchestrator = _orchestrators.get(user_id)
    if orchestrator is None:
        orchestrator = Orchestrator(user_id, client=client)
        _orchestrators[user_id] = orchestrator
    return orchestrator


def reset_orchestrators() -> None:
    _orchestrators.clear()


async def run_cycle(
    state: PersonalizationState,
    context: PersonalizationContext | None = None,
    profile: OnboardingProfile | None = None,
    signals: CollaboratorSignals | None = None,
    user_id: str = "default",
    now: datetime | None = None,
    client: GroqClient | None = None,
) -> PersonalizationDirective | None:
    """Run one orchestration cycle through the user's Orchestrator.

    ``client`` only applies when the user's Orchestrator is first created.
    """
    orchestrator = get_orchestrator(user_id, client=client)
    return await orchestrator.run_cycle(state, context, profile, signals, now=now)
