"""
Nudge Feedback

Turns the three UI reactions to a displayed nudge into core updates:
- accept: successful ComplianceEvent
- dismiss: unsuccessful ComplianceEvent plus a limiter dismissal
- snooze: re-display the same nudge later unless a newer one superseded it
"""

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable

from attune.config import get_config
from attune.contracts.orchestrator import NudgePayload
from attune.contracts.signals import ComplianceEvent
from attune.contracts.state import PersonalizationState
from attune.personalization.engine import process_compliance_event
from attune.store.state_store import StateStore

if TYPE_CHECKING:
    from attune.orchestrator.pipeline import Orchestrator

logger = logging.getLogger(__name__)


class NudgeFeedback:
    """Feeds nudge reactions for one user back into the engine."""

    def __init__(self, orchestrator: "Orchestrator", store: StateStore):
        self.orchestrator = orchestrator
        self.store = store
        self._snooze_tasks: set[asyncio.Task] = set()

    @property
    def user_id(self) -> str:
        return self.orchestrator.user_id

    def _record(self, was_successful: bool, now: datetime | None) -> PersonalizationState | None:
        directive = self.orchestrator.directive
        state = self.store.get(self.user_id)
        if directive is None or state is None:
            logger.warning(f"No directive or state for {self.user_id}, reaction not recorded")
            return None

        now = now or datetime.now()
        event = ComplianceEvent(
            timestamp=now,
            intervention_type=directive.strategy.modality,
            was_successful=was_successful,
        )
        new_state = process_compliance_event(state, event, now=now)
        self.store.set(self.user_id, new_state)
        return new_state

    def accept(self, now: datetime | None = None) -> PersonalizationState | None:
        if self.orchestrator.current_nudge is None:
            return None
        self.orchestrator.current_nudge = None
        return self._record(True, now)

    def dismiss(self, now: datetime | None = None) -> PersonalizationState | None:
        if self.orchestrator.current_nudge is None:
            return None
        self.orchestrator.current_nudge = None
        self.orchestrator.record_dismissal(now)
        return self._record(False, now)

    def snooze(
        self,
        delay_s: float | None = None,
        on_redisplay: Callable[[NudgePayload], Any] | None = None,
    ) -> asyncio.Task | None:
        """Hide the current nudge and schedule it to reappear.

        Must be called from a running event loop. Returns the scheduled
        task, or None when there is nothing to snooze.
        """
        nudge = self.orchestrator.current_nudge
        if nudge is None:
            return None

        delay = delay_s if delay_s is not None else get_config().SNOOZE_DEFAULT_S
        self.orchestrator.current_nudge = None

        task = asyncio.create_task(self._redisplay_after(nudge, delay, on_redisplay))
        self._snooze_tasks.add(task)
        task.add_done_callback(self._snooze_tasks.discard)
        return task

    async def _redisplay_after(
        self,
        nudge: NudgePayload,
        delay: float,
        on_redisplay: Callable[[NudgePayload], Any] | None,
    ) -> bool:
        await asyncio.sleep(delay)

        history = self.orchestrator.nudge_history
        superseded = bool(history) and history[-1].id != nudge.id
        if self.orchestrator.current_nudge is not None or superseded:
            logger.debug(f"Snoozed nudge {nudge.id} superseded, not redisplaying")
            return False

        self.orchestrator.current_nudge = nudge
        if on_redisplay is not None:
            on_redisplay(nudge)
        return True

    async def cancel_pending(self) -> None:
        """Cancel snoozes that have not fired yet."""
        for task in list(self._snooze_tasks):
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._snooze_tasks.clear()
