"""Tests for nudge feedback: accept, dismiss and snooze."""

import asyncio
from datetime import timedelta

import pytest

from attune.orchestrator import Orchestrator
from attune.proactive import NudgeFeedback, NudgeRateLimiter
from attune.store import InMemoryStateStore


@pytest.fixture
def store(state):
    store = InMemoryStateStore()
    store.set("default", state)
    return store


@pytest.fixture
def orchestrator():
    limiter = NudgeRateLimiter(min_interval_s=0)
    return Orchestrator(limiter=limiter, cooldown_s=0, clock=lambda: 0.0)


@pytest.fixture
def feedback(orchestrator, store):
    return NudgeFeedback(orchestrator, store)


class TestAcceptDismiss:
    @pytest.mark.asyncio
    async def test_accept_records_success(self, feedback, orchestrator, store, state, now):
        directive = await orchestrator.run_cycle(state, now=now)

        updated = feedback.accept(now=now)

        modality = directive.strategy.modality
        assert updated.total_interactions == 1
        assert updated.compliance_matrix.get(modality).successes == 1
        assert store.get("default") is updated
        assert orchestrator.current_nudge is None

    @pytest.mark.asyncio
    async def test_second_reaction_is_ignored(self, feedback, orchestrator, state, now):
        await orchestrator.run_cycle(state, now=now)
        feedback.accept(now=now)
        assert feedback.accept(now=now) is None
        assert feedback.dismiss(now=now) is None

    @pytest.mark.asyncio
    async def test_dismiss_records_failure_and_cooldown(self, feedback, orchestrator, state, now):
        directive = await orchestrator.run_cycle(state, now=now)

        updated = feedback.dismiss(now=now)

        assert updated.compliance_matrix.get(directive.strategy.modality).attempts == 1
        assert updated.compliance_matrix.get(directive.strategy.modality).successes == 0
        assert updated.fatigue.dismissals_today == 1
        assert orchestrator.rate_state.last_dismiss_time == now

        later = await orchestrator.run_cycle(state, now=now + timedelta(minutes=10))
        assert later.nudge is None
        assert later.nudge_suppressed_reason.startswith("Recently dismissed")

    def test_nothing_displayed(self, feedback):
        assert feedback.accept() is None
        assert feedback.dismiss() is None

    @pytest.mark.asyncio
    async def test_missing_state_not_recorded(self, orchestrator, state, now):
        feedback = NudgeFeedback(orchestrator, InMemoryStateStore())
        await orchestrator.run_cycle(state, now=now)

        assert feedback.accept(now=now) is None
        assert orchestrator.current_nudge is None


class TestSnooze:
    @pytest.mark.asyncio
    async def test_redisplays_after_delay(self, feedback, orchestrator, state, now):
        directive = await orchestrator.run_cycle(state, now=now)
        shown = []

        task = feedback.snooze(delay_s=0.01, on_redisplay=shown.append)
        assert orchestrator.current_nudge is None

        assert await task is True
        assert orchestrator.current_nudge == directive.nudge
        assert shown == [directive.nudge]

    @pytest.mark.asyncio
    async def test_newer_nudge_supersedes(self, feedback, orchestrator, state, now):
        first = await orchestrator.run_cycle(state, now=now)
        task = feedback.snooze(delay_s=0.05)

        second = await orchestrator.run_cycle(state, now=now + timedelta(minutes=1))
        assert second.nudge is not None

        assert await task is False
        assert orchestrator.current_nudge == second.nudge
        assert orchestrator.current_nudge.id != first.nudge.id

    @pytest.mark.asyncio
    async def test_nothing_to_snooze(self, feedback):
        assert feedback.snooze(delay_s=0.01) is None

    @pytest.mark.asyncio
    async def test_cancel_pending(self, feedback, orchestrator, state, now):
        await orchestrator.run_cycle(state, now=now)
        task = feedback.snooze(delay_s=10)

        await feedback.cancel_pending()

        assert task.cancelled()
        assert orchestrator.current_nudge is None
