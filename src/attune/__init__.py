"""Attune - adaptive personalization and orchestration engine.

The functional API:

    state = initialize(profile)
    state = process_compliance_event(state, event)
    state = record_focus_session(state, session)
    state = perform_daily_update(state)
    directive = await run_cycle(state, context, profile)
"""

from attune.orchestrator.pipeline import run_cycle
from attune.personalization.engine import (
    initialize,
    perform_daily_update,
    process_compliance_event,
    record_focus_session,
)

__version__ = "0.1.0"

__all__ = [
    "initialize",
    "perform_daily_update",
    "process_compliance_event",
    "record_focus_session",
    "run_cycle",
]
