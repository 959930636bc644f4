"""Behavioral orchestrator - five rule stages and optional enrichment."""

from attune.orchestrator.directive import build_directive, generate_nudge, merge_enrichment
from attune.orchestrator.gap import compute_behavioral_gap
from attune.orchestrator.inference import infer_context
from attune.orchestrator.ingestion import build_user_state
from attune.orchestrator.messages import generate_module_messages
from attune.orchestrator.pipeline import (
    Orchestrator,
    get_orchestrator,
    reset_orchestrators,
    run_cycle,
    run_pipeline,
)
from attune.orchestrator.strategy import select_strategy

__all__ = [
    "build_directive",
    "generate_nudge",
    "merge_enrichment",
    "compute_behavioral_gap",
    "infer_context",
    "build_user_state",
    "generate_module_messages",
    "Orchestrator",
    "get_orchestrator",
    "reset_orchestrators",
    "run_cycle",
    "run_pipeline",
    "select_strategy",
]
