"""Persistence adapters for PersonalizationState."""

from attune.store.state_store import InMemoryStateStore, SqliteStateStore, StateStore

__all__ = ["InMemoryStateStore", "SqliteStateStore", "StateStore"]
