"""Shared fixtures."""

from datetime import datetime

import pytest

from attune.config import reload_config
from attune.contracts import OnboardingProfile
from attune.orchestrator import reset_orchestrators
from attune.personalization import initialize


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Fresh config with no API key from the developer's environment."""
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    reload_config()
    reset_orchestrators()
    yield
    reset_orchestrators()


@pytest.fixture
def now():
    return datetime(2026, 3, 2, 10, 0, 0)


@pytest.fixture
def profile():
    return OnboardingProfile()


@pytest.fixture
def state(profile, now):
    return initialize(profile, now=now)
