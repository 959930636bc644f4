"""Proactive delivery - rate limiting and nudge feedback."""

from attune.proactive.feedback import NudgeFeedback
from attune.proactive.rate_limiter import NudgeRateLimiter, NudgeRateState, RateDecision

__all__ = [
    "NudgeFeedback",
    "NudgeRateLimiter",
    "NudgeRateState",
    "RateDecision",
]
