"""
Nudge Rate Limiter

Gates nudge delivery to prevent notification fatigue:
- at most N nudges per calendar day
- a minimum interval between nudges
- a longer cooldown after the user dismisses one
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from pydantic import BaseModel, Field

from attune.config import get_config

logger = logging.getLogger(__name__)


class NudgeRateState(BaseModel):
    """Persistable limiter bookkeeping."""

    model_config = {"frozen": True}

    today_count: int = Field(default=0, ge=0)
    last_nudge_time: datetime | None = None
    last_dismiss_time: datetime | None = None
    daily_reset_date: date | None = None


@dataclass
class RateDecision:
    """Whether a nudge may be delivered now, and why not if it may not."""

    allowed: bool
    reason: str = ""


class NudgeRateLimiter:
    """Applies delivery limits to a NudgeRateState."""

    def __init__(
        self,
        max_per_day: int | None = None,
        min_interval_s: float | None = None,
        dismiss_cooldown_s: float | None = None,
    ):
        config = get_config()
        self.max_per_day = max_per_day if max_per_day is not None else config.NUDGE_MAX_PER_DAY
        self.min_interval = timedelta(seconds=(
            min_interval_s if min_interval_s is not None else config.NUDGE_MIN_INTERVAL_S
        ))
        self.dismiss_cooldown = timedelta(seconds=(
            dismiss_cooldown_s if dismiss_cooldown_s is not None
            else config.NUDGE_DISMISS_COOLDOWN_S
        ))

    def _count_today(self, state: NudgeRateState, today: date) -> int:
        return state.today_count if state.daily_reset_date == today else 0

    def can_deliver(self, state: NudgeRateState, now: datetime | None = None) -> RateDecision:
        """Check the daily cap, then the interval, then the dismissal cooldown."""
        now = now or datetime.now()

        count = self._count_today(state, now.date())
        if count >= self.max_per_day:
            return RateDecision(False, f"Daily limit reached ({count}/{self.max_per_day})")

        if state.last_nudge_time and now - state.last_nudge_time < self.min_interval:
            remaining = self.min_interval - (now - state.last_nudge_time)
            return RateDecision(
                False, f"Too soon since last nudge ({int(remaining.total_seconds() // 60)} min left)"
            )

        if state.last_dismiss_time and now - state.last_dismiss_time < self.dismiss_cooldown:
            remaining = self.dismiss_cooldown - (now - state.last_dismiss_time)
            return RateDecision(
                False, f"Recently dismissed ({int(remaining.total_seconds() // 60)} min left)"
            )

        return RateDecision(True)

    def record_delivery(self, state: NudgeRateState, now: datetime | None = None) -> NudgeRateState:
        now = now or datetime.now()
        today = now.date()
        count = self._count_today(state, today) + 1
        logger.debug(f"Nudge delivered ({count}/{self.max_per_day} today)")
        return state.model_copy(update={
            "today_count": count,
            "last_nudge_time": now,
            "daily_reset_date": today,
        })

    def record_dismissal(self, state: NudgeRateState, now: datetime | None = None) -> NudgeRateState:
        return state.model_copy(update={"last_dismiss_time": now or datetime.now()})

    def remaining_today(self, state: NudgeRateState, now: datetime | None = None) -> int:
        now = now or datetime.now()
        return max(0, self.max_per_day - self._count_today(state, now.date()))
