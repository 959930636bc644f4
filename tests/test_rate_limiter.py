"""Tests for nudge rate limiting."""

from datetime import timedelta

from attune.proactive import NudgeRateLimiter, NudgeRateState


class TestNudgeRateLimiter:
    def test_fresh_state_allowed(self, now):
        limiter = NudgeRateLimiter()
        decision = limiter.can_deliver(NudgeRateState(), now=now)
        assert decision.allowed
        assert decision.reason == ""

    def test_defaults_from_config(self):
        limiter = NudgeRateLimiter()
        assert limiter.max_per_day == 5
        assert limiter.min_interval == timedelta(minutes=30)
        assert limiter.dismiss_cooldown == timedelta(hours=1)

    def test_min_interval(self, now):
        limiter = NudgeRateLimiter()
        state = limiter.record_delivery(NudgeRateState(), now=now)

        decision = limiter.can_deliver(state, now=now + timedelta(minutes=10))
        assert not decision.allowed
        assert decision.reason == "Too soon since last nudge (20 min left)"

        assert limiter.can_deliver(state, now=now + timedelta(minutes=30)).allowed

    def test_daily_cap(self, now):
        limiter = NudgeRateLimiter(max_per_day=2, min_interval_s=0)
        state = NudgeRateState()
        for i in range(2):
            state = limiter.record_delivery(state, now=now + timedelta(minutes=i))

        decision = limiter.can_deliver(state, now=now + timedelta(hours=1))
        assert not decision.allowed
        assert decision.reason == "Daily limit reached (2/2)"
        assert limiter.remaining_today(state, now=now) == 0

    def test_cap_resets_next_day(self, now):
        limiter = NudgeRateLimiter(max_per_day=1, min_interval_s=0)
        state = limiter.record_delivery(NudgeRateState(), now=now)

        tomorrow = now + timedelta(days=1)
        assert limiter.can_deliver(state, now=tomorrow).allowed
        assert limiter.remaining_today(state, now=tomorrow) == 1
        assert limiter.record_delivery(state, now=tomorrow).today_count == 1

    def test_dismiss_cooldown(self, now):
        limiter = NudgeRateLimiter(min_interval_s=0)
        state = limiter.record_dismissal(NudgeRateState(), now=now)

        decision = limiter.can_deliver(state, now=now + timedelta(minutes=15))
        assert not decision.allowed
        assert decision.reason == "Recently dismissed (45 min left)"

        assert limiter.can_deliver(state, now=now + timedelta(hours=1)).allowed

    def test_daily_cap_checked_first(self, now):
        limiter = NudgeRateLimiter(max_per_day=1)
        state = limiter.record_delivery(NudgeRateState(), now=now)
        state = limiter.record_dismissal(state, now=now)

        decision = limiter.can_deliver(state, now=now + timedelta(minutes=1))
        assert decision.reason.startswith("Daily limit reached")

    def test_state_is_immutable(self, now):
        limiter = NudgeRateLimiter()
        original = NudgeRateState()
        limiter.record_delivery(original, now=now)
        assert original.today_count == 0
