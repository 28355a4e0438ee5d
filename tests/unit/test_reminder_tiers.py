"""Reminder tier boundaries."""

from datetime import datetime, timedelta, timezone

import pytest

from inventorypro.subscriptions.tiers import ReminderTier, classify_tier, days_remaining

NOW = datetime(2026, 3, 10, 9, 0, 0, tzinfo=timezone.utc)


class TestClassifyTier:
    """Closest deadline wins."""

    @pytest.mark.parametrize(
        ("days", "expected"),
        [
            (8, ReminderTier.NONE),
            (7, ReminderTier.SEVEN_DAY),
            (4, ReminderTier.SEVEN_DAY),
            (3, ReminderTier.THREE_DAY),
            (2, ReminderTier.THREE_DAY),
            (1, ReminderTier.ONE_DAY),
            (0, ReminderTier.ONE_DAY),
        ],
    )
    def test_boundaries(self, days, expected):
        assert classify_tier(days) is expected

    def test_negative_days_is_most_urgent(self):
        assert classify_tier(-2) is ReminderTier.ONE_DAY

    def test_tiers_never_get_less_urgent_as_time_passes(self):
        order = [ReminderTier.NONE, ReminderTier.SEVEN_DAY, ReminderTier.THREE_DAY, ReminderTier.ONE_DAY]
        ranks = [order.index(classify_tier(d)) for d in range(10, -1, -1)]
        assert ranks == sorted(ranks)


class TestDaysRemaining:
    def test_exact_days(self):
        assert days_remaining(NOW + timedelta(days=3), NOW) == 3

    def test_partial_day_rounds_up(self):
        assert days_remaining(NOW + timedelta(days=2, hours=1), NOW) == 3

    def test_a_few_hours_left_is_one_day(self):
        assert days_remaining(NOW + timedelta(hours=5), NOW) == 1

    def test_already_past_is_not_positive(self):
        assert days_remaining(NOW - timedelta(hours=5), NOW) <= 0
