"""Reminder tier classification.

Tiers are derived per sweep from the time left until ``subscription_end_date``
and never persisted. The closest deadline wins: a subscription one day out
also satisfies the three- and seven-day predicates but classifies as
``ONE_DAY``.
"""

from __future__ import annotations

import enum
import math
from datetime import datetime, timedelta

DAY = timedelta(days=1)


class ReminderTier(str, enum.Enum):
    SEVEN_DAY = "seven_day"
    THREE_DAY = "three_day"
    ONE_DAY = "one_day"
    NONE = "none"


# Checked in order, smallest threshold first
TIER_THRESHOLDS: tuple[tuple[int, ReminderTier], ...] = (
    (1, ReminderTier.ONE_DAY),
    (3, ReminderTier.THREE_DAY),
    (7, ReminderTier.SEVEN_DAY),
)

REMINDER_WINDOW = timedelta(days=TIER_THRESHOLDS[-1][0])


def days_remaining(end_date: datetime, now: datetime) -> int:
    """Whole days left until ``end_date``, rounded up."""
    return math.ceil((end_date - now) / DAY)


def classify_tier(days: int) -> ReminderTier:
    """Map days remaining onto the most urgent applicable tier."""
    for threshold, tier in TIER_THRESHOLDS:
        if days <= threshold:
            return tier
    return ReminderTier.NONE
