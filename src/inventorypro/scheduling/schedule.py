"""Wall-clock schedule for the background sweeps.

Both drivers (the in-process supervisor and the arq worker) read this table,
so a fire time changes in one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class ScheduledSweep:
    """A sweep fired daily at each of ``hours`` on ``minute``."""

    name: str
    hours: tuple[int, ...]
    minute: int = 0


LIFECYCLE = ScheduledSweep("lifecycle", hours=(0,))
CLEANUP = ScheduledSweep("cleanup", hours=(1,))
PAYMENT_DUE = ScheduledSweep("payment_due", hours=(8,))
REMINDERS = ScheduledSweep("reminders", hours=(9,))
LOW_STOCK = ScheduledSweep("low_stock", hours=(0, 6, 12, 18))

SCHEDULE: tuple[ScheduledSweep, ...] = (LIFECYCLE, CLEANUP, PAYMENT_DUE, REMINDERS, LOW_STOCK)


def resolve_timezone(name: str) -> tzinfo:
    """Look up an IANA zone name (``UTC``, ``Europe/Berlin``)."""
    return ZoneInfo(name)


def next_run_after(now: datetime, hours: tuple[int, ...], minute: int, tz: tzinfo) -> datetime:
    """First fire time strictly after ``now``, evaluated on ``tz``'s wall clock.

    ``now`` must be timezone-aware. The result is in ``tz``.
    """
    if now.tzinfo is None:
        msg = "now must be timezone-aware"
        raise ValueError(msg)

    local = now.astimezone(tz)
    day = local.date()
    # Every sweep fires at least once a day, so today or tomorrow always matches
    for offset in range(3):
        candidate_day = day + timedelta(days=offset)
        for hour in sorted(hours):
            candidate = datetime(
                candidate_day.year, candidate_day.month, candidate_day.day, hour, minute, tzinfo=tz
            )
            if candidate > local:
                return candidate
    msg = f"No fire time found for hours={hours} minute={minute}"
    raise ValueError(msg)


def seconds_until_next_run(now: datetime, sweep: ScheduledSweep, tz: tzinfo) -> float:
    """Delay in seconds from ``now`` to the sweep's next fire time."""
    return (next_run_after(now, sweep.hours, sweep.minute, tz) - now).total_seconds()
