"""Validate period-day edits and compute which days may be marked."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

from .const import FILL_BRIDGE, FILL_TODAY
from .forecast import average_period_length
from .history import Cycle


def is_marked_future_days(dates: Iterable[date], today: date | None = None) -> bool:
    """Return True if any of ``dates`` is after today."""
    today = today or date.today()
    return any(day > today for day in dates)


def is_active_date(
    day: date, history: tuple[Cycle, ...], today: date | None = None  # noqa: ARG001
) -> bool:
    """Return True if ``day`` may be selected in an editing calendar.

    Any day up to and including today is selectable, regardless of existing
    cycles.
    """
    return day <= (today or date.today())


def is_period_today(history: tuple[Cycle, ...], today: date | None = None) -> bool:
    if not history:
        return False
    return (today or date.today()) in history[-1].period_dates


def past_future_fill_days(
    history: tuple[Cycle, ...],
    today: date | None = None,
    policy: str = FILL_TODAY,
) -> frozenset[date]:
    """Return the days to add when the user marks "period started today".

    - ``today``: only today is added. A run that already includes yesterday
      simply continues; otherwise today seeds a new cycle.
    - ``bridge``: as ``today``, and when the last run stopped a few days ago
      but today is still within the average period length from its start,
      the skipped days are filled so the run stays one cycle.

    The result never contains a day after today.
    """
    today = today or date.today()
    days = {today}
    if policy != FILL_BRIDGE or not history:
        return frozenset(days)

    last = history[-1]
    gap = (today - last.end_date).days
    within_period = (today - last.start_date).days < average_period_length(history)
    if gap > 1 and within_period:
        days.update(last.end_date + timedelta(days=i) for i in range(1, gap))
    return frozenset(days)
