"""Forecast period and fertility events from a cycle history.

Every function here is pure: it reads the history it is given and returns a
new value. Averages default to a 28 day cycle and a 5 day period until the
history holds enough data; callers may pass an ``Averages`` computed with
other fallbacks.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, timedelta
import math

from .const import (
    ANNOTATION_FORECAST,
    ANNOTATION_FORECAST_TODAY,
    ANNOTATION_PERIOD,
    CHANCE_HIGH,
    CHANCE_LOW,
    CHANCE_MEDIUM,
    DEFAULT_CYCLE_LENGTH,
    DEFAULT_PERIOD_LENGTH,
    FORECAST_CYCLES,
    HIGH_CHANCE_DAYS,
    LUTEAL_PHASE_DAYS,
    MEDIUM_CHANCE_DAYS,
    TITLE_DAY_OF_PERIOD,
    TITLE_NO_DATA,
    TITLE_UNTIL_PERIOD,
)
from .history import Cycle


@dataclass(frozen=True)
class Averages:
    """Average cycle and period length in whole days."""

    cycle_length: int
    period_length: int


@dataclass(frozen=True)
class DaysBeforePeriod:
    """Headline forecast: what is being counted and how many days."""

    title: str
    days: int


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def average_cycle_length(
    history: tuple[Cycle, ...], default: int = DEFAULT_CYCLE_LENGTH
) -> int:
    """Return the mean cycle length, or ``default`` without a complete cycle."""
    lengths = [c.cycle_length for c in history if c.cycle_length is not None]
    if not lengths:
        return default
    return max(1, _round_half_up(sum(lengths) / len(lengths)))


def average_period_length(
    history: tuple[Cycle, ...], default: int = DEFAULT_PERIOD_LENGTH
) -> int:
    """Return the mean period length, or ``default`` for an empty history."""
    if not history:
        return default
    total = sum(c.period_length for c in history)
    return max(1, _round_half_up(total / len(history)))


def averages(
    history: tuple[Cycle, ...],
    default_cycle_length: int = DEFAULT_CYCLE_LENGTH,
    default_period_length: int = DEFAULT_PERIOD_LENGTH,
) -> Averages:
    return Averages(
        cycle_length=average_cycle_length(history, default_cycle_length),
        period_length=average_period_length(history, default_period_length),
    )


def _day_of_cycle(history: tuple[Cycle, ...], today: date) -> int:
    # today before the last start is an invalid state; treat it as day zero
    return max(0, (today - history[-1].start_date).days)


def _ovulation_offset(avg: Averages) -> int:
    return max(0, avg.cycle_length - LUTEAL_PHASE_DAYS)


def days_before_period(
    history: tuple[Cycle, ...],
    today: date,
    avg: Averages | None = None,
) -> DaysBeforePeriod:
    """Return either the current day of period or the days until the next one."""
    if not history:
        return DaysBeforePeriod(title=TITLE_NO_DATA, days=0)

    avg = avg or averages(history)
    day_of_cycle = _day_of_cycle(history, today)
    if day_of_cycle < avg.period_length:
        return DaysBeforePeriod(title=TITLE_DAY_OF_PERIOD, days=day_of_cycle + 1)

    predicted = history[-1].start_date + timedelta(days=avg.cycle_length)
    return DaysBeforePeriod(
        title=TITLE_UNTIL_PERIOD, days=max(0, (predicted - today).days)
    )


def pregnancy_chance(
    history: tuple[Cycle, ...],
    today: date | None = None,
    avg: Averages | None = None,
) -> str | None:
    """Classify today's chance of conception by distance from ovulation.

    Returns ``None`` when there is no history to estimate from.
    """
    if not history:
        return None
    today = today or date.today()
    avg = avg or averages(history)

    distance = abs(_day_of_cycle(history, today) - _ovulation_offset(avg))
    if distance <= HIGH_CHANCE_DAYS:
        return CHANCE_HIGH
    if distance <= MEDIUM_CHANCE_DAYS:
        return CHANCE_MEDIUM
    return CHANCE_LOW


def ovulation_date(
    history: tuple[Cycle, ...], avg: Averages | None = None
) -> date | None:
    """Estimated ovulation day of the most recent cycle."""
    if not history:
        return None
    avg = avg or averages(history)
    return history[-1].start_date + timedelta(days=_ovulation_offset(avg))


def next_period_start(
    history: tuple[Cycle, ...], avg: Averages | None = None
) -> date | None:
    if not history:
        return None
    avg = avg or averages(history)
    return history[-1].start_date + timedelta(days=avg.cycle_length)


def forecast_period_windows(
    history: tuple[Cycle, ...],
    cycles: int = FORECAST_CYCLES,
    avg: Averages | None = None,
    first: int = 1,
) -> Iterator[tuple[date, date]]:
    """Yield projected ``(start, end)`` period windows, ``end`` exclusive.

    Windows are projected one average cycle apart from the most recent
    recorded start. ``first`` is the index of the first window; 0 is the
    window of the most recent cycle itself.
    """
    if not history:
        return
    avg = avg or averages(history)
    last_start = history[-1].start_date
    for k in range(first, min(cycles, FORECAST_CYCLES) + 1):
        start = last_start + timedelta(days=k * avg.cycle_length)
        yield start, start + timedelta(days=avg.period_length)


def forecast_fertile_windows(
    history: tuple[Cycle, ...],
    cycles: int = FORECAST_CYCLES,
    avg: Averages | None = None,
) -> Iterator[tuple[date, date]]:
    """Yield ``(start, end)`` high-chance windows around each ovulation, ``end`` exclusive.

    The first window belongs to the most recent recorded cycle, the rest to
    the projected ones.
    """
    if not history:
        return
    avg = avg or averages(history)
    last_start = history[-1].start_date
    offset = _ovulation_offset(avg)
    for k in range(0, min(cycles, FORECAST_CYCLES) + 1):
        ovulation = last_start + timedelta(days=k * avg.cycle_length + offset)
        yield (
            ovulation - timedelta(days=HIGH_CHANCE_DAYS),
            ovulation + timedelta(days=HIGH_CHANCE_DAYS + 1),
        )


def is_forecast_period_days(
    day: date, history: tuple[Cycle, ...], avg: Averages | None = None
) -> bool:
    """Return True if ``day`` falls inside a projected period window.

    Projection starts at the most recent recorded start and stops at the
    first window that contains or follows ``day``.
    """
    for start, end in forecast_period_windows(history, avg=avg, first=0):
        if day < start:
            return False
        if day < end:
            return True
    return False


def is_forecast_period_today(
    history: tuple[Cycle, ...],
    today: date | None = None,
    avg: Averages | None = None,
) -> bool:
    return is_forecast_period_days(today or date.today(), history, avg)


def day_annotation(
    day: date,
    history: tuple[Cycle, ...],
    today: date,
    avg: Averages | None = None,
) -> str | None:
    """Map a calendar day to its highlight.

    Forecast today wins over other forecast days, which win over the days
    of the most recent recorded period.
    """
    if not history:
        return None
    if day == today and is_forecast_period_today(history, today, avg):
        return ANNOTATION_FORECAST_TODAY
    if is_forecast_period_days(day, history, avg):
        return ANNOTATION_FORECAST
    if day in history[-1].period_dates:
        return ANNOTATION_PERIOD
    return None
