"""Build an ordered cycle history from a set of marked period dates."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Cycle:
    """One menstrual cycle derived from a run of consecutive period dates.

    ``cycle_length`` is the number of days to the next cycle's start and is
    ``None`` for the most recent cycle.
    """

    start_date: date
    period_dates: tuple[date, ...]
    cycle_length: int | None = None

    @property
    def period_length(self) -> int:
        return len(self.period_dates)

    @property
    def end_date(self) -> date:
        return self.period_dates[-1]


def build_history(marked_dates: Iterable[date]) -> tuple[Cycle, ...]:
    """Group marked dates into cycles, oldest first.

    A new cycle starts whenever the gap to the previous marked date is more
    than one day.
    """
    days = sorted(set(marked_dates))
    if not days:
        return ()

    runs: list[list[date]] = [[days[0]]]
    for day in days[1:]:
        if (day - runs[-1][-1]).days > 1:
            runs.append([day])
        else:
            runs[-1].append(day)

    cycles: list[Cycle] = []
    for i, run in enumerate(runs):
        cycle_length = None
        if i + 1 < len(runs):
            cycle_length = (runs[i + 1][0] - run[0]).days
        cycles.append(
            Cycle(start_date=run[0], period_dates=tuple(run), cycle_length=cycle_length)
        )
    return tuple(cycles)


def flatten_history(history: Iterable[Cycle]) -> frozenset[date]:
    """Return every period date contained in ``history``."""
    return frozenset(day for cycle in history for day in cycle.period_dates)


def last_period_days(history: tuple[Cycle, ...]) -> tuple[date, ...]:
    """Return the period dates of the most recent cycle."""
    if not history:
        return ()
    return history[-1].period_dates
