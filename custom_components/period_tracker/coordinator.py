"""Data coordinator for period tracker."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from homeassistant.core import CALLBACK_TYPE, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.event import async_track_time_change
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator
from homeassistant.util import dt as dt_util

from .const import (
    CONF_DEFAULT_CYCLE_LENGTH,
    CONF_DEFAULT_PERIOD_LENGTH,
    DEFAULT_CYCLE_LENGTH,
    DEFAULT_PERIOD_LENGTH,
    DOMAIN,
    LOGGER,
)
from .forecast import (
    Averages,
    DaysBeforePeriod,
    averages,
    days_before_period,
    is_forecast_period_today,
    next_period_start,
    ovulation_date,
    pregnancy_chance,
)
from .history import Cycle, build_history, last_period_days
from .storage import PeriodTrackerStorage
from .validation import is_active_date, is_marked_future_days, is_period_today

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant


class FutureDaysError(HomeAssistantError):
    """Raised when an edit would mark a day after today."""


@dataclass(frozen=True)
class CycleState:
    """Snapshot of the cycle history and every forecast derived from it."""

    today: date
    history: tuple[Cycle, ...]
    averages: Averages
    days_before_period: DaysBeforePeriod
    pregnancy_chance: str | None
    period_today: bool
    forecast_period_today: bool
    next_period_start: date | None
    ovulation_date: date | None
    last_period_days: tuple[date, ...]


def build_cycle_state(
    marked_dates: Iterable[date],
    today: date,
    default_cycle_length: int = DEFAULT_CYCLE_LENGTH,
    default_period_length: int = DEFAULT_PERIOD_LENGTH,
) -> CycleState:
    """Rebuild the history from scratch and derive all forecasts."""
    history = build_history(marked_dates)
    avg = averages(history, default_cycle_length, default_period_length)
    return CycleState(
        today=today,
        history=history,
        averages=avg,
        days_before_period=days_before_period(history, today, avg),
        pregnancy_chance=pregnancy_chance(history, today, avg),
        period_today=is_period_today(history, today),
        forecast_period_today=is_forecast_period_today(history, today, avg),
        next_period_start=next_period_start(history, avg),
        ovulation_date=ovulation_date(history, avg),
        last_period_days=last_period_days(history),
    )


class PeriodTrackerUpdateCoordinator(DataUpdateCoordinator[CycleState]):
    """Class to publish the current cycle state."""

    def __init__(
        self,
        hass: HomeAssistant,
        *,
        config_entry: ConfigEntry,
        storage: PeriodTrackerStorage,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            logger=LOGGER,
            name=DOMAIN,
            update_interval=timedelta(days=1),
        )
        self.config_entry = config_entry
        self.storage = storage

    @property
    def today(self) -> date:
        return dt_util.now().date()

    async def async_set_marked_dates(self, dates: Iterable[date]) -> None:
        """Replace the marked days, persist them and refresh the state.

        Raises FutureDaysError and writes nothing if any day is after today.
        """
        new_dates = frozenset(dates)
        if is_marked_future_days(new_dates, self.today):
            raise FutureDaysError("You can't mark future days")
        if new_dates == self.storage.marked_dates:
            LOGGER.debug("Period days unchanged; skipping save")
            return
        await self.storage.async_save_marked_dates(new_dates)
        await self.async_request_refresh()

    async def async_add_marked_dates(self, dates: Iterable[date]) -> None:
        """Mark ``dates`` in addition to the stored days.

        Each incoming day must be an active (editable) day; nothing is written
        if any of them is not.
        """
        new_dates = frozenset(dates)
        history = self.data.history if self.data else ()
        rejected = sorted(
            d for d in new_dates if not is_active_date(d, history, self.today)
        )
        if rejected:
            raise FutureDaysError(
                "You can't mark future days: "
                + ", ".join(d.isoformat() for d in rejected)
            )
        await self.async_set_marked_dates(self.storage.marked_dates | new_dates)

    async def async_remove_marked_dates(self, dates: Iterable[date]) -> int:
        """Unmark ``dates``; returns how many were marked."""
        removed = await self.storage.async_remove_dates(dates)
        if removed:
            await self.async_request_refresh()
        return removed

    @callback
    def async_schedule_midnight_refresh(self) -> CALLBACK_TYPE:
        """Refresh when the local date changes; returns the unsubscribe callback."""

        async def _async_midnight_refresh(_now: datetime) -> None:
            await self.async_request_refresh()

        return async_track_time_change(
            self.hass, _async_midnight_refresh, hour=0, minute=0, second=0
        )

    async def _async_update_data(self) -> CycleState:
        options = self.config_entry.options
        state = build_cycle_state(
            self.storage.marked_dates,
            self.today,
            default_cycle_length=int(
                options.get(CONF_DEFAULT_CYCLE_LENGTH, DEFAULT_CYCLE_LENGTH)
            ),
            default_period_length=int(
                options.get(CONF_DEFAULT_PERIOD_LENGTH, DEFAULT_PERIOD_LENGTH)
            ),
        )
        LOGGER.debug(
            "Rebuilt %d cycles; %s %d",
            len(state.history),
            state.days_before_period.title,
            state.days_before_period.days,
        )
        return state
