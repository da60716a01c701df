"""Calendar platform for period tracker."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.components.calendar import (
    CalendarEntity,
    CalendarEntityFeature,
    CalendarEvent,
)
from homeassistant.exceptions import HomeAssistantError
from homeassistant.util import dt as dt_util

from .const import CONF_SHOW_FERTILITY_ON_CAL, CONF_SHOW_FORECAST_ON_CAL, LOGGER
from .entity import PeriodTrackerEntity
from .forecast import forecast_fertile_windows, forecast_period_windows
from .storage import as_day

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import CycleState, PeriodTrackerUpdateCoordinator
    from .data import PeriodTrackerConfigEntry

SUMMARY_PERIOD = "Period"
SUMMARY_PREDICTED = "Predicted Period"
SUMMARY_FERTILE = "Fertile Window"


async def async_setup_entry(
    _hass: HomeAssistant,
    entry: PeriodTrackerConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up calendar entity."""
    async_add_entities([PeriodTrackerCalendar(entry.runtime_data.coordinator)])


def _end_as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def build_events(
    state: CycleState, *, show_forecast: bool, show_fertility: bool
) -> list[CalendarEvent]:
    """Return all-day events for recorded cycles and forecasts, sorted by start."""
    events: list[CalendarEvent] = [
        CalendarEvent(
            summary=SUMMARY_PERIOD,
            start=cycle.start_date,
            end=cycle.end_date + timedelta(days=1),
            uid=cycle.start_date.isoformat(),
        )
        for cycle in state.history
    ]
    if show_forecast:
        events.extend(
            CalendarEvent(summary=SUMMARY_PREDICTED, start=start, end=end)
            for start, end in forecast_period_windows(state.history, avg=state.averages)
        )
    if show_fertility:
        events.extend(
            CalendarEvent(summary=SUMMARY_FERTILE, start=start, end=end)
            for start, end in forecast_fertile_windows(state.history, avg=state.averages)
        )
    return sorted(events, key=lambda e: e.start)


class PeriodTrackerCalendar(PeriodTrackerEntity, CalendarEntity):
    """Calendar of recorded and forecast period days."""

    _attr_name = "Cycle"
    _attr_supported_features = (
        CalendarEntityFeature.CREATE_EVENT | CalendarEntityFeature.DELETE_EVENT
    )

    def __init__(self, coordinator: PeriodTrackerUpdateCoordinator) -> None:
        """Initialize the calendar entity."""
        super().__init__(coordinator, "calendar")

    def _events(self) -> list[CalendarEvent]:
        options = self.coordinator.config_entry.options
        return build_events(
            self.coordinator.data,
            show_forecast=bool(options.get(CONF_SHOW_FORECAST_ON_CAL, True)),
            show_fertility=bool(options.get(CONF_SHOW_FERTILITY_ON_CAL, False)),
        )

    @property
    def event(self) -> CalendarEvent | None:
        """Return the current or next upcoming event."""
        today = dt_util.now().date()
        upcoming = [e for e in self._events() if _end_as_date(e.end) > today]
        return upcoming[0] if upcoming else None

    async def async_get_events(
        self,
        hass: HomeAssistant,  # noqa: ARG002
        start_date: datetime,
        end_date: datetime,
    ) -> list[CalendarEvent]:
        """Return calendar events within a date range."""
        first, last = start_date.date(), end_date.date()
        return [
            e
            for e in self._events()
            if e.start <= last and _end_as_date(e.end) > first
        ]

    async def async_create_event(self, **kwargs: Any) -> None:
        """Mark the days of a new "Period" event.

        Events with any other summary are ignored.
        """
        summary = str(kwargs.get("summary", "")).strip().lower()
        if summary not in {"period", "menstruation"}:
            LOGGER.debug("Ignoring calendar event with summary %r", summary)
            return

        start_raw = kwargs.get("dtstart")
        if start_raw is None:
            raise HomeAssistantError("Calendar event requires a start date")
        start_day = as_day(start_raw)
        end_raw = kwargs.get("dtend")
        # all-day event ends are exclusive
        end_day = as_day(end_raw) - timedelta(days=1) if end_raw else start_day
        if end_day < start_day:
            raise HomeAssistantError("Calendar event end must be on/after start")

        days = {
            start_day + timedelta(days=i)
            for i in range((end_day - start_day).days + 1)
        }
        await self.coordinator.async_add_marked_dates(days)

    async def async_delete_event(
        self,
        uid: str,
        recurrence_id: str | None = None,  # noqa: ARG002
        recurrence_range: str | None = None,  # noqa: ARG002
    ) -> None:
        """Remove the days of a recorded cycle, identified by its start date."""
        try:
            start = date.fromisoformat(uid)
        except ValueError as err:
            raise HomeAssistantError(f"Unknown event: {uid}") from err
        cycle = next(
            (c for c in self.coordinator.data.history if c.start_date == start), None
        )
        if cycle is None:
            raise HomeAssistantError(f"No recorded period starts on {uid}")
        await self.coordinator.async_remove_marked_dates(cycle.period_dates)
