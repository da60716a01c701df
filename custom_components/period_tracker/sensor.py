"""Sensor platform for period tracker."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
)
from homeassistant.const import UnitOfTime

from .const import CHANCE_LEVELS
from .entity import PeriodTrackerEntity

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import PeriodTrackerUpdateCoordinator
    from .data import PeriodTrackerConfigEntry

ENTITY_DESCRIPTIONS: tuple[SensorEntityDescription, ...] = (
    SensorEntityDescription(
        key="days_before_period",
        name="Days Before Period",
        icon="mdi:calendar-clock",
        native_unit_of_measurement=UnitOfTime.DAYS,
    ),
    SensorEntityDescription(
        key="pregnancy_chance",
        name="Pregnancy Chance",
        icon="mdi:calendar-heart",
        device_class=SensorDeviceClass.ENUM,
        options=list(CHANCE_LEVELS),
    ),
    SensorEntityDescription(
        key="next_period_start",
        name="Next Period Start",
        device_class=SensorDeviceClass.DATE,
    ),
    SensorEntityDescription(
        key="average_cycle_length",
        name="Average Cycle Length",
        icon="mdi:calendar-sync",
        native_unit_of_measurement=UnitOfTime.DAYS,
    ),
    SensorEntityDescription(
        key="average_period_length",
        name="Average Period Length",
        icon="mdi:calendar-range",
        native_unit_of_measurement=UnitOfTime.DAYS,
    ),
    SensorEntityDescription(
        key="cycles_recorded",
        name="Cycles Recorded",
        icon="mdi:counter",
    ),
)


async def async_setup_entry(
    _hass: HomeAssistant,
    entry: PeriodTrackerConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up sensor entities."""
    async_add_entities(
        PeriodTrackerSensor(entry.runtime_data.coordinator, description)
        for description in ENTITY_DESCRIPTIONS
    )


class PeriodTrackerSensor(PeriodTrackerEntity, SensorEntity):
    """Representation of a period tracker sensor."""

    def __init__(
        self,
        coordinator: PeriodTrackerUpdateCoordinator,
        description: SensorEntityDescription,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, description.key)
        self.entity_description = description

    @property
    def native_value(self) -> str | int | date | None:
        """Return the state of the sensor."""
        state = self.coordinator.data
        key = self.entity_description.key
        if key == "days_before_period":
            return state.days_before_period.days
        if key == "pregnancy_chance":
            return state.pregnancy_chance
        if key == "next_period_start":
            return state.next_period_start
        if key == "average_cycle_length":
            return state.averages.cycle_length
        if key == "average_period_length":
            return state.averages.period_length
        if key == "cycles_recorded":
            return len(state.history)
        return None

    @property
    def extra_state_attributes(self) -> dict[str, Any] | None:
        if self.entity_description.key != "days_before_period":
            return None
        state = self.coordinator.data
        return {
            "title": state.days_before_period.title,
            "last_period_days": [d.isoformat() for d in state.last_period_days],
        }
