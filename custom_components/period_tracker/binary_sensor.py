"""Binary sensors for period tracker."""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.components.binary_sensor import (
    BinarySensorEntity,
    BinarySensorEntityDescription,
)

from .entity import PeriodTrackerEntity

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import PeriodTrackerUpdateCoordinator
    from .data import PeriodTrackerConfigEntry

ENTITY_DESCRIPTIONS: tuple[BinarySensorEntityDescription, ...] = (
    BinarySensorEntityDescription(
        key="period_today",
        name="Period Today",
        icon="mdi:water",
    ),
    BinarySensorEntityDescription(
        key="forecast_period_today",
        name="Forecast Period Today",
        icon="mdi:water-outline",
    ),
)


async def async_setup_entry(
    _hass: HomeAssistant,
    entry: PeriodTrackerConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up binary sensor entities."""
    async_add_entities(
        PeriodTrackerBinarySensor(entry.runtime_data.coordinator, description)
        for description in ENTITY_DESCRIPTIONS
    )


class PeriodTrackerBinarySensor(PeriodTrackerEntity, BinarySensorEntity):
    """Representation of a period tracker binary sensor."""

    def __init__(
        self,
        coordinator: PeriodTrackerUpdateCoordinator,
        description: BinarySensorEntityDescription,
    ) -> None:
        """Initialize the binary sensor."""
        super().__init__(coordinator, description.key)
        self.entity_description = description

    @property
    def is_on(self) -> bool:
        """Return true if today is a recorded or a forecast period day."""
        state = self.coordinator.data
        if self.entity_description.key == "forecast_period_today":
            return state.forecast_period_today
        return state.period_today
