"""Base entity for period tracker."""

from __future__ import annotations

from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import ATTRIBUTION
from .coordinator import PeriodTrackerUpdateCoordinator


class PeriodTrackerEntity(CoordinatorEntity[PeriodTrackerUpdateCoordinator]):
    """Base entity class for this integration."""

    _attr_attribution = ATTRIBUTION
    _attr_has_entity_name = True

    def __init__(self, coordinator: PeriodTrackerUpdateCoordinator, key: str) -> None:
        """Initialize the base entity."""
        super().__init__(coordinator)
        self._attr_unique_id = f"{coordinator.config_entry.entry_id}_{key}"
        self._attr_device_info = DeviceInfo(
            identifiers={
                (
                    coordinator.config_entry.domain,
                    coordinator.config_entry.entry_id,
                )
            },
            name=coordinator.config_entry.title,
        )
