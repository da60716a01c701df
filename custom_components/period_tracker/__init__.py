"""Setup for period tracker integration."""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.const import Platform
from homeassistant.helpers import config_validation as cv
from homeassistant.loader import async_get_loaded_integration
from homeassistant.util import dt as dt_util

from .const import (
    CONF_DEFAULT_CYCLE_LENGTH,
    CONF_DEFAULT_PERIOD_LENGTH,
    CONF_FILL_POLICY,
    CONF_LAST_PERIOD,
    CONF_PERIOD_LENGTH,
    CONF_SHOW_FERTILITY_ON_CAL,
    CONF_SHOW_FORECAST_ON_CAL,
    DEFAULT_CYCLE_LENGTH,
    DEFAULT_PERIOD_LENGTH,
    DOMAIN,
    FILL_POLICIES,
    FILL_TODAY,
    LOGGER,
)
from .coordinator import PeriodTrackerUpdateCoordinator
from .data import PeriodTrackerConfigEntry, PeriodTrackerData
from .services import async_register_services
from .storage import PeriodTrackerStorage

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.typing import ConfigType

PLATFORMS: list[Platform] = [
    Platform.SENSOR,
    Platform.BINARY_SENSOR,
    Platform.CALENDAR,
]

OPTION_DEFAULTS = {
    CONF_FILL_POLICY: FILL_TODAY,
    CONF_DEFAULT_CYCLE_LENGTH: DEFAULT_CYCLE_LENGTH,
    CONF_DEFAULT_PERIOD_LENGTH: DEFAULT_PERIOD_LENGTH,
    CONF_SHOW_FORECAST_ON_CAL: True,
    CONF_SHOW_FERTILITY_ON_CAL: False,
}

CONFIG_SCHEMA = vol.Schema(
    {
        DOMAIN: vol.Schema(
            {
                vol.Optional(CONF_LAST_PERIOD): cv.date,
                vol.Optional(
                    CONF_PERIOD_LENGTH, default=DEFAULT_PERIOD_LENGTH
                ): cv.positive_int,
                vol.Optional(CONF_FILL_POLICY, default=FILL_TODAY): vol.In(FILL_POLICIES),
                vol.Optional(
                    CONF_DEFAULT_CYCLE_LENGTH, default=DEFAULT_CYCLE_LENGTH
                ): cv.positive_int,
                vol.Optional(
                    CONF_DEFAULT_PERIOD_LENGTH, default=DEFAULT_PERIOD_LENGTH
                ): cv.positive_int,
                vol.Optional(CONF_SHOW_FORECAST_ON_CAL, default=True): cv.boolean,
                vol.Optional(CONF_SHOW_FERTILITY_ON_CAL, default=False): cv.boolean,
            }
        )
    },
    extra=vol.ALLOW_EXTRA,
)


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up integration from YAML configuration."""
    if DOMAIN not in config:
        return True
    conf = config[DOMAIN]
    data = dict(conf)
    if CONF_LAST_PERIOD in data:
        data[CONF_LAST_PERIOD] = data[CONF_LAST_PERIOD].isoformat()
    hass.async_create_task(
        hass.config_entries.flow.async_init(
            DOMAIN,
            context={"source": config_entries.SOURCE_IMPORT},
            data=data,
        )
    )
    return True


def seed_dates(entry_data: dict, today: date) -> set[date]:
    """Return the period days implied by the configured last period start.

    Days after today are dropped.
    """
    raw = entry_data.get(CONF_LAST_PERIOD)
    if not raw:
        return set()
    start = date.fromisoformat(str(raw))
    length = int(entry_data.get(CONF_PERIOD_LENGTH, DEFAULT_PERIOD_LENGTH))
    days = {start + timedelta(days=i) for i in range(max(1, length))}
    return {d for d in days if d <= today}


async def async_setup_entry(
    hass: HomeAssistant, entry: PeriodTrackerConfigEntry
) -> bool:
    """Set up period tracker from a config entry."""
    async_register_services(hass)

    options = {
        **OPTION_DEFAULTS,
        **{k: entry.data[k] for k in OPTION_DEFAULTS if k in entry.data},
        **entry.options,
    }
    if options != dict(entry.options):
        hass.config_entries.async_update_entry(entry, options=options)

    storage = PeriodTrackerStorage(hass, entry.entry_id)
    if await storage.async_load_marked_dates() is None:
        # New user: seed from the configured last period, never beyond today
        try:
            seeded = seed_dates(entry.data, dt_util.now().date())
        except ValueError:
            LOGGER.warning("Invalid %s in config entry; starting empty", CONF_LAST_PERIOD)
            seeded = set()
        if seeded:
            await storage.async_add_dates(seeded)

    coordinator = PeriodTrackerUpdateCoordinator(
        hass,
        config_entry=entry,
        storage=storage,
    )
    entry.runtime_data = PeriodTrackerData(
        coordinator=coordinator,
        integration=async_get_loaded_integration(hass, entry.domain),
        storage=storage,
    )
    await coordinator.async_config_entry_first_refresh()
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    entry.async_on_unload(coordinator.async_schedule_midnight_refresh())
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))
    return True


async def async_unload_entry(
    hass: HomeAssistant, entry: PeriodTrackerConfigEntry
) -> bool:
    """Unload a config entry."""
    return await hass.config_entries.async_unload_platforms(entry, PLATFORMS)


async def async_reload_entry(
    hass: HomeAssistant, entry: PeriodTrackerConfigEntry
) -> None:
    """Reload when config entry options change."""
    await hass.config_entries.async_reload(entry.entry_id)
