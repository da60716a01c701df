"""Config flow for period tracker."""

from __future__ import annotations

from datetime import date

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.helpers import selector
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
)
from .validation import is_marked_future_days


def validate_last_period(user_input: dict) -> dict[str, str]:
    """Return form errors for the optional last period start."""
    raw = user_input.get(CONF_LAST_PERIOD)
    if not raw:
        return {}
    try:
        start = date.fromisoformat(str(raw))
    except ValueError:
        return {CONF_LAST_PERIOD: "invalid_date"}
    if is_marked_future_days([start], dt_util.now().date()):
        return {CONF_LAST_PERIOD: "future_date"}
    return {}


class PeriodTrackerFlowHandler(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for the integration."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict | None = None
    ) -> config_entries.ConfigFlowResult:
        """Handle the initial step."""
        errors: dict[str, str] = {}
        if user_input is not None:
            errors = validate_last_period(user_input)
            if not errors:
                await self.async_set_unique_id(DOMAIN)
                self._abort_if_unique_id_configured()
                return self.async_create_entry(title="Period Tracker", data=user_input)

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Optional(CONF_LAST_PERIOD): selector.DateSelector(),
                    vol.Optional(
                        CONF_PERIOD_LENGTH, default=DEFAULT_PERIOD_LENGTH
                    ): selector.NumberSelector(
                        selector.NumberSelectorConfig(
                            min=1, max=15, mode=selector.NumberSelectorMode.BOX
                        )
                    ),
                }
            ),
            errors=errors,
        )

    async def async_step_import(
        self, config: dict
    ) -> config_entries.ConfigFlowResult:
        """Handle import from YAML."""
        return await self.async_step_user(config)

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> config_entries.OptionsFlow:
        return OptionsFlowHandler()


class OptionsFlowHandler(config_entries.OptionsFlow):
    """Handle options for the integration."""

    async def async_step_init(
        self, user_input: dict | None = None
    ) -> config_entries.ConfigFlowResult:
        if user_input is not None:
            return self.async_create_entry(title="Options", data=user_input)

        current = self.config_entry.options
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        CONF_FILL_POLICY,
                        default=current.get(CONF_FILL_POLICY, FILL_TODAY),
                    ): selector.SelectSelector(
                        selector.SelectSelectorConfig(
                            options=list(FILL_POLICIES),
                            translation_key=CONF_FILL_POLICY,
                        )
                    ),
                    vol.Optional(
                        CONF_DEFAULT_CYCLE_LENGTH,
                        default=current.get(CONF_DEFAULT_CYCLE_LENGTH, DEFAULT_CYCLE_LENGTH),
                    ): vol.All(vol.Coerce(int), vol.Range(min=1, max=99)),
                    vol.Optional(
                        CONF_DEFAULT_PERIOD_LENGTH,
                        default=current.get(CONF_DEFAULT_PERIOD_LENGTH, DEFAULT_PERIOD_LENGTH),
                    ): vol.All(vol.Coerce(int), vol.Range(min=1, max=15)),
                    vol.Optional(
                        CONF_SHOW_FORECAST_ON_CAL,
                        default=bool(current.get(CONF_SHOW_FORECAST_ON_CAL, True)),
                    ): selector.BooleanSelector(),
                    vol.Optional(
                        CONF_SHOW_FERTILITY_ON_CAL,
                        default=bool(current.get(CONF_SHOW_FERTILITY_ON_CAL, False)),
                    ): selector.BooleanSelector(),
                }
            ),
        )
