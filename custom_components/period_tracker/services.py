"""Services for period_tracker."""

from __future__ import annotations

from datetime import date, timedelta
import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import voluptuous as vol
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv, entity_registry as er

from .const import CONF_FILL_POLICY, DOMAIN, FILL_TODAY, LOGGER
from .storage import as_day
from .validation import is_period_today, past_future_fill_days

if TYPE_CHECKING:
    from .data import PeriodTrackerConfigEntry

SERVICE_MARK_PERIOD_TODAY = "mark_period_today"
SERVICE_ADD_PERIOD_DAYS = "add_period_days"
SERVICE_REMOVE_PERIOD_DAYS = "remove_period_days"
SERVICE_SET_PERIOD_DAYS = "set_period_days"
SERVICE_IMPORT_HISTORY = "import_history"

_TARGET = {
    vol.Optional("entity_id"): cv.entity_ids,
    vol.Optional("entry_id"): cv.string,
}

_MARK_TODAY_SCHEMA = vol.Schema(_TARGET)

_DATES_SCHEMA = vol.Schema(
    {vol.Required("dates"): vol.All(cv.ensure_list, [cv.date]), **_TARGET}
)

_SET_DATES_SCHEMA = vol.Schema(
    {vol.Optional("dates", default=[]): vol.All(cv.ensure_list, [cv.date]), **_TARGET}
)

_PERIOD_ITEM = vol.Schema({vol.Required("start"): cv.date, vol.Optional("end"): cv.date})

_IMPORT_SCHEMA = vol.Schema(
    {
        vol.Optional("json"): cv.string,
        vol.Optional("file"): cv.string,
        vol.Optional("dates", default=[]): vol.All(cv.ensure_list, [cv.date]),
        vol.Optional("periods", default=[]): [_PERIOD_ITEM],
        vol.Optional("mode", default="merge"): vol.In(["merge", "replace"]),
        **_TARGET,
    }
)


def _resolve_entry_id(hass: HomeAssistant, call: ServiceCall) -> str | None:
    """Resolve a config entry_id from a service call.

    Priority:
    1) entity_id provided -> map to config_entry_id via entity registry
    2) entry_id provided
    3) if only one entry for DOMAIN, use that
    """
    if entity_ids := call.data.get("entity_id"):
        ent_reg = er.async_get(hass)
        for entity_id in entity_ids if isinstance(entity_ids, list) else [entity_ids]:
            ent = ent_reg.async_get(entity_id)
            if ent and ent.config_entry_id:
                return ent.config_entry_id

    if entry_id := call.data.get("entry_id"):
        return entry_id

    entries = hass.config_entries.async_entries(DOMAIN)
    if len(entries) == 1:
        return entries[0].entry_id

    return None


def _resolve_entry(
    hass: HomeAssistant, call: ServiceCall
) -> PeriodTrackerConfigEntry | None:
    target_entry_id = _resolve_entry_id(hass, call)
    if not target_entry_id:
        LOGGER.error(
            "%s: Could not resolve a config entry. Provide entity_id or entry_id",
            call.service,
        )
        return None
    entry = hass.config_entries.async_get_entry(target_entry_id)
    if not entry or entry.domain != DOMAIN or not hasattr(entry, "runtime_data"):
        LOGGER.error("%s: Invalid or unknown entry_id: %s", call.service, target_entry_id)
        return None
    return entry


def period_range(start: date, end: date | None) -> set[date]:
    """Expand an inclusive start/end range into single days."""
    end = end or start
    return {start + timedelta(days=i) for i in range((end - start).days + 1)}


def parse_import_payload(obj: Any) -> set[date]:
    """Collect period days from a JSON import payload.

    Accepted shapes:
    - a list of ISO dates
    - {"marked_dates": [...]}
    - {"periods": [{"start": ..., "end": ...}]}
    - third-party items [{"type": "period", "date": ...}], optionally under "data"
    """
    days: set[date] = set()
    if isinstance(obj, dict) and ("marked_dates" in obj or "periods" in obj):
        days.update(as_day(raw) for raw in obj.get("marked_dates", []))
        for period in obj.get("periods", []):
            end = period.get("end")
            days |= period_range(as_day(period["start"]), as_day(end) if end else None)
        return days

    if isinstance(obj, dict) and "data" in obj:
        obj = obj["data"]
    if not isinstance(obj, list):
        raise ValueError("Unsupported JSON structure")

    for item in obj:
        if isinstance(item, str):
            days.add(as_day(item))
        elif isinstance(item, dict):
            if str(item.get("type", "")).lower() != "period":
                continue
            try:
                days.add(as_day(item["date"]))
            except (KeyError, ValueError):
                LOGGER.warning("import_history: Skipping invalid item: %s", item)
        else:
            LOGGER.warning("import_history: Skipping invalid item: %s", item)
    return days


def async_register_services(hass: HomeAssistant) -> None:
    """Register integration services once."""
    key = f"{DOMAIN}_services_registered"
    if hass.data.get(key):
        return

    async def _handle_mark_period_today(call: ServiceCall) -> None:
        if not (entry := _resolve_entry(hass, call)):
            return
        coordinator = entry.runtime_data.coordinator
        today = coordinator.today
        history = coordinator.data.history
        if is_period_today(history, today):
            LOGGER.warning("mark_period_today: %s is already marked as a period day", today)
            return
        policy = entry.options.get(CONF_FILL_POLICY, FILL_TODAY)
        days = past_future_fill_days(history, today, policy)
        LOGGER.debug("mark_period_today: adding %s with policy %s", sorted(days), policy)
        await coordinator.async_add_marked_dates(days)

    async def _handle_add_period_days(call: ServiceCall) -> None:
        if not (entry := _resolve_entry(hass, call)):
            return
        await entry.runtime_data.coordinator.async_add_marked_dates(call.data["dates"])

    async def _handle_remove_period_days(call: ServiceCall) -> None:
        if not (entry := _resolve_entry(hass, call)):
            return
        to_remove = call.data["dates"]
        removed = await entry.runtime_data.coordinator.async_remove_marked_dates(to_remove)
        if not removed:
            LOGGER.debug("remove_period_days: No matching days for %s", sorted(to_remove))

    async def _handle_set_period_days(call: ServiceCall) -> None:
        if not (entry := _resolve_entry(hass, call)):
            return
        await entry.runtime_data.coordinator.async_set_marked_dates(call.data["dates"])

    async def _handle_import_history(call: ServiceCall) -> None:
        if not (entry := _resolve_entry(hass, call)):
            return

        days: set[date] = set(call.data.get("dates", []))
        for period in call.data.get("periods", []):
            days |= period_range(period["start"], period.get("end"))

        raw_json: str | None = None
        if file_path := call.data.get("file"):
            try:
                path = Path(hass.config.path(file_path))
                raw_json = await hass.async_add_executor_job(
                    path.read_text, "utf-8"
                )
            except OSError as err:
                LOGGER.exception("import_history: Failed to read file: %s", file_path)
                raise HomeAssistantError(
                    "Import failed: file not found or unreadable. See logs for details."
                ) from err
        if not raw_json and (j := call.data.get("json")):
            raw_json = j

        if raw_json:
            try:
                days |= parse_import_payload(json.loads(raw_json))
            except (KeyError, TypeError, ValueError) as err:
                LOGGER.exception("import_history: Failed to parse json payload")
                raise HomeAssistantError(
                    "Import failed: invalid JSON. See logs for details."
                ) from err

        if not days:
            LOGGER.error("import_history: No valid period days found to import")
            raise HomeAssistantError(
                "Import failed: no valid records found. See logs for details."
            )

        coordinator = entry.runtime_data.coordinator
        if call.data.get("mode", "merge") == "merge":
            days |= coordinator.storage.marked_dates
        await coordinator.async_set_marked_dates(days)
        LOGGER.info("import_history: %d period days now recorded", len(days))

    for name, handler, schema in (
        (SERVICE_MARK_PERIOD_TODAY, _handle_mark_period_today, _MARK_TODAY_SCHEMA),
        (SERVICE_ADD_PERIOD_DAYS, _handle_add_period_days, _DATES_SCHEMA),
        (SERVICE_REMOVE_PERIOD_DAYS, _handle_remove_period_days, _DATES_SCHEMA),
        (SERVICE_SET_PERIOD_DAYS, _handle_set_period_days, _SET_DATES_SCHEMA),
        (SERVICE_IMPORT_HISTORY, _handle_import_history, _IMPORT_SCHEMA),
    ):
        hass.services.async_register(DOMAIN, name, handler, schema=schema)

    hass.data[key] = True
    LOGGER.debug(
        "Registered services: %s.%s, %s.%s, %s.%s, %s.%s, %s.%s",
        DOMAIN,
        SERVICE_MARK_PERIOD_TODAY,
        DOMAIN,
        SERVICE_ADD_PERIOD_DAYS,
        DOMAIN,
        SERVICE_REMOVE_PERIOD_DAYS,
        DOMAIN,
        SERVICE_SET_PERIOD_DAYS,
        DOMAIN,
        SERVICE_IMPORT_HISTORY,
    )
