"""Persistent storage for the set of marked period days."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from typing import Any

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.storage import Store

from .const import DOMAIN, LOGGER

STORAGE_VERSION = 1


class PeriodTrackerStorageError(HomeAssistantError):
    """Raised when the marked days cannot be written."""


def as_day(value: date | datetime | str) -> date:
    """Reduce a date, datetime or ISO string to a calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise ValueError(f"Unsupported date value: {value!r}")


def dates_to_dict(dates: Iterable[date]) -> dict[str, Any]:
    return {"marked_dates": [d.isoformat() for d in sorted(set(dates))]}


def dates_from_dict(obj: dict[str, Any]) -> frozenset[date]:
    return frozenset(as_day(raw) for raw in obj.get("marked_dates", []))


class PeriodTrackerStorage:
    """Load and save the marked period days of one config entry.

    The whole set is replaced on every write.
    """

    def __init__(self, hass: HomeAssistant, entry_id: str) -> None:
        self.hass = hass
        self.entry_id = entry_id
        self._store: Store[dict[str, Any]] = Store(
            hass, version=STORAGE_VERSION, key=f"{DOMAIN}.{entry_id}.marked_dates"
        )
        self._marked_dates: frozenset[date] = frozenset()

    @property
    def marked_dates(self) -> frozenset[date]:
        return self._marked_dates

    async def async_load_marked_dates(self) -> frozenset[date] | None:
        """Load the stored set; ``None`` means nothing has been stored yet."""
        data = await self._store.async_load()
        if data is None:
            LOGGER.debug("No stored period days for %s", self.entry_id)
            self._marked_dates = frozenset()
            return None
        try:
            self._marked_dates = dates_from_dict(data)
        except (AttributeError, TypeError, ValueError):
            LOGGER.exception("Failed to load stored period days; resetting")
            self._marked_dates = frozenset()
        return self._marked_dates

    async def async_save_marked_dates(self, dates: Iterable[date]) -> None:
        new_dates = frozenset(dates)
        try:
            await self._store.async_save(dates_to_dict(new_dates))
        except (OSError, HomeAssistantError) as err:
            raise PeriodTrackerStorageError(
                f"Failed to save period days: {err}"
            ) from err
        self._marked_dates = new_dates
        LOGGER.debug("Saved %d period days for %s", len(new_dates), self.entry_id)

    async def async_add_dates(self, dates: Iterable[date]) -> None:
        await self.async_save_marked_dates(self._marked_dates | frozenset(dates))

    async def async_remove_dates(self, dates: Iterable[date]) -> int:
        """Unmark ``dates`` and return how many of them were marked."""
        to_remove = self._marked_dates & frozenset(dates)
        if to_remove:
            await self.async_save_marked_dates(self._marked_dates - to_remove)
        return len(to_remove)
