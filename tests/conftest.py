"""Shared fixtures for period tracker tests."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from custom_components.period_tracker.coordinator import (
    PeriodTrackerUpdateCoordinator,
    build_cycle_state,
)
from custom_components.period_tracker.history import Cycle, build_history
from custom_components.period_tracker.storage import PeriodTrackerStorage

TEST_TODAY = date(2024, 2, 20)


def day_range(start: date, days: int) -> set[date]:
    """Return ``days`` consecutive days starting at ``start``."""
    return {start + timedelta(days=i) for i in range(days)}


async def async_seed(
    coordinator: PeriodTrackerUpdateCoordinator, dates: Iterable[date]
) -> None:
    """Store ``dates`` and publish the matching state, as a refresh would."""
    await coordinator.storage.async_save_marked_dates(dates)
    coordinator.data = build_cycle_state(coordinator.storage.marked_dates, TEST_TODAY)


@pytest.fixture
def single_cycle_dates() -> set[date]:
    return day_range(date(2024, 1, 1), 3)


@pytest.fixture
def two_cycle_dates() -> set[date]:
    return day_range(date(2024, 1, 1), 3) | day_range(date(2024, 1, 29), 3)


@pytest.fixture
def two_cycle_history(two_cycle_dates: set[date]) -> tuple[Cycle, ...]:
    return build_history(two_cycle_dates)


@pytest.fixture
def frozen_now():
    """Pin the coordinator's local clock to TEST_TODAY."""
    with patch(
        "custom_components.period_tracker.coordinator.dt_util.now",
        return_value=datetime(2024, 2, 20, 9, 30),
    ):
        yield


@pytest.fixture
def store() -> MagicMock:
    mock_store = MagicMock()
    mock_store.async_load = AsyncMock(return_value=None)
    mock_store.async_save = AsyncMock()
    return mock_store


@pytest.fixture
def storage(store: MagicMock) -> PeriodTrackerStorage:
    with patch(
        "custom_components.period_tracker.storage.Store", return_value=store
    ) as store_cls:
        result = PeriodTrackerStorage(MagicMock(), "abc123")
    assert store_cls.call_args.kwargs["key"] == "period_tracker.abc123.marked_dates"
    return result


@pytest.fixture
def coordinator(storage: PeriodTrackerStorage) -> PeriodTrackerUpdateCoordinator:
    # Bypass DataUpdateCoordinator setup; refreshes are recorded, not run
    instance = PeriodTrackerUpdateCoordinator.__new__(PeriodTrackerUpdateCoordinator)
    instance.hass = MagicMock()
    instance.config_entry = MagicMock(options={})
    instance.storage = storage
    instance.data = None
    instance.async_request_refresh = AsyncMock()
    return instance
