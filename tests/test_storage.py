"""Tests for persisting the marked period days."""

from __future__ import annotations

from datetime import date, datetime
from unittest.mock import MagicMock

import pytest

from custom_components.period_tracker.storage import (
    PeriodTrackerStorage,
    PeriodTrackerStorageError,
    as_day,
    dates_from_dict,
    dates_to_dict,
)


class TestSerialization:
    def test_writes_sorted_iso_days(self) -> None:
        data = dates_to_dict({date(2024, 1, 2), date(2024, 1, 1)})
        assert data == {"marked_dates": ["2024-01-01", "2024-01-02"]}

    def test_reads_iso_days(self) -> None:
        data = {"marked_dates": ["2024-01-02", "2024-01-01", "2024-01-02"]}
        assert dates_from_dict(data) == {date(2024, 1, 1), date(2024, 1, 2)}

    @pytest.mark.parametrize(
        "value",
        [date(2024, 1, 5), datetime(2024, 1, 5, 23, 59), "2024-01-05", "2024-01-05T08:00:00"],
    )
    def test_as_day_drops_time_of_day(self, value: object) -> None:
        assert as_day(value) == date(2024, 1, 5)

    def test_as_day_rejects_other_types(self) -> None:
        with pytest.raises(ValueError):
            as_day(20240105)  # type: ignore[arg-type]


class TestPeriodTrackerStorage:
    @pytest.mark.asyncio
    async def test_not_found_returns_none(self, storage: PeriodTrackerStorage) -> None:
        assert await storage.async_load_marked_dates() is None
        assert storage.marked_dates == frozenset()

    @pytest.mark.asyncio
    async def test_loads_stored_days(
        self, storage: PeriodTrackerStorage, store: MagicMock
    ) -> None:
        store.async_load.return_value = {"marked_dates": ["2024-01-29", "2024-01-30"]}
        loaded = await storage.async_load_marked_dates()
        assert loaded == {date(2024, 1, 29), date(2024, 1, 30)}
        assert storage.marked_dates == loaded

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"marked_dates": ["not-a-date"]}, ["2024-01-01"]])
    async def test_corrupt_payload_resets_to_empty(
        self, storage: PeriodTrackerStorage, store: MagicMock, payload: object
    ) -> None:
        store.async_load.return_value = payload
        assert await storage.async_load_marked_dates() == frozenset()

    @pytest.mark.asyncio
    async def test_save_replaces_whole_set(
        self, storage: PeriodTrackerStorage, store: MagicMock
    ) -> None:
        await storage.async_save_marked_dates([date(2024, 1, 2), date(2024, 1, 1)])
        store.async_save.assert_awaited_once_with(
            {"marked_dates": ["2024-01-01", "2024-01-02"]}
        )
        assert storage.marked_dates == {date(2024, 1, 1), date(2024, 1, 2)}

    @pytest.mark.asyncio
    async def test_add_dates_merges(
        self, storage: PeriodTrackerStorage, store: MagicMock
    ) -> None:
        await storage.async_save_marked_dates([date(2024, 1, 1)])
        await storage.async_add_dates([date(2024, 1, 2)])
        assert storage.marked_dates == {date(2024, 1, 1), date(2024, 1, 2)}
        assert store.async_save.await_count == 2

    @pytest.mark.asyncio
    async def test_failed_write_keeps_previous_set(
        self, storage: PeriodTrackerStorage, store: MagicMock
    ) -> None:
        await storage.async_save_marked_dates([date(2024, 1, 1)])
        store.async_save.side_effect = OSError("disk full")
        with pytest.raises(PeriodTrackerStorageError):
            await storage.async_save_marked_dates([date(2024, 1, 5)])
        assert storage.marked_dates == {date(2024, 1, 1)}

    @pytest.mark.asyncio
    async def test_remove_dates_unmarks_matching_days(
        self, storage: PeriodTrackerStorage, store: MagicMock
    ) -> None:
        await storage.async_save_marked_dates([date(2024, 1, 1), date(2024, 1, 2)])
        removed = await storage.async_remove_dates([date(2024, 1, 2), date(2024, 3, 1)])
        assert removed == 1
        assert storage.marked_dates == {date(2024, 1, 1)}
        store.async_save.assert_awaited_with({"marked_dates": ["2024-01-01"]})

    @pytest.mark.asyncio
    async def test_remove_dates_without_match_writes_nothing(
        self, storage: PeriodTrackerStorage, store: MagicMock
    ) -> None:
        await storage.async_save_marked_dates([date(2024, 1, 1)])
        assert await storage.async_remove_dates([date(2024, 3, 1)]) == 0
        assert store.async_save.await_count == 1
        assert storage.marked_dates == {date(2024, 1, 1)}
