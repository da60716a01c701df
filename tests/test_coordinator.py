"""Tests for the published cycle state and edits through the coordinator."""

from __future__ import annotations

from datetime import date, datetime
from unittest.mock import MagicMock, patch

import pytest

from custom_components.period_tracker.const import (
    CHANCE_LOW,
    TITLE_DAY_OF_PERIOD,
    TITLE_NO_DATA,
    TITLE_UNTIL_PERIOD,
)
from custom_components.period_tracker.coordinator import (
    FutureDaysError,
    PeriodTrackerUpdateCoordinator,
    build_cycle_state,
)
from custom_components.period_tracker.forecast import Averages
from custom_components.period_tracker.storage import PeriodTrackerStorage
from tests.conftest import TEST_TODAY, async_seed, day_range

pytestmark = pytest.mark.usefixtures("frozen_now")


class TestBuildCycleState:
    def test_empty_set_gives_placeholder_state(self) -> None:
        state = build_cycle_state(set(), TEST_TODAY)
        assert state.history == ()
        assert state.days_before_period.title == TITLE_NO_DATA
        assert state.days_before_period.days == 0
        assert state.pregnancy_chance is None
        assert state.next_period_start is None
        assert not state.period_today
        assert not state.forecast_period_today
        assert state.averages == Averages(cycle_length=28, period_length=5)

    def test_two_cycles(self, two_cycle_dates: set[date]) -> None:
        state = build_cycle_state(two_cycle_dates, date(2024, 2, 20))
        assert len(state.history) == 2
        assert state.days_before_period.title == TITLE_UNTIL_PERIOD
        assert state.days_before_period.days == 6
        assert state.pregnancy_chance == CHANCE_LOW
        assert state.next_period_start == date(2024, 2, 26)
        assert state.ovulation_date == date(2024, 2, 12)
        assert state.last_period_days[0] == date(2024, 1, 29)

    def test_period_today(self, two_cycle_dates: set[date]) -> None:
        state = build_cycle_state(two_cycle_dates, date(2024, 1, 30))
        assert state.period_today
        assert state.days_before_period.title == TITLE_DAY_OF_PERIOD
        assert state.forecast_period_today

    def test_configured_defaults_apply_to_short_history(
        self, single_cycle_dates: set[date]
    ) -> None:
        state = build_cycle_state(
            single_cycle_dates, date(2024, 1, 10), default_cycle_length=35
        )
        assert state.averages.cycle_length == 35
        assert state.next_period_start == date(2024, 2, 5)


class TestSetMarkedDates:
    @pytest.mark.asyncio
    async def test_saves_and_refreshes(
        self, coordinator: PeriodTrackerUpdateCoordinator, store: MagicMock
    ) -> None:
        await coordinator.async_set_marked_dates({date(2024, 1, 1), date(2024, 2, 20)})
        store.async_save.assert_awaited_once_with(
            {"marked_dates": ["2024-01-01", "2024-02-20"]}
        )
        coordinator.async_request_refresh.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rejects_future_days(
        self, coordinator: PeriodTrackerUpdateCoordinator, store: MagicMock
    ) -> None:
        with pytest.raises(FutureDaysError):
            await coordinator.async_set_marked_dates({date(2024, 2, 21)})
        store.async_save.assert_not_awaited()
        coordinator.async_request_refresh.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unchanged_set_is_not_written(
        self, coordinator: PeriodTrackerUpdateCoordinator, store: MagicMock
    ) -> None:
        await async_seed(coordinator, [date(2024, 1, 1)])
        store.async_save.reset_mock()
        await coordinator.async_set_marked_dates([date(2024, 1, 1)])
        store.async_save.assert_not_awaited()
        coordinator.async_request_refresh.assert_not_awaited()


class TestAddMarkedDates:
    @pytest.mark.asyncio
    async def test_merges_with_stored_days(
        self, coordinator: PeriodTrackerUpdateCoordinator, two_cycle_dates: set[date]
    ) -> None:
        await async_seed(coordinator, two_cycle_dates)
        await coordinator.async_add_marked_dates({date(2024, 2, 19), date(2024, 2, 20)})
        assert coordinator.storage.marked_dates == two_cycle_dates | {
            date(2024, 2, 19),
            date(2024, 2, 20),
        }
        coordinator.async_request_refresh.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_one_future_day_rejects_the_batch(
        self, coordinator: PeriodTrackerUpdateCoordinator, two_cycle_dates: set[date]
    ) -> None:
        await async_seed(coordinator, two_cycle_dates)
        with pytest.raises(FutureDaysError, match="2024-02-21"):
            await coordinator.async_add_marked_dates(day_range(date(2024, 2, 19), 3))
        assert coordinator.storage.marked_dates == two_cycle_dates
        coordinator.async_request_refresh.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_before_first_refresh(
        self, coordinator: PeriodTrackerUpdateCoordinator
    ) -> None:
        await coordinator.async_add_marked_dates([TEST_TODAY])
        assert coordinator.storage.marked_dates == {TEST_TODAY}


class TestRemoveMarkedDates:
    @pytest.mark.asyncio
    async def test_removes_and_refreshes(
        self, coordinator: PeriodTrackerUpdateCoordinator, two_cycle_dates: set[date]
    ) -> None:
        await async_seed(coordinator, two_cycle_dates)
        removed = await coordinator.async_remove_marked_dates(
            [date(2024, 1, 1), date(2024, 3, 1)]
        )
        assert removed == 1
        assert coordinator.storage.marked_dates == two_cycle_dates - {date(2024, 1, 1)}
        coordinator.async_request_refresh.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_nothing_to_remove(
        self,
        coordinator: PeriodTrackerUpdateCoordinator,
        storage: PeriodTrackerStorage,
        two_cycle_dates: set[date],
    ) -> None:
        await async_seed(coordinator, two_cycle_dates)
        assert await coordinator.async_remove_marked_dates([date(2024, 3, 1)]) == 0
        assert storage.marked_dates == two_cycle_dates
        coordinator.async_request_refresh.assert_not_awaited()


class TestMidnightRefresh:
    @pytest.mark.asyncio
    async def test_refreshes_at_local_midnight(
        self, coordinator: PeriodTrackerUpdateCoordinator
    ) -> None:
        with patch(
            "custom_components.period_tracker.coordinator.async_track_time_change"
        ) as track:
            unsubscribe = coordinator.async_schedule_midnight_refresh()

        assert unsubscribe is track.return_value
        assert track.call_args.args[0] is coordinator.hass
        assert track.call_args.kwargs == {"hour": 0, "minute": 0, "second": 0}

        action = track.call_args.args[1]
        await action(datetime(2024, 2, 21, 0, 0))
        coordinator.async_request_refresh.assert_awaited_once()
