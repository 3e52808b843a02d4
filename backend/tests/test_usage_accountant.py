"""Tests for days-active accounting over a resource's activity ledger."""

from datetime import UTC, datetime

import pytest

from app.core.exceptions import ValidationError
from app.services.resource import Resource
from app.services.usage_accountant import days_active, timestamps_between
from tests.conftest import DAY_0, FakeClock, day


def _make_ledger(
    activations: list[int] | None = None,
    deactivations: list[int] | None = None,
    date_created: datetime | int | None = DAY_0,
) -> Resource:
    """Create a detached resource with the given history."""
    resource = Resource()
    resource.set_date_created(date_created)
    resource.set_activation_timestamps(activations or [])
    resource.set_deactivation_timestamps(deactivations or [])
    return resource


class TestTimestampsBetween:
    def test_bounds_are_inclusive(self):
        assert timestamps_between([1, 5, 10, 11], 5, 10) == [5, 10]

    def test_keeps_original_order(self):
        assert timestamps_between([9, 2, 7, 20], 0, 10) == [9, 2, 7]

    def test_empty(self):
        assert timestamps_between([], 0, 10) == []


class TestNeverActivated:
    def test_no_history(self):
        ledger = _make_ledger()
        assert days_active(ledger, day(0), day(30)) == 0

    def test_only_deactivations(self):
        ledger = _make_ledger(deactivations=[day(2), day(4)])
        assert days_active(ledger, day(0), day(30)) == 0

    def test_default_window_end(self):
        ledger = _make_ledger()
        assert days_active(ledger, day(0), clock=FakeClock()) == 0


class TestSingleInterval:
    def test_open_activation_counts_to_window_end(self):
        ledger = _make_ledger(activations=[day(3, 8)])
        # 7.5 days rounds up
        assert days_active(ledger, day(0), day(10, 20)) == 8

    def test_window_end_defaults_to_clock(self):
        clock = FakeClock()
        clock.set(day(5, 8))
        ledger = _make_ledger(activations=[day(3, 8)])
        assert days_active(ledger, day(0), clock=clock) == 2

    def test_activation_and_deactivation(self):
        ledger = _make_ledger(activations=[day(3, 8)], deactivations=[day(10, 8)])
        assert days_active(ledger, day(0), day(15)) == 7

    def test_iso_string_window(self):
        ledger = _make_ledger(activations=[day(3, 8)], deactivations=[day(10, 8)])
        result = days_active(ledger, "2025-01-01T00:00:00Z", "2025-01-16T00:00:00+00:00")
        assert result == 7

    def test_datetime_window(self):
        ledger = _make_ledger(activations=[day(3, 8)], deactivations=[day(10, 8)])
        result = days_active(
            ledger, datetime(2025, 1, 1, tzinfo=UTC), datetime(2025, 1, 16, tzinfo=UTC)
        )
        assert result == 7

    def test_partial_day_counts_as_one(self):
        ledger = _make_ledger(activations=[day(2, 9)], deactivations=[day(2, 9, 1)])
        assert days_active(ledger, day(0), day(5)) == 1

    def test_zero_length_interval(self):
        ledger = _make_ledger(activations=[day(2, 9)], deactivations=[day(2, 9)])
        assert days_active(ledger, day(0), day(5)) == 0


class TestSameDayTransitions:
    def test_activate_and_deactivate_same_day(self):
        ledger = _make_ledger(activations=[day(2, 9)], deactivations=[day(2, 17)])
        assert days_active(ledger, day(0), day(5)) == 1

    def test_two_cycles_closing_same_day(self):
        ledger = _make_ledger(
            activations=[day(2, 9), day(2, 12)],
            deactivations=[day(2, 10), day(2, 17)],
        )
        assert days_active(ledger, day(0), day(5)) == 1

    def test_second_cycle_closing_same_day_adds_nothing(self):
        ledger = _make_ledger(
            activations=[day(1, 9), day(2, 12)],
            deactivations=[day(2, 10), day(2, 17)],
        )
        assert days_active(ledger, day(0), day(5)) == 2

    def test_cycles_on_separate_days(self):
        ledger = _make_ledger(
            activations=[day(1, 9), day(3, 9)],
            deactivations=[day(2, 9), day(4, 9)],
        )
        assert days_active(ledger, day(0), day(10)) == 2

    def test_reactivation_same_day_gives_back_counted_day(self):
        ledger = _make_ledger(
            activations=[day(1, 9), day(1, 15)],
            deactivations=[day(1, 10), day(3, 15)],
        )
        # 1 for the first cycle, 2 for the second, less the shared opening day
        assert days_active(ledger, day(0), day(5)) == 2

    def test_open_reactivation_closing_on_window_end_day(self):
        ledger = _make_ledger(
            activations=[day(4, 9), day(4, 12)],
            deactivations=[day(4, 10)],
        )
        # Second interval closes at the window end, same day as the first
        assert days_active(ledger, day(0), day(4, 20)) == 1


class TestWindowBoundary:
    def test_active_before_window_start(self):
        ledger = _make_ledger(activations=[day(-5)], date_created=day(-10))
        assert days_active(ledger, day(0), day(4, 12)) == 5

    def test_never_counts_days_before_window(self):
        ledger = _make_ledger(activations=[day(-20)], date_created=day(-30))
        assert days_active(ledger, day(0), day(3)) == 3

    def test_active_at_start_then_deactivated(self):
        ledger = _make_ledger(activations=[day(-5)], deactivations=[day(2, 6)])
        assert days_active(ledger, day(0), day(10)) == 3

    def test_seed_uses_creation_date_when_later(self):
        ledger = _make_ledger(
            activations=[day(6)],
            deactivations=[day(4)],
            date_created=day(2),
        )
        # (day 2 -> day 4) + (day 6 -> day 10)
        assert days_active(ledger, day(0), day(10)) == 6

    def test_seed_without_creation_date_uses_window_start(self):
        ledger = _make_ledger(activations=[day(-1)], date_created=None)
        assert days_active(ledger, day(1), day(3)) == 2

    def test_window_before_first_activation(self):
        ledger = _make_ledger(activations=[day(10)])
        assert days_active(ledger, day(0), day(5)) == 0

    def test_window_after_deactivation(self):
        ledger = _make_ledger(activations=[day(-3)], deactivations=[day(-1)])
        assert days_active(ledger, day(0), day(5)) == 0

    def test_reactivated_before_window(self):
        ledger = _make_ledger(
            activations=[day(-6), day(-2)],
            deactivations=[day(-4)],
        )
        assert days_active(ledger, day(0), day(3)) == 3


class TestIrregularHistory:
    def test_inverted_window(self):
        ledger = _make_ledger(activations=[day(1)])
        assert days_active(ledger, day(10), day(0)) == 0

    def test_two_deactivations_in_a_row(self):
        ledger = _make_ledger(
            activations=[day(1), day(5)],
            deactivations=[day(2), day(3)],
        )
        # Second pairing closes before it opens and contributes nothing
        assert days_active(ledger, day(0), day(10)) == 1

    def test_more_deactivations_than_activations(self):
        ledger = _make_ledger(activations=[day(1)], deactivations=[day(2), day(6)])
        assert days_active(ledger, day(0), day(10)) == 1

    def test_unsorted_history_never_negative(self):
        ledger = _make_ledger(
            activations=[day(8), day(1)],
            deactivations=[day(3), day(2)],
        )
        assert days_active(ledger, day(0), day(10)) >= 0

    def test_invalid_window_raises(self):
        ledger = _make_ledger(activations=[day(1)])
        with pytest.raises(ValidationError):
            days_active(ledger, "not a date", day(10))


class TestProperties:
    def test_idempotent(self):
        ledger = _make_ledger(
            activations=[day(1, 9), day(1, 15), day(4, 8)],
            deactivations=[day(1, 10), day(2, 12)],
        )
        before = ledger.get_data()
        first = days_active(ledger, day(0), day(9))
        second = days_active(ledger, day(0), day(9))
        assert first == second
        assert ledger.get_data() == before

    def test_monotonic_in_window_end(self):
        ledger = _make_ledger(
            activations=[day(1, 9), day(1, 15), day(4, 8)],
            deactivations=[day(1, 10), day(2, 12)],
        )
        results = [days_active(ledger, day(0), day(0) + step * 6 * 3600) for step in range(40)]
        assert results == sorted(results)
        assert results[-1] > 0

    def test_monotonic_with_activation_after_window_start(self):
        ledger = _make_ledger(activations=[day(3, 12)], deactivations=[day(6)])
        results = [days_active(ledger, day(0), day(n)) for n in range(10)]
        assert results == sorted(results)
        assert results[-1] == 3

    def test_monotonic_with_repeated_activation_across_window_start(self):
        ledger = _make_ledger(
            activations=[day(-2, 22), day(6, 4), day(10, 3)],
            date_created=day(-5),
        )
        results = [days_active(ledger, day(0), day(0) + step * 3 * 3600) for step in range(160)]
        assert results == sorted(results)

    def test_repeated_activation_counts_from_window_start(self):
        ledger = _make_ledger(
            activations=[day(-2, 22), day(6, 4)],
            date_created=day(-5),
        )
        # Active throughout; the later activation closes on the window end day
        assert days_active(ledger, day(0), day(6, 6)) == 7
        assert days_active(ledger, day(0), day(6, 2)) == 7
