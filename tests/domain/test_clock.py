"""Tests for the injectable clocks."""

from datetime import datetime, timezone

from inventory_kernel.domain.clock import DeterministicClock, SystemClock, ensure_utc


def test_deterministic_clock_is_stable():
    clock = DeterministicClock()

    assert clock.now() == clock.now()


def test_advance_and_tick():
    clock = DeterministicClock(datetime(2024, 5, 1, tzinfo=timezone.utc))

    clock.advance(30)
    assert clock.now() == datetime(2024, 5, 1, 0, 0, 30, tzinfo=timezone.utc)
    assert clock.tick() == datetime(2024, 5, 1, 0, 0, 31, tzinfo=timezone.utc)


def test_set_time_resets_advance():
    clock = DeterministicClock()
    clock.advance(100)
    target = datetime(2025, 1, 1, tzinfo=timezone.utc)

    clock.set_time(target)

    assert clock.now() == target


def test_system_clock_is_utc():
    assert SystemClock().now().tzinfo is not None


def test_ensure_utc():
    naive = datetime(2024, 1, 1, 12, 0)

    assert ensure_utc(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert ensure_utc(None) is None
