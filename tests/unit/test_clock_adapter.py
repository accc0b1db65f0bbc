from datetime import UTC, datetime, timedelta

from version_publisher.adapters.clock import FixedClock, SystemClock


def test_system_clock_is_utc_aware():
    clock = SystemClock()
    now = clock.now_utc()
    assert now.tzinfo is not None
    assert now.utcoffset() == timedelta(0)
    diff = abs((datetime.now(UTC) - now).total_seconds())
    assert diff < 1.0


def test_fixed_clock_assumes_utc_for_naive_values():
    clock = FixedClock(datetime(2024, 1, 1, 9, 0))
    assert clock.now_utc() == datetime(2024, 1, 1, 9, 0, tzinfo=UTC)

    clock.advance_to(datetime(2024, 1, 1, 10, 0))
    assert clock.now_utc() == datetime(2024, 1, 1, 10, 0, tzinfo=UTC)
