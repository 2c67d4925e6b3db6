"""Unit tests for UTC timestamp columns."""

from datetime import datetime, timedelta, timezone

import pytest

from edustack.core.database import UTCDateTime, utc_now


def test_utc_now_is_timezone_aware():
    now = utc_now()
    assert now.tzinfo is not None
    assert now.utcoffset() == timedelta(0)


@pytest.mark.parametrize(
    "value,stored",
    [
        (None, None),
        (datetime(2024, 5, 1, 12, 0), datetime(2024, 5, 1, 12, 0)),
        (datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc), datetime(2024, 5, 1, 12, 0)),
        (datetime(2024, 5, 1, 14, 0, tzinfo=timezone(timedelta(hours=2))), datetime(2024, 5, 1, 12, 0)),
    ],
)
def test_values_are_written_as_naive_utc(value, stored):
    assert UTCDateTime().process_bind_param(value, None) == stored


def test_values_are_read_as_aware_utc():
    loaded = UTCDateTime().process_result_value(datetime(2024, 5, 1, 12, 0), None)
    assert loaded == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    assert UTCDateTime().process_result_value(None, None) is None


@pytest.mark.asyncio
async def test_timestamps_round_trip_through_the_database(in_memory_session, add_course):
    course = await add_course("Timed Course", published=False)
    course.published_at = datetime(2024, 5, 1, 14, 30, tzinfo=timezone(timedelta(hours=2)))
    await in_memory_session.commit()

    await in_memory_session.refresh(course)

    assert course.created_at.tzinfo is not None
    assert course.created_at <= utc_now()
    assert course.published_at == datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
