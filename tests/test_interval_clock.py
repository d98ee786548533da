import datetime as dt

import pytest

from wallstats.common.errors import ConfigError
from wallstats.services.interval_clock import current_interval, parse_granularity

UTC = dt.timezone.utc
EPOCH = dt.datetime(1970, 1, 1, tzinfo=UTC)

INSTANTS = [
    dt.datetime(2016, 6, 8, 10, 47, 31, 123456, tzinfo=UTC),
    dt.datetime(2016, 6, 8, 10, 30, 0, tzinfo=UTC),
    dt.datetime(2016, 6, 8, 10, 29, 59, 999999, tzinfo=UTC),
    dt.datetime(2020, 2, 29, 23, 59, 59, tzinfo=UTC),
    dt.datetime(2024, 3, 10, 14, 47, 12, tzinfo=dt.timezone(dt.timedelta(hours=5, minutes=30))),
    dt.datetime(2024, 11, 3, 1, 15, tzinfo=dt.timezone(dt.timedelta(hours=-7))),
]


@pytest.mark.parametrize("code, width", [
    ("PT30M", dt.timedelta(minutes=30)),
    ("PT60M", dt.timedelta(hours=1)),
    ("PT1H", dt.timedelta(hours=1)),
])
@pytest.mark.parametrize("now", INSTANTS)
def test_start_is_aligned_and_end_is_one_granularity_later(now, code, width):
    interval = current_interval(now, code)

    assert (interval.start - EPOCH) % width == dt.timedelta(0)
    assert interval.end - interval.start == width
    assert interval.granularity == width
    assert interval.start <= now < interval.end


def test_thirty_minute_boundaries():
    interval = current_interval(dt.datetime(2016, 6, 8, 10, 47, tzinfo=UTC), "PT30M")
    assert interval.start == dt.datetime(2016, 6, 8, 10, 30, tzinfo=UTC)
    assert interval.end == dt.datetime(2016, 6, 8, 11, 0, tzinfo=UTC)


def test_hour_boundary_is_utc_aligned_for_half_hour_offsets():
    now = dt.datetime(2024, 3, 10, 14, 47, 12, tzinfo=dt.timezone(dt.timedelta(hours=5, minutes=30)))
    interval = current_interval(now, "PT1H")
    assert interval.start == dt.datetime(2024, 3, 10, 9, 0, tzinfo=UTC)


def test_naive_instants_are_treated_as_utc():
    interval = current_interval(dt.datetime(2016, 6, 8, 10, 47), "PT30M")
    assert interval.start == dt.datetime(2016, 6, 8, 10, 30)
    assert interval.to_query() == "2016-06-08T10:30:00+0000/2016-06-08T11:00:00+0000"


def test_query_notation_keeps_offset():
    tz = dt.timezone(dt.timedelta(hours=8))
    interval = current_interval(dt.datetime(2016, 6, 8, 0, 10, tzinfo=tz), "PT60M")
    assert interval.to_query() == "2016-06-08T00:00:00+0800/2016-06-08T01:00:00+0800"


@pytest.mark.parametrize("value", ["PT15M", "PT1D", "", dt.timedelta(minutes=15), dt.timedelta(hours=2)])
def test_rejects_other_granularities(value):
    with pytest.raises(ConfigError):
        parse_granularity(value)


def test_accepts_timedelta_granularity():
    assert parse_granularity(dt.timedelta(minutes=30)) == dt.timedelta(minutes=30)
