"""
Interval Clock

Computes the statistics interval the current poll belongs to. Intervals
are aligned to multiples of the granularity counted from the Unix epoch,
so 30 minute intervals start at :00 and :30 UTC.
"""

import datetime as dt
from typing import NamedTuple, Union

from wallstats.common.errors import ConfigError


GRANULARITIES = {
    "PT30M": dt.timedelta(minutes=30),
    "PT60M": dt.timedelta(hours=1),
    "PT1H": dt.timedelta(hours=1),
}

TIME_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)
_NAIVE_EPOCH = dt.datetime(1970, 1, 1)


class Interval(NamedTuple):
    start: dt.datetime
    end: dt.datetime
    granularity: dt.timedelta

    def to_query(self) -> str:
        """Provider interval notation: ``start/end``."""
        return f"{format_timestamp(self.start)}/{format_timestamp(self.end)}"


def parse_granularity(value: Union[str, dt.timedelta]) -> dt.timedelta:
    """
    Resolve a granularity code (or timedelta) to a supported width.

    Raises:
        ConfigError: For anything other than 30 or 60 minutes
    """
    if isinstance(value, dt.timedelta):
        if value in GRANULARITIES.values():
            return value
    elif value in GRANULARITIES:
        return GRANULARITIES[value]
    raise ConfigError(f"Invalid granularity {value!r}. Use PT30M, PT60M or PT1H")


def current_interval(now: dt.datetime, granularity: Union[str, dt.timedelta]) -> Interval:
    """
    Truncate ``now`` down to its granularity boundary.

    Naive datetimes are treated as UTC wall-clock values.

    Args:
        now: Instant to place in an interval
        granularity: Interval width or its ISO-8601 code

    Returns:
        Interval: ``[start, start + granularity)``
    """
    width = parse_granularity(granularity)
    epoch = _EPOCH if now.tzinfo is not None else _NAIVE_EPOCH
    start = now - (now - epoch) % width
    return Interval(start, start + width, width)


def format_timestamp(value: dt.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value.strftime(TIME_FORMAT)
