"""Time source shared by token and session services"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Union

Clock = Callable[[], datetime]

EPOCH = datetime(1970, 1, 1)
MICROSECONDS = 1_000_000


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the form stored in the database)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_timestamp(moment: datetime) -> int:
    """Convert a naive UTC datetime to whole epoch seconds"""
    return (moment - EPOCH) // timedelta(seconds=1)


def to_microseconds(moment: datetime) -> int:
    """Convert a naive UTC datetime to exact epoch microseconds"""
    return (moment - EPOCH) // timedelta(microseconds=1)


def to_numeric_date(moment: datetime) -> Union[int, float]:
    """JWT NumericDate: whole seconds when possible, fractional otherwise"""
    seconds, remainder = divmod(to_microseconds(moment), MICROSECONDS)
    if not remainder:
        return seconds
    return seconds + remainder / MICROSECONDS


def numeric_date_to_microseconds(value: Union[int, float]) -> int:
    return round(value * MICROSECONDS)
