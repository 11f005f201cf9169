"""
Common Value Objects

Value objects used across multiple domains:
- RentalPeriod: An inclusive day range a piece of equipment is rented for
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from shared.domain.base import ValueObject

ONE_DAY = timedelta(days=1)


def to_utc_datetime(value) -> datetime:
    """
    Coerce a date, datetime or ISO-8601 string into an aware UTC datetime.

    Naive values are taken to be UTC already.

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        moment = datetime.fromisoformat(value.strip())
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")

    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


@dataclass(frozen=True)
class RentalPeriod(ValueObject):
    """
    Rental period value object

    Both ends are inclusive: a rental from the 1st to the 3rd covers
    three days. Used for pricing and availability checks.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Start ({self.start.isoformat()}) must not be after end ({self.end.isoformat()})")

    @classmethod
    def from_values(cls, start, end) -> 'RentalPeriod':
        """Build a period from raw request values (dates, datetimes or ISO strings)"""
        return cls(to_utc_datetime(start), to_utc_datetime(end))

    def normalized(self) -> 'RentalPeriod':
        """
        Widen the period to whole UTC days

        The start moves to 00:00:00 of its day and the end to the last
        microsecond of its day.
        """
        day_start = datetime.combine(self.start.date(), time.min, tzinfo=timezone.utc)
        day_end = datetime.combine(self.end.date(), time.max, tzinfo=timezone.utc)
        return RentalPeriod(day_start, day_end)

    @property
    def days(self) -> int:
        """
        Number of billable days, counting both endpoints

        A partial day rounds up, and a rental is never shorter than one day.
        """
        elapsed = (self.end - self.start) / ONE_DAY
        return max(1, math.ceil(elapsed) + 1)

    def overlaps_with(self, other: 'RentalPeriod') -> bool:
        """Inclusive overlap: periods sharing a single instant overlap"""
        if not isinstance(other, RentalPeriod):
            raise TypeError("Can only check overlap with another RentalPeriod")
        return self.start <= other.end and other.start <= self.end

    def __str__(self):
        return f"{self.start.date().isoformat()} - {self.end.date().isoformat()}"

    def __repr__(self):
        return f"RentalPeriod({self.start.isoformat()}, {self.end.isoformat()})"
