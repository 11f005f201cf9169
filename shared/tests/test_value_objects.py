from datetime import date, datetime, timedelta, timezone

import pytest

from shared.domain.value_objects import RentalPeriod, to_utc_datetime


def test_three_inclusive_days():
    period = RentalPeriod.from_values("2024-01-01", "2024-01-03")

    assert period.days == 3


def test_same_day_rental_is_one_day():
    period = RentalPeriod.from_values("2024-01-01", "2024-01-01")

    assert period.days == 1


def test_partial_day_rounds_up():
    period = RentalPeriod.from_values("2024-01-01T10:00:00+00:00", "2024-01-02T09:00:00+00:00")

    assert period.days == 2


def test_start_after_end_is_rejected():
    with pytest.raises(ValueError):
        RentalPeriod.from_values("2024-01-05", "2024-01-01")


def test_normalized_covers_whole_utc_days():
    period = RentalPeriod.from_values("2024-01-01T10:30:00+05:30", "2024-01-03T08:00:00+00:00").normalized()

    assert period.start == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert period.end.date() == date(2024, 1, 3)
    assert period.end - datetime(2024, 1, 3, tzinfo=timezone.utc) > timedelta(hours=23, minutes=59)


def test_overlap_is_inclusive():
    first = RentalPeriod.from_values("2024-01-01", "2024-01-03")

    assert first.overlaps_with(RentalPeriod.from_values("2024-01-03", "2024-01-05"))
    assert not first.overlaps_with(RentalPeriod.from_values("2024-01-04", "2024-01-05"))


@pytest.mark.parametrize("value", ["", "tomorrow", "2024-13-01", None, 42])
def test_to_utc_datetime_rejects_garbage(value):
    with pytest.raises(ValueError):
        to_utc_datetime(value)


def test_to_utc_datetime_treats_naive_as_utc():
    assert to_utc_datetime(datetime(2024, 1, 1, 12, 0)) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert to_utc_datetime(date(2024, 1, 1)) == datetime(2024, 1, 1, tzinfo=timezone.utc)
