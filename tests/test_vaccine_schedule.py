from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from babytracker.vaccine_schedule import STANDARD_SCHEDULE, scheduled_date, vaccine_status

NOW = datetime(2026, 6, 1, 12, 0)


@pytest.mark.parametrize(
    "delta, expected",
    [
        (timedelta(days=10), "upcoming"),
        (timedelta(0), "upcoming"),
        (-timedelta(weeks=3), "due"),
        (-timedelta(weeks=4, days=6), "due"),
        (-timedelta(weeks=5), "overdue"),
    ],
)
def test_status(delta, expected):
    assert vaccine_status(NOW + delta, NOW) == expected


def test_schedule_covers_first_year():
    assert len(STANDARD_SCHEDULE) == 20
    assert {v.age_group for v in STANDARD_SCHEDULE} == {"birth", "2-months", "4-months", "6-months", "12-months"}
    # one dose per vaccine and age group
    assert len({(v.name, v.age_group) for v in STANDARD_SCHEDULE}) == 20


def test_scheduled_date():
    birth = datetime(2026, 1, 1)
    assert scheduled_date(birth, 8) == datetime(2026, 2, 26)
    assert scheduled_date(birth, 0) == birth
