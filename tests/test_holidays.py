"""Dutch holiday calendar."""
import random
from datetime import date

import pytest

from dialfm.holidays import easter, holiday_for, holiday_line


@pytest.mark.parametrize("year,expected", [
    (2000, date(2000, 4, 23)),
    (2019, date(2019, 4, 21)),
    (2024, date(2024, 3, 31)),
    (2025, date(2025, 4, 20)),
    (2038, date(2038, 4, 25)),
])
def test_easter(year, expected):
    assert easter(year) == expected


@pytest.mark.parametrize("day,name", [
    (date(2024, 4, 27), "Koningsdag"),
    (date(2024, 12, 5), "Sinterklaas"),
    (date(2024, 12, 26), "Kerst"),
    (date(2024, 3, 31), "Pasen"),
    (date(2025, 1, 1), "Nieuwjaarsdag"),
])
def test_holiday_for(day, name):
    assert holiday_for(day).name == name


def test_ordinary_day():
    assert holiday_for(date(2024, 6, 3)) is None
    assert holiday_line(date(2024, 6, 3)) is None


def test_holiday_line_comes_from_the_holiday():
    day = date(2024, 5, 5)
    assert holiday_line(day, random.Random(2)) in holiday_for(day).dj_lines
