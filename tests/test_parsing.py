"""Tests for birth date parsing."""
from datetime import date

import pytest

from kinship.parsing import birth_year, parse_birth_date


@pytest.mark.parametrize("value, expected", [
    ("1956-03-14", date(1956, 3, 14)),
    ("1839-08-29T00:00:00", date(1839, 8, 29)),
    ("1746-00-00", date(1746, 1, 1)),
    ("25 NOV 1954", date(1954, 11, 25)),
    ("11 Aug. 1968", date(1968, 8, 11)),
    ("NOV 1954", date(1954, 11, 1)),
    ("May, 1837", date(1837, 5, 1)),
    ("April 17, 1850", date(1850, 4, 17)),
    ("01/27/1920", date(1920, 1, 27)),
    ("1698", date(1698, 1, 1)),
    ("about 1833", date(1833, 1, 1)),
    ("ABT. 1790", date(1790, 1, 1)),
])
def test_parse_birth_date(value, expected):
    assert parse_birth_date(value) == expected


@pytest.mark.parametrize("value", [None, "", "   ", "unknown", "1956-02-30", "Smarch 1900"])
def test_unparseable_dates(value):
    assert parse_birth_date(value) is None


def test_birth_year():
    assert birth_year("25 NOV 1954") == 1954
    assert birth_year(None) is None
