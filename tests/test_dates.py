"""Tests for German departure parsing."""

from datetime import date, datetime

from voice_transit.dates import parse_departure_de

NOW = datetime(2025, 3, 14, 7, 0)


def test_clock_time_uses_reference_day():
    parsed = parse_departure_de("14:30", now=NOW)
    assert parsed is not None
    assert (parsed.date(), parsed.hour, parsed.minute) == (date(2025, 3, 14), 14, 30)


def test_tomorrow():
    parsed = parse_departure_de("morgen", now=NOW)
    assert parsed is not None
    assert parsed.date() == date(2025, 3, 15)


def test_empty_text():
    assert parse_departure_de("", now=NOW) is None
    assert parse_departure_de("   ", now=NOW) is None


def test_not_understood():
    assert parse_departure_de("blubberdiblubb", now=NOW) is None
