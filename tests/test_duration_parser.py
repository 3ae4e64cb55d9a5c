"""Tests for free-text duration parsing."""

import pytest
from hypothesis import given, strategies as st

from sathi_seva.jobs.duration import (
    DEFAULT_MINUTES,
    FULL_DAY_MINUTES,
    HALF_DAY_MINUTES,
    MULTIPLE_DAYS_MINUTES,
    parse_minutes,
)


@pytest.mark.parametrize("descriptor, minutes", [
    ("2 hours", 120),
    ("1 hour", 60),
    ("3hours", 180),
    ("10 Hours of work", 600),
    ("Half day", HALF_DAY_MINUTES),
    ("half day job", HALF_DAY_MINUTES),
    ("Full Day", FULL_DAY_MINUTES),
    ("Multiple days", MULTIPLE_DAYS_MINUTES),
])
def test_recognised_descriptors(descriptor, minutes):
    assert parse_minutes(descriptor) == minutes


@pytest.mark.parametrize("descriptor", [None, "", "   ", "a while", "soon", "2 days"])
def test_unrecognised_descriptors_default_to_one_hour(descriptor):
    assert parse_minutes(descriptor) == DEFAULT_MINUTES


def test_hours_rule_wins_over_day_keywords():
    assert parse_minutes("Half day, about 5 hours") == 300


def test_fractional_hours_are_not_read_as_whole_hours():
    assert parse_minutes("2.5 hours") == DEFAULT_MINUTES


def test_day_keywords_checked_in_order():
    assert parse_minutes("half day or full day") == HALF_DAY_MINUTES


@given(hours=st.integers(min_value=0, max_value=999))
def test_hours_scale_linearly(hours):
    assert parse_minutes(f"{hours} hours") == hours * 60


@given(text=st.text(max_size=40))
def test_never_raises_and_never_negative(text):
    assert parse_minutes(text) >= 0
