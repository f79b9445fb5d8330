"""Tests for study-time unit normalization."""

import pytest

from learnscore.services.units import (
    LEGACY_MINUTES_THRESHOLD,
    SECONDS_UNIT,
    normalize_study_seconds,
)


@pytest.mark.parametrize("raw", [0, 1, 45, 600, 9_999])
def test_values_below_threshold_are_minutes(raw):
    assert normalize_study_seconds(raw) == raw * 60


@pytest.mark.parametrize("raw", [10_000, 10_001, 36_000, 599_940])
def test_values_at_or_above_threshold_are_seconds(raw):
    assert normalize_study_seconds(raw) == raw


def test_threshold_is_ten_thousand():
    assert LEGACY_MINUTES_THRESHOLD == 10_000


def test_none_is_zero():
    assert normalize_study_seconds(None) == 0


def test_rows_stamped_as_seconds_skip_heuristic():
    assert normalize_study_seconds(120, SECONDS_UNIT) == 120
