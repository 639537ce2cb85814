"""
Tests for the normalizer and the per-signal scorers.
"""

from datetime import datetime, timedelta

import pytest

from ranking.logic.normalizer import clamp, rescale
from ranking.logic.dimension_scorers import (
    EnrollmentBounds,
    score_quality,
    score_popularity,
    score_freshness,
    compute_enrollment_bounds,
    compute_editorial_boost,
)
from ranking.logic.errors import InvalidInputError


# =============================================================================
# NORMALIZER
# =============================================================================

def test_clamp_bounds_value():
    assert clamp(5, 0, 1) == 1
    assert clamp(-2, 0, 1) == 0
    assert clamp(0.4, 0, 1) == 0.4


def test_clamp_inverted_range_returns_min():
    assert clamp(0.5, 1, 0) == 1


def test_rescale_linear():
    assert rescale(3, 1, 5) == pytest.approx(0.5)
    assert rescale(1, 1, 5) == 0
    assert rescale(5, 1, 5) == 1


def test_rescale_degenerate_range_is_zero():
    assert rescale(7, 7, 7) == 0


# =============================================================================
# QUALITY
# =============================================================================

@pytest.mark.parametrize("rating_count", [30, 31, 120, 10_000])
def test_quality_saturates_at_confidence_threshold(rating_count):
    """Enough ratings -> plain normalized rating."""
    assert score_quality(4.2, rating_count, 30) == pytest.approx(rescale(4.2, 1, 5))


def test_quality_without_ratings_keeps_twenty_percent():
    assert score_quality(4.6, 0, 30) == pytest.approx(0.2 * rescale(4.6, 1, 5))


def test_quality_partial_confidence():
    base = rescale(5.0, 1, 5)
    confidence = 15 / 30
    expected = base * confidence + base * 0.2 * (1 - confidence)
    assert score_quality(5.0, 15, 30) == pytest.approx(expected)


def test_quality_unrated_average_floors_at_zero():
    assert score_quality(0.0, 0, 30) == 0


@pytest.mark.parametrize("rating_avg, rating_count", [(4.0, -1), (5.5, 10), (-0.1, 10)])
def test_quality_rejects_invalid_input(rating_avg, rating_count):
    with pytest.raises(InvalidInputError):
        score_quality(rating_avg, rating_count, 30)


def test_invalid_input_is_a_value_error():
    with pytest.raises(ValueError):
        score_quality(4.0, -5, 30)


# =============================================================================
# POPULARITY
# =============================================================================

def test_popularity_batch_extremes():
    bounds = compute_enrollment_bounds([45, 600, 18_000])
    assert score_popularity(45, bounds) == 0
    assert score_popularity(18_000, bounds) == 1
    assert 0 < score_popularity(600, bounds) < 1


def test_popularity_equal_enrollments_all_zero():
    bounds = compute_enrollment_bounds([250, 250, 250])
    assert score_popularity(250, bounds) == 0


def test_enrollment_bounds_of_empty_batch():
    assert compute_enrollment_bounds([]) == EnrollmentBounds(0, 0)


def test_popularity_is_batch_relative():
    small = compute_enrollment_bounds([100, 200])
    large = compute_enrollment_bounds([100, 200, 10_000])
    assert score_popularity(200, small) == 1
    assert score_popularity(200, large) < 0.02


# =============================================================================
# FRESHNESS
# =============================================================================

def test_freshness_just_updated_is_one(now):
    assert score_freshness(now, 365, now) == 1


def test_freshness_at_and_beyond_max_age_is_zero(now):
    assert score_freshness(now - timedelta(days=365), 365, now) == 0
    assert score_freshness(now - timedelta(days=900), 365, now) == 0


def test_freshness_future_timestamp_is_one(now):
    assert score_freshness(now + timedelta(days=10), 365, now) == 1


def test_freshness_decreases_with_age(now):
    scores = [score_freshness(now - timedelta(days=d), 365, now) for d in (0, 1, 30, 180, 364)]
    assert scores == sorted(scores, reverse=True)
    assert len(set(scores)) == len(scores)


def test_freshness_naive_timestamp_is_utc(now):
    naive = datetime(2026, 1, 28) - timedelta(days=73)
    assert score_freshness(naive, 365, now) == pytest.approx(1 - 73 / 365)


# =============================================================================
# EDITORIAL BOOST
# =============================================================================

def test_editorial_boost_adds_both_flags():
    boost = compute_editorial_boost(True, True, 4.5, 3.5, 0.2, 0.15)
    assert boost == pytest.approx(0.35)


def test_editorial_boost_single_flag():
    assert compute_editorial_boost(False, True, 4.5, 3.5, 0.2, 0.15) == pytest.approx(0.15)
    assert compute_editorial_boost(False, False, 4.5, 3.5, 0.2, 0.15) == 0


def test_editorial_boost_zero_below_quality_floor():
    assert compute_editorial_boost(True, True, 3.4, 3.5, 0.2, 0.15) == 0


def test_editorial_boost_at_quality_floor_counts():
    assert compute_editorial_boost(True, False, 3.5, 3.5, 0.2, 0.15) == pytest.approx(0.2)
