"""
Domain service: Plant health scoring.

A day's score blends two sub-scores worth up to 50 points each:
- water: observed precipitation against the plant's daily water need
- humidity: observed relative humidity against the plant's expected humidity
"""
import math

MAX_SUB_SCORE = 50.0
HUMIDITY_TOLERANCE = 50.0
"""Percentage-point difference at which the humidity sub-score reaches zero."""


# Decimal places kept before rounding, so float noise at .5 cannot flip the result
ROUNDING_PRECISION = 9


def _round_half_up(value: float) -> int:
    return int(math.floor(round(value, ROUNDING_PRECISION) + 0.5))


def water_sub_score(actual_water: float, expected_water: float) -> float:
    """Water component in [0, 50]; zero when the expected amount is not positive."""
    if expected_water <= 0:
        return 0.0
    difference = abs(actual_water - expected_water)
    return MAX_SUB_SCORE * (1 - min(difference / expected_water, 1.0))


def humidity_sub_score(actual_humidity: float, expected_humidity: float) -> float:
    difference = abs(actual_humidity - expected_humidity)
    return MAX_SUB_SCORE * (1 - min(difference / HUMIDITY_TOLERANCE, 1.0))


def score(
    actual_water: float,
    expected_water: float,
    actual_humidity: float,
    expected_humidity: float,
) -> int:
    """
    Compute the health score for one day.

    Args:
        actual_water: Observed precipitation in mm
        expected_water: Daily water need in mm
        actual_humidity: Observed relative humidity in %
        expected_humidity: Expected relative humidity in %

    Returns:
        Integer score clamped to [0, 100]
    """
    total = water_sub_score(actual_water, expected_water) + humidity_sub_score(
        actual_humidity, expected_humidity
    )
    return max(0, min(100, _round_half_up(total)))
