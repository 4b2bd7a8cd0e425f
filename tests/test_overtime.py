import math

import pytest

from timecard.errors import InputValidationError
from timecard.overtime import DailyTierRule, classify_hours


@pytest.mark.parametrize(
    "hours, expected",
    [
        (0, (0, 0, 0)),
        (6.5, (6.5, 0, 0)),
        (8, (8, 0, 0)),
        (8.01, (8, 0.01, 0)),
        (12, (8, 4, 0)),
        (12.01, (8, 4, 0.01)),
        (15, (8, 4, 3)),
    ],
)
def test_classify_hours_tiers(hours, expected):
    breakdown = classify_hours(hours)

    assert breakdown.total == pytest.approx(hours)
    assert (breakdown.regular, breakdown.overtime, breakdown.double_time) == pytest.approx(expected)


def test_buckets_always_add_up_to_total():
    for hours in [0, 0.25, 7.99, 8, 8.0001, 9.75, 11.999, 12, 12.5, 16, 23.9, 100.125]:
        breakdown = classify_hours(hours)

        assert breakdown.regular + breakdown.overtime + breakdown.double_time == pytest.approx(hours, abs=1e-9)
        assert min(breakdown.regular, breakdown.overtime, breakdown.double_time) >= 0


@pytest.mark.parametrize("bad", [-0.01, -8, math.nan, math.inf, -math.inf])
def test_invalid_hours_are_rejected(bad):
    with pytest.raises(InputValidationError):
        classify_hours(bad)


def test_non_numeric_hours_are_rejected():
    with pytest.raises(ValueError):
        classify_hours("8")
    with pytest.raises(InputValidationError):
        classify_hours(True)


def test_custom_thresholds():
    rule = DailyTierRule(daily_threshold=10, double_time_threshold=10)

    breakdown = rule.classify(11)

    assert (breakdown.regular, breakdown.overtime, breakdown.double_time) == pytest.approx((10, 0, 1))


def test_rule_rejects_double_time_below_daily_threshold():
    with pytest.raises(InputValidationError):
        DailyTierRule(daily_threshold=8, double_time_threshold=6)
