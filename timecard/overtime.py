from __future__ import annotations
import math
from dataclasses import dataclass

from .errors import InputValidationError
from .models import HoursBreakdown


@dataclass(frozen=True)
class DailyTierRule:
    """Daily overtime tiers: regular up to ``daily_threshold`` hours, overtime
    up to ``double_time_threshold`` hours, double time beyond that.

    Hours landing exactly on a threshold stay in the lower tier.
    """

    daily_threshold: float = 8.0
    double_time_threshold: float = 12.0

    def __post_init__(self) -> None:
        for name in ("daily_threshold", "double_time_threshold"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise InputValidationError(f"{name} must be a finite non-negative number, got {value!r}")
        if self.double_time_threshold < self.daily_threshold:
            raise InputValidationError("double_time_threshold must not be below daily_threshold")

    def classify(self, daily_hours: float) -> HoursBreakdown:
        if isinstance(daily_hours, bool) or not isinstance(daily_hours, (int, float)):
            raise InputValidationError(f"Hours must be a number, got {daily_hours!r}")
        if not math.isfinite(daily_hours) or daily_hours < 0:
            raise InputValidationError(f"Hours must be finite and non-negative, got {daily_hours!r}")

        hours = float(daily_hours)
        regular = min(hours, self.daily_threshold)
        remaining = hours - regular
        overtime = 0.0
        double_time = 0.0
        if remaining > 0:
            overtime = min(remaining, self.double_time_threshold - self.daily_threshold)
            remaining -= overtime
        if remaining > 0:
            double_time = remaining
        return HoursBreakdown(total=hours, regular=regular, overtime=overtime, double_time=double_time)


DEFAULT_RULE = DailyTierRule()


def classify_hours(daily_hours: float, rule: DailyTierRule = DEFAULT_RULE) -> HoursBreakdown:
    return rule.classify(daily_hours)
