"""Value aggregation over a goal window. Math only, never raises."""

from __future__ import annotations

from datetime import date

from app.engine import dates
from app.engine.models import (
    ActivityLog,
    ActivityType,
    Goal,
    PeriodValues,
    TrackingType,
    Trend,
    ValueShape,
)


def trend_of(activity_type: ActivityType | None) -> Trend:
    """Resolved trend; a missing type compares as more-is-better."""
    if activity_type is None:
        return Trend.more_is_better
    return activity_type.trend


def is_discrete(activity_type: ActivityType | None) -> bool:
    return activity_type is not None and activity_type.is_discrete


def uses_average_value(activity_type: ActivityType | None) -> bool:
    """Slider and discrete types report an average-like figure, not a running sum."""
    if activity_type is None:
        return False
    return activity_type.shape is ValueShape.continuous_slider or activity_type.is_discrete


def compare(value: float, target: float, trend: Trend) -> bool:
    """Trend comparison of a value against the target.

    - more-is-better: value >= target
    - less-is-better: value <= target
    - exact-match: value == target
    """
    if trend is Trend.less_is_better:
        return value <= target
    if trend is Trend.exact_match:
        return value == target
    return value >= target


def day_meets_target(value: float, target: float, trend: Trend, discrete: bool) -> bool:
    """Discrete choices meet only on an exact match, whatever the trend."""
    if discrete:
        return value == target
    return compare(value, target, trend)


def logged_value(activity_log: ActivityLog | None, activity_type_id: str, on_date: date) -> float | None:
    if not activity_log:
        return None
    day = activity_log.get(on_date)
    if not day:
        return None
    return day.get(activity_type_id)


def aggregate_period(
    goal: Goal,
    activity_type: ActivityType | None,
    activity_log: ActivityLog | None,
    start_date: date,
    end_date: date,
) -> PeriodValues:
    """Aggregate the goal's activity type over [start_date, end_date].

    Unlogged days are skipped, not counted as zero. An empty window gives
    day_count == 0, average == 0 and all_days_met == False.
    """
    if not activity_log or start_date > end_date:
        return PeriodValues()

    trend = trend_of(activity_type)
    discrete = is_discrete(activity_type)

    total = 0.0
    count = 0
    days_met = 0
    for day in dates.iter_dates(start_date, end_date):
        value = logged_value(activity_log, goal.activity_type_id, day)
        if value is None:
            continue
        total += value
        count += 1
        if day_meets_target(value, goal.target_value, trend, discrete):
            days_met += 1

    return PeriodValues(
        sum=total,
        day_count=count,
        average=total / count if count > 0 else 0.0,
        days_met_target=days_met,
        all_days_met=count > 0 and days_met == count,
    )


def match_ratio(values: PeriodValues) -> float:
    if values.day_count <= 0:
        return 0.0
    return values.days_met_target / values.day_count


def effective_value(goal: Goal, activity_type: ActivityType | None, values: PeriodValues) -> float:
    """The figure compared against the target and shown as progress.

    - tracking_type "sum": running sum, whatever the shape
    - discrete, absolute: number of matching days
    - discrete, average: share of logged days that matched
    - slider: average
    - increment (and unknown types): running sum
    """
    tracking = goal.tracking_type
    if tracking == TrackingType.sum.value:
        return values.sum
    if is_discrete(activity_type):
        if tracking == TrackingType.absolute.value:
            return float(values.days_met_target)
        return match_ratio(values)
    if activity_type is not None and activity_type.shape is ValueShape.continuous_slider:
        return values.average
    return values.sum
