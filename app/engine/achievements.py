"""Achievement projection: was a goal met over the full period containing a date?

Computed on read, keyed by the period's nominal bounds. Storing the result
is the caller's business.
"""

from __future__ import annotations

from datetime import date

from app.config import settings
from app.engine import aggregator, classifier, periods
from app.engine.models import Achievement, ActivityLog, ActivityType, Goal


def evaluate_achievement(
    goal: Goal,
    activity_type: ActivityType | None,
    activity_log: ActivityLog | None,
    activity_date: date,
    majority_threshold: float | None = None,
) -> Achievement | None:
    """Achievement for the period containing `activity_date`, or None.

    None when the date falls outside a one-shot goal's span, or when the
    goal is not met over that period.
    """
    period = periods.nominal_period(goal, activity_date)
    if period is None:
        return None
    period_start, period_end = period

    values = aggregator.aggregate_period(goal, activity_type, activity_log, period_start, period_end)
    threshold = majority_threshold if majority_threshold is not None else settings.discrete_majority_threshold
    if not classifier.meets_target(goal, activity_type, values, threshold):
        return None

    if aggregator.is_discrete(activity_type):
        achieved = values.days_met_target
    else:
        achieved = int(aggregator.effective_value(goal, activity_type, values))

    return Achievement(
        goal_id=goal.id,
        period_start=period_start,
        period_end=period_end,
        achieved_value=achieved,
        target_value=goal.target_value,
    )
