"""Relevance — which goals are shown for a date, independent of status."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from app.engine import dates
from app.engine.models import DateType, Goal, RECURRING_DATE_TYPES
from app.engine.periods import date_type_of


def _overdue_on_today(reference_date: date, today: date, deadline: date) -> bool:
    # An expired goal stays visible on the current day only, not retroactively.
    return reference_date == today and reference_date > deadline


def is_goal_relevant(goal: Goal, reference_date: date, today: date) -> bool:
    """Whether `goal` should be listed on `reference_date`.

    - daily / weekly / monthly: from created_at onward
    - by_date: created_at..target_date, plus today once overdue
    - date_range: start_date..end_date (created_at ignored), plus today once overdue
    """
    dt = date_type_of(goal)

    if dt is DateType.date_range:
        if goal.start_date is None or goal.end_date is None:
            return False
        in_range = goal.start_date <= reference_date <= goal.end_date
        return in_range or _overdue_on_today(reference_date, today, goal.end_date)

    if goal.created_at is not None and reference_date < goal.created_at:
        return False

    if dt in RECURRING_DATE_TYPES:
        return True

    if dt is DateType.by_date:
        if goal.target_date is None:
            return False
        return reference_date <= goal.target_date or _overdue_on_today(reference_date, today, goal.target_date)

    return False


def relevant_goals(goals: Iterable[Goal], reference_date: date, today: date) -> list[Goal]:
    return [g for g in goals if is_goal_relevant(g, reference_date, today)]


def shows_indicator(goal: Goal, reference_date: date) -> bool:
    """Whether the goal's milestone marker appears on `reference_date`.

    Broader than the evaluation boundary for date ranges: the marker shows
    on every day inside the range.
    """
    dt = date_type_of(goal)
    if dt is DateType.daily:
        return True
    if dt is DateType.weekly:
        return dates.is_sunday(reference_date)
    if dt is DateType.monthly:
        return dates.is_last_day_of_month(reference_date)
    if dt is DateType.by_date:
        return goal.target_date is not None and goal.target_date == reference_date
    if dt is DateType.date_range:
        if goal.start_date is None or goal.end_date is None:
            return False
        return goal.start_date <= reference_date <= goal.end_date
    return False


def goals_with_indicator(goals: Iterable[Goal], reference_date: date) -> list[Goal]:
    return [g for g in goals if shows_indicator(g, reference_date)]
