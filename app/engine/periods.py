"""Period resolution — which dates a goal aggregates, and when it is judged.

Every function takes the reference date and, where relevant, `today`
explicitly. Nothing here reads the wall clock.
"""

from __future__ import annotations

import logging
from datetime import date

from app.engine import dates
from app.engine.models import DateType, Goal, GoalWindow, RECURRING_DATE_TYPES

logger = logging.getLogger(__name__)


def date_type_of(goal: Goal) -> DateType | None:
    try:
        return DateType(goal.date_type)
    except ValueError:
        return None


def is_evaluation_boundary(goal: Goal, reference_date: date) -> bool:
    """True on the day a goal's result for the current cycle is settled.

    - daily: every day
    - weekly: Sundays (weeks run Monday..Sunday)
    - monthly: last calendar day of the month
    - by_date: the target date only
    - date_range: the end date only
    """
    dt = date_type_of(goal)
    if dt is DateType.daily:
        return True
    if dt is DateType.weekly:
        return dates.is_sunday(reference_date)
    if dt is DateType.monthly:
        return dates.is_last_day_of_month(reference_date)
    if dt is DateType.by_date:
        return goal.target_date is not None and reference_date == goal.target_date
    if dt is DateType.date_range:
        return goal.end_date is not None and reference_date == goal.end_date
    return False


def resolve_window(goal: Goal, reference_date: date, today: date) -> GoalWindow:
    """Inclusive aggregation window for `goal` as seen on `reference_date`.

    One-shot goals clamp the upper bound to `today` (no future entries exist
    yet); the boundary check still uses the nominal target/end date.
    Missing dates (including created_at on a recurring goal) yield an empty
    window, which aggregates to zero days.
    """
    dt = date_type_of(goal)
    boundary = is_evaluation_boundary(goal, reference_date)

    if dt in RECURRING_DATE_TYPES and goal.created_at is None:
        return GoalWindow.empty(reference_date, boundary)

    if dt is DateType.daily:
        return GoalWindow(reference_date, reference_date, boundary)

    if dt is DateType.weekly:
        return GoalWindow(dates.week_start(reference_date), dates.week_end(reference_date), boundary)

    if dt is DateType.monthly:
        return GoalWindow(dates.month_start(reference_date), dates.month_end(reference_date), boundary)

    if dt is DateType.by_date:
        if goal.created_at is None or goal.target_date is None:
            return GoalWindow.empty(reference_date, boundary)
        return GoalWindow(goal.created_at, min(today, goal.target_date), boundary)

    if dt is DateType.date_range:
        if goal.start_date is None or goal.end_date is None:
            return GoalWindow.empty(reference_date, boundary)
        return GoalWindow(goal.start_date, min(today, goal.end_date), boundary)

    logger.warning("Goal %s has unrecognized date_type %r", goal.id, goal.date_type)
    return GoalWindow.empty(reference_date)


def nominal_period(goal: Goal, on_date: date) -> tuple[date, date] | None:
    """Full, unclamped period containing `on_date`, or None when outside it.

    Used for achievement bookkeeping, where the cycle is keyed by its
    nominal bounds rather than by how much of it has elapsed.
    """
    dt = date_type_of(goal)
    if dt is DateType.daily:
        return on_date, on_date
    if dt is DateType.weekly:
        return dates.week_start(on_date), dates.week_end(on_date)
    if dt is DateType.monthly:
        return dates.month_start(on_date), dates.month_end(on_date)
    if dt is DateType.by_date:
        if goal.created_at is None or goal.target_date is None or on_date > goal.target_date:
            return None
        return goal.created_at, goal.target_date
    if dt is DateType.date_range:
        if goal.start_date is None or goal.end_date is None:
            return None
        if on_date < goal.start_date or on_date > goal.end_date:
            return None
        return goal.start_date, goal.end_date
    return None


def goal_deadline(goal: Goal) -> date | None:
    """Nominal deadline of a one-shot goal; None for recurring goals."""
    dt = date_type_of(goal)
    if dt is DateType.by_date:
        return goal.target_date
    if dt is DateType.date_range:
        return goal.end_date
    return None


def is_goal_expired(goal: Goal, today: date) -> bool:
    """True once `today` is past a one-shot goal's deadline.

    Always relative to `today`, never to the viewed date, so the goal's
    status does not depend on which day is on screen.
    """
    deadline = goal_deadline(goal)
    return deadline is not None and today > deadline


def days_remaining(goal: Goal, from_date: date) -> int | None:
    """Days from `from_date` until the goal's next evaluation date.

    daily -> 0; weekly -> until Sunday; monthly -> until month end;
    by_date / date_range -> until the target / end date. Never negative.
    None when the goal has no usable deadline.
    """
    dt = date_type_of(goal)
    if dt is DateType.daily:
        return 0
    if dt is DateType.weekly:
        target = dates.week_end(from_date)
    elif dt is DateType.monthly:
        target = dates.month_end(from_date)
    elif dt in (DateType.by_date, DateType.date_range):
        target = goal_deadline(goal)
        if target is None:
            return None
    else:
        return None
    return max(0, dates.days_between(from_date, target))
