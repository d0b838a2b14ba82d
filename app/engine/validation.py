"""Structural goal validation. Returns messages, never raises."""

from __future__ import annotations

from app.engine.models import DateType, GOAL_ICONS, Goal


def validate_goal_dates(goal: Goal) -> list[str]:
    """Only the checks that affect evaluation: the dates each date_type needs."""
    errors: list[str] = []

    if goal.date_type == DateType.by_date.value and goal.target_date is None:
        errors.append('Target date is required for "By Date" goals')

    if goal.date_type == DateType.date_range.value:
        if goal.start_date is None:
            errors.append('Start date is required for "Date Range" goals')
        if goal.end_date is None:
            errors.append('End date is required for "Date Range" goals')
        if goal.start_date and goal.end_date and goal.end_date < goal.start_date:
            errors.append("End date must be after start date")

    return errors


def validate_goal(goal: Goal) -> list[str]:
    """Full check used when a goal is created or edited."""
    errors: list[str] = []

    if not goal.name.strip():
        errors.append("Goal name is required")

    if not goal.activity_type_id:
        errors.append("Activity type is required")

    if goal.target_value < 0:
        errors.append("Target value cannot be negative")

    if goal.icon not in GOAL_ICONS:
        errors.append("Invalid icon selected")

    errors.extend(validate_goal_dates(goal))
    return errors
