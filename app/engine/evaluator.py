"""Goal evaluation: a resolved window, aggregated and then classified.

Pure projection of (goal, activity log, reference date, today). The caller
supplies one consistent log snapshot for a batch so a render pass agrees
with itself.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date

from app.config import settings
from app.engine import aggregator, classifier, periods, relevance
from app.engine.models import (
    ActivityLog,
    ActivityType,
    BoundaryMissPolicy,
    DateType,
    Goal,
    GoalEvaluation,
)


def _default_policy() -> BoundaryMissPolicy:
    return BoundaryMissPolicy(settings.boundary_miss_policy)


def evaluate_goal(
    goal: Goal,
    activity_type: ActivityType | None,
    activity_log: ActivityLog | None,
    reference_date: date,
    today: date,
    policy: BoundaryMissPolicy | None = None,
    majority_threshold: float | None = None,
) -> GoalEvaluation:
    window = periods.resolve_window(goal, reference_date, today)
    values = aggregator.aggregate_period(goal, activity_type, activity_log, window.start_date, window.end_date)

    ctx = classifier.ClassificationContext(
        goal=goal,
        activity_type=activity_type,
        window=window,
        values=values,
        today=today,
        policy=policy or _default_policy(),
        majority_threshold=(
            majority_threshold if majority_threshold is not None else settings.discrete_majority_threshold
        ),
    )
    status = classifier.classify(ctx)

    if periods.date_type_of(goal) is DateType.daily:
        # Daily goals show the day's raw logged value.
        logged = None
        if not window.is_empty:
            logged = aggregator.logged_value(activity_log, goal.activity_type_id, reference_date)
        effective = logged if logged is not None else 0.0
    else:
        effective = aggregator.effective_value(goal, activity_type, values)

    return GoalEvaluation(
        goal_id=goal.id,
        reference_date=reference_date,
        display_status=status,
        effective_value=effective,
        days_met_target=values.days_met_target,
        day_count=values.day_count,
        days_remaining=periods.days_remaining(goal, reference_date),
        is_evaluation_day=window.is_evaluation_boundary,
        uses_average_value=aggregator.uses_average_value(activity_type),
        window_start=window.start_date,
        window_end=window.end_date,
    )


def evaluate_goals_for_date(
    goals: Iterable[Goal],
    activity_types: Mapping[str, ActivityType],
    activity_log: ActivityLog | None,
    reference_date: date,
    today: date,
    policy: BoundaryMissPolicy | None = None,
) -> list[GoalEvaluation]:
    """Evaluate every goal relevant on `reference_date`, in input order."""
    return [
        evaluate_goal(
            goal,
            activity_types.get(goal.activity_type_id),
            activity_log,
            reference_date,
            today,
            policy=policy,
        )
        for goal in relevance.relevant_goals(goals, reference_date, today)
    ]
