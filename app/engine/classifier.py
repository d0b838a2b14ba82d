"""Status classification — an ordered rule table, first match wins.

Each evaluation is classified from scratch; there is no stored state and
the previously displayed status never matters. New goal/tracking
combinations are added as rules rather than as new branches.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from app.engine import aggregator, periods
from app.engine.models import (
    ActivityType,
    BoundaryMissPolicy,
    DateType,
    DisplayStatus,
    Goal,
    GoalWindow,
    ONE_SHOT_DATE_TYPES,
    PeriodValues,
    TrackingType,
    Trend,
    ValueShape,
)

logger = logging.getLogger(__name__)

DEFAULT_MAJORITY_THRESHOLD = 0.5


@dataclass(frozen=True, slots=True)
class ClassificationContext:
    goal: Goal
    activity_type: ActivityType | None
    window: GoalWindow
    values: PeriodValues
    today: date
    policy: BoundaryMissPolicy = BoundaryMissPolicy.deferred_to_expiry
    majority_threshold: float = DEFAULT_MAJORITY_THRESHOLD

    @property
    def date_type(self) -> DateType | None:
        return periods.date_type_of(self.goal)

    @property
    def tracking_type(self) -> TrackingType | None:
        try:
            return TrackingType(self.goal.tracking_type)
        except ValueError:
            return None

    @property
    def trend(self) -> Trend:
        return aggregator.trend_of(self.activity_type)

    @property
    def discrete(self) -> bool:
        return aggregator.is_discrete(self.activity_type)

    @property
    def at_boundary(self) -> bool:
        return self.window.is_evaluation_boundary


def meets_target(
    goal: Goal,
    activity_type: ActivityType | None,
    values: PeriodValues,
    majority_threshold: float = DEFAULT_MAJORITY_THRESHOLD,
) -> bool:
    """Terminal comparison for a window. Never true for an empty window.

    - tracking "sum": running sum against the trend (discrete types use >=)
    - discrete, absolute: every logged day matched
    - discrete, average: strict majority of logged days matched
    - slider: average against the trend
    - increment: running sum against the trend
    """
    if values.day_count <= 0:
        return False

    trend = aggregator.trend_of(activity_type)
    discrete = aggregator.is_discrete(activity_type)
    tracking = goal.tracking_type

    if tracking == TrackingType.sum.value:
        return aggregator.compare(values.sum, goal.target_value, Trend.more_is_better if discrete else trend)

    if discrete:
        if tracking == TrackingType.absolute.value:
            return values.all_days_met
        return aggregator.match_ratio(values) > majority_threshold

    return aggregator.compare(aggregator.effective_value(goal, activity_type, values), goal.target_value, trend)


def _is_met(ctx: ClassificationContext) -> bool:
    return meets_target(ctx.goal, ctx.activity_type, ctx.values, ctx.majority_threshold)


def _unrecognized(ctx: ClassificationContext) -> bool:
    return ctx.date_type is None or ctx.tracking_type is None


def _budget_exceeded(ctx: ClassificationContext) -> bool:
    # Sum-based "no more than N" budgets cannot recover once exceeded.
    if ctx.activity_type is None or ctx.trend is not Trend.less_is_better:
        return False
    sum_based = ctx.activity_type.shape is ValueShape.continuous_increment or (
        ctx.tracking_type is TrackingType.sum and not ctx.discrete
    )
    return sum_based and ctx.values.sum > ctx.goal.target_value


def _absolute_mismatch(ctx: ClassificationContext) -> bool:
    return (
        ctx.discrete
        and ctx.tracking_type is TrackingType.absolute
        and ctx.values.day_count > 0
        and not ctx.values.all_days_met
    )


def _expired(ctx: ClassificationContext) -> bool:
    return periods.is_goal_expired(ctx.goal, ctx.today) and not _is_met(ctx)


def _settles_early(ctx: ClassificationContext) -> bool:
    """One-shot goals whose progress can only grow may report met early."""
    if ctx.date_type not in ONE_SHOT_DATE_TYPES:
        return False
    if ctx.tracking_type is TrackingType.sum:
        return ctx.discrete or ctx.trend is Trend.more_is_better
    if ctx.discrete:
        return ctx.tracking_type is TrackingType.average
    return ctx.trend is Trend.more_is_better


def _early_met(ctx: ClassificationContext) -> bool:
    return _settles_early(ctx) and _is_met(ctx)


def _pending(ctx: ClassificationContext) -> bool:
    return not ctx.at_boundary


def _boundary_met(ctx: ClassificationContext) -> bool:
    return ctx.at_boundary and _is_met(ctx)


def _boundary_unmet_immediate(ctx: ClassificationContext) -> bool:
    return ctx.at_boundary and ctx.policy is BoundaryMissPolicy.immediate


def _boundary_unmet_daily(ctx: ClassificationContext) -> bool:
    # Daily goals have no pending "evaluation day" label.
    return ctx.at_boundary and ctx.date_type is DateType.daily


def _always(ctx: ClassificationContext) -> bool:
    return True


@dataclass(frozen=True, slots=True)
class Rule:
    name: str
    applies: Callable[[ClassificationContext], bool]
    status: DisplayStatus


RULES: tuple[Rule, ...] = (
    Rule("unrecognized", _unrecognized, DisplayStatus.in_progress),
    Rule("budget_exceeded", _budget_exceeded, DisplayStatus.missed),
    Rule("absolute_mismatch", _absolute_mismatch, DisplayStatus.missed),
    Rule("expired", _expired, DisplayStatus.missed),
    Rule("early_met", _early_met, DisplayStatus.met),
    Rule("pending", _pending, DisplayStatus.in_progress),
    Rule("boundary_met", _boundary_met, DisplayStatus.met),
    Rule("boundary_unmet_immediate", _boundary_unmet_immediate, DisplayStatus.missed),
    Rule("boundary_unmet_daily", _boundary_unmet_daily, DisplayStatus.in_progress),
    Rule("boundary_unmet", _always, DisplayStatus.evaluation_day),
)


def matching_rule(ctx: ClassificationContext, rules: tuple[Rule, ...] = RULES) -> Rule:
    for rule in rules:
        if rule.applies(ctx):
            return rule
    return rules[-1]


def classify(ctx: ClassificationContext, rules: tuple[Rule, ...] = RULES) -> DisplayStatus:
    rule = matching_rule(ctx, rules)
    if rule.name == "unrecognized":
        logger.warning(
            "Goal %s has unrecognized date_type=%r / tracking_type=%r; reporting in_progress",
            ctx.goal.id,
            ctx.goal.date_type,
            ctx.goal.tracking_type,
        )
    return rule.status
