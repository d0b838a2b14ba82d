"""Tests for the status rule table."""

from __future__ import annotations

from datetime import date

from app.engine.aggregator import aggregate_period
from app.engine.classifier import (
    RULES,
    ClassificationContext,
    Rule,
    classify,
    matching_rule,
    meets_target,
)
from app.engine.models import (
    BoundaryMissPolicy,
    DisplayStatus,
    PeriodValues,
    Trend,
    ValueShape,
)
from app.engine.periods import resolve_window
from tests.conftest import make_goal, make_log, make_type

TODAY = date(2026, 2, 20)


def _ctx(goal, atype, log, reference_date, today=TODAY, policy=BoundaryMissPolicy.deferred_to_expiry):
    window = resolve_window(goal, reference_date, today)
    values = aggregate_period(goal, atype, log, window.start_date, window.end_date)
    return ClassificationContext(
        goal=goal, activity_type=atype, window=window, values=values, today=today, policy=policy
    )


class TestRuleTable:
    def test_rule_names_unique(self):
        names = [r.name for r in RULES]
        assert len(names) == len(set(names))

    def test_last_rule_is_catch_all(self):
        assert RULES[-1].name == "boundary_unmet"
        assert RULES[-1].status == DisplayStatus.evaluation_day

    def test_fallback_uses_given_table(self):
        goal = make_goal(date_type="weekly", target_value=10)
        ctx = _ctx(goal, make_type(), {}, date(2026, 2, 11))
        rules = (
            Rule("never", lambda c: False, DisplayStatus.met),
            Rule("fallback", lambda c: False, DisplayStatus.missed),
        )
        assert matching_rule(ctx, rules).name == "fallback"
        assert classify(ctx, rules) == DisplayStatus.missed


class TestMeetsTarget:
    def test_empty_never_met(self):
        atype = make_type(ValueShape.continuous_increment, Trend.less_is_better)
        assert meets_target(make_goal(target_value=5), atype, PeriodValues()) is False

    def test_majority_is_strict(self):
        atype = make_type(ValueShape.discrete_options, Trend.exact_match)
        half = PeriodValues(sum=2, day_count=4, average=0.5, days_met_target=2)
        assert meets_target(make_goal(tracking_type="average"), atype, half) is False

    def test_absolute_needs_all_days(self):
        atype = make_type(ValueShape.discrete_options, Trend.exact_match)
        all_met = PeriodValues(sum=3, day_count=3, average=1, days_met_target=3, all_days_met=True)
        assert meets_target(make_goal(tracking_type="absolute"), atype, all_met) is True

    def test_slider_uses_average(self):
        atype = make_type(ValueShape.continuous_slider, Trend.less_is_better)
        v = PeriodValues(sum=30, day_count=10, average=3, days_met_target=5)
        assert meets_target(make_goal(target_value=4), atype, v) is True

    def test_sum_tracking_on_discrete_is_at_least(self):
        atype = make_type(ValueShape.discrete_toggle, Trend.exact_match)
        v = PeriodValues(sum=5, day_count=6, average=5 / 6, days_met_target=5)
        assert meets_target(make_goal(tracking_type="sum", target_value=4), atype, v) is True


class TestBudgetExceeded:
    def test_missed_before_boundary(self):
        goal = make_goal(
            date_type="date_range",
            target_value=5,
            start_date=date(2026, 2, 10),
            end_date=date(2026, 2, 19),
        )
        atype = make_type(ValueShape.continuous_increment, Trend.less_is_better)
        log = make_log({date(2026, 2, 10): 2, date(2026, 2, 11): 2, date(2026, 2, 12): 2})
        ctx = _ctx(goal, atype, log, date(2026, 2, 12), today=date(2026, 2, 12))
        assert matching_rule(ctx).name == "budget_exceeded"
        assert classify(ctx) == DisplayStatus.missed

    def test_slider_not_short_circuited(self):
        goal = make_goal(date_type="weekly", target_value=5)
        atype = make_type(ValueShape.continuous_slider, Trend.less_is_better)
        log = make_log({date(2026, 2, 9): 9, date(2026, 2, 10): 9})
        assert classify(_ctx(goal, atype, log, date(2026, 2, 10))) == DisplayStatus.in_progress

    def test_missing_type_excluded(self):
        goal = make_goal(date_type="weekly", target_value=5)
        log = make_log({date(2026, 2, 9): 9})
        assert matching_rule(_ctx(goal, None, log, date(2026, 2, 10))).name == "pending"


class TestAbsoluteMismatch:
    def test_one_mismatch_misses_immediately(self):
        goal = make_goal(date_type="monthly", tracking_type="absolute", target_value=1)
        atype = make_type(ValueShape.discrete_toggle, Trend.more_is_better)
        log = make_log({date(2026, 2, 2): 1, date(2026, 2, 3): 0})
        ctx = _ctx(goal, atype, log, date(2026, 2, 3))
        assert matching_rule(ctx).name == "absolute_mismatch"

    def test_no_days_logged_not_missed(self):
        goal = make_goal(date_type="monthly", tracking_type="absolute", target_value=1)
        atype = make_type(ValueShape.discrete_toggle)
        assert classify(_ctx(goal, atype, {}, date(2026, 2, 3))) == DisplayStatus.in_progress

    def test_average_tracking_tolerates_mismatch(self):
        goal = make_goal(date_type="monthly", tracking_type="average", target_value=1)
        atype = make_type(ValueShape.discrete_toggle)
        log = make_log({date(2026, 2, 2): 1, date(2026, 2, 3): 0})
        assert classify(_ctx(goal, atype, log, date(2026, 2, 3))) == DisplayStatus.in_progress


class TestExpired:
    def test_unmet_expired_goal_missed(self):
        goal = make_goal(
            date_type="by_date", target_value=10, created_at=date(2026, 2, 1), target_date=date(2026, 2, 19)
        )
        log = make_log({date(2026, 2, 5): 3})
        ctx = _ctx(goal, make_type(), log, date(2026, 2, 10))
        assert matching_rule(ctx).name == "expired"
        assert classify(ctx) == DisplayStatus.missed

    def test_met_goal_stays_met_after_deadline(self):
        goal = make_goal(
            date_type="by_date", target_value=10, created_at=date(2026, 2, 1), target_date=date(2026, 2, 19)
        )
        log = make_log({date(2026, 2, 5): 6, date(2026, 2, 6): 6})
        assert classify(_ctx(goal, make_type(), log, date(2026, 2, 10))) == DisplayStatus.met


class TestEarlyMet:
    def test_by_date_more_is_better_met_early(self):
        goal = make_goal(
            date_type="by_date", target_value=10, created_at=date(2026, 2, 1), target_date=date(2026, 3, 1)
        )
        log = make_log({date(2026, 2, 5): 6, date(2026, 2, 6): 6})
        ctx = _ctx(goal, make_type(), log, date(2026, 2, 10))
        assert matching_rule(ctx).name == "early_met"

    def test_weekly_more_is_better_waits_for_sunday(self):
        goal = make_goal(date_type="weekly", target_value=10)
        log = make_log({date(2026, 2, 9): 20})
        assert classify(_ctx(goal, make_type(), log, date(2026, 2, 11))) == DisplayStatus.in_progress
        assert classify(_ctx(goal, make_type(), log, date(2026, 2, 15))) == DisplayStatus.met

    def test_less_is_better_by_date_waits_for_boundary(self):
        goal = make_goal(
            date_type="by_date", target_value=10, created_at=date(2026, 2, 1), target_date=date(2026, 3, 1)
        )
        atype = make_type(ValueShape.continuous_increment, Trend.less_is_better)
        log = make_log({date(2026, 2, 5): 3})
        assert classify(_ctx(goal, atype, log, date(2026, 2, 10))) == DisplayStatus.in_progress

    def test_exact_match_boundary_only(self):
        goal = make_goal(
            date_type="date_range",
            target_value=4,
            start_date=date(2026, 2, 10),
            end_date=date(2026, 2, 25),
        )
        atype = make_type(ValueShape.continuous_increment, Trend.exact_match)
        log = make_log({date(2026, 2, 11): 4})
        assert classify(_ctx(goal, atype, log, date(2026, 2, 12))) == DisplayStatus.in_progress

    def test_discrete_absolute_never_early(self):
        goal = make_goal(
            date_type="date_range",
            tracking_type="absolute",
            target_value=1,
            start_date=date(2026, 2, 10),
            end_date=date(2026, 2, 25),
        )
        atype = make_type(ValueShape.discrete_toggle)
        log = make_log({date(2026, 2, 11): 1})
        assert classify(_ctx(goal, atype, log, date(2026, 2, 12))) == DisplayStatus.in_progress


class TestBoundaryOutcome:
    def _weekly_unmet(self, policy):
        goal = make_goal(date_type="weekly", target_value=10)
        log = make_log({date(2026, 2, 9): 2})
        return classify(_ctx(goal, make_type(), log, date(2026, 2, 15), policy=policy))

    def test_deferred_policy_labels_evaluation_day(self):
        assert self._weekly_unmet(BoundaryMissPolicy.deferred_to_expiry) == DisplayStatus.evaluation_day

    def test_immediate_policy_misses(self):
        assert self._weekly_unmet(BoundaryMissPolicy.immediate) == DisplayStatus.missed

    def test_daily_never_evaluation_day(self):
        goal = make_goal(date_type="daily", target_value=10)
        log = make_log({date(2026, 2, 11): 2})
        ctx = _ctx(goal, make_type(), log, date(2026, 2, 11))
        assert matching_rule(ctx).name == "boundary_unmet_daily"
        assert classify(ctx) == DisplayStatus.in_progress

    def test_boundary_met(self):
        goal = make_goal(date_type="monthly", target_value=3)
        atype = make_type(ValueShape.continuous_slider, Trend.less_is_better)
        log = make_log({date(2026, 2, 3): 2, date(2026, 2, 20): 4})
        ctx = _ctx(goal, atype, log, date(2026, 2, 28))
        assert matching_rule(ctx).name == "boundary_met"


class TestUnrecognized:
    def test_unknown_date_type(self, caplog):
        goal = make_goal(date_type="fortnightly", target_value=0)
        log = make_log({date(2026, 2, 11): 5})
        with caplog.at_level("WARNING"):
            status = classify(_ctx(goal, make_type(), log, date(2026, 2, 11)))
        assert status == DisplayStatus.in_progress
        assert "unrecognized" in caplog.text

    def test_unknown_tracking_type(self):
        goal = make_goal(date_type="daily", tracking_type="median", target_value=0)
        log = make_log({date(2026, 2, 11): 5})
        assert classify(_ctx(goal, make_type(), log, date(2026, 2, 11))) == DisplayStatus.in_progress
