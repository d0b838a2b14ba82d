"""Goal engine contract — Pydantic v2 models and engine result records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from pydantic import BaseModel, Field


class ValueShape(str, Enum):
    continuous_increment = "continuous-increment"
    continuous_slider = "continuous-slider"
    discrete_options = "discrete-options"
    discrete_toggle = "discrete-toggle"


DISCRETE_SHAPES = frozenset({ValueShape.discrete_options, ValueShape.discrete_toggle})


class Trend(str, Enum):
    more_is_better = "more-is-better"
    less_is_better = "less-is-better"
    exact_match = "exact-match"


class DateType(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    by_date = "by_date"
    date_range = "date_range"


RECURRING_DATE_TYPES = frozenset({DateType.daily, DateType.weekly, DateType.monthly})
ONE_SHOT_DATE_TYPES = frozenset({DateType.by_date, DateType.date_range})


class TrackingType(str, Enum):
    average = "average"
    absolute = "absolute"
    sum = "sum"


class DisplayStatus(str, Enum):
    in_progress = "in_progress"
    evaluation_day = "evaluation_day"
    met = "met"
    missed = "missed"


class BoundaryMissPolicy(str, Enum):
    immediate = "immediate"
    deferred_to_expiry = "deferred-to-expiry"


GOAL_ICONS: tuple[str, ...] = (
    "target",
    "fitness",
    "health",
    "nutrition",
    "mindfulness",
    "hydration",
    "sleep",
    "strength",
    "cardio",
    "habit",
    "milestone",
    "challenge",
)


# Date-keyed entries: date -> {activity_type_id -> numeric value}
ActivityLog = dict[date, dict[str, float]]


class DiscreteOption(BaseModel):
    label: str
    value: float


class ActivityType(BaseModel):
    """A tracked behavior, with its trend already resolved from legacy fields."""

    id: str
    name: str = ""
    shape: ValueShape = ValueShape.continuous_increment
    trend: Trend = Trend.more_is_better
    options: list[DiscreteOption] = Field(default_factory=list)
    unit: str | None = None

    @property
    def is_discrete(self) -> bool:
        return self.shape in DISCRETE_SHAPES


class Goal(BaseModel):
    """A user goal.

    date_type / tracking_type stay plain strings so unrecognized values
    reach the engine, which degrades to in_progress instead of rejecting.
    """

    id: str
    activity_type_id: str
    name: str = ""
    target_value: float
    date_type: str = DateType.daily.value
    tracking_type: str = TrackingType.average.value
    created_at: date | None = None
    target_date: date | None = None
    start_date: date | None = None
    end_date: date | None = None
    icon: str = "target"


class ActivityEntry(BaseModel):
    date: date
    activity_type_id: str
    value: float


@dataclass(frozen=True, slots=True)
class GoalWindow:
    """Inclusive aggregation window for one evaluation cycle."""

    start_date: date
    end_date: date
    is_evaluation_boundary: bool = False

    @property
    def is_empty(self) -> bool:
        return self.start_date > self.end_date

    @classmethod
    def empty(cls, reference_date: date, is_evaluation_boundary: bool = False) -> GoalWindow:
        return cls(
            start_date=reference_date,
            end_date=reference_date - timedelta(days=1),
            is_evaluation_boundary=is_evaluation_boundary,
        )


@dataclass(frozen=True, slots=True)
class PeriodValues:
    sum: float = 0.0
    day_count: int = 0
    average: float = 0.0
    days_met_target: int = 0
    all_days_met: bool = False


class GoalEvaluation(BaseModel):
    """Engine output for one (goal, reference_date) pair. Never persisted."""

    goal_id: str
    reference_date: date
    display_status: DisplayStatus
    effective_value: float = 0.0
    days_met_target: int = 0
    day_count: int = 0
    days_remaining: int | None = None
    is_evaluation_day: bool = False
    uses_average_value: bool = False
    window_start: date | None = None
    window_end: date | None = None


class Achievement(BaseModel):
    goal_id: str
    period_start: date
    period_end: date
    achieved_value: int
    target_value: float


class EvaluateRequest(BaseModel):
    """Stateless evaluation payload: everything the engine needs, inline."""

    goal: Goal
    activity_type: ActivityType | None = None
    entries: list[ActivityEntry] = Field(default_factory=list)
    reference_date: date
    today: date | None = None
    boundary_miss_policy: BoundaryMissPolicy | None = None

    def activity_log(self) -> ActivityLog:
        log: ActivityLog = {}
        for entry in self.entries:
            log.setdefault(entry.date, {})[entry.activity_type_id] = entry.value
        return log
