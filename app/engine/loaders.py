"""Row -> model conversion at the data-loading boundary.

Storage rows carry two generations of trend fields (`is_negative` and
`goal_type`) and UI-oriented type names. Both are resolved here, once, so
the engine only ever sees a `Trend` and a `ValueShape`.
Malformed rows degrade to defaults; nothing here raises.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from app.engine.dates import parse_date
from app.engine.models import (
    ActivityLog,
    ActivityType,
    DiscreteOption,
    Goal,
    TrackingType,
    Trend,
    ValueShape,
)

logger = logging.getLogger(__name__)

GOAL_TYPE_TRENDS: dict[str, Trend] = {
    "positive": Trend.more_is_better,
    "negative": Trend.less_is_better,
    "neutral": Trend.exact_match,
}

UI_TYPE_SHAPES: dict[str, ValueShape] = {
    "increment": ValueShape.continuous_increment,
    "fixedValue": ValueShape.continuous_increment,  # logs a constant amount, summed like increments
    "slider": ValueShape.continuous_slider,
    "buttonGroup": ValueShape.discrete_options,
    "toggle": ValueShape.discrete_toggle,
}

TOGGLE_OPTIONS = (DiscreteOption(label="No", value=0), DiscreteOption(label="Yes", value=1))


def resolve_trend(goal_type: str | None, is_negative: bool | None) -> Trend:
    """`goal_type` wins; otherwise the legacy `is_negative` flag; otherwise exact-match."""
    if goal_type:
        trend = GOAL_TYPE_TRENDS.get(goal_type)
        if trend is not None:
            return trend
        logger.warning("Unknown goal_type %r on activity type; falling back to is_negative", goal_type)
    if is_negative is True:
        return Trend.less_is_better
    if is_negative is False:
        return Trend.more_is_better
    return Trend.exact_match


def resolve_shape(ui_type: str | None) -> ValueShape:
    shape = UI_TYPE_SHAPES.get(ui_type or "")
    if shape is None:
        logger.warning("Unknown ui_type %r; treating as increment", ui_type)
        return ValueShape.continuous_increment
    return shape


def _to_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    try:
        return float(value)  # Decimal from numeric columns
    except (TypeError, ValueError):
        return None


def parse_options(raw: Any) -> list[DiscreteOption]:
    """Parse a button_options JSONB payload (list of {label, value}), skipping bad items."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return []
    if not isinstance(raw, list):
        return []
    options: list[DiscreteOption] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        value = _to_float(item.get("value"))
        if value is None:
            continue
        options.append(DiscreteOption(label=str(item.get("label") or ""), value=value))
    return options


def activity_type_from_row(row: dict[str, Any]) -> ActivityType:
    shape = resolve_shape(row.get("ui_type"))
    options = parse_options(row.get("button_options"))
    if shape is ValueShape.discrete_toggle and not options:
        options = list(TOGGLE_OPTIONS)
    return ActivityType(
        id=str(row.get("id") or ""),
        name=row.get("name") or "",
        shape=shape,
        trend=resolve_trend(row.get("goal_type"), row.get("is_negative")),
        options=options,
        unit=row.get("unit"),
    )


def activity_types_by_id(rows: Iterable[dict[str, Any]]) -> dict[str, ActivityType]:
    types = (activity_type_from_row(r) for r in rows)
    return {t.id: t for t in types if t.id}


def goal_from_row(row: dict[str, Any]) -> Goal | None:
    """Build a Goal from a goals row. None when the row lacks an id or a target."""
    goal_id = row.get("id")
    target = _to_float(row.get("target_value"))
    if goal_id is None or target is None:
        logger.warning("Skipping goal row without id/target_value: %r", goal_id)
        return None
    tracking = (str(row.get("tracking_type") or "").strip().lower()) or TrackingType.average.value
    return Goal(
        id=str(goal_id),
        activity_type_id=str(row.get("activity_type_id") or ""),
        name=row.get("name") or "",
        target_value=target,
        date_type=str(row.get("date_type") or ""),
        tracking_type=tracking,
        created_at=parse_date(row.get("created_at")),
        target_date=parse_date(row.get("target_date")),
        start_date=parse_date(row.get("start_date")),
        end_date=parse_date(row.get("end_date")),
        icon=row.get("icon") or "target",
    )


def goals_from_rows(rows: Iterable[dict[str, Any]]) -> list[Goal]:
    goals = (goal_from_row(r) for r in rows)
    return [g for g in goals if g is not None]


def activity_log_from_rows(rows: Iterable[dict[str, Any]]) -> ActivityLog:
    """Fold activities rows into date -> {activity_type_id: value}; later rows overwrite."""
    log: ActivityLog = {}
    for row in rows:
        day = parse_date(row.get("date"))
        type_id = row.get("activity_type_id")
        value = _to_float(row.get("value"))
        if day is None or not type_id or value is None:
            continue
        log.setdefault(day, {})[str(type_id)] = value
    return log
