"""Engine HTTP router — evaluations, indicators and achievements per goal.

The wall clock is read here, once per request, and passed into the engine
as `today`.
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import verify_api_key
from app.config import settings
from app.db import get_session
from app.engine import achievements, connector, evaluator, loaders, periods, relevance
from app.engine.dates import today_in
from app.engine.models import (
    Achievement,
    ActivityLog,
    BoundaryMissPolicy,
    EvaluateRequest,
    Goal,
    GoalEvaluation,
)
from app.engine.validation import validate_goal_dates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/engine", tags=["goals"])


def _parse_date(value: str | None, name: str, default: date) -> date:
    if value is None:
        return default
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid date for '{name}': {value}")


def _today(tz: str | None) -> date:
    tz_name = tz or settings.default_tz
    try:
        return today_in(tz_name)
    except (KeyError, ValueError):
        raise HTTPException(status_code=422, detail=f"Unknown timezone: {tz_name}")


async def _load_activity_log(
    session: AsyncSession,
    goals: list[Goal],
    reference_date: date,
    today: date,
    user_id: str | None,
) -> ActivityLog:
    """Fetch one activity snapshot covering every goal's window for this date."""
    windows = [periods.resolve_window(g, reference_date, today) for g in goals]
    windows = [w for w in windows if not w.is_empty]
    if not windows:
        return {}
    start = min(w.start_date for w in windows)
    end = max(w.end_date for w in windows)
    type_ids = sorted({g.activity_type_id for g in goals})
    rows = await connector.fetch_activity_rows(session, start, end, user_id, type_ids)
    return loaders.activity_log_from_rows(rows)


# ---------------------------------------------------------------------------
# /engine/goals/evaluations
# ---------------------------------------------------------------------------


@router.get("/goals/evaluations", response_model=list[GoalEvaluation])
async def goal_evaluations(
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
    on_date: str | None = Query(default=None, alias="date", description="Reference date (YYYY-MM-DD, default: today)"),
    user_id: str | None = Query(default=None, description="Filter by user (omit for all users)"),
    tz: str | None = Query(default=None, description="Timezone used to determine today"),
    policy: BoundaryMissPolicy | None = Query(default=None, description="Override boundary miss policy"),
) -> list[GoalEvaluation]:
    today = _today(tz)
    reference_date = _parse_date(on_date, "date", today)

    goals = loaders.goals_from_rows(await connector.fetch_goal_rows(session, user_id))
    relevant = relevance.relevant_goals(goals, reference_date, today)
    if not relevant:
        return []

    activity_types = loaders.activity_types_by_id(await connector.fetch_activity_type_rows(session, user_id))
    activity_log = await _load_activity_log(session, relevant, reference_date, today, user_id)

    results = evaluator.evaluate_goals_for_date(
        relevant, activity_types, activity_log, reference_date, today, policy=policy
    )
    logger.info("Evaluated %d goal(s) for %s", len(results), reference_date.isoformat())
    return results


# ---------------------------------------------------------------------------
# /engine/goals/evaluate (stateless)
# ---------------------------------------------------------------------------


@router.post("/goals/evaluate", response_model=GoalEvaluation)
async def evaluate_payload(
    payload: EvaluateRequest,
    _: str = Depends(verify_api_key),
    tz: str | None = Query(default=None, description="Timezone used when 'today' is omitted"),
) -> GoalEvaluation:
    errors = validate_goal_dates(payload.goal)
    if errors:
        raise HTTPException(status_code=422, detail=errors)

    today = payload.today or _today(tz)
    return evaluator.evaluate_goal(
        payload.goal,
        payload.activity_type,
        payload.activity_log(),
        payload.reference_date,
        today,
        policy=payload.boundary_miss_policy,
    )


# ---------------------------------------------------------------------------
# /engine/goals/indicators
# ---------------------------------------------------------------------------


@router.get("/goals/indicators")
async def goal_indicators(
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
    on_date: str = Query(..., alias="date", description="Date (YYYY-MM-DD)"),
    user_id: str | None = Query(default=None, description="Filter by user (omit for all users)"),
) -> list[dict]:
    reference_date = _parse_date(on_date, "date", date.min)
    goals = loaders.goals_from_rows(await connector.fetch_goal_rows(session, user_id))
    return [
        {"id": g.id, "name": g.name, "date_type": g.date_type}
        for g in relevance.goals_with_indicator(goals, reference_date)
    ]


# ---------------------------------------------------------------------------
# /engine/goals/{goal_id}/achievement
# ---------------------------------------------------------------------------


@router.get("/goals/{goal_id}/achievement")
async def goal_achievement(
    goal_id: str,
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
    on_date: str = Query(..., alias="date", description="Any date inside the period (YYYY-MM-DD)"),
    user_id: str | None = Query(default=None, description="Owner of the goal"),
) -> dict:
    activity_date = _parse_date(on_date, "date", date.min)

    row = await connector.fetch_goal_row(session, goal_id, user_id)
    goal = loaders.goal_from_row(row) if row is not None else None
    if goal is None:
        raise HTTPException(status_code=404, detail=f"Unknown goal: {goal_id}")

    achievement: Achievement | None = None
    period = periods.nominal_period(goal, activity_date)
    if period is not None:
        activity_types = loaders.activity_types_by_id(await connector.fetch_activity_type_rows(session, user_id))
        rows = await connector.fetch_activity_rows(
            session, period[0], period[1], user_id, [goal.activity_type_id]
        )
        achievement = achievements.evaluate_achievement(
            goal,
            activity_types.get(goal.activity_type_id),
            loaders.activity_log_from_rows(rows),
            activity_date,
        )

    return {
        "goal_id": goal.id,
        "date": activity_date.isoformat(),
        "achievement": achievement.model_dump(mode="json") if achievement else None,
    }
