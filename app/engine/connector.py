"""Database connector — read-only async access to goals, activity_types and activities.

Tables (see the app's migrations):
  goals: id, user_id, activity_type_id, name, target_value, icon, date_type,
         tracking_type, target_date, start_date, end_date, created_at
  activity_types: id, user_id, name, unit, is_negative, goal_type, ui_type,
                  button_options (JSONB), deleted
  activities: id, user_id, activity_type_id, date, value

Returns plain dict rows; conversion to engine models happens in loaders.
Empty results are empty lists, never an error.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Sequence

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession


def _rows(result: Any) -> list[dict[str, Any]]:
    columns = list(result.keys())
    return [dict(zip(columns, r)) for r in result.fetchall()]


async def fetch_goal_rows(
    session: AsyncSession,
    user_id: str | None = None,
) -> Sequence[dict[str, Any]]:
    query = (
        "SELECT id, activity_type_id, name, target_value, icon, date_type, "
        "tracking_type, target_date, start_date, end_date, created_at "
        "FROM goals"
    )
    params: dict[str, Any] = {}
    if user_id is not None:
        query += " WHERE user_id = :user_id"
        params["user_id"] = user_id
    query += " ORDER BY created_at"

    result = await session.execute(text(query), params)
    return _rows(result)


async def fetch_goal_row(
    session: AsyncSession,
    goal_id: str,
    user_id: str | None = None,
) -> dict[str, Any] | None:
    query = (
        "SELECT id, activity_type_id, name, target_value, icon, date_type, "
        "tracking_type, target_date, start_date, end_date, created_at "
        "FROM goals WHERE id = :goal_id"
    )
    params: dict[str, Any] = {"goal_id": goal_id}
    if user_id is not None:
        query += " AND user_id = :user_id"
        params["user_id"] = user_id

    result = await session.execute(text(query), params)
    rows = _rows(result)
    return rows[0] if rows else None


async def fetch_activity_type_rows(
    session: AsyncSession,
    user_id: str | None = None,
) -> Sequence[dict[str, Any]]:
    """All activity types, soft-deleted ones included, since goals may still reference them."""
    query = (
        "SELECT id, name, unit, is_negative, goal_type, ui_type, button_options "
        "FROM activity_types"
    )
    params: dict[str, Any] = {}
    if user_id is not None:
        query += " WHERE user_id = :user_id"
        params["user_id"] = user_id
    query += " ORDER BY display_order"

    result = await session.execute(text(query), params)
    return _rows(result)


async def fetch_activity_rows(
    session: AsyncSession,
    start: date,
    end: date,
    user_id: str | None = None,
    activity_type_ids: Sequence[str] | None = None,
) -> Sequence[dict[str, Any]]:
    """Activities with date in [start, end] (inclusive)."""
    if start > end:
        return []
    if activity_type_ids is not None and not activity_type_ids:
        return []

    query = (
        "SELECT date, activity_type_id, value "
        "FROM activities "
        "WHERE date >= :start AND date <= :end"
    )
    params: dict[str, Any] = {"start": start, "end": end}
    if user_id is not None:
        query += " AND user_id = :user_id"
        params["user_id"] = user_id
    if activity_type_ids is not None:
        query += " AND activity_type_id = ANY(:type_ids)"
        params["type_ids"] = list(activity_type_ids)
    query += " ORDER BY date"

    result = await session.execute(text(query), params)
    return _rows(result)
