"""Shared fixtures for the test suite."""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from app.db import get_session
from app.engine.models import (
    ActivityLog,
    ActivityType,
    DiscreteOption,
    Goal,
    Trend,
    ValueShape,
)
from app.main import app


# ---------------------------------------------------------------------------
# Fake DB session (no real Postgres needed)
# ---------------------------------------------------------------------------

class FakeSession:
    """Minimal stand-in for AsyncSession; records every executed statement."""

    def __init__(self, rows: list[dict[str, Any]] | None = None):
        self._rows = rows or []
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def execute(self, stmt, params=None):
        self.calls.append((str(stmt), dict(params or {})))
        return FakeResult(self._rows)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        pass


class FakeResult:
    def __init__(self, rows: list[dict[str, Any]]):
        self._rows = rows
        self._keys = list(rows[0].keys()) if rows else []

    def keys(self):
        return self._keys

    def fetchall(self):
        return [tuple(r[k] for k in self._keys) for r in self._rows]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def fake_session():
    """Return a FakeSession with no rows (override _rows in tests if needed)."""
    return FakeSession()


@pytest.fixture()
def override_session(fake_session):
    """Override the FastAPI dependency so no real DB is needed."""
    async def _override():
        yield fake_session

    app.dependency_overrides[get_session] = _override
    yield fake_session
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_session):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

TYPE_ID = "type_1"


def make_goal(**overrides: Any) -> Goal:
    defaults: dict[str, Any] = dict(
        id="goal_1",
        activity_type_id=TYPE_ID,
        name="Test goal",
        target_value=1.0,
        date_type="daily",
        tracking_type="average",
        created_at=date(2026, 1, 1),
    )
    defaults.update(overrides)
    return Goal(**defaults)


def make_type(
    shape: ValueShape = ValueShape.continuous_increment,
    trend: Trend = Trend.more_is_better,
    **overrides: Any,
) -> ActivityType:
    defaults: dict[str, Any] = dict(id=TYPE_ID, name="Test type", shape=shape, trend=trend)
    if shape is ValueShape.discrete_toggle:
        defaults["options"] = [DiscreteOption(label="No", value=0), DiscreteOption(label="Yes", value=1)]
    defaults.update(overrides)
    return ActivityType(**defaults)


def make_log(values: dict[date, float], type_id: str = TYPE_ID) -> ActivityLog:
    """Build an ActivityLog with one activity type."""
    return {d: {type_id: v} for d, v in values.items()}
