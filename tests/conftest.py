"""Root conftest for all tests.

This file makes shared fixtures available across all test modules.
"""

import datetime as dt

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from runcast.core.clock import FixedClock
from runcast.db.models import Base
from runcast.db.session import make_session_factory
from runcast.weather.types import WeatherDay

# Monday, 09:00 UTC
FIXED_NOW = dt.datetime(2026, 3, 2, 9, 0, tzinfo=dt.timezone.utc)


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every session in one test.

    StaticPool keeps a single connection so all sessions see the same
    in-memory database.
    """
    test_engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(test_engine)
    try:
        yield test_engine
    finally:
        test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Transactional session factory (commit on success) bound to the test engine."""
    return make_session_factory(engine)


@pytest.fixture
def db_session(engine):
    """Plain session for arranging rows. Call `db_session.commit()` after adding.

    Usage:
        def test_something(db_session):
            db_session.add(Run(...))
            db_session.commit()
    """
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock(FIXED_NOW)


@pytest.fixture
def today(fixed_clock) -> dt.date:
    return fixed_clock.today()


@pytest.fixture
def make_day():
    """Factory for WeatherDay with mild, dry defaults (15°C, 0% precip, 10 km/h wind)."""

    def _make_day(day: dt.date, location: str = "Balbriggan, IE", **overrides) -> WeatherDay:
        values = {
            "location": location,
            "date": day,
            "condition": "Clear",
            "description": "Clear",
            "temperature": 15.0,
            "feels_like": 14.0,
            "precipitation": 0.0,
            "humidity": 70.0,
            "wind_speed": 10.0,
            "wind_direction": 180.0,
        }
        values.update(overrides)
        return WeatherDay(**values)

    return _make_day


@pytest.fixture
def clear_week(today, make_day) -> list[WeatherDay]:
    """Seven clear days starting today."""
    return [make_day(today + dt.timedelta(days=offset)) for offset in range(7)]
