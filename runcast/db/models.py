from __future__ import annotations

import datetime as dt
import uuid

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all database models."""


class WeatherCache(Base):
    """Cached daily forecast per location.

    Schema:
    - location: Location key as requested by the caller (e.g., "Balbriggan, IE")
    - date: Local calendar date of the forecast day
    - condition/description: WMO condition label
    - temperature, feels_like: Celsius
    - precipitation: Max precipitation probability (0-100)
    - humidity: Mean relative humidity (0-100)
    - wind_speed: km/h, wind_direction: degrees
    - cached_at / expires_at: naive UTC timestamps

    Constraints:
    - Unique constraint: (location, date), the upsert key
    - Freshness is checked at read time (expires_at > now); nothing evicts rows
    """

    __tablename__ = "weather_cache"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    location: Mapped[str] = mapped_column(String, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    condition: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False, default="")
    temperature: Mapped[float] = mapped_column(Float, nullable=False)
    feels_like: Mapped[float] = mapped_column(Float, nullable=False)
    precipitation: Mapped[float] = mapped_column(Float, nullable=False)
    humidity: Mapped[float] = mapped_column(Float, nullable=False)
    wind_speed: Mapped[float] = mapped_column(Float, nullable=False)
    wind_direction: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    cached_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    expires_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("location", "date", name="uq_weather_cache_location_date"),
        Index("idx_weather_cache_location_date", "location", "date"),
    )


class TrainingPlanWeek(Base):
    """One week of the training plan.

    Read-only reference data: the suggestion engine looks up the week that
    contains "today" for its long-run and weekly mileage targets (km).
    """

    __tablename__ = "training_plan_weeks"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    week_number: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    phase: Mapped[str] = mapped_column(String, nullable=False)  # Phase enum value
    week_start: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    week_end: Mapped[dt.date] = mapped_column(Date, nullable=False)
    long_run_target: Mapped[float] = mapped_column(Float, nullable=False)
    weekly_mileage_target: Mapped[float] = mapped_column(Float, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)


class WeatherPreference(Base):
    """Weather tolerance thresholds for one run type.

    Null limits mean "no limit". RACE has every limit null and an empty
    avoid list.
    """

    __tablename__ = "weather_preferences"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    run_type: Mapped[str] = mapped_column(String, nullable=False, unique=True)  # RunType enum value
    max_precipitation: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_wind_speed: Mapped[float | None] = mapped_column(Float, nullable=True)
    min_temperature: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_temperature: Mapped[float | None] = mapped_column(Float, nullable=True)
    avoid_conditions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)


class Run(Base):
    """A run on the calendar, scheduled or completed.

    At most one run per date. Uncompleted runs are accepted suggestions or
    manual entries; completed runs feed progression stats.
    """

    __tablename__ = "runs"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, unique=True)
    run_type: Mapped[str] = mapped_column(String, nullable=False)  # RunType enum value
    distance: Mapped[float] = mapped_column(Float, nullable=False)  # km
    pace: Mapped[str | None] = mapped_column(String, nullable=True)  # "6:17" per km
    duration: Mapped[str | None] = mapped_column(String, nullable=True)  # "1:10:00"
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)


DEFAULT_SETTINGS_ID = "default-settings"


class UserSettings(Base):
    """Single-user settings: default forecast location and target race."""

    __tablename__ = "user_settings"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=DEFAULT_SETTINGS_ID)
    default_location: Mapped[str] = mapped_column(String, nullable=False, default="Balbriggan, IE")
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    race_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    race_name: Mapped[str | None] = mapped_column(String, nullable=True)
    race_distance_km: Mapped[float | None] = mapped_column(Float, nullable=True)
    target_time: Mapped[str | None] = mapped_column(String, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)
