"""Read-only collaborators of the suggestion engine.

Each collaborator is a Protocol with a SQLAlchemy implementation. The
implementations convert rows into immutable planning types inside the
session, so nothing ORM-bound leaks into the engine.
"""

from __future__ import annotations

import datetime as dt
from typing import Protocol

from loguru import logger
from pydantic import BaseModel, ConfigDict
from sqlalchemy import func, select

from runcast.db.models import DEFAULT_SETTINGS_ID, Run, TrainingPlanWeek, UserSettings, WeatherPreference
from runcast.db.session import SessionFactory, get_session
from runcast.planning.types import (
    AcceptedRun,
    LastCompletedRun,
    Phase,
    PhaseOutlook,
    PhaseWindow,
    RunType,
    RunTypePreference,
    TrainingWeek,
)


class TrainingPlanLookup(Protocol):
    def current(self, today: dt.date) -> TrainingWeek | None: ...

    def phase_outlook(self, today: dt.date) -> PhaseOutlook: ...


class WeatherPreferenceStore(Protocol):
    def all(self) -> list[RunTypePreference]: ...


class RunLedger(Protocol):
    def accepted_runs(self, since: dt.date) -> list[AcceptedRun]: ...

    def longest_completed_distance(self) -> float: ...

    def last_completed_run(self) -> LastCompletedRun | None: ...


class PlannerSettings(BaseModel):
    """User settings the planner needs."""

    model_config = ConfigDict(frozen=True)

    default_location: str | None = None
    race_date: dt.date | None = None
    race_distance_km: float | None = None


class UserSettingsLookup(Protocol):
    def get(self) -> PlannerSettings: ...


def _to_training_week(row: TrainingPlanWeek) -> TrainingWeek:
    return TrainingWeek(
        week_number=row.week_number,
        phase=Phase(row.phase),
        week_start=row.week_start,
        week_end=row.week_end,
        weekly_mileage_target=row.weekly_mileage_target,
        long_run_target=row.long_run_target,
        notes=row.notes,
    )


class SqlTrainingPlanLookup:
    """Training plan weeks from the `training_plan_weeks` table."""

    def __init__(self, session_factory: SessionFactory | None = None) -> None:
        self._session_factory = session_factory or get_session

    def current(self, today: dt.date) -> TrainingWeek | None:
        """Return the plan week whose [week_start, week_end] contains `today`."""
        with self._session_factory() as session:
            row = session.execute(
                select(TrainingPlanWeek)
                .where(TrainingPlanWeek.week_start <= today, TrainingPlanWeek.week_end >= today)
                .order_by(TrainingPlanWeek.week_number)
                .limit(1)
            ).scalar_one_or_none()
            return _to_training_week(row) if row is not None else None

    def phase_outlook(self, today: dt.date) -> PhaseOutlook:
        """Describe the current phase and the next two distinct phases.

        Falls back to the first week that has not ended (before the plan
        starts) and then to the last week that started (after it ends).
        """
        with self._session_factory() as session:
            weeks = [
                _to_training_week(row)
                for row in session.execute(select(TrainingPlanWeek).order_by(TrainingPlanWeek.week_number)).scalars()
            ]

        if not weeks:
            return PhaseOutlook()

        current = next((w for w in weeks if w.week_start <= today <= w.week_end), None)
        in_plan = current is not None
        if current is None:
            current = next((w for w in weeks if w.week_end >= today), None)
        if current is None:
            current = next((w for w in reversed(weeks) if w.week_start <= today), None)
        if current is None:
            return PhaseOutlook()

        windows: dict[Phase, PhaseWindow] = {}
        for week in weeks:
            if week.week_number <= current.week_number or week.phase == current.phase:
                continue
            window = windows.get(week.phase)
            if window is None:
                windows[week.phase] = PhaseWindow(phase=week.phase, start_date=week.week_start, end_date=week.week_end)
            elif week.week_end > window.end_date:
                windows[week.phase] = window.model_copy(update={"end_date": week.week_end})

        return PhaseOutlook(
            current_phase=current.phase,
            week_number=current.week_number,
            in_plan=in_plan,
            upcoming=tuple(list(windows.values())[:2]),
        )


class SqlWeatherPreferenceStore:
    """Per-run-type tolerances from the `weather_preferences` table."""

    def __init__(self, session_factory: SessionFactory | None = None) -> None:
        self._session_factory = session_factory or get_session

    def all(self) -> list[RunTypePreference]:
        preferences: list[RunTypePreference] = []
        with self._session_factory() as session:
            for row in session.execute(select(WeatherPreference).order_by(WeatherPreference.run_type)).scalars():
                try:
                    run_type = RunType(row.run_type)
                except ValueError:
                    logger.warning(f"Ignoring weather preference for unknown run type {row.run_type!r}")
                    continue
                preferences.append(
                    RunTypePreference(
                        run_type=run_type,
                        max_precipitation=row.max_precipitation,
                        max_wind_speed=row.max_wind_speed,
                        min_temperature=row.min_temperature,
                        max_temperature=row.max_temperature,
                        avoid_conditions=frozenset(row.avoid_conditions or []),
                    )
                )
        return preferences


class SqlRunLedger:
    """Scheduled and completed runs from the `runs` table."""

    def __init__(self, session_factory: SessionFactory | None = None) -> None:
        self._session_factory = session_factory or get_session

    def accepted_runs(self, since: dt.date) -> list[AcceptedRun]:
        """All runs on or after `since`, completed or not, ordered by date."""
        with self._session_factory() as session:
            rows = session.execute(select(Run).where(Run.date >= since).order_by(Run.date)).scalars()
            return [
                AcceptedRun(
                    id=row.id,
                    date=row.date,
                    run_type=RunType(row.run_type),
                    distance=row.distance,
                    completed=row.completed,
                )
                for row in rows
            ]

    def longest_completed_distance(self) -> float:
        with self._session_factory() as session:
            longest = session.execute(select(func.max(Run.distance)).where(Run.completed.is_(True))).scalar()
        return float(longest or 0.0)

    def last_completed_run(self) -> LastCompletedRun | None:
        with self._session_factory() as session:
            row = session.execute(
                select(Run).where(Run.completed.is_(True)).order_by(Run.date.desc()).limit(1)
            ).scalar_one_or_none()
            return LastCompletedRun(date=row.date, distance=row.distance) if row is not None else None


class SqlUserSettingsLookup:
    """Singleton user settings row."""

    def __init__(self, session_factory: SessionFactory | None = None) -> None:
        self._session_factory = session_factory or get_session

    def get(self) -> PlannerSettings:
        with self._session_factory() as session:
            row = session.get(UserSettings, DEFAULT_SETTINGS_ID)
            if row is None:
                return PlannerSettings()
            return PlannerSettings(
                default_location=row.default_location,
                race_date=row.race_date,
                race_distance_km=row.race_distance_km,
            )
