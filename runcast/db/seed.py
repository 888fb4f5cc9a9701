"""Seed data for a fresh database.

Creates:
- WeatherPreference: one tolerance row per run type
- UserSettings: singleton with the default location and target race
- TrainingPlanWeek: a 34-week half-marathon plan (weeks run Sunday-Saturday)
- Run: completed historical runs that bootstrap progression stats

Every function is idempotent: re-running the seed never duplicates rows.
"""

from __future__ import annotations

import datetime as dt

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from runcast.db.models import DEFAULT_SETTINGS_ID, Run, TrainingPlanWeek, UserSettings, WeatherPreference
from runcast.planning.types import Phase, RunType

# run_type -> (max_precipitation, max_wind_speed, min_temperature, max_temperature, avoid_conditions)
WEATHER_PREFERENCES: dict[RunType, tuple[float | None, float | None, float | None, float | None, list[str]]] = {
    RunType.LONG_RUN: (20, 25, 0, 25, ["Heavy Rain", "Thunderstorm", "Heavy Snow"]),
    RunType.EASY_RUN: (50, 35, -5, 30, ["Thunderstorm", "Heavy Snow"]),
    RunType.TEMPO_RUN: (30, 25, 5, 25, ["Heavy Rain", "Thunderstorm", "Heavy Snow"]),
    RunType.INTERVAL_RUN: (30, 25, 5, 25, ["Heavy Rain", "Thunderstorm", "Heavy Snow"]),
    RunType.RECOVERY_RUN: (60, 40, -5, 30, ["Thunderstorm"]),
    RunType.RACE: (None, None, None, None, []),
}

TRAINING_START = dt.date(2025, 9, 21)

# (week_number, phase, long_run_target, weekly_mileage_target, notes)
TRAINING_PLAN: list[tuple[int, Phase, float, float, str | None]] = [
    (1, Phase.BASE_BUILDING, 7, 15, None),
    (2, Phase.BASE_BUILDING, 8, 16, None),
    (3, Phase.BASE_BUILDING, 8, 17, None),
    (4, Phase.BASE_BUILDING, 9, 18, None),
    (5, Phase.BASE_BUILDING, 9, 19, None),
    (6, Phase.BASE_BUILDING, 10, 20, None),
    (7, Phase.BASE_BUILDING, 10, 21, None),
    (8, Phase.BASE_BUILDING, 11, 22, None),
    (9, Phase.BASE_BUILDING, 11, 23, None),
    (10, Phase.BASE_BUILDING, 12, 24, None),
    (11, Phase.BASE_BUILDING, 12, 25, None),
    (12, Phase.BASE_BUILDING, 13, 26, None),
    (13, Phase.BASE_BUILDING, 13, 26, None),
    (14, Phase.BASE_BUILDING, 14, 27, None),
    (15, Phase.BASE_BUILDING, 14, 27, "Base building complete"),
    (16, Phase.BASE_EXTENSION, 15, 28, None),
    (17, Phase.BASE_EXTENSION, 15, 29, None),
    (18, Phase.BASE_EXTENSION, 16, 30, None),
    (19, Phase.BASE_EXTENSION, 16, 31, None),
    (20, Phase.BASE_EXTENSION, 17, 32, None),
    (21, Phase.BASE_EXTENSION, 15, 28, "Recovery week - reduce volume"),
    (22, Phase.BASE_EXTENSION, 17, 33, None),
    (23, Phase.BASE_EXTENSION, 18, 34, "Base extension complete"),
    (24, Phase.SPEED_DEVELOPMENT, 18, 35, None),
    (25, Phase.SPEED_DEVELOPMENT, 19, 36, None),
    (26, Phase.SPEED_DEVELOPMENT, 16, 30, "Recovery week"),
    (27, Phase.SPEED_DEVELOPMENT, 19, 37, None),
    (28, Phase.SPEED_DEVELOPMENT, 20, 38, "Peak long run - race distance simulation"),
    (29, Phase.SPEED_DEVELOPMENT, 18, 35, None),
    (30, Phase.SPEED_DEVELOPMENT, 20, 38, "Final peak week"),
    (31, Phase.PEAK_TAPER, 16, 30, "Begin taper - reduce volume, maintain intensity"),
    (32, Phase.PEAK_TAPER, 12, 24, None),
    (33, Phase.PEAK_TAPER, 8, 16, None),
    (34, Phase.PEAK_TAPER, 5, 10, "Race week - rest and prepare"),
]

# (date, distance km, pace per km, duration, run_type, notes)
HISTORICAL_RUNS: list[tuple[dt.date, float, str, str, RunType, str | None]] = [
    (dt.date(2025, 9, 23), 7.0, "6:20", "44:20", RunType.LONG_RUN, None),
    (dt.date(2025, 9, 26), 4.51, "6:17", "28:20", RunType.EASY_RUN, None),
    (dt.date(2025, 9, 29), 5.38, "6:34", "35:20", RunType.EASY_RUN, None),
    (dt.date(2025, 10, 2), 6.03, "6:42", "40:25", RunType.EASY_RUN, None),
    (dt.date(2025, 10, 5), 7.33, "6:35", "48:17", RunType.LONG_RUN, None),
    (dt.date(2025, 10, 8), 6.04, "6:47", "40:59", RunType.EASY_RUN, None),
    (dt.date(2025, 10, 11), 6.03, "6:33", "39:33", RunType.EASY_RUN, None),
    (dt.date(2025, 10, 15), 8.05, "6:48", "54:46", RunType.LONG_RUN, None),
    (dt.date(2025, 10, 17), 6.0, "6:32", "39:12", RunType.EASY_RUN, None),
    (dt.date(2025, 10, 21), 9.01, "6:33", "59:06", RunType.LONG_RUN, None),
    (dt.date(2025, 10, 24), 5.0, "6:53", "34:25", RunType.EASY_RUN, None),
    (dt.date(2025, 10, 27), 5.0, "6:45", "33:45", RunType.EASY_RUN, None),
    (dt.date(2025, 10, 31), 9.0, "6:41", "60:09", RunType.LONG_RUN, None),
    (dt.date(2025, 11, 3), 5.7, "6:23", "36:25", RunType.EASY_RUN, None),
    (dt.date(2025, 11, 5), 5.71, "6:46", "38:41", RunType.EASY_RUN, None),
    (dt.date(2025, 11, 7), 5.63, "6:45", "38:03", RunType.EASY_RUN, None),
    (dt.date(2025, 11, 9), 10.1, "6:38", "66:59", RunType.LONG_RUN, "First double-digit run"),
    (dt.date(2025, 11, 12), 5.72, "6:36", "37:46", RunType.EASY_RUN, None),
    (dt.date(2025, 11, 16), 10.82, "6:42", "72:25", RunType.LONG_RUN, None),
    (dt.date(2025, 11, 20), 6.01, "6:37", "39:42", RunType.EASY_RUN, None),
    (dt.date(2025, 11, 23), 11.48, "6:45", "77:32", RunType.LONG_RUN, None),
    (dt.date(2025, 11, 26), 6.15, "6:39", "40:53", RunType.EASY_RUN, None),
]


def week_dates(start: dt.date, week_number: int) -> tuple[dt.date, dt.date]:
    """Return (week_start, week_end) for a 1-based plan week."""
    week_start = start + dt.timedelta(days=(week_number - 1) * 7)
    return week_start, week_start + dt.timedelta(days=6)


def seed_weather_preferences(session: Session) -> int:
    """Insert missing weather preference rows. Existing rows are left untouched.

    Returns:
        Number of rows created
    """
    existing = set(session.execute(select(WeatherPreference.run_type)).scalars())
    created = 0
    for run_type, (max_precip, max_wind, min_temp, max_temp, avoid) in WEATHER_PREFERENCES.items():
        if run_type.value in existing:
            continue
        session.add(
            WeatherPreference(
                run_type=run_type.value,
                max_precipitation=max_precip,
                max_wind_speed=max_wind,
                min_temperature=min_temp,
                max_temperature=max_temp,
                avoid_conditions=list(avoid),
            )
        )
        created += 1
    session.flush()
    logger.info(f"Weather preferences seeded: {created} created, {len(existing)} already present")
    return created


def seed_user_settings(session: Session) -> UserSettings:
    """Create the singleton user settings row if it does not exist."""
    user_settings = session.get(UserSettings, DEFAULT_SETTINGS_ID)
    if user_settings is not None:
        logger.debug("User settings already present")
        return user_settings

    user_settings = UserSettings(
        id=DEFAULT_SETTINGS_ID,
        default_location="Balbriggan, IE",
        latitude=53.6108,
        longitude=-6.1817,
        race_date=dt.date(2026, 5, 17),
        race_name="Life Style Sports Fastlane Summer Edition 2026",
        race_distance_km=21.1,
        target_time="2:00:00",
    )
    session.add(user_settings)
    session.flush()
    logger.info("User settings created")
    return user_settings


def seed_training_plan(session: Session, start: dt.date = TRAINING_START) -> int:
    """Replace the training plan with the 34-week table starting on `start`.

    Args:
        session: Open database session
        start: First day (Sunday) of week 1

    Returns:
        Number of weeks written
    """
    session.execute(delete(TrainingPlanWeek))
    for week_number, phase, long_run_target, weekly_mileage_target, notes in TRAINING_PLAN:
        week_start, week_end = week_dates(start, week_number)
        session.add(
            TrainingPlanWeek(
                week_number=week_number,
                phase=phase.value,
                week_start=week_start,
                week_end=week_end,
                long_run_target=long_run_target,
                weekly_mileage_target=weekly_mileage_target,
                notes=notes,
            )
        )
    session.flush()
    logger.info(f"Training plan seeded: {len(TRAINING_PLAN)} weeks from {start.isoformat()}")
    return len(TRAINING_PLAN)


def seed_runs(session: Session) -> int:
    """Insert historical completed runs on dates that have no run yet."""
    taken = set(session.execute(select(Run.date)).scalars())
    created = 0
    for run_date, distance, pace, duration, run_type, notes in HISTORICAL_RUNS:
        if run_date in taken:
            continue
        session.add(
            Run(
                date=run_date,
                distance=distance,
                pace=pace,
                duration=duration,
                run_type=run_type.value,
                notes=notes,
                completed=True,
            )
        )
        created += 1
    session.flush()
    logger.info(f"Historical runs seeded: {created} created")
    return created


def seed_all(session: Session, plan_start: dt.date = TRAINING_START, with_history: bool = True) -> None:
    seed_weather_preferences(session)
    seed_user_settings(session)
    seed_training_plan(session, plan_start)
    if with_history:
        seed_runs(session)
