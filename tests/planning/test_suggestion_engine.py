"""Scenario tests for the suggestion engine."""

import datetime as dt

import pytest

from runcast.planning.constants import DEFAULT_PREFERENCES, EngineConfig
from runcast.planning.engine import generate_suggestions
from runcast.planning.types import (
    AcceptedRun,
    LastCompletedRun,
    Phase,
    ProgressionStats,
    RunType,
    RunTypePreference,
    TrainingWeek,
)

PREFERENCES = list(DEFAULT_PREFERENCES.values())

# Easy and recovery runs never fit a clear day, so only long and quality runs remain
QUALITY_ONLY = [
    *(DEFAULT_PREFERENCES[t] for t in (RunType.LONG_RUN, RunType.TEMPO_RUN, RunType.INTERVAL_RUN)),
    RunTypePreference(run_type=RunType.EASY_RUN, avoid_conditions=frozenset({"Clear"})),
    RunTypePreference(run_type=RunType.RECOVERY_RUN, avoid_conditions=frozenset({"Clear"})),
]


@pytest.fixture
def week(today) -> TrainingWeek:
    return TrainingWeek(
        week_number=14,
        phase=Phase.BASE_BUILDING,
        week_start=today,
        week_end=today + dt.timedelta(days=6),
        weekly_mileage_target=30,
        long_run_target=14,
    )


@pytest.fixture
def history() -> ProgressionStats:
    return ProgressionStats(longest_completed_distance=12)


def _accepted(day: dt.date, run_type: RunType = RunType.EASY_RUN, distance: float = 5.0, completed=False):
    return AcceptedRun(id=f"run-{day.isoformat()}", date=day, run_type=run_type, distance=distance, completed=completed)


def _types(suggestions) -> list[tuple[RunType, float]]:
    return [(s.run_type, s.distance) for s in suggestions]


def test_clear_week_scenario(clear_week, week, history):
    suggestions = generate_suggestions(clear_week, week, PREFERENCES, [], history)

    # Tempo and interval tie at 90 (tempo has priority); recovery (89) outscores easy (88)
    assert _types(suggestions) == [
        (RunType.TEMPO_RUN, 7.0),
        (RunType.RECOVERY_RUN, 3.5),
        (RunType.RECOVERY_RUN, 3.5),
        (RunType.RECOVERY_RUN, 3.0),
        (RunType.LONG_RUN, 13.0),
    ]
    assert [s.date for s in suggestions] == [d.date for d in (*clear_week[:4], clear_week[5])]
    assert [s.weather_score for s in suggestions] == [90, 89, 89, 89, 85]
    assert sum(s.distance for s in suggestions) == 30
    assert all(s.weather_quality == "excellent" for s in suggestions)


def test_long_run_rationale_explains_cap(clear_week, week, history):
    suggestions = generate_suggestions(clear_week, week, PREFERENCES, [], history)
    long_run = next(s for s in suggestions if s.run_type is RunType.LONG_RUN)

    rules = [check.rule_id for check in long_run.rationale]
    assert rules == [
        "ACCEPTED_RUN_EXCLUSION",
        "WEATHER_ELIGIBILITY",
        "TRAINING_PLAN",
        "PROGRESSIVE_OVERLOAD",
        "REST_GAP",
        "WEEKLY_BUDGET",
    ]
    assert all(check.passed for check in long_run.rationale)
    assert "longest completed 12 km" in long_run.rationale[3].description


def test_rest_guard_is_reported_for_blocked_quality_runs(clear_week, make_day, week, history):
    # Saturday, Sunday, Monday: the long run takes Saturday, Sunday falls in its rest window
    forecast = [*clear_week[5:], make_day(clear_week[6].date + dt.timedelta(days=1))]

    suggestions = generate_suggestions(forecast, week, PREFERENCES, [], history)

    assert suggestions[0].run_type is RunType.LONG_RUN
    sunday = suggestions[1]
    assert sunday.run_type is RunType.RECOVERY_RUN
    failed = [check for check in sunday.rationale if not check.passed]
    assert {check.rule_id for check in failed} == {"REST_GAP"}
    assert any("TEMPO_RUN" in check.description for check in failed)


def test_wet_day_gets_nothing_but_race(today, make_day, week, history):
    forecast = [make_day(today, precipitation=90)]

    assert generate_suggestions(forecast, week, PREFERENCES, [], history) == []

    race = generate_suggestions(forecast, week, PREFERENCES, [], history, race_date=today, race_distance=21.1)
    assert _types(race) == [(RunType.RACE, 21.1)]
    assert [c.rule_id for c in race[0].rationale] == ["ACCEPTED_RUN_EXCLUSION", "RACE_DAY", "WEATHER_ELIGIBILITY"]


def test_race_only_on_race_date(clear_week, week, history):
    race_date = clear_week[5].date

    suggestions = generate_suggestions(clear_week, week, PREFERENCES, [], history, race_date=race_date)

    races = [s for s in suggestions if s.run_type is RunType.RACE]
    assert [s.date for s in races] == [race_date]
    assert races[0].distance == EngineConfig().default_race_distance


def test_race_outside_window_is_ignored(clear_week, week, history):
    suggestions = generate_suggestions(
        clear_week, week, PREFERENCES, [], history, race_date=clear_week[-1].date + dt.timedelta(days=1)
    )
    assert RunType.RACE not in {s.run_type for s in suggestions}


def test_demanding_runs_keep_clear_of_race(clear_week, week, history):
    race_date = clear_week[3].date

    suggestions = generate_suggestions(clear_week, week, PREFERENCES, [], history, race_date=race_date)

    for suggestion in suggestions:
        if suggestion.run_type in {RunType.LONG_RUN, RunType.TEMPO_RUN, RunType.INTERVAL_RUN}:
            assert abs((suggestion.date - race_date).days) > 1


def test_accepted_dates_are_excluded(clear_week, week, history):
    accepted = [_accepted(clear_week[0].date), _accepted(clear_week[2].date)]

    suggestions = generate_suggestions(clear_week, week, PREFERENCES, accepted, history)

    assert not {s.date for s in suggestions} & {r.date for r in accepted}


def test_accepted_runs_consume_weekly_budget(clear_week, week, history):
    accepted = [_accepted(clear_week[6].date, distance=20.0)]

    suggestions = generate_suggestions(clear_week, week, PREFERENCES, accepted, history)

    assert sum(s.distance for s in suggestions) <= 10
    assert _types(suggestions)[0] == (RunType.LONG_RUN, 10.0)


def test_accepted_long_run_blocks_another(clear_week, week, history):
    accepted = [_accepted(clear_week[6].date, RunType.LONG_RUN, 12.0)]

    suggestions = generate_suggestions(clear_week, week, PREFERENCES, accepted, history)

    assert RunType.LONG_RUN not in {s.run_type for s in suggestions}


def test_last_completed_run_blocks_demanding_runs(clear_week, week):
    yesterday = clear_week[0].date - dt.timedelta(days=1)
    history = ProgressionStats(
        longest_completed_distance=12,
        last_completed_run=LastCompletedRun(date=yesterday, distance=12.0),
    )

    config = EngineConfig(long_run_weekdays=frozenset())

    suggestions = generate_suggestions(clear_week, week, PREFERENCES, [], history, config=config)

    long_run = next(s for s in suggestions if s.run_type is RunType.LONG_RUN)
    assert long_run.date == clear_week[2].date
    assert suggestions[0].run_type is RunType.RECOVERY_RUN
    assert "REST_GAP" in {c.rule_id for c in suggestions[0].rationale if not c.passed}


def test_long_run_prefers_best_weather(today, make_day, week, history):
    forecast = [make_day(today + dt.timedelta(days=i), precipitation=15) for i in range(7)]
    forecast[4] = make_day(forecast[4].date, precipitation=0)

    suggestions = generate_suggestions(forecast, week, PREFERENCES, [], history)

    long_run = next(s for s in suggestions if s.run_type is RunType.LONG_RUN)
    assert long_run.date == forecast[4].date


def test_no_history_means_no_long_run(clear_week, week):
    suggestions = generate_suggestions(clear_week, week, PREFERENCES, [], ProgressionStats())

    assert RunType.LONG_RUN not in {s.run_type for s in suggestions}
    assert suggestions


def test_defaults_without_training_week(clear_week, history):
    suggestions = generate_suggestions(clear_week, None, PREFERENCES, [], history)

    long_run = next(s for s in suggestions if s.run_type is RunType.LONG_RUN)
    assert long_run.distance == 10
    assert sum(s.distance for s in suggestions) <= 20
    assert "using defaults" in next(c for c in long_run.rationale if c.rule_id == "TRAINING_PLAN").description


def test_speed_phase_allows_two_quality_sessions(today, make_day, history):
    forecast = [make_day(today + dt.timedelta(days=i)) for i in range(14)]
    week = TrainingWeek(
        week_number=27,
        phase=Phase.SPEED_DEVELOPMENT,
        week_start=today,
        week_end=today + dt.timedelta(days=6),
        weekly_mileage_target=60,
        long_run_target=19,
    )

    suggestions = generate_suggestions(forecast, week, QUALITY_ONLY, [], history)

    quality = [s.run_type for s in suggestions if s.run_type in {RunType.TEMPO_RUN, RunType.INTERVAL_RUN}]
    assert sorted(quality) == [RunType.INTERVAL_RUN, RunType.TEMPO_RUN]


def test_base_phase_allows_one_quality_session(today, make_day, history):
    forecast = [make_day(today + dt.timedelta(days=i)) for i in range(14)]
    week = TrainingWeek(
        week_number=10,
        phase=Phase.BASE_BUILDING,
        week_start=today,
        week_end=today + dt.timedelta(days=6),
        weekly_mileage_target=60,
        long_run_target=12,
    )

    suggestions = generate_suggestions(forecast, week, QUALITY_ONLY, [], history)

    quality = [s for s in suggestions if s.run_type in {RunType.TEMPO_RUN, RunType.INTERVAL_RUN}]
    assert len(quality) == 1


def test_long_run_prefers_weekend_on_ties(clear_week, week, history):
    suggestions = generate_suggestions(clear_week, week, PREFERENCES, [], history)
    long_run = next(s for s in suggestions if s.run_type is RunType.LONG_RUN)
    assert long_run.date == clear_week[5].date
    assert long_run.date.weekday() == 5

    weekdays_only = EngineConfig(long_run_weekdays=frozenset())
    suggestions = generate_suggestions(clear_week, week, PREFERENCES, [], history, config=weekdays_only)
    long_run = next(s for s in suggestions if s.run_type is RunType.LONG_RUN)
    assert long_run.date == clear_week[0].date


def test_weekend_does_not_beat_better_weather(today, make_day, week, history):
    forecast = [make_day(today + dt.timedelta(days=i)) for i in range(7)]
    forecast[5] = make_day(forecast[5].date, wind_speed=20)
    forecast[6] = make_day(forecast[6].date, wind_speed=20)

    suggestions = generate_suggestions(forecast, week, PREFERENCES, [], history)

    long_run = next(s for s in suggestions if s.run_type is RunType.LONG_RUN)
    assert long_run.date == forecast[0].date


def test_higher_score_wins_within_one_band(today, make_day, week, history):
    # 12.5°C, light wind: easy scores 96 and tempo 90, both "excellent"
    forecast = [make_day(today, temperature=12.5, wind_speed=5, precipitation=0)]
    preferences = [
        RunTypePreference(run_type=RunType.LONG_RUN, avoid_conditions=frozenset({"Clear"})),
        RunTypePreference(run_type=RunType.RECOVERY_RUN, avoid_conditions=frozenset({"Clear"})),
        DEFAULT_PREFERENCES[RunType.TEMPO_RUN],
        DEFAULT_PREFERENCES[RunType.INTERVAL_RUN],
        DEFAULT_PREFERENCES[RunType.EASY_RUN],
    ]

    suggestions = generate_suggestions(forecast, week, preferences, [], history)

    assert _types(suggestions) == [(RunType.EASY_RUN, 6.0)]
    assert suggestions[0].weather_score == 96
    priority = next(c for c in suggestions[0].rationale if c.rule_id == "PRIORITY")
    assert "TEMPO_RUN (90)" in priority.description


def test_higher_score_beats_priority_across_bands(today, make_day, history):
    # 24°C and 10% rain: tempo (ideal 15) scores 69, recovery (ideal 22.5) scores 90
    forecast = [make_day(today, temperature=24.0, wind_speed=0, precipitation=10)]
    week = TrainingWeek(
        week_number=1,
        phase=Phase.BASE_BUILDING,
        week_start=today,
        week_end=today,
        weekly_mileage_target=30,
        long_run_target=14,
    )
    preferences = [
        RunTypePreference(run_type=RunType.LONG_RUN, max_precipitation=0, avoid_conditions=frozenset({"Clear"})),
        RunTypePreference(run_type=RunType.TEMPO_RUN, max_precipitation=30, min_temperature=5, max_temperature=25),
        RunTypePreference(run_type=RunType.INTERVAL_RUN, max_precipitation=0, max_temperature=20),
        RunTypePreference(run_type=RunType.EASY_RUN, max_precipitation=50, max_temperature=20),
        RunTypePreference(run_type=RunType.RECOVERY_RUN, max_precipitation=60, min_temperature=5, max_temperature=40),
    ]

    suggestions = generate_suggestions(forecast, week, preferences, [], history)

    assert _types(suggestions) == [(RunType.RECOVERY_RUN, 3.5)]


def test_duplicate_forecast_dates_collapse(clear_week, week, history):
    suggestions = generate_suggestions(clear_week + clear_week[:3], week, PREFERENCES, [], history)

    dates = [s.date for s in suggestions]
    assert dates == sorted(set(dates))


def test_empty_forecast():
    assert generate_suggestions([], None, PREFERENCES, [], ProgressionStats()) == []


def test_engine_is_deterministic(clear_week, week, history):
    first = generate_suggestions(clear_week, week, PREFERENCES, [], history)
    second = generate_suggestions(list(reversed(clear_week)), week, list(reversed(PREFERENCES)), [], history)

    assert first == second
