"""Tests for the runcast CLI commands."""

import datetime as dt

from sqlalchemy import func, select

from cli.cli import app
from runcast.db.models import Run, TrainingPlanWeek, WeatherCache
from runcast.db.seed import seed_all
from runcast.integrations.weather.errors import ForecastLocationNotFound, ForecastUnavailable


def _seed(db_session, today: dt.date) -> None:
    seed_all(db_session, today, with_history=False)
    db_session.add(Run(date=today - dt.timedelta(days=10), run_type="LONG_RUN", distance=8.0, completed=True))
    db_session.commit()


def _count(session_factory, model) -> int:
    with session_factory() as session:
        return session.execute(select(func.count()).select_from(model)).scalar_one()


def test_suggest_prints_table(runner, db_session, today):
    _seed(db_session, today)

    result = runner.invoke(app, ["suggest", "--days", "7"])

    assert result.exit_code == 0, result.output
    assert "Run suggestions for Balbriggan, IE" in result.output
    assert "Long Run" in result.output
    assert "Tempo Run" in result.output
    assert "Total suggested: 13.5 km" in result.output


def test_suggest_explain_lists_rule_checks(runner, db_session, today):
    _seed(db_session, today)

    result = runner.invoke(app, ["suggest", "--days", "7", "--explain"])

    assert result.exit_code == 0, result.output
    assert "PROGRESSIVE_OVERLOAD" in result.output
    assert "fail TRAINING_PLAN" in result.output


def test_suggest_with_no_fitting_runs(runner, forecast_client):
    forecast_client.forecast = [d.model_copy(update={"condition": "Thunderstorm"}) for d in forecast_client.forecast]

    result = runner.invoke(app, ["suggest", "--days", "3"])

    assert result.exit_code == 0, result.output
    assert "No runs fit" in result.output


def test_suggest_reports_retryable_forecast_error(runner, forecast_client):
    forecast_client.error = ForecastUnavailable("upstream 503", 503)

    result = runner.invoke(app, ["suggest", "--days", "3"])

    assert result.exit_code == 1
    assert "upstream 503" in result.output
    assert "Try again in a few minutes" in result.output


def test_suggest_rejects_bad_window(runner, forecast_client):
    result = runner.invoke(app, ["suggest", "--days", "0"])

    assert result.exit_code == 2
    assert forecast_client.calls == []


def test_forecast_is_cached_between_invocations(runner, forecast_client, session_factory):
    first = runner.invoke(app, ["forecast", "Balbriggan, IE", "--days", "3"])
    second = runner.invoke(app, ["forecast", "Balbriggan, IE", "--days", "3"])

    assert first.exit_code == 0, first.output
    assert second.exit_code == 0, second.output
    assert "Forecast for Balbriggan, IE" in first.output
    assert "Clear" in first.output
    assert forecast_client.calls == [("Balbriggan, IE", 3)]
    assert _count(session_factory, WeatherCache) == 3


def test_forecast_unknown_location(runner, forecast_client):
    forecast_client.error = ForecastLocationNotFound("No results for 'Atlantis'", 404)

    result = runner.invoke(app, ["forecast", "Atlantis"])

    assert result.exit_code == 1
    assert "Check the location" in result.output


def test_phase_without_plan(runner):
    result = runner.invoke(app, ["phase"])

    assert result.exit_code == 1
    assert "No training plan found" in result.output


def test_phase_with_plan(runner, db_session, today):
    _seed(db_session, today)

    result = runner.invoke(app, ["phase"])

    assert result.exit_code == 0, result.output
    assert "Week 1: Base Building" in result.output
    assert "Base Extension" in result.output
    assert "Speed Development" in result.output


def test_seed_command(runner, session_factory, today):
    result = runner.invoke(app, ["seed", "--plan-start", today.isoformat(), "--no-history"])

    assert result.exit_code == 0, result.output
    assert _count(session_factory, TrainingPlanWeek) == 34
    assert _count(session_factory, Run) == 0


def test_seed_rejects_bad_date(runner, session_factory):
    result = runner.invoke(app, ["seed", "--plan-start", "next tuesday"])

    assert result.exit_code == 2
    assert _count(session_factory, TrainingPlanWeek) == 0


def test_purge_cache_removes_expired_rows(runner, fixed_clock, session_factory):
    runner.invoke(app, ["forecast", "Balbriggan, IE", "--days", "3"])

    fresh = runner.invoke(app, ["purge-cache"])
    fixed_clock.advance(dt.timedelta(hours=2))
    expired = runner.invoke(app, ["purge-cache"])

    assert "Removed 0 expired forecast rows" in fresh.output
    assert "Removed 3 expired forecast rows" in expired.output
    assert _count(session_factory, WeatherCache) == 0
