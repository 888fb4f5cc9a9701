"""Shared fixtures for CLI tests.

Commands run against the in-memory test database, a stub forecast provider
and the fixed clock instead of the real engine, Open-Meteo and wall clock.
"""

import datetime as dt

import pytest
from rich.console import Console
from typer.testing import CliRunner

import cli.cli as cli_module


class StubForecastClient:
    def __init__(self, make_day, start: dt.date):
        self.calls: list[tuple[str, int]] = []
        self.error: Exception | None = None
        self.forecast = [make_day(start + dt.timedelta(days=i)) for i in range(16)]

    def fetch(self, location, days, start_date=None):
        self.calls.append((location, days))
        if self.error is not None:
            raise self.error
        return self.forecast[:days]


@pytest.fixture
def forecast_client(make_day, today) -> StubForecastClient:
    return StubForecastClient(make_day, today)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, session_factory, forecast_client, fixed_clock):
    """Point every CLI collaborator at test doubles."""
    monkeypatch.setattr(cli_module, "get_session", session_factory)
    monkeypatch.setattr(cli_module, "get_forecast_client", lambda: forecast_client)
    monkeypatch.setattr(cli_module, "init_db", lambda: None)
    monkeypatch.setattr(cli_module, "SystemClock", lambda: fixed_clock)
    monkeypatch.setattr(cli_module, "setup_logger", lambda **kwargs: None)
    monkeypatch.setattr(cli_module, "console", Console(width=200))
