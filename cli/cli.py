"""CLI for runcast.

Developer CLI to set up the local database, inspect cached forecasts and
generate weather-aware run suggestions through the same service code path
the rest of the package uses.
"""

from datetime import date
from typing import NoReturn

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from runcast.config.settings import settings
from runcast.core.clock import SystemClock
from runcast.core.logger import setup_logger
from runcast.db.seed import TRAINING_START, seed_all
from runcast.db.session import get_session, init_db
from runcast.integrations.weather.client import get_forecast_client
from runcast.integrations.weather.errors import ForecastError
from runcast.planning.service import build_forecast_cache, build_suggestion_service
from runcast.planning.types import PHASE_LABELS, RunType, Suggestion
from runcast.weather.store import SqlForecastCacheStore

# Initialize Rich console for output
console = Console()

# Initialize Typer app
app = typer.Typer(
    name="runcast",
    help="runcast CLI - weather-aware run planning",
    add_completion=False,
)

_QUALITY_STYLES = {"excellent": "green", "good": "cyan", "fair": "yellow", "poor": "red"}


@app.callback()
def main(debug: bool = typer.Option(False, "--debug", help="Enable debug logging")) -> None:
    """Configure logging before any command runs."""
    setup_logger(level="DEBUG" if debug else settings.log_level, log_file=settings.log_file)


def _fail_forecast(error: ForecastError) -> NoReturn:
    console.print(f"[red]Error:[/red] {error.message}", style="bold red")
    if error.retryable:
        console.print("[yellow]This looks temporary. Try again in a few minutes.[/yellow]")
    else:
        console.print("[yellow]Check the location and try again; retrying as-is will not help.[/yellow]")
    raise typer.Exit(1) from error


@app.command("init-db")
def init_db_command() -> None:
    """Create database tables."""
    init_db()
    console.print("[green]Database tables ready[/green]")


@app.command()
def seed(
    plan_start: str | None = typer.Option(
        None, "--plan-start", help="First day of plan week 1 (YYYY-MM-DD), defaults to the built-in plan"
    ),
    history: bool = typer.Option(True, "--history/--no-history", help="Also insert historical completed runs"),
) -> None:
    """Seed weather preferences, user settings, the training plan and run history."""
    try:
        start = date.fromisoformat(plan_start) if plan_start else TRAINING_START
    except ValueError as e:
        console.print(f"[red]Error:[/red] invalid --plan-start {plan_start!r}, expected YYYY-MM-DD")
        raise typer.Exit(2) from e

    init_db()
    with get_session() as session:
        seed_all(session, plan_start=start, with_history=history)
    console.print(f"[green]Seed complete[/green] (plan starts {start.isoformat()})")


@app.command()
def forecast(
    location: str = typer.Argument(..., help='Location name ("Balbriggan, IE") or "lat,lon"'),
    days: int = typer.Option(7, "--days", "-d", help="Number of days to show"),
) -> None:
    """Show the daily forecast for a location (served from the cache when fresh)."""
    cache = build_forecast_cache(get_session, provider=get_forecast_client(), clock=SystemClock())
    try:
        forecast_days = cache.resolve(location, days)
    except ForecastError as e:
        _fail_forecast(e)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2) from e

    table = Table(title=f"Forecast for {location}")
    table.add_column("Date")
    table.add_column("Condition")
    table.add_column("Temp °C", justify="right")
    table.add_column("Feels °C", justify="right")
    table.add_column("Precip %", justify="right")
    table.add_column("Wind km/h", justify="right")
    table.add_column("Humidity %", justify="right")
    for day in forecast_days:
        table.add_row(
            day.date.strftime("%a %Y-%m-%d"),
            day.condition,
            f"{day.temperature:.1f}",
            f"{day.feels_like:.1f}",
            f"{day.precipitation:.0f}",
            f"{day.wind_speed:.1f}",
            f"{day.humidity:.0f}",
        )
    console.print(table)


def _suggestion_table(suggestions: list[Suggestion], location: str) -> Table:
    table = Table(title=f"Run suggestions for {location}")
    table.add_column("Date")
    table.add_column("Run")
    table.add_column("km", justify="right")
    table.add_column("Weather")
    table.add_column("Score", justify="right")
    table.add_column("Why")
    for suggestion in suggestions:
        style = _QUALITY_STYLES.get(suggestion.weather_quality, "white")
        fired = [check.description for check in suggestion.rationale if not check.passed]
        why = next(
            (c.description for c in suggestion.rationale if c.rule_id in {"PRIORITY", "RACE_DAY"}),
            "",
        )
        if fired:
            why = f"{why} [dim]({len(fired)} alternative(s) ruled out)[/dim]"
        table.add_row(
            suggestion.date.strftime("%a %Y-%m-%d"),
            suggestion.run_type.value.replace("_", " ").title(),
            f"{suggestion.distance:g}",
            f"[{style}]{suggestion.condition}[/{style}]",
            f"[{style}]{suggestion.weather_score}[/{style}]",
            why,
        )
    return table


@app.command()
def suggest(
    days: int | None = typer.Option(None, "--days", "-d", help="Days to plan (default SUGGESTION_DEFAULT_DAYS)"),
    location: str | None = typer.Option(None, "--location", "-l", help="Forecast location (default from settings)"),
    explain: bool = typer.Option(False, "--explain", help="Print every rule check per suggestion"),
) -> None:
    """Suggest runs for the coming days from the forecast, plan and history."""
    service = build_suggestion_service(get_session, provider=get_forecast_client(), clock=SystemClock())
    resolved_location = service.resolve_location(location)
    try:
        suggestions = service.generate(days=days, location=resolved_location)
    except ForecastError as e:
        _fail_forecast(e)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2) from e

    if not suggestions:
        console.print("[yellow]No runs fit the forecast, plan and rest rules for this window.[/yellow]")
        return

    console.print(_suggestion_table(suggestions, resolved_location))
    total = sum(s.distance for s in suggestions if s.run_type is not RunType.RACE)
    console.print(f"Total suggested: [bold]{total:g} km[/bold]")

    if explain:
        for suggestion in suggestions:
            console.print(f"\n[bold]{suggestion.date.isoformat()} {suggestion.run_type.value}[/bold]")
            for check in suggestion.rationale:
                mark = "[green]pass[/green]" if check.passed else "[red]fail[/red]"
                console.print(f"  {mark} {check.rule_id}: {check.description}")


@app.command()
def phase() -> None:
    """Show the current training phase and what comes next."""
    service = build_suggestion_service(get_session, provider=get_forecast_client(), clock=SystemClock())
    outlook = service.phase_outlook()
    if outlook.current_phase is None:
        console.print("[yellow]No training plan found. Run `runcast seed` first.[/yellow]")
        raise typer.Exit(1)

    status = "" if outlook.in_plan else " [dim](outside the plan dates)[/dim]"
    console.print(
        f"Week [bold]{outlook.week_number}[/bold]: [bold]{PHASE_LABELS[outlook.current_phase]}[/bold]{status}"
    )
    if not outlook.upcoming:
        console.print("[dim]No further phases[/dim]")
        return

    table = Table(title="Upcoming phases")
    table.add_column("Phase")
    table.add_column("Starts")
    table.add_column("Ends")
    for window in outlook.upcoming:
        table.add_row(PHASE_LABELS[window.phase], window.start_date.isoformat(), window.end_date.isoformat())
    console.print(table)


@app.command("purge-cache")
def purge_cache() -> None:
    """Delete expired forecast cache rows."""
    removed = SqlForecastCacheStore(get_session).purge_expired(SystemClock().now())
    logger.debug(f"purge-cache removed {removed} rows")
    console.print(f"[green]Removed {removed} expired forecast rows[/green]")


if __name__ == "__main__":
    app()
