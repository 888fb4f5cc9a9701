"""Suggestion orchestration.

SuggestionService gathers every input the engine needs (location, training
week, forecast, preferences, runs, race date) and calls the pure engine.
Forecast errors propagate unchanged.
"""

from __future__ import annotations

from datetime import timedelta

from loguru import logger

from runcast.config.settings import settings
from runcast.core.clock import Clock, SystemClock
from runcast.db.session import SessionFactory
from runcast.integrations.weather.client import ForecastProvider, get_forecast_client
from runcast.planning.constants import DEFAULT_ENGINE_CONFIG, EngineConfig
from runcast.planning.engine import generate_suggestions
from runcast.planning.repositories import (
    RunLedger,
    SqlRunLedger,
    SqlTrainingPlanLookup,
    SqlUserSettingsLookup,
    SqlWeatherPreferenceStore,
    TrainingPlanLookup,
    UserSettingsLookup,
    WeatherPreferenceStore,
)
from runcast.planning.types import PhaseOutlook, ProgressionStats, Suggestion
from runcast.weather.cache import ForecastCache
from runcast.weather.store import SqlForecastCacheStore


class SuggestionService:
    """Generate run suggestions for the upcoming days."""

    def __init__(
        self,
        forecast_cache: ForecastCache,
        training_plan: TrainingPlanLookup,
        preferences: WeatherPreferenceStore,
        runs: RunLedger,
        user_settings: UserSettingsLookup,
        clock: Clock,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        self.forecast_cache = forecast_cache
        self.training_plan = training_plan
        self.preferences = preferences
        self.runs = runs
        self.user_settings = user_settings
        self.clock = clock
        self.config = config

    def resolve_location(self, location: str | None = None) -> str:
        """Pick the forecast location: argument, stored setting, then configured default."""
        if location and location.strip():
            return location.strip()
        stored = self.user_settings.get().default_location
        if stored and stored.strip():
            return stored.strip()
        return settings.default_location

    def generate(self, days: int | None = None, location: str | None = None) -> list[Suggestion]:
        """Suggest runs for the next `days` days.

        Args:
            days: Window length, defaults to SUGGESTION_DEFAULT_DAYS
            location: Forecast location, defaults to the stored user setting

        Returns:
            Suggestions in date order

        Raises:
            ValueError: `days` outside 1..FORECAST_MAX_DAYS
            ForecastError: The forecast could not be resolved
        """
        window = days if days is not None else settings.suggestion_default_days
        if not 1 <= window <= settings.forecast_max_days:
            raise ValueError(f"days must be between 1 and {settings.forecast_max_days}, got {window}")

        today = self.clock.today()
        resolved_location = self.resolve_location(location)
        training_week = self.training_plan.current(today)
        if training_week is None:
            logger.info(f"No training week covers {today.isoformat()}; engine will use default targets")

        forecast = self.forecast_cache.resolve(resolved_location, window)

        # Runs up to max_rest_days back can still block demanding runs at the start of the window
        since = today - timedelta(days=self.config.max_rest_days)
        accepted_runs = self.runs.accepted_runs(since)
        progression = ProgressionStats(
            longest_completed_distance=self.runs.longest_completed_distance(),
            last_completed_run=self.runs.last_completed_run(),
        )

        user = self.user_settings.get()
        race_date = user.race_date or settings.race_date
        race_distance = user.race_distance_km or settings.race_distance_km

        suggestions = generate_suggestions(
            forecast,
            training_week,
            self.preferences.all(),
            accepted_runs,
            progression,
            race_date=race_date,
            race_distance=race_distance,
            config=self.config,
        )
        logger.info(f"Generated {len(suggestions)} suggestions for {resolved_location} over {window} days")
        return suggestions

    def phase_outlook(self) -> PhaseOutlook:
        return self.training_plan.phase_outlook(self.clock.today())


def build_forecast_cache(
    session_factory: SessionFactory | None = None,
    provider: ForecastProvider | None = None,
    clock: Clock | None = None,
) -> ForecastCache:
    return ForecastCache(
        provider=provider or get_forecast_client(),
        store=SqlForecastCacheStore(session_factory),
        clock=clock or SystemClock(),
    )


def build_suggestion_service(
    session_factory: SessionFactory | None = None,
    provider: ForecastProvider | None = None,
    clock: Clock | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> SuggestionService:
    """Wire a SuggestionService to the database and the Open-Meteo client."""
    clock = clock or SystemClock()
    return SuggestionService(
        forecast_cache=build_forecast_cache(session_factory, provider, clock),
        training_plan=SqlTrainingPlanLookup(session_factory),
        preferences=SqlWeatherPreferenceStore(session_factory),
        runs=SqlRunLedger(session_factory),
        user_settings=SqlUserSettingsLookup(session_factory),
        clock=clock,
        config=config,
    )
