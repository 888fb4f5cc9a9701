"""Cache-first forecast resolution.

ForecastCache answers "what is the weather for the next N days at this
location" from the `weather_cache` table, calling the forecast provider only
when at least one requested day is missing or expired. Expiry is checked at
read time; nothing evicts rows in the background.
"""

from __future__ import annotations

from datetime import date, timedelta

from loguru import logger

from runcast.config.settings import settings
from runcast.core.clock import Clock, SystemClock
from runcast.integrations.weather.client import ForecastProvider
from runcast.integrations.weather.errors import ForecastUnavailable
from runcast.weather.store import ForecastCacheStore
from runcast.weather.types import CacheEntry, WeatherDay


class ForecastCache:
    """Resolve consecutive forecast days for a location, cache first."""

    def __init__(
        self,
        provider: ForecastProvider,
        store: ForecastCacheStore,
        clock: Clock | None = None,
        ttl: timedelta | None = None,
        max_days: int | None = None,
    ) -> None:
        self.provider = provider
        self.store = store
        self.clock = clock or SystemClock()
        self.ttl = ttl or timedelta(seconds=settings.weather_cache_ttl_seconds)
        self.max_days = max_days or settings.forecast_max_days

    def resolve(self, location: str, days: int) -> list[WeatherDay]:
        """Return exactly `days` forecast days starting today, ascending by date.

        Args:
            location: Location key (cache rows are stored under this exact string)
            days: Number of consecutive days, 1 to `max_days`

        Returns:
            One WeatherDay per requested date, no gaps, no duplicates

        Raises:
            ValueError: `days` out of range or blank location
            ForecastError: Provider failure or a forecast that does not cover
                every missing date. Nothing is cached in that case.
        """
        if not location or not location.strip():
            raise ValueError("location must not be empty")
        if not 1 <= days <= self.max_days:
            raise ValueError(f"days must be between 1 and {self.max_days}, got {days}")

        today = self.clock.today()
        now = self.clock.now()
        target_dates = [today + timedelta(days=offset) for offset in range(days)]

        hits: dict[date, WeatherDay] = {
            entry.day.date: entry.day for entry in self.store.find_many(location, target_dates, now)
        }
        missing = {d for d in target_dates if d not in hits}

        if not missing:
            logger.debug(f"Forecast cache hit for {location}: {days} days")
            return [hits[d] for d in target_dates]

        logger.info(f"Forecast cache miss for {location}: {len(missing)}/{days} days missing, fetching")
        fetched: dict[date, WeatherDay] = {}
        for day in self.provider.fetch(location, days, start_date=today):
            if day.date in missing and day.date not in fetched:
                fetched[day.date] = day if day.location == location else day.model_copy(update={"location": location})

        uncovered = missing - fetched.keys()
        if uncovered:
            first_gap = min(uncovered).isoformat()
            raise ForecastUnavailable(
                f"Forecast for {location} is missing {len(uncovered)} requested day(s), first gap {first_gap}"
            )

        expires_at = now + self.ttl
        self.store.upsert_batch(
            [CacheEntry(day=day, cached_at=now, expires_at=expires_at) for day in fetched.values()]
        )

        merged = {**hits, **fetched}
        return [merged[d] for d in target_dates]

    def current(self, location: str) -> WeatherDay:
        """Return today's forecast for `location` through the cache."""
        return self.resolve(location, 1)[0]
