"""Open-Meteo forecast client.

Open-Meteo is free, needs no API key and serves up to 16 days of hourly
forecast data. This client resolves a location (geocoding API, or a literal
"lat,lon" pair), fetches the hourly forecast and aggregates it into one
WeatherDay per calendar day in the client's time zone (TIMEZONE by default):

- temperature, feels_like, humidity: mean over the day's hours
- precipitation: max precipitation probability
- wind_speed: max wind speed
- condition, wind_direction: taken from the 12:00 hour

Transient failures (timeouts, transport errors, 5xx, 429) are retried with
exponential backoff; 4xx errors fail immediately.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable
from datetime import date, timedelta
from typing import Any, Protocol

import httpx
from loguru import logger

from runcast.config.settings import settings
from runcast.integrations.weather.errors import (
    ForecastError,
    ForecastLocationNotFound,
    ForecastUnavailable,
    error_for_status,
)
from runcast.weather.conditions import condition_from_wmo
from runcast.weather.types import WeatherDay

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
OPEN_METEO_MAX_DAYS = 16

HOURLY_VARIABLES = (
    "temperature_2m",
    "apparent_temperature",
    "precipitation_probability",
    "weather_code",
    "wind_speed_10m",
    "wind_direction_10m",
    "relative_humidity_2m",
)

_COORDINATES_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)\s*$")
_COUNTRY_SUFFIX_RE = re.compile(r",\s*[A-Za-z]{2,3}\s*$")
_MIDDAY_HOUR = 12


class ForecastProvider(Protocol):
    """Source of daily forecasts. May return more, fewer or unordered days."""

    def fetch(self, location: str, days: int, start_date: date | None = None) -> list[WeatherDay]: ...


class OpenMeteoForecastClient:
    """ForecastProvider backed by the Open-Meteo HTTP APIs."""

    def __init__(
        self,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
        transport: httpx.BaseTransport | None = None,
        timezone: str | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            timeout: Per-request timeout in seconds (defaults to settings)
            max_retries: Total attempts per request (defaults to settings)
            retry_delay: Base backoff delay in seconds; attempt n waits delay * 2**n
            sleep: Sleep function, replaced in tests
            transport: Optional httpx transport, replaced in tests
            timezone: IANA zone that defines forecast days (defaults to settings)
        """
        self.timeout = timeout if timeout is not None else settings.weather_http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.weather_max_retries
        self.retry_delay = retry_delay if retry_delay is not None else settings.weather_retry_delay_seconds
        self.timezone = timezone or settings.timezone
        self._sleep = sleep
        self._transport = transport

    def _get_json(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        """GET a JSON document with retries on transient failures."""
        last_error: ForecastError | None = None

        for attempt in range(self.max_retries):
            try:
                with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                    response = client.get(url, params=params)
                if response.status_code >= 400:
                    raise error_for_status(
                        response.status_code,
                        f"Open-Meteo returned {response.status_code} for {url}",
                    )
                payload = response.json()
                if not isinstance(payload, dict):
                    raise ForecastUnavailable("Open-Meteo returned a non-object JSON payload")
                return payload
            except ForecastError as e:
                if not e.retryable:
                    raise
                last_error = e
            except httpx.TimeoutException as e:
                last_error = ForecastUnavailable(f"Open-Meteo request timed out: {e}")
            except httpx.TransportError as e:
                last_error = ForecastUnavailable(f"Open-Meteo transport error: {e}")
            except ValueError as e:
                last_error = ForecastUnavailable(f"Open-Meteo returned invalid JSON: {e}")

            if attempt < self.max_retries - 1:
                delay = self.retry_delay * (2**attempt)
                logger.warning(
                    f"Open-Meteo request failed (attempt {attempt + 1}/{self.max_retries}): "
                    f"{last_error}. Retrying in {delay:.1f}s"
                )
                self._sleep(delay)

        if last_error is None:
            last_error = ForecastUnavailable("Open-Meteo request failed")
        logger.error(f"Open-Meteo request failed after {self.max_retries} attempts: {last_error}")
        raise last_error

    def geocode(self, location: str) -> tuple[float, float]:
        """Resolve a location string to (latitude, longitude).

        A literal "lat,lon" pair is used as-is. Otherwise a trailing country
        code (", IE", ", USA") is stripped before querying the geocoding API,
        which matches on place names only.

        Raises:
            ForecastLocationNotFound: Blank location or no geocoding match
        """
        match = _COORDINATES_RE.match(location)
        if match:
            return float(match.group(1)), float(match.group(2))

        name = _COUNTRY_SUFFIX_RE.sub("", location).strip()
        if not name:
            raise ForecastLocationNotFound(f"Cannot geocode empty location {location!r}")

        data = self._get_json(GEOCODING_URL, {"name": name, "count": 1, "language": "en", "format": "json"})
        results = data.get("results") or []
        if not results:
            raise ForecastLocationNotFound(f"Location not found: {location}", 404)

        top = results[0]
        try:
            latitude, longitude = float(top["latitude"]), float(top["longitude"])
        except (KeyError, TypeError, ValueError) as e:
            raise ForecastUnavailable(f"Malformed geocoding result for {location}: {e}") from e

        logger.debug(f"Geocoded {location!r} to {top.get('name')}, {top.get('country')} ({latitude}, {longitude})")
        return latitude, longitude

    def fetch(self, location: str, days: int, start_date: date | None = None) -> list[WeatherDay]:
        """Fetch a daily forecast for `days` days.

        Args:
            location: Location name or "lat,lon"
            days: Number of days (1-16)
            start_date: First day in the client's zone; the provider's own
                "today" for that zone when omitted

        Returns:
            One WeatherDay per day in the client's zone, keyed by the requested location string
        """
        if not 1 <= days <= OPEN_METEO_MAX_DAYS:
            raise ValueError(f"days must be between 1 and {OPEN_METEO_MAX_DAYS}, got {days}")

        latitude, longitude = self.geocode(location)
        params: dict[str, Any] = {
            "latitude": latitude,
            "longitude": longitude,
            "hourly": ",".join(HOURLY_VARIABLES),
            "timezone": self.timezone,
        }
        if start_date is not None:
            params["start_date"] = start_date.isoformat()
            params["end_date"] = (start_date + timedelta(days=days - 1)).isoformat()
        else:
            params["forecast_days"] = days

        logger.info(f"Fetching {days}-day forecast for {location} ({latitude}, {longitude}) in {self.timezone}")
        data = self._get_json(FORECAST_URL, params)
        return parse_daily_forecast(data, location)


def _hourly_series(hourly: dict[str, Any], name: str, length: int) -> list[Any]:
    series = hourly.get(name)
    if not isinstance(series, list) or len(series) < length:
        raise ForecastUnavailable(f"Open-Meteo response is missing hourly '{name}' values")
    return series


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def parse_daily_forecast(data: dict[str, Any], location: str) -> list[WeatherDay]:
    """Aggregate an Open-Meteo hourly response into daily WeatherDay entries.

    Hours are grouped by the date of their timestamp. Null hourly
    values are skipped; a day with no usable temperature is dropped.

    Raises:
        ForecastUnavailable: The response lacks the hourly block or a variable
    """
    hourly = data.get("hourly")
    if not isinstance(hourly, dict) or not isinstance(hourly.get("time"), list):
        raise ForecastUnavailable("Open-Meteo response has no hourly data")

    times: list[str] = hourly["time"]
    length = len(times)
    series = {name: _hourly_series(hourly, name, length) for name in HOURLY_VARIABLES}

    # date -> list of hourly indexes
    hours_by_day: dict[date, list[int]] = {}
    for index, stamp in enumerate(times):
        try:
            day = date.fromisoformat(str(stamp)[:10])
        except ValueError as e:
            raise ForecastUnavailable(f"Unparseable hourly timestamp {stamp!r}") from e
        hours_by_day.setdefault(day, []).append(index)

    latitude = data.get("latitude")
    longitude = data.get("longitude")
    result: list[WeatherDay] = []

    for day, indexes in sorted(hours_by_day.items()):

        def values(name: str, idx: list[int] = indexes) -> list[float]:
            return [float(series[name][i]) for i in idx if series[name][i] is not None]

        temperatures = values("temperature_2m")
        if not temperatures:
            logger.debug(f"Skipping {day.isoformat()}: no temperature values")
            continue
        feels_like = values("apparent_temperature") or temperatures
        humidity = values("relative_humidity_2m")
        precipitation = values("precipitation_probability")
        wind = values("wind_speed_10m")

        midday = next(
            (i for i in indexes if str(times[i])[11:13] == f"{_MIDDAY_HOUR:02d}"),
            indexes[len(indexes) // 2],
        )
        condition = condition_from_wmo(series["weather_code"][midday])
        wind_direction = series["wind_direction_10m"][midday]

        result.append(
            WeatherDay(
                location=location,
                date=day,
                condition=condition.value,
                description=condition.value,
                latitude=float(latitude) if latitude is not None else None,
                longitude=float(longitude) if longitude is not None else None,
                temperature=round(_mean(temperatures), 1),
                feels_like=round(_mean(feels_like), 1),
                precipitation=min(max(precipitation, default=0.0), 100.0),
                humidity=min(round(_mean(humidity)), 100) if humidity else 0.0,
                wind_speed=round(max(wind, default=0.0), 1),
                wind_direction=float(wind_direction) if wind_direction is not None else 0.0,
            )
        )

    return result


def get_forecast_client() -> OpenMeteoForecastClient:
    """Build the default forecast provider from settings."""
    return OpenMeteoForecastClient()
