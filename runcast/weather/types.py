"""Forecast data contract between the cache and the suggestion engine.

WeatherDay is an immutable per-day snapshot for one location. CacheEntry
wraps a WeatherDay with its freshness window.
"""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field


class WeatherDay(BaseModel):
    """Daily weather snapshot for a location.

    Attributes:
        location: Location key exactly as requested (e.g., "Balbriggan, IE")
        date: Local calendar date of the forecast
        condition: Condition label (a WeatherCondition value for provider data)
        description: Longer description, defaults to the condition label
        latitude: Resolved latitude
        longitude: Resolved longitude
        temperature: Mean temperature in Celsius
        feels_like: Mean apparent temperature in Celsius
        precipitation: Maximum precipitation probability (0-100)
        humidity: Mean relative humidity (0-100)
        wind_speed: Maximum wind speed in km/h
        wind_direction: Midday wind direction in degrees (0-360)
    """

    model_config = ConfigDict(frozen=True)

    location: str
    date: dt.date
    condition: str
    description: str = ""
    latitude: float | None = None
    longitude: float | None = None
    temperature: float
    feels_like: float
    precipitation: float = Field(ge=0, le=100)
    humidity: float = Field(ge=0, le=100)
    wind_speed: float = Field(ge=0)
    wind_direction: float = 0.0


class CacheEntry(BaseModel):
    """A cached forecast day and its freshness window."""

    model_config = ConfigDict(frozen=True)

    day: WeatherDay
    cached_at: dt.datetime
    expires_at: dt.datetime
