"""Weather tolerance checks and scoring per run type.

Eligibility is binary (a day is acceptable for a run type or not). The
weather score only ranks acceptable days; it never eliminates one.
"""

from runcast.planning.constants import DEFAULT_ENGINE_CONFIG, DEFAULT_PREFERENCES, EngineConfig
from runcast.planning.types import RunType, RunTypePreference
from runcast.weather.conditions import first_avoided_match
from runcast.weather.types import WeatherDay


def resolve_preferences(preferences: list[RunTypePreference]) -> dict[RunType, RunTypePreference]:
    """Index preferences by run type, filling gaps with built-in defaults.

    RACE always uses the unrestricted built-in preference.
    """
    resolved = dict(DEFAULT_PREFERENCES)
    for preference in preferences:
        if preference.run_type is not RunType.RACE:
            resolved[preference.run_type] = preference
    return resolved


def rejection_reasons(day: WeatherDay, preference: RunTypePreference) -> list[str]:
    """Explain every limit the day violates. Empty means acceptable.

    Args:
        day: Forecast day
        preference: Tolerances for one run type

    Returns:
        Human-readable reasons, at most one for avoided conditions
    """
    if preference.run_type is RunType.RACE:
        return []

    reasons: list[str] = []
    if preference.max_precipitation is not None and day.precipitation > preference.max_precipitation:
        reasons.append(
            f"Precipitation too high ({round(day.precipitation)}% vs {round(preference.max_precipitation)}% max)"
        )
    if preference.max_wind_speed is not None and day.wind_speed > preference.max_wind_speed:
        reasons.append(
            f"Wind speed exceeds limit ({round(day.wind_speed)} km/h vs {round(preference.max_wind_speed)} km/h max)"
        )
    if preference.min_temperature is not None and day.temperature < preference.min_temperature:
        reasons.append(
            f"Temperature below minimum ({round(day.temperature)}°C vs {round(preference.min_temperature)}°C min)"
        )
    if preference.max_temperature is not None and day.temperature > preference.max_temperature:
        reasons.append(
            f"Temperature above maximum ({round(day.temperature)}°C vs {round(preference.max_temperature)}°C max)"
        )
    avoided = first_avoided_match(day.condition, preference.avoid_conditions)
    if avoided is not None:
        reasons.append(f"Conditions include {avoided} which should be avoided")
    return reasons


def is_acceptable_weather(day: WeatherDay, preference: RunTypePreference) -> bool:
    return not rejection_reasons(day, preference)


def ideal_temperature(preference: RunTypePreference, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> float:
    """Midpoint of the preference's temperature band, or the configured ideal."""
    if preference.min_temperature is not None and preference.max_temperature is not None:
        return (preference.min_temperature + preference.max_temperature) / 2
    return config.ideal_temperature


def weather_score(
    day: WeatherDay,
    preference: RunTypePreference,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    """Score a day for a run type from 0 (awful) to 100 (ideal).

    Starts at 100 and subtracts:
    - precipitation: precip / max_precip * weight, capped (scale 100 without a limit)
    - wind: wind / max_wind * weight, capped, only when wind is limited
    - temperature: |temp - ideal| * per-degree penalty, capped
    - condition: flat penalty when the condition is on the avoid list
    """
    score = 100.0

    precip_scale = max(preference.max_precipitation, 1.0) if preference.max_precipitation is not None else 100.0
    score -= min(day.precipitation / precip_scale * config.precipitation_weight, config.precipitation_weight)

    if preference.max_wind_speed is not None and preference.max_wind_speed > 0:
        score -= min(day.wind_speed / preference.max_wind_speed * config.wind_weight, config.wind_weight)

    temperature_gap = abs(day.temperature - ideal_temperature(preference, config))
    score -= min(temperature_gap * config.temperature_penalty_per_degree, config.temperature_weight)

    if first_avoided_match(day.condition, preference.avoid_conditions) is not None:
        score -= config.condition_weight

    return max(0, min(100, round(score)))


def weather_quality(score: int, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> str:
    """Label a score: excellent, good, fair or poor."""
    if score >= config.excellent_threshold:
        return "excellent"
    if score >= config.good_threshold:
        return "good"
    if score >= config.fair_threshold:
        return "fair"
    return "poor"
