"""Weather conditions as closed enumerations.

Conditions come from WMO weather interpretation codes. Callers never do
their own substring checks on condition text; `matches_condition` is the
single place where a day's condition is compared to a user's avoid list.
"""

from collections.abc import Iterable
from enum import StrEnum


class WeatherCategory(StrEnum):
    CLEAR = "clear"
    CLOUDY = "cloudy"
    FOG = "fog"
    DRIZZLE = "drizzle"
    RAIN = "rain"
    SNOW = "snow"
    THUNDERSTORM = "thunderstorm"
    UNKNOWN = "unknown"


class WeatherCondition(StrEnum):
    CLEAR = "Clear"
    MAINLY_CLEAR = "Mainly Clear"
    PARTLY_CLOUDY = "Partly Cloudy"
    OVERCAST = "Overcast"
    FOGGY = "Foggy"
    RIME_FOG = "Depositing Rime Fog"
    LIGHT_DRIZZLE = "Light Drizzle"
    MODERATE_DRIZZLE = "Moderate Drizzle"
    DENSE_DRIZZLE = "Dense Drizzle"
    LIGHT_FREEZING_DRIZZLE = "Light Freezing Drizzle"
    DENSE_FREEZING_DRIZZLE = "Dense Freezing Drizzle"
    SLIGHT_RAIN = "Slight Rain"
    MODERATE_RAIN = "Moderate Rain"
    HEAVY_RAIN = "Heavy Rain"
    LIGHT_FREEZING_RAIN = "Light Freezing Rain"
    HEAVY_FREEZING_RAIN = "Heavy Freezing Rain"
    SLIGHT_SNOW = "Slight Snow"
    MODERATE_SNOW = "Moderate Snow"
    HEAVY_SNOW = "Heavy Snow"
    SNOW_GRAINS = "Snow Grains"
    SLIGHT_RAIN_SHOWERS = "Slight Rain Showers"
    MODERATE_RAIN_SHOWERS = "Moderate Rain Showers"
    VIOLENT_RAIN_SHOWERS = "Violent Rain Showers"
    SLIGHT_SNOW_SHOWERS = "Slight Snow Showers"
    HEAVY_SNOW_SHOWERS = "Heavy Snow Showers"
    THUNDERSTORM = "Thunderstorm"
    THUNDERSTORM_SLIGHT_HAIL = "Thunderstorm with Slight Hail"
    THUNDERSTORM_HEAVY_HAIL = "Thunderstorm with Heavy Hail"
    UNKNOWN = "Unknown"


# WMO weather interpretation codes (https://open-meteo.com/en/docs#weathervariables)
WMO_CONDITIONS: dict[int, WeatherCondition] = {
    0: WeatherCondition.CLEAR,
    1: WeatherCondition.MAINLY_CLEAR,
    2: WeatherCondition.PARTLY_CLOUDY,
    3: WeatherCondition.OVERCAST,
    45: WeatherCondition.FOGGY,
    48: WeatherCondition.RIME_FOG,
    51: WeatherCondition.LIGHT_DRIZZLE,
    53: WeatherCondition.MODERATE_DRIZZLE,
    55: WeatherCondition.DENSE_DRIZZLE,
    56: WeatherCondition.LIGHT_FREEZING_DRIZZLE,
    57: WeatherCondition.DENSE_FREEZING_DRIZZLE,
    61: WeatherCondition.SLIGHT_RAIN,
    63: WeatherCondition.MODERATE_RAIN,
    65: WeatherCondition.HEAVY_RAIN,
    66: WeatherCondition.LIGHT_FREEZING_RAIN,
    67: WeatherCondition.HEAVY_FREEZING_RAIN,
    71: WeatherCondition.SLIGHT_SNOW,
    73: WeatherCondition.MODERATE_SNOW,
    75: WeatherCondition.HEAVY_SNOW,
    77: WeatherCondition.SNOW_GRAINS,
    80: WeatherCondition.SLIGHT_RAIN_SHOWERS,
    81: WeatherCondition.MODERATE_RAIN_SHOWERS,
    82: WeatherCondition.VIOLENT_RAIN_SHOWERS,
    85: WeatherCondition.SLIGHT_SNOW_SHOWERS,
    86: WeatherCondition.HEAVY_SNOW_SHOWERS,
    95: WeatherCondition.THUNDERSTORM,
    96: WeatherCondition.THUNDERSTORM_SLIGHT_HAIL,
    99: WeatherCondition.THUNDERSTORM_HEAVY_HAIL,
}

_CONDITION_CATEGORIES: dict[WeatherCondition, WeatherCategory] = {
    WeatherCondition.CLEAR: WeatherCategory.CLEAR,
    WeatherCondition.MAINLY_CLEAR: WeatherCategory.CLEAR,
    WeatherCondition.PARTLY_CLOUDY: WeatherCategory.CLOUDY,
    WeatherCondition.OVERCAST: WeatherCategory.CLOUDY,
    WeatherCondition.FOGGY: WeatherCategory.FOG,
    WeatherCondition.RIME_FOG: WeatherCategory.FOG,
    WeatherCondition.LIGHT_DRIZZLE: WeatherCategory.DRIZZLE,
    WeatherCondition.MODERATE_DRIZZLE: WeatherCategory.DRIZZLE,
    WeatherCondition.DENSE_DRIZZLE: WeatherCategory.DRIZZLE,
    WeatherCondition.LIGHT_FREEZING_DRIZZLE: WeatherCategory.DRIZZLE,
    WeatherCondition.DENSE_FREEZING_DRIZZLE: WeatherCategory.DRIZZLE,
    WeatherCondition.SLIGHT_RAIN: WeatherCategory.RAIN,
    WeatherCondition.MODERATE_RAIN: WeatherCategory.RAIN,
    WeatherCondition.HEAVY_RAIN: WeatherCategory.RAIN,
    WeatherCondition.LIGHT_FREEZING_RAIN: WeatherCategory.RAIN,
    WeatherCondition.HEAVY_FREEZING_RAIN: WeatherCategory.RAIN,
    WeatherCondition.SLIGHT_RAIN_SHOWERS: WeatherCategory.RAIN,
    WeatherCondition.MODERATE_RAIN_SHOWERS: WeatherCategory.RAIN,
    WeatherCondition.VIOLENT_RAIN_SHOWERS: WeatherCategory.RAIN,
    WeatherCondition.SLIGHT_SNOW: WeatherCategory.SNOW,
    WeatherCondition.MODERATE_SNOW: WeatherCategory.SNOW,
    WeatherCondition.HEAVY_SNOW: WeatherCategory.SNOW,
    WeatherCondition.SNOW_GRAINS: WeatherCategory.SNOW,
    WeatherCondition.SLIGHT_SNOW_SHOWERS: WeatherCategory.SNOW,
    WeatherCondition.HEAVY_SNOW_SHOWERS: WeatherCategory.SNOW,
    WeatherCondition.THUNDERSTORM: WeatherCategory.THUNDERSTORM,
    WeatherCondition.THUNDERSTORM_SLIGHT_HAIL: WeatherCategory.THUNDERSTORM,
    WeatherCondition.THUNDERSTORM_HEAVY_HAIL: WeatherCategory.THUNDERSTORM,
    WeatherCondition.UNKNOWN: WeatherCategory.UNKNOWN,
}

# Keyword fallback for condition text that is not one of the WMO labels
_CATEGORY_KEYWORDS: tuple[tuple[str, WeatherCategory], ...] = (
    ("thunder", WeatherCategory.THUNDERSTORM),
    ("snow", WeatherCategory.SNOW),
    ("sleet", WeatherCategory.SNOW),
    ("drizzle", WeatherCategory.DRIZZLE),
    ("rain", WeatherCategory.RAIN),
    ("shower", WeatherCategory.RAIN),
    ("fog", WeatherCategory.FOG),
    ("mist", WeatherCategory.FOG),
    ("overcast", WeatherCategory.CLOUDY),
    ("cloud", WeatherCategory.CLOUDY),
    ("clear", WeatherCategory.CLEAR),
    ("sun", WeatherCategory.CLEAR),
)

_CONDITIONS_BY_TEXT: dict[str, WeatherCondition] = {c.value.casefold(): c for c in WeatherCondition}


def _normalize(text: str) -> str:
    return " ".join(text.split()).casefold()


def condition_from_wmo(code: int | None) -> WeatherCondition:
    """Map a WMO weather code to a condition, UNKNOWN for unmapped codes."""
    if code is None:
        return WeatherCondition.UNKNOWN
    return WMO_CONDITIONS.get(int(code), WeatherCondition.UNKNOWN)


def parse_condition(text: str) -> WeatherCondition:
    """Parse condition text back into the enum, UNKNOWN if it is not a WMO label."""
    return _CONDITIONS_BY_TEXT.get(_normalize(text), WeatherCondition.UNKNOWN)


def categorize(condition: str) -> WeatherCategory:
    """Return the broad category of a condition label."""
    parsed = parse_condition(condition)
    if parsed is not WeatherCondition.UNKNOWN:
        return _CONDITION_CATEGORIES[parsed]

    normalized = _normalize(condition)
    for keyword, category in _CATEGORY_KEYWORDS:
        if keyword in normalized:
            return category
    return WeatherCategory.UNKNOWN


def matches_condition(condition: str, avoided: str) -> bool:
    """Check whether a day's condition matches one avoid-list entry.

    Matching is case-insensitive and whitespace-normalised. An entry matches
    when it is contained in the condition label ("Thunderstorm" matches
    "Thunderstorm with Slight Hail") or when it names the condition's
    category ("snow" matches "Snow Grains", "cloudy" matches "Overcast").
    """
    needle = _normalize(avoided)
    if not needle:
        return False
    if needle in _normalize(condition):
        return True
    category = categorize(condition)
    return category is not WeatherCategory.UNKNOWN and needle == category.value


def first_avoided_match(condition: str, avoid_conditions: Iterable[str]) -> str | None:
    """Return the first avoid-list entry (sorted) matching the condition, or None."""
    for avoided in sorted(avoid_conditions):
        if matches_condition(condition, avoided):
            return avoided
    return None
