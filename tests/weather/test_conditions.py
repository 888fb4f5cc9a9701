import pytest

from runcast.weather.conditions import (
    WeatherCategory,
    WeatherCondition,
    categorize,
    condition_from_wmo,
    first_avoided_match,
    matches_condition,
    parse_condition,
)


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        (0, WeatherCondition.CLEAR),
        (3, WeatherCondition.OVERCAST),
        (65, WeatherCondition.HEAVY_RAIN),
        (75, WeatherCondition.HEAVY_SNOW),
        (96, WeatherCondition.THUNDERSTORM_SLIGHT_HAIL),
        (42, WeatherCondition.UNKNOWN),
        (None, WeatherCondition.UNKNOWN),
    ],
)
def test_condition_from_wmo(code, expected):
    assert condition_from_wmo(code) is expected


def test_parse_condition_is_case_and_whitespace_insensitive():
    assert parse_condition("  heavy   RAIN ") is WeatherCondition.HEAVY_RAIN
    assert parse_condition("Sunny spells") is WeatherCondition.UNKNOWN


def test_categorize_known_labels_and_free_text():
    assert categorize("Slight Rain Showers") is WeatherCategory.RAIN
    assert categorize("Depositing Rime Fog") is WeatherCategory.FOG
    assert categorize("Light sleet later") is WeatherCategory.SNOW
    assert categorize("Sunny") is WeatherCategory.CLEAR
    assert categorize("???") is WeatherCategory.UNKNOWN


def test_matches_condition_by_containment():
    assert matches_condition("Thunderstorm with Slight Hail", "Thunderstorm")
    assert matches_condition("Heavy Rain", "heavy rain")
    assert matches_condition("Heavy  Rain", "Heavy Rain")
    assert not matches_condition("Slight Rain", "Heavy Rain")


def test_matches_condition_by_category():
    assert matches_condition("Snow Grains", "snow")
    assert matches_condition("Overcast", "Cloudy")
    assert not matches_condition("Clear", "rain")


def test_matches_condition_ignores_blank_entries():
    assert not matches_condition("Heavy Rain", "   ")


def test_first_avoided_match_is_deterministic():
    avoid = {"Thunderstorm", "Heavy Rain", "rain"}
    assert first_avoided_match("Heavy Rain", avoid) == "Heavy Rain"
    assert first_avoided_match("Clear", avoid) is None
