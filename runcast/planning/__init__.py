"""Planning module - weather-aware run suggestions.

This module provides:
- Run types, training phases and the planning data contract
- Weather tolerance checks and scoring per run type
- Progressive overload and rest-gap guards
- The pure suggestion engine
"""

from runcast.planning.constants import DEFAULT_PREFERENCES, PRIORITY_ORDER, EngineConfig
from runcast.planning.engine import generate_suggestions
from runcast.planning.preferences import is_acceptable_weather, rejection_reasons, weather_quality, weather_score
from runcast.planning.types import (
    AcceptedRun,
    LastCompletedRun,
    Phase,
    PhaseOutlook,
    ProgressionStats,
    RuleCheck,
    RunType,
    RunTypePreference,
    Suggestion,
    TrainingWeek,
)

__all__ = [
    "DEFAULT_PREFERENCES",
    "PRIORITY_ORDER",
    "AcceptedRun",
    "EngineConfig",
    "LastCompletedRun",
    "Phase",
    "PhaseOutlook",
    "ProgressionStats",
    "RuleCheck",
    "RunType",
    "RunTypePreference",
    "Suggestion",
    "TrainingWeek",
    "generate_suggestions",
    "is_acceptable_weather",
    "rejection_reasons",
    "weather_quality",
    "weather_score",
]
