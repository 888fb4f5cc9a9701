"""Tuning constants for the suggestion engine.

Every number the engine uses lives on EngineConfig so callers (and tests)
can override it without touching the rules.
"""

from pydantic import BaseModel, ConfigDict, Field

from runcast.planning.types import Phase, RunType, RunTypePreference

# Tie-break order when several run types fit a day equally well
PRIORITY_ORDER: tuple[RunType, ...] = (
    RunType.LONG_RUN,
    RunType.TEMPO_RUN,
    RunType.INTERVAL_RUN,
    RunType.EASY_RUN,
    RunType.RECOVERY_RUN,
)


class EngineConfig(BaseModel):
    """Overridable engine constants. Distances in km, temperatures in Celsius."""

    model_config = ConfigDict(frozen=True)

    # Progression
    long_run_increment: float = Field(default=1.0, ge=0)
    min_run_distance: float = Field(default=3.0, gt=0)
    distance_step: float = Field(default=0.5, gt=0)

    # Rest gap: ceil(distance / rest_km_per_day) clamped to [min_rest_days, max_rest_days]
    rest_km_per_day: float = Field(default=8.0, gt=0)
    min_rest_days: int = Field(default=1, ge=0)
    max_rest_days: int = Field(default=3, ge=0)

    # Preferred long run days (Monday=0), used to break weather score ties; empty disables
    long_run_weekdays: frozenset[int] = frozenset({5, 6})

    # Used when no training week covers today
    default_long_run_target: float = Field(default=10.0, gt=0)
    default_weekly_mileage_target: float = Field(default=20.0, gt=0)
    default_race_distance: float = Field(default=21.1, gt=0)  # half marathon

    # Nominal distances as fractions of the week's targets
    tempo_fraction: float = Field(default=0.5, gt=0)  # of long_run_target
    interval_fraction: float = Field(default=0.4, gt=0)  # of long_run_target
    easy_fraction: float = Field(default=0.2, gt=0)  # of weekly_mileage_target
    recovery_fraction: float = Field(default=0.6, gt=0)  # of the easy distance

    # Quality sessions (tempo, interval) allowed per window
    quality_sessions_by_phase: dict[Phase, int] = Field(default_factory=lambda: {Phase.SPEED_DEVELOPMENT: 2})
    default_quality_sessions: int = Field(default=1, ge=0)

    # Weather score
    precipitation_weight: float = 40.0
    wind_weight: float = 25.0
    temperature_weight: float = 20.0
    condition_weight: float = 15.0
    temperature_penalty_per_degree: float = 2.0
    ideal_temperature: float = 12.5

    # Weather quality bands (score >= threshold)
    excellent_threshold: int = 80
    good_threshold: int = 60
    fair_threshold: int = 40

    def quality_sessions(self, phase: Phase | None) -> int:
        if phase is None:
            return self.default_quality_sessions
        return self.quality_sessions_by_phase.get(phase, self.default_quality_sessions)


DEFAULT_ENGINE_CONFIG = EngineConfig()

_HARSH = frozenset({"Heavy Rain", "Thunderstorm", "Heavy Snow"})

# Built-in tolerances for run types without a stored preference row
DEFAULT_PREFERENCES: dict[RunType, RunTypePreference] = {
    RunType.LONG_RUN: RunTypePreference(
        run_type=RunType.LONG_RUN,
        max_precipitation=20,
        max_wind_speed=25,
        min_temperature=0,
        max_temperature=25,
        avoid_conditions=_HARSH,
    ),
    RunType.EASY_RUN: RunTypePreference(
        run_type=RunType.EASY_RUN,
        max_precipitation=50,
        max_wind_speed=35,
        min_temperature=-5,
        max_temperature=30,
        avoid_conditions=frozenset({"Thunderstorm", "Heavy Snow"}),
    ),
    RunType.TEMPO_RUN: RunTypePreference(
        run_type=RunType.TEMPO_RUN,
        max_precipitation=30,
        max_wind_speed=25,
        min_temperature=5,
        max_temperature=25,
        avoid_conditions=_HARSH,
    ),
    RunType.INTERVAL_RUN: RunTypePreference(
        run_type=RunType.INTERVAL_RUN,
        max_precipitation=30,
        max_wind_speed=25,
        min_temperature=5,
        max_temperature=25,
        avoid_conditions=_HARSH,
    ),
    RunType.RECOVERY_RUN: RunTypePreference(
        run_type=RunType.RECOVERY_RUN,
        max_precipitation=60,
        max_wind_speed=40,
        min_temperature=-5,
        max_temperature=30,
        avoid_conditions=frozenset({"Thunderstorm"}),
    ),
    RunType.RACE: RunTypePreference(run_type=RunType.RACE),
}
