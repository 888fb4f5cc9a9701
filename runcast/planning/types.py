"""Types shared by the suggestion engine and its collaborators.

All models are immutable. The engine only reads them; repositories build
them from database rows.
"""

import datetime as dt
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class RunType(StrEnum):
    LONG_RUN = "LONG_RUN"
    EASY_RUN = "EASY_RUN"
    TEMPO_RUN = "TEMPO_RUN"
    INTERVAL_RUN = "INTERVAL_RUN"
    RECOVERY_RUN = "RECOVERY_RUN"
    RACE = "RACE"


class Phase(StrEnum):
    BASE_BUILDING = "BASE_BUILDING"
    BASE_EXTENSION = "BASE_EXTENSION"
    SPEED_DEVELOPMENT = "SPEED_DEVELOPMENT"
    PEAK_TAPER = "PEAK_TAPER"


PHASE_LABELS: dict[Phase, str] = {
    Phase.BASE_BUILDING: "Base Building",
    Phase.BASE_EXTENSION: "Base Extension",
    Phase.SPEED_DEVELOPMENT: "Speed Development",
    Phase.PEAK_TAPER: "Peak & Taper",
}

# Runs that need recovery afterwards and are blocked inside a rest window
DEMANDING_RUN_TYPES: frozenset[RunType] = frozenset(
    {RunType.LONG_RUN, RunType.TEMPO_RUN, RunType.INTERVAL_RUN, RunType.RACE}
)

QUALITY_RUN_TYPES: frozenset[RunType] = frozenset({RunType.TEMPO_RUN, RunType.INTERVAL_RUN})


class TrainingWeek(BaseModel):
    """Training plan row for the week containing "today". Distances in km."""

    model_config = ConfigDict(frozen=True)

    week_number: int = Field(ge=1)
    phase: Phase
    week_start: dt.date
    week_end: dt.date
    weekly_mileage_target: float = Field(gt=0)
    long_run_target: float = Field(gt=0)
    notes: str | None = None


class RunTypePreference(BaseModel):
    """Weather tolerance for one run type. None means "no limit"."""

    model_config = ConfigDict(frozen=True)

    run_type: RunType
    max_precipitation: float | None = None
    max_wind_speed: float | None = None
    min_temperature: float | None = None
    max_temperature: float | None = None
    avoid_conditions: frozenset[str] = frozenset()


class AcceptedRun(BaseModel):
    """A run already on the calendar; its date is never suggested again."""

    model_config = ConfigDict(frozen=True)

    id: str
    date: dt.date
    run_type: RunType
    distance: float = Field(ge=0)
    completed: bool = False


class LastCompletedRun(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    distance: float = Field(ge=0)


class ProgressionStats(BaseModel):
    """Aggregates over completed runs that bound suggested distances and rest."""

    model_config = ConfigDict(frozen=True)

    longest_completed_distance: float = Field(default=0.0, ge=0)
    last_completed_run: LastCompletedRun | None = None


class RuleCheck(BaseModel):
    """One evaluated rule in a suggestion's rationale.

    Attributes:
        rule_id: Stable rule identifier (e.g., "REST_GAP")
        description: Human-readable outcome of the check
        passed: Whether the rule allowed the suggestion as made. A rule that
            shortened or reshaped the suggestion (e.g., a capped long run)
            still passes; the description says what fired.
    """

    model_config = ConfigDict(frozen=True)

    rule_id: str
    description: str
    passed: bool = True


class Suggestion(BaseModel):
    """A suggested run for one forecast day."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    run_type: RunType
    distance: float
    weather_score: int = Field(ge=0, le=100)
    weather_quality: str
    condition: str
    rationale: tuple[RuleCheck, ...] = ()


class PhaseWindow(BaseModel):
    model_config = ConfigDict(frozen=True)

    phase: Phase
    start_date: dt.date
    end_date: dt.date


class PhaseOutlook(BaseModel):
    """Where "today" sits in the training plan.

    Attributes:
        current_phase: Phase of the current (or nearest) plan week, if any
        week_number: Plan week number of that week
        in_plan: False when today is before the first or after the last week
        upcoming: Next distinct phases (at most two) with their date ranges
    """

    model_config = ConfigDict(frozen=True)

    current_phase: Phase | None = None
    week_number: int | None = None
    in_plan: bool = False
    upcoming: tuple[PhaseWindow, ...] = ()
