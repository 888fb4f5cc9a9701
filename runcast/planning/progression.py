"""Progressive overload and rest-gap guards."""

import datetime as dt
import math
from collections.abc import Iterable
from typing import NamedTuple

from runcast.planning.constants import DEFAULT_ENGINE_CONFIG, EngineConfig
from runcast.planning.types import DEMANDING_RUN_TYPES, ProgressionStats, RunType


class RestAnchor(NamedTuple):
    """A run that needs recovery around it."""

    date: dt.date
    distance: float
    run_type: RunType | None
    source: str  # "completed", "accepted" or "suggested"


def round_down(distance: float, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> float:
    """Round a distance down to the configured step (0.5 km by default)."""
    step = config.distance_step
    return math.floor(round(distance / step, 6)) * step


def long_run_cap(
    long_run_target: float,
    progression: ProgressionStats,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> float:
    """Longest long run allowed: the week's target, bounded by recent history."""
    return min(long_run_target, progression.longest_completed_distance + config.long_run_increment)


def rest_days(distance: float, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> int:
    """Rest days required after a run of `distance` km."""
    required = math.ceil(distance / config.rest_km_per_day) if distance > 0 else 0
    return max(config.min_rest_days, min(config.max_rest_days, required))


def rest_conflict(
    day: dt.date,
    distance: float,
    anchors: Iterable[RestAnchor],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> RestAnchor | None:
    """Find the first anchor that a demanding run on `day` would collide with.

    An earlier anchor needs `rest_days(anchor.distance)` full days before the
    run; a later anchor needs `rest_days(distance)` days after it.
    """
    for anchor in sorted(anchors, key=lambda a: (a.date, a.source)):
        gap = (day - anchor.date).days
        if gap == 0:
            return anchor
        if gap > 0 and gap <= rest_days(anchor.distance, config):
            return anchor
        if gap < 0 and -gap <= rest_days(distance, config):
            return anchor
    return None


def is_demanding(run_type: RunType) -> bool:
    return run_type in DEMANDING_RUN_TYPES
