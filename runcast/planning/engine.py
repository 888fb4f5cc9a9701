"""Rule-based run suggestion engine.

`generate_suggestions` turns a forecast, the current training week, per-run-
type weather tolerances and the running history into at most one suggested
run per forecast day. It is pure: no I/O, no clock, no randomness. The same
inputs always give the same suggestions, and infeasibility only ever shows up
as fewer (possibly zero) suggestions.

Selection order:
1. Race day (if the race date is an open forecast day)
2. The long run, on the best-scoring eligible day (weekends win ties)
3. Remaining days in date order, highest-scoring run type first, ties broken
   by run type priority, until the weekly budget is spent
"""

import datetime as dt
from collections.abc import Sequence
from typing import NamedTuple

from loguru import logger

from runcast.planning.constants import DEFAULT_ENGINE_CONFIG, PRIORITY_ORDER, EngineConfig
from runcast.planning.preferences import (
    rejection_reasons,
    resolve_preferences,
    weather_quality,
    weather_score,
)
from runcast.planning.progression import RestAnchor, is_demanding, long_run_cap, rest_conflict, rest_days, round_down
from runcast.planning.types import (
    PHASE_LABELS,
    QUALITY_RUN_TYPES,
    AcceptedRun,
    Phase,
    ProgressionStats,
    RuleCheck,
    RunType,
    RunTypePreference,
    Suggestion,
    TrainingWeek,
)
from runcast.weather.types import WeatherDay

ACCEPTED_RUN_EXCLUSION = "ACCEPTED_RUN_EXCLUSION"
WEATHER_ELIGIBILITY = "WEATHER_ELIGIBILITY"
TRAINING_PLAN = "TRAINING_PLAN"
PROGRESSIVE_OVERLOAD = "PROGRESSIVE_OVERLOAD"
REST_GAP = "REST_GAP"
WEEKLY_BUDGET = "WEEKLY_BUDGET"
PRIORITY = "PRIORITY"
RACE_DAY = "RACE_DAY"

# Run types considered for ordinary days; the long run and race are placed first
_DAILY_RUN_TYPES = tuple(t for t in PRIORITY_ORDER if t is not RunType.LONG_RUN)


class _Candidate(NamedTuple):
    run_type: RunType
    distance: float
    nominal: float
    score: int
    quality: str


class _PlanTargets(NamedTuple):
    long_run_target: float
    weekly_mileage_target: float
    phase: Phase | None
    summary: str


def _plan_targets(training_week: TrainingWeek | None, config: EngineConfig) -> _PlanTargets:
    if training_week is None:
        return _PlanTargets(
            config.default_long_run_target,
            config.default_weekly_mileage_target,
            None,
            f"No training week covers this window; using defaults (long run {config.default_long_run_target:g} km, "
            f"weekly {config.default_weekly_mileage_target:g} km)",
        )
    return _PlanTargets(
        training_week.long_run_target,
        training_week.weekly_mileage_target,
        training_week.phase,
        f"Week {training_week.week_number} ({PHASE_LABELS[training_week.phase]}): long run target "
        f"{training_week.long_run_target:g} km, weekly target {training_week.weekly_mileage_target:g} km",
    )


def _nominal_distance(run_type: RunType, targets: _PlanTargets, config: EngineConfig) -> float:
    easy = targets.weekly_mileage_target * config.easy_fraction
    nominal = {
        RunType.TEMPO_RUN: targets.long_run_target * config.tempo_fraction,
        RunType.INTERVAL_RUN: targets.long_run_target * config.interval_fraction,
        RunType.EASY_RUN: easy,
        RunType.RECOVERY_RUN: easy * config.recovery_fraction,
    }[run_type]
    return round_down(nominal, config)


def _describe_anchor(anchor: RestAnchor) -> str:
    label = anchor.run_type.value if anchor.run_type is not None else "run"
    return f"{anchor.source} {label} of {anchor.distance:g} km on {anchor.date.isoformat()}"


def _dedupe_forecast(forecast: Sequence[WeatherDay]) -> list[WeatherDay]:
    by_date: dict[dt.date, WeatherDay] = {}
    for day in forecast:
        by_date.setdefault(day.date, day)
    return [by_date[d] for d in sorted(by_date)]


def generate_suggestions(
    forecast: Sequence[WeatherDay],
    training_week: TrainingWeek | None,
    preferences: Sequence[RunTypePreference],
    accepted_runs: Sequence[AcceptedRun],
    progression: ProgressionStats,
    *,
    race_date: dt.date | None = None,
    race_distance: float | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[Suggestion]:
    """Suggest runs for the forecast window.

    Args:
        forecast: Forecast days; duplicates collapse to the first per date
        training_week: Plan week containing today, or None for defaults
        preferences: Stored tolerances; missing run types use built-in defaults
        accepted_runs: Runs already on the calendar (completed or not)
        progression: Longest completed distance and last completed run
        race_date: Date of the target race, if any
        race_distance: Race distance in km (defaults to a half marathon)
        config: Tuning constants

    Returns:
        Suggestions in ascending date order, at most one per open forecast day
    """
    days = _dedupe_forecast(forecast)
    if not days:
        return []

    resolved = resolve_preferences(list(preferences))
    targets = _plan_targets(training_week, config)
    accepted_dates = {run.date for run in accepted_runs}
    window_start, window_end = days[0].date, days[-1].date
    window_runs = [run for run in accepted_runs if window_start <= run.date <= window_end]
    open_days = [day for day in days if day.date not in accepted_dates]

    budget = targets.weekly_mileage_target - sum(run.distance for run in window_runs)
    quality_quota = config.quality_sessions(targets.phase)
    quality_used = {run.run_type for run in window_runs if run.run_type in QUALITY_RUN_TYPES}
    long_run_accepted = any(run.run_type is RunType.LONG_RUN for run in window_runs)

    anchors: list[RestAnchor] = [
        RestAnchor(run.date, run.distance, run.run_type, "accepted") for run in accepted_runs if is_demanding(run.run_type)
    ]
    if progression.last_completed_run is not None:
        last = progression.last_completed_run
        anchors.append(RestAnchor(last.date, last.distance, None, "completed"))

    excluded_check = RuleCheck(rule_id=ACCEPTED_RUN_EXCLUSION, description="No run scheduled on this date")
    plan_check = RuleCheck(rule_id=TRAINING_PLAN, description=targets.summary)
    selected: dict[dt.date, Suggestion] = {}

    logger.debug(
        f"Generating suggestions for {len(open_days)}/{len(days)} open days, budget {budget:g} km, "
        f"quality quota {quality_quota}"
    )

    # 1. Race day
    if race_date is not None:
        race_day = next((day for day in open_days if day.date == race_date), None)
        if race_day is not None:
            distance = race_distance or config.default_race_distance
            score = weather_score(race_day, resolved[RunType.RACE], config)
            selected[race_day.date] = Suggestion(
                date=race_day.date,
                run_type=RunType.RACE,
                distance=distance,
                weather_score=score,
                weather_quality=weather_quality(score, config),
                condition=race_day.condition,
                rationale=(
                    excluded_check,
                    RuleCheck(rule_id=RACE_DAY, description=f"Race day: {distance:g} km, outside the weekly budget"),
                    RuleCheck(rule_id=WEATHER_ELIGIBILITY, description="Races go ahead in any weather"),
                ),
            )
            anchors.append(RestAnchor(race_day.date, distance, RunType.RACE, "suggested"))

    # 2. Long run
    if long_run_accepted:
        logger.debug("Long run already scheduled in this window")
    else:
        long_preference = resolved[RunType.LONG_RUN]
        cap = long_run_cap(targets.long_run_target, progression, config)
        distance = round_down(min(cap, budget), config)
        if distance < config.min_run_distance:
            logger.debug(f"No long run: allowed distance {distance:g} km below minimum {config.min_run_distance:g} km")
        else:
            # Highest score, then a preferred weekday, then the earliest date
            best: tuple[tuple[int, bool], WeatherDay] | None = None
            for day in open_days:
                if day.date in selected or rejection_reasons(day, long_preference):
                    continue
                if rest_conflict(day.date, distance, anchors, config) is not None:
                    continue
                rank = (weather_score(day, long_preference, config), day.date.weekday() in config.long_run_weekdays)
                if best is None or rank > best[0]:
                    best = (rank, day)

            if best is not None:
                (score, _), day = best
                overload = (
                    f"Capped at {distance:g} km (longest completed {progression.longest_completed_distance:g} km "
                    f"+ {config.long_run_increment:g} km, target {targets.long_run_target:g} km)"
                )
                selected[day.date] = Suggestion(
                    date=day.date,
                    run_type=RunType.LONG_RUN,
                    distance=distance,
                    weather_score=score,
                    weather_quality=weather_quality(score, config),
                    condition=day.condition,
                    rationale=(
                        excluded_check,
                        RuleCheck(
                            rule_id=WEATHER_ELIGIBILITY,
                            description=f"Weather within LONG_RUN limits, best long run day (score {score})",
                        ),
                        plan_check,
                        RuleCheck(rule_id=PROGRESSIVE_OVERLOAD, description=overload),
                        RuleCheck(
                            rule_id=REST_GAP,
                            description=f"Clear of rest windows; needs {rest_days(distance, config)} rest day(s) after",
                        ),
                        RuleCheck(
                            rule_id=WEEKLY_BUDGET,
                            description=f"{distance:g} km of {budget:g} km remaining this week",
                        ),
                    ),
                )
                budget -= distance
                anchors.append(RestAnchor(day.date, distance, RunType.LONG_RUN, "suggested"))
            else:
                logger.debug("No open day suits a long run")

    # 3. Remaining days in date order
    for day in open_days:
        if day.date in selected:
            continue
        if budget < config.min_run_distance:
            logger.debug(f"Weekly budget spent ({budget:g} km left); stopping")
            break

        candidates: list[_Candidate] = []
        rejected: list[RuleCheck] = []
        for run_type in _DAILY_RUN_TYPES:
            preference = resolved[run_type]
            reasons = rejection_reasons(day, preference)
            if reasons:
                rejected.append(
                    RuleCheck(rule_id=WEATHER_ELIGIBILITY, description=f"{run_type}: {'; '.join(reasons)}", passed=False)
                )
                continue

            if run_type in QUALITY_RUN_TYPES and (run_type in quality_used or len(quality_used) >= quality_quota):
                rejected.append(
                    RuleCheck(
                        rule_id=TRAINING_PLAN,
                        description=f"{run_type}: quality session limit reached ({quality_quota} per window)",
                        passed=False,
                    )
                )
                continue

            nominal = _nominal_distance(run_type, targets, config)
            distance = round_down(min(nominal, budget), config)
            if distance < config.min_run_distance:
                rejected.append(
                    RuleCheck(
                        rule_id=WEEKLY_BUDGET,
                        description=f"{run_type}: {distance:g} km fits the budget, below the {config.min_run_distance:g} km minimum",
                        passed=False,
                    )
                )
                continue

            if is_demanding(run_type):
                conflict = rest_conflict(day.date, distance, anchors, config)
                if conflict is not None:
                    rejected.append(
                        RuleCheck(
                            rule_id=REST_GAP,
                            description=f"{run_type}: too close to {_describe_anchor(conflict)}",
                            passed=False,
                        )
                    )
                    continue

            score = weather_score(day, preference, config)
            candidates.append(_Candidate(run_type, distance, nominal, score, weather_quality(score, config)))

        if not candidates:
            logger.debug(f"{day.date.isoformat()}: no run type fits")
            continue

        winner = min(candidates, key=lambda c: (-c.score, PRIORITY_ORDER.index(c.run_type)))
        runners_up = [f"{c.run_type.value} ({c.score})" for c in candidates if c is not winner]
        priority_note = (
            f"Chosen over {', '.join(runners_up)} with score {winner.score}; ties go by priority order"
            if runners_up
            else f"Only fitting run type ({winner.quality} weather)"
        )
        budget_note = f"{winner.distance:g} km of {budget:g} km remaining this week"
        if winner.distance < winner.nominal:
            budget_note += f" (shortened from {winner.nominal:g} km)"
        rest_note = (
            f"Clear of rest windows; needs {rest_days(winner.distance, config)} rest day(s) after"
            if is_demanding(winner.run_type)
            else "Not a demanding run; no rest gap required"
        )

        selected[day.date] = Suggestion(
            date=day.date,
            run_type=winner.run_type,
            distance=winner.distance,
            weather_score=winner.score,
            weather_quality=winner.quality,
            condition=day.condition,
            rationale=(
                excluded_check,
                *rejected,
                RuleCheck(
                    rule_id=WEATHER_ELIGIBILITY,
                    description=f"Weather within {winner.run_type} limits (score {winner.score})",
                ),
                plan_check,
                RuleCheck(rule_id=REST_GAP, description=rest_note),
                RuleCheck(rule_id=WEEKLY_BUDGET, description=budget_note),
                RuleCheck(rule_id=PRIORITY, description=priority_note),
            ),
        )
        budget -= winner.distance
        if winner.run_type in QUALITY_RUN_TYPES:
            quality_used.add(winner.run_type)
        if is_demanding(winner.run_type):
            anchors.append(RestAnchor(day.date, winner.distance, winner.run_type, "suggested"))

    suggestions = [selected[d] for d in sorted(selected)]
    logger.debug(f"Generated {len(suggestions)} suggestions, {budget:g} km of budget left")
    return suggestions
