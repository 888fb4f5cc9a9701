import datetime as dt

import pytest

from runcast.planning.constants import EngineConfig
from runcast.planning.progression import RestAnchor, long_run_cap, rest_conflict, rest_days, round_down
from runcast.planning.types import ProgressionStats, RunType

DAY = dt.date(2026, 3, 2)


@pytest.mark.parametrize(("distance", "expected"), [(13.0, 13.0), (5.6, 5.5), (6.99, 6.5), (2.4, 2.0)])
def test_round_down_to_half_km(distance, expected):
    assert round_down(distance) == expected


def test_long_run_cap_is_bounded_by_history():
    assert long_run_cap(14, ProgressionStats(longest_completed_distance=12)) == 13
    assert long_run_cap(10, ProgressionStats(longest_completed_distance=12)) == 10


def test_long_run_cap_increment_is_configurable():
    config = EngineConfig(long_run_increment=2.0)
    assert long_run_cap(20, ProgressionStats(longest_completed_distance=12), config) == 14


@pytest.mark.parametrize(("distance", "days"), [(0, 1), (5, 1), (8, 1), (8.5, 2), (16, 2), (21.1, 3), (42.2, 3)])
def test_rest_days_scale_with_distance(distance, days):
    assert rest_days(distance) == days


def test_rest_conflict_after_earlier_anchor():
    long_run = RestAnchor(DAY, 13.0, RunType.LONG_RUN, "suggested")

    assert rest_conflict(DAY + dt.timedelta(days=1), 5, [long_run]) == long_run
    assert rest_conflict(DAY + dt.timedelta(days=2), 5, [long_run]) == long_run
    assert rest_conflict(DAY + dt.timedelta(days=3), 5, [long_run]) is None


def test_rest_conflict_before_later_anchor_uses_candidate_distance():
    race = RestAnchor(DAY + dt.timedelta(days=3), 21.1, RunType.RACE, "suggested")

    assert rest_conflict(DAY, 13.0, [race]) is None  # needs 2 days, has 3
    assert rest_conflict(DAY, 20.0, [race]) == race  # needs 3 days


def test_rest_conflict_on_same_day():
    anchor = RestAnchor(DAY, 3.0, None, "completed")
    assert rest_conflict(DAY, 3.0, [anchor]) == anchor


def test_no_anchors_no_conflict():
    assert rest_conflict(DAY, 20.0, []) is None
