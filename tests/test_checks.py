"""Tests for the difficulty checks and the check runner."""

from __future__ import annotations

import pytest

from catch_verifier.analysis.cache import MovementCache
from catch_verifier.analysis.movement import build_movement_sequence
from catch_verifier.analysis.patterns import Tier
from catch_verifier.checks.dashes import check_consecutive_dash, check_dash_cup, check_edge_walk
from catch_verifier.checks.hyperdashes import (
    check_antiflow_hyperdash,
    check_consecutive_hyperdash,
    check_different_snap_hyperdash,
    check_hyperdash_conjunction,
    check_hyperdash_salad,
    check_strong_hyperdash,
)
from catch_verifier.checks.issues import Issue, IssueLevel, format_timestamp
from catch_verifier.checks.runner import ALL_CHECKS, get_checks, run_checks
from catch_verifier.data.hitobjects import DifficultyMap, HitObject, HitObjectType


def _map(points: list[tuple[float, float]], version: str = "Test") -> DifficultyMap:
    """Difficulty of circles at (time, x), circle size 5."""
    objects = [HitObject(time=t, x=x) for t, x in points]
    return DifficultyMap(version=version, circle_size=5.0, hit_objects=objects)


def _run(check, points: list[tuple[float, float]]) -> list[Issue]:
    """Classify a difficulty and run a single check on it."""
    bm = _map(points)
    return check(bm, build_movement_sequence(bm))


def _templates(issues: list[Issue]) -> list[str]:
    return [i.template for i in issues]


class TestDashCup:
    def test_dash_and_hyperdash_flagged(self):
        issues = _run(check_dash_cup, [(0, 300), (200, 100), (450, 100), (700, 480)])
        assert _templates(issues) == ["Dash", "HyperDash"]
        assert issues[0].time == 0
        assert issues[1].time == 450
        assert all(i.level == IssueLevel.PROBLEM and i.tiers == (Tier.CUP,) for i in issues)

    def test_walks_only(self):
        assert _run(check_dash_cup, [(0, 0), (500, 50), (1000, 100)]) == []


class TestHyperdashSalad:
    def test_hyperdash_flagged(self):
        issues = _run(check_hyperdash_salad, [(0, 300), (200, 100), (450, 100), (700, 480)])
        assert _templates(issues) == ["HyperDash"]
        assert issues[0].tiers == (Tier.SALAD,)


class TestConsecutiveDash:
    def test_three_dashes_break_salad_only(self):
        issues = _run(check_consecutive_dash, [(0, 0), (200, 200), (400, 0), (600, 200), (800, 250)])
        assert len(issues) == 1
        assert issues[0].tiers == (Tier.SALAD,)
        assert issues[0].time == 400
        assert "at most 2, currently 3" in issues[0].message

    def test_five_dashes_break_both(self):
        points = [(i * 200, (i % 2) * 200) for i in range(6)] + [(1200, 250)]
        issues = _run(check_consecutive_dash, points)
        assert sorted(t for i in issues for t in i.tiers) == [Tier.SALAD, Tier.PLATTER]

    def test_two_dashes_allowed(self):
        assert _run(check_consecutive_dash, [(0, 0), (200, 200), (400, 0), (600, 50)]) == []


class TestConsecutiveHyperdash:
    def test_three_hyperdashes_break_platter(self):
        issues = _run(check_consecutive_hyperdash, [(0, 0), (250, 480), (500, 0), (750, 480)])
        assert len(issues) == 1
        assert issues[0].tiers == (Tier.PLATTER,)
        assert "currently 3" in issues[0].message


class TestEdgeWalk:
    def test_single_edge_walk(self):
        # 155 px in 200 ms is ~9.6 px short of a dash
        issues = _run(check_edge_walk, [(0, 100), (200, 255), (400, 255)])
        assert _templates(issues) == ["EdgeWalk", "EdgeWalkWarning"]
        assert issues[0].level == IssueLevel.MINOR and issues[0].tiers == (Tier.PLATTER,)
        assert issues[1].level == IssueLevel.WARNING and issues[1].tiers == (Tier.SALAD,)
        assert issues[0].time == 0

    def test_long_gap_is_ignored(self):
        assert _run(check_edge_walk, [(0, 0), (600, 360)]) == []

    def test_hyperdashes_count_towards_general_cutoff(self):
        # 12 edge walks among 600+ non-dash movements stay individual
        points = [(i * 200, 100 if i % 2 == 0 else 255) for i in range(13)]
        points += [(2900, 100), (3150, 0)]
        points += [(3400 + i * 250, 480 if i % 2 == 0 else 0) for i in range(620)]
        issues = _run(check_edge_walk, points)
        assert len(issues) == 24
        assert set(_templates(issues)) == {"EdgeWalk", "EdgeWalkWarning"}

    def test_many_edge_walks_collapse_to_general(self):
        points = [(i * 200, 100 if i % 2 == 0 else 255) for i in range(13)]
        issues = _run(check_edge_walk, points)
        assert _templates(issues) == ["EdgeWalkGeneral", "EdgeWalkWarningGeneral"]
        assert len(issues[0].extra_times) == 9
        assert len(issues[0].timestamp.split()) == 10


class TestStrongHyperdash:
    def test_strong_basic_hyperdash(self):
        issues = _run(check_strong_hyperdash, [(0, 0), (250, 480)])
        assert _templates(issues) == ["Strong"]
        assert issues[0].time == 250

    def test_strong_higher_snapped_hyperdash(self):
        issues = _run(check_strong_hyperdash, [(0, 0), (200, 350)])
        assert _templates(issues) == ["StrongHigherSnap"]

    def test_moderate_hyperdash(self):
        assert _run(check_strong_hyperdash, [(0, 0), (250, 400)]) == []
        assert _run(check_strong_hyperdash, [(0, 0), (200, 300)]) == []


class TestAntiflowHyperdash:
    def test_antiflow_walk_after_basic(self):
        issues = _run(check_antiflow_hyperdash, [(0, 0), (250, 480), (500, 380)])
        assert _templates(issues) == ["AntiflowWalk"]
        assert issues[0].time == 0

    def test_antiflow_dash_after_higher_snap(self):
        issues = _run(check_antiflow_hyperdash, [(0, 0), (200, 350), (400, 100)])
        assert _templates(issues) == ["AntiflowDashHigh"]

    def test_higher_snapped_dash_after_basic(self):
        # 100 ms dash back after a 250 ms hyperdash
        issues = _run(check_antiflow_hyperdash, [(0, 0), (250, 400), (350, 250)])
        assert _templates(issues) == ["AntiflowHighDash"]

    def test_slider_tail_reversal_after_hyperdash(self):
        objects = [
            HitObject(time=0, x=0),
            HitObject(time=250, x=480, object_type=HitObjectType.SLIDER, end_time=600,
                      nested=[(350, 490), (600, 380)]),
            HitObject(time=900, x=380),
        ]
        bm = DifficultyMap(version="Test", circle_size=5.0, hit_objects=objects)
        issues = check_antiflow_hyperdash(bm, build_movement_sequence(bm))
        assert _templates(issues) == ["AntiflowWalk"]
        assert issues[0].time == 0

    def test_flowing_hyperdash(self):
        assert _run(check_antiflow_hyperdash, [(0, 0), (250, 480), (500, 500)]) == []


class TestHyperdashConjunction:
    def test_higher_snapped_hyperdash_into_dash(self):
        issues = _run(check_hyperdash_conjunction, [(0, 0), (200, 350), (400, 100)])
        assert _templates(issues) == ["ConsecutiveHigherSnapPlatter"]
        assert issues[0].time == 200

    def test_basic_hyperdashes_not_flagged(self):
        assert _run(check_hyperdash_conjunction, [(0, 0), (250, 480), (550, 0)]) == []


class TestDifferentSnapHyperdash:
    def test_different_snaps(self):
        issues = _run(check_different_snap_hyperdash, [(0, 0), (250, 480), (550, 0)])
        assert _templates(issues) == ["ConsecutiveDifferentSnap"] * 2
        assert [i.level for i in issues] == [IssueLevel.PROBLEM, IssueLevel.WARNING]
        assert [i.tiers for i in issues] == [(Tier.PLATTER,), (Tier.RAIN,)]

    def test_equal_snaps(self):
        assert _run(check_different_snap_hyperdash, [(0, 0), (250, 480), (500, 0)]) == []


class TestIssue:
    def test_format_timestamp(self):
        assert format_timestamp(0) == "00:00:000"
        assert format_timestamp(83_456) == "01:23:456"

    def test_to_dict(self):
        issue = Issue("dash_cup", "Dash", IssueLevel.PROBLEM, 1500, "Dash is used.", (Tier.CUP,), "Cup")
        data = issue.to_dict()
        assert data["level"] == "problem"
        assert data["tiers"] == ["cup"]
        assert data["timestamp"] == "00:01:500"
        assert str(issue) == "[PROBLEM] 00:01:500 - Dash is used."


class TestRunner:
    def _difficulties(self) -> list[DifficultyMap]:
        return [
            _map([(0, 0), (200, 200), (400, 0), (600, 200), (800, 250)], version="Cup"),
            _map([(0, 0), (250, 480), (500, 380)], version="Platter"),
        ]

    def test_run_all_checks(self):
        issues = run_checks(self._difficulties())
        assert issues
        assert [i.version for i in issues] == sorted(i.version for i in issues)
        checks = {i.check for i in issues}
        assert {"dash_cup", "consecutive_dash", "strong_hyperdash", "antiflow_hyperdash"} <= checks

    def test_threaded_matches_inline(self):
        inline = run_checks(self._difficulties())
        threaded = run_checks(self._difficulties(), max_workers=4)
        assert [i.to_dict() for i in threaded] == [i.to_dict() for i in inline]

    def test_shared_cache_classifies_each_variant_once(self):
        calls: list[str] = []

        def compute(beatmap):
            calls.append(beatmap.version)
            return build_movement_sequence(beatmap)

        run_checks(self._difficulties(), cache=MovementCache(compute=compute), max_workers=4)
        assert sorted(calls) == ["Cup", "Platter"]

    def test_tier_filter(self):
        issues = run_checks(self._difficulties(), tiers=[Tier.CUP])
        assert issues
        assert all(Tier.CUP in i.tiers for i in issues)

    def test_min_level_filter(self):
        issues = run_checks(self._difficulties(), min_level=IssueLevel.PROBLEM)
        assert all(i.level == IssueLevel.PROBLEM for i in issues)

    def test_empty_difficulty(self):
        bm = DifficultyMap(version="Empty", circle_size=5.0, hit_objects=[])
        assert run_checks([bm]) == []

    def test_duplicate_versions_raise(self):
        hyper = _map([(0, 0), (250, 480)], version="")
        walks = _map([(0, 0), (500, 50)], version="")
        with pytest.raises(ValueError):
            run_checks([hyper, walks])

    def test_get_checks(self):
        assert get_checks() == ALL_CHECKS
        assert [c.name for c in get_checks(["edge_walk"])] == ["edge_walk"]
        with pytest.raises(ValueError):
            get_checks(["no_such_check"])
