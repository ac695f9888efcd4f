"""Tests for AssignmentEngine - pure logic, no HA fixtures needed.

These tests validate workload aggregation, fair assignee selection and the
rolling-history helpers without any Home Assistant mocking.
"""

from __future__ import annotations

from datetime import date

from custom_components.housemates import const
from custom_components.housemates.engines.assignment_engine import (
    AssignmentEngine,
    LoadMap,
)
from custom_components.housemates.models import AssignmentLoad, CompletionRecord
from tests.helpers import make_task, utc


def _load(*tasks: tuple[str | None, str, float]) -> LoadMap:
    """Build a load map from (assigned_to, status, points) triples."""
    return AssignmentEngine.build_assignment_load(
        make_task(f"chore-{index}", assigned_to=member, status=status, points=points)
        for index, (member, status, points) in enumerate(tasks)
    )


def _simulate(
    members: list[str],
    rolling_points: dict[str, float],
    load_map: LoadMap,
    due_points: list[float],
) -> list[str]:
    """Assign a series of due chores, folding each choice into the load."""
    assignments = []
    for points in due_points:
        target = AssignmentEngine.select_fair_assignee(members, rolling_points, load_map)
        assignments.append(target or "none")
        AssignmentEngine.adjust_assignment_load(load_map, target, 1, points)
    return assignments


# =============================================================================
# TEST: ASSIGNMENT LOAD
# =============================================================================


class TestBuildAssignmentLoad:
    """Test pending workload aggregation."""

    def test_ignores_completed_chores(self) -> None:
        """Completed chores contribute nothing."""
        load_map = _load(
            ("alice", const.CHORE_STATUS_COMPLETED, 5),
            ("alice", const.CHORE_STATUS_PENDING, 2),
        )
        assert load_map["alice"] == AssignmentLoad(count=1, points=2)

    def test_counts_overdue_chores(self) -> None:
        """Overdue chores are still owed."""
        load_map = _load(
            ("bob", const.CHORE_STATUS_OVERDUE, 4),
            ("bob", const.CHORE_STATUS_PENDING, 1),
        )
        assert load_map["bob"] == AssignmentLoad(count=2, points=5)

    def test_ignores_unassigned_chores(self) -> None:
        """Unassigned pending chores do not belong to anyone."""
        assert _load((None, const.CHORE_STATUS_PENDING, 5)) == {}

    def test_non_finite_points_count_as_zero(self) -> None:
        """Malformed points add to the count but not the points."""
        load_map = _load(("alice", const.CHORE_STATUS_PENDING, float("nan")))
        assert load_map["alice"] == AssignmentLoad(count=1, points=0)


class TestAdjustAssignmentLoad:
    """Test incremental load maintenance."""

    def test_moves_chore_between_members(self) -> None:
        """Removing from one member and adding to another."""
        load_map = _load(("alice", const.CHORE_STATUS_PENDING, 3))

        AssignmentEngine.adjust_assignment_load(load_map, "alice", -1, -3)
        AssignmentEngine.adjust_assignment_load(load_map, "bob", 1, 3)

        assert "alice" not in load_map
        assert load_map["bob"] == AssignmentLoad(count=1, points=3)

    def test_clamps_at_zero(self) -> None:
        """Over-subtracting never produces negative values."""
        load_map = _load(("alice", const.CHORE_STATUS_PENDING, 3))

        AssignmentEngine.adjust_assignment_load(load_map, "alice", 0, -10)

        assert load_map["alice"] == AssignmentLoad(count=1, points=0)

    def test_entry_removed_when_both_zero(self) -> None:
        """An entry reaching (0, 0) is absent, not stored as zeros."""
        load_map = _load(("alice", const.CHORE_STATUS_PENDING, 3))

        AssignmentEngine.adjust_assignment_load(load_map, "alice", -5, -5)

        assert load_map == {}

    def test_none_member_is_noop(self) -> None:
        """Adjusting nobody changes nothing."""
        load_map = _load(("alice", const.CHORE_STATUS_PENDING, 3))

        AssignmentEngine.adjust_assignment_load(load_map, None, 1, 5)

        assert load_map == {"alice": AssignmentLoad(count=1, points=3)}

    def test_never_negative_after_any_sequence(self) -> None:
        """Arbitrary deltas keep every field non-negative."""
        load_map: LoadMap = {}
        deltas = [(1, 4), (-3, -1), (2, -9), (1, 2.5), (-1, -1), (0, 7), (-4, -20)]
        for delta_count, delta_points in deltas:
            AssignmentEngine.adjust_assignment_load(
                load_map, "alice", delta_count, delta_points
            )
            for load in load_map.values():
                assert load.count >= 0
                assert load.points >= 0
                assert (load.count, load.points) != (0, 0)


# =============================================================================
# TEST: FAIR SELECTION
# =============================================================================


class TestSelectFairAssignee:
    """Test the deterministic selection cascade."""

    def test_picks_fewer_rolling_points(self) -> None:
        """alice 6, bob 3, no pending load → bob."""
        assert (
            AssignmentEngine.select_fair_assignee(
                ["alice", "bob"], {"alice": 6, "bob": 3}, {}
            )
            == "bob"
        )

    def test_pending_points_break_rolling_tie(self) -> None:
        """Equal rolling points; bob has lighter pending work."""
        load_map = _load(
            ("alice", const.CHORE_STATUS_PENDING, 6),
            ("bob", const.CHORE_STATUS_PENDING, 2),
        )
        assert (
            AssignmentEngine.select_fair_assignee(
                ["alice", "bob"], {"alice": 5, "bob": 5}, load_map
            )
            == "bob"
        )

    def test_lighter_pending_beats_lower_rolling(self) -> None:
        """Pending points are part of the score."""
        load_map = _load(("alice", const.CHORE_STATUS_PENDING, 8))
        assert (
            AssignmentEngine.select_fair_assignee(
                ["alice", "bob"], {"alice": 2, "bob": 6}, load_map
            )
            == "bob"
        )

    def test_pending_points_weigh_more_than_count(self) -> None:
        """alice (count 2, points 1) beats bob (count 1, points 2)."""
        load_map = {
            "alice": AssignmentLoad(count=2, points=1),
            "bob": AssignmentLoad(count=1, points=2),
        }
        assert (
            AssignmentEngine.select_fair_assignee(
                ["alice", "bob"], {"alice": 5, "bob": 5}, load_map
            )
            == "alice"
        )

    def test_count_breaks_tie_when_points_equal(self) -> None:
        """Equal score and pending points; fewer pending chores wins."""
        load_map = _load(
            ("alice", const.CHORE_STATUS_PENDING, 1),
            ("alice", const.CHORE_STATUS_PENDING, 1),
            ("bob", const.CHORE_STATUS_PENDING, 2),
        )
        assert (
            AssignmentEngine.select_fair_assignee(
                ["alice", "bob"], {"alice": 4, "bob": 4}, load_map
            )
            == "bob"
        )

    def test_lexicographic_final_tie_break(self) -> None:
        """Identical members resolve to the smallest id, in any order."""
        assert (
            AssignmentEngine.select_fair_assignee(["carol", "bob", "dave"], {}, {})
            == "bob"
        )
        assert (
            AssignmentEngine.select_fair_assignee(["dave", "carol", "bob"], {}, {})
            == "bob"
        )

    def test_last_completed_breaks_tie_before_id(self) -> None:
        """The member who completed longest ago wins an otherwise equal tie."""
        last_completed = {
            "alice": utc(2025, 3, 10),
            "bob": utc(2025, 3, 1),
        }
        assert (
            AssignmentEngine.select_fair_assignee(
                ["alice", "bob"], {}, {}, last_completed=last_completed
            )
            == "bob"
        )

    def test_never_completed_wins_recency_tie(self) -> None:
        """A member with no completion on record counts as oldest."""
        last_completed = {"alice": utc(2025, 3, 1)}
        assert (
            AssignmentEngine.select_fair_assignee(
                ["alice", "bob"], {}, {}, last_completed=last_completed
            )
            == "bob"
        )

    def test_exclusion_skips_member(self) -> None:
        """The excluded member is passed over when others exist."""
        assert (
            AssignmentEngine.select_fair_assignee(
                ["alice", "bob"], {"alice": 0, "bob": 10}, {}, exclude_member_id="alice"
            )
            == "bob"
        )

    def test_exclusion_falls_back_to_full_list(self) -> None:
        """Excluding the only candidate still returns them."""
        assert (
            AssignmentEngine.select_fair_assignee(
                ["alice"], {}, {}, exclude_member_id="alice"
            )
            == "alice"
        )

    def test_empty_candidates_returns_none(self) -> None:
        """No members, no assignee."""
        assert AssignmentEngine.select_fair_assignee([], {}, {}) is None

    def test_missing_rolling_points_count_as_zero(self) -> None:
        """Members absent from the points map score zero."""
        assert (
            AssignmentEngine.select_fair_assignee(["alice", "bob"], {"alice": 1}, {})
            == "bob"
        )

    def test_deterministic_over_repeated_calls(self) -> None:
        """Identical inputs give identical output."""
        load_map = _load(("charlie", const.CHORE_STATUS_PENDING, 2))
        points = {"alice": 3, "bob": 3, "charlie": 1}
        results = {
            AssignmentEngine.select_fair_assignee(
                ["alice", "bob", "charlie"], points, load_map
            )
            for _ in range(20)
        }
        assert results == {"alice"}


class TestSimulatedSweeps:
    """Sequences of due chores folded into the running load."""

    def test_balances_against_current_workload(self) -> None:
        """Existing pending work steers the next three assignments."""
        load_map = _load(
            ("alice", const.CHORE_STATUS_PENDING, 8),
            ("charlie", const.CHORE_STATUS_PENDING, 2),
        )
        assert _simulate(
            ["alice", "bob", "charlie"],
            {"alice": 2, "bob": 4, "charlie": 6},
            load_map,
            [5, 3, 2],
        ) == ["bob", "charlie", "bob"]

    def test_spreads_when_scores_stay_close(self) -> None:
        """Equal history rotates through the household."""
        load_map = _load(("alice", const.CHORE_STATUS_PENDING, 2))
        assert _simulate(
            ["alice", "bob", "charlie"],
            {"alice": 3, "bob": 3, "charlie": 3},
            load_map,
            [4, 4, 4],
        ) == ["bob", "charlie", "alice"]


# =============================================================================
# TEST: ELIGIBILITY AND HISTORY
# =============================================================================


class TestEligibleMembers:
    """Test eligible member resolution."""

    def test_unrestricted_uses_whole_household_sorted(self) -> None:
        """No restriction means everybody, in sorted order."""
        task = make_task()
        assert AssignmentEngine.eligible_members(task, ["carol", "alice", "bob"]) == [
            "alice",
            "bob",
            "carol",
        ]

    def test_restriction_limits_pool(self) -> None:
        """Only listed household members are eligible."""
        task = make_task(eligible_assignees=frozenset({"bob", "carol"}))
        assert AssignmentEngine.eligible_members(task, ["alice", "bob", "carol"]) == [
            "bob",
            "carol",
        ]

    def test_restriction_naming_nobody_falls_back(self) -> None:
        """A restriction to former members falls back to the household."""
        task = make_task(eligible_assignees=frozenset({"zed"}))
        assert AssignmentEngine.eligible_members(task, ["bob", "alice"]) == [
            "alice",
            "bob",
        ]


class TestRollingPoints:
    """Test rolling history aggregation."""

    def test_window_starts_at_local_midnight(self) -> None:
        """Completions on the first day of the window count; earlier do not."""
        completions = [
            CompletionRecord("alice", 4, utc(2025, 3, 1, 0, 0)),
            CompletionRecord("alice", 2, utc(2025, 2, 28, 23, 59)),
            CompletionRecord("bob", 3, utc(2025, 3, 28, 12, 0)),
            CompletionRecord("bob", 1, utc(2025, 3, 20, 8, 0)),
        ]
        points = AssignmentEngine.build_rolling_points(completions, date(2025, 3, 29))
        assert points == {"alice": 4.0, "bob": 4.0}

    def test_custom_window(self) -> None:
        """A 7 day window drops older completions."""
        completions = [
            CompletionRecord("alice", 5, utc(2025, 3, 20)),
            CompletionRecord("alice", 1, utc(2025, 3, 27)),
        ]
        points = AssignmentEngine.build_rolling_points(
            completions, date(2025, 3, 29), window_days=7
        )
        assert points == {"alice": 1.0}

    def test_last_completed_map_keeps_latest(self) -> None:
        """The newest completion per member wins."""
        tasks = [
            make_task("a", last_completed_by="alice", last_completed_at=utc(2025, 3, 1)),
            make_task("b", last_completed_by="alice", last_completed_at=utc(2025, 3, 5)),
            make_task("c", last_completed_by="bob", last_completed_at=utc(2025, 3, 2)),
            make_task("d", last_completed_by=None, last_completed_at=utc(2025, 3, 9)),
        ]
        assert AssignmentEngine.build_last_completed_map(tasks) == {
            "alice": utc(2025, 3, 5),
            "bob": utc(2025, 3, 2),
        }


class TestHouseFairness:
    """Test the fairness report."""

    def test_deviation_from_average(self) -> None:
        """Each member is compared with the household average."""
        report = AssignmentEngine.calculate_house_fairness(
            ["alice", "bob"], {"alice": 10, "bob": 4}, resolve_name=str.title
        )
        assert report.average_points == 7
        assert report.window_days == const.ROLLING_WINDOW_DAYS
        assert [(m.member_name, m.deviation) for m in report.member_stats] == [
            ("Alice", 3),
            ("Bob", -3),
        ]

    def test_empty_household(self) -> None:
        """No members gives a zero average and no stats."""
        report = AssignmentEngine.calculate_house_fairness([], {})
        assert report.average_points == 0
        assert report.member_stats == []
