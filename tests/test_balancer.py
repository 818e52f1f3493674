"""Tests for the GroupBalancer engine."""

import random

import pytest

from labgroups.domain.models import LearningStyle, SeatingPreference, Trainee
from labgroups.engine.balancer import GroupBalancer, GroupState, generate_groups


def _trainee(tid, first, agency=None):
    return Trainee(trainee_id=tid, first_name=first, last_name="Test", home_agency=agency)


def _avoid(a, b, kind="avoid"):
    return SeatingPreference(trainee_id=a, other_trainee_id=b, preference_type=kind)


def _style(tid, style):
    return LearningStyle(trainee_id=tid, primary_style=style)


def _roster(n, agencies=(None,)):
    return [_trainee(f"t{i}", f"Name{i}", agencies[i % len(agencies)]) for i in range(n)]


def _group_of(result, trainee_id):
    for g in result.groups:
        if trainee_id in g.trainee_ids:
            return g.group_index
    return None


def _sizes(result):
    return [len(g.trainee_ids) for g in result.groups]


@pytest.mark.parametrize("num_groups", [1, 2, 3, 5, 7])
@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_every_trainee_placed_exactly_once(num_groups, seed):
    """Every trainee ends up in exactly one group, whatever the constraints."""
    roster = _roster(23, agencies=("North", "South", None, "North", "East"))
    styles = [_style(t.trainee_id, s) for t, s in zip(roster, ["audio", "visual", "kinesthetic", None] * 6)]
    avoidances = [_avoid("t0", "t1"), _avoid("t2", "t3"), _avoid("t0", "t5"), _avoid("t7", "t8")]
    
    result = generate_groups(roster, styles, avoidances, num_groups, rng=seed)
    
    assert len(result.groups) == num_groups
    assert [g.group_index for g in result.groups] == list(range(num_groups))
    placed = [tid for g in result.groups for tid in g.trainee_ids]
    assert sorted(placed) == sorted(t.trainee_id for t in roster)
    assert result.stats["total_trainees"] == 23
    assert sum(result.stats["group_sizes"]) == 23


def test_sizes_balanced_without_constraints():
    """Without agencies or avoidances group sizes differ by at most one."""
    result = generate_groups(_roster(17), [], [], 4, rng=7)
    sizes = _sizes(result)
    assert max(sizes) - min(sizes) <= 1


def test_same_seed_gives_same_groups():
    """A fixed seed reproduces the same assignment."""
    roster = _roster(20, agencies=("Fire", "EMS", "Fire", None))
    styles = [_style(t.trainee_id, "visual") for t in roster[::3]]
    avoidances = [_avoid("t0", "t4")]
    
    first = generate_groups(roster, styles, avoidances, 4, rng=42)
    second = generate_groups(roster, styles, avoidances, 4, rng=random.Random(42))
    
    assert first.to_dict() == second.to_dict()


def test_unseeded_runs_keep_invariants():
    """Unseeded runs may differ, but coverage and balance still hold."""
    roster = _roster(12, agencies=("Fire", "EMS", None))
    for _ in range(5):
        result = GroupBalancer().balance(roster, [], [], 3)
        sizes = _sizes(result)
        assert sum(sizes) == 12
        assert max(sizes) - min(sizes) <= 1


def test_forced_conflict_is_reported():
    """Two trainees who avoid each other in a single group produce warnings naming both."""
    roster = [_trainee("a", "Alice"), _trainee("b", "Bob")]
    result = generate_groups(roster, [], [_avoid("a", "b")], 1)
    
    assert result.warnings == [
        "Conflict in Group 1: Alice should avoid Bob",
        "Conflict in Group 1: Bob should avoid Alice",
    ]
    assert result.stats["avoidance_conflicts"] == 2


def test_avoiding_pair_split_when_possible():
    """A conflict-free 2-2 split is preferred over one with a conflict."""
    roster = [_trainee("a", "A"), _trainee("b", "B"), _trainee("c", "C"), _trainee("d", "D")]
    result = generate_groups(roster, [], [_avoid("a", "b")], 2, rng=3)
    
    assert _group_of(result, "a") != _group_of(result, "b")
    assert sorted(_sizes(result)) == [2, 2]
    assert result.warnings == []
    assert result.stats["avoidance_conflicts"] == 0


def test_agency_spread_evenly():
    """Six trainees from one agency over three groups gives two per group."""
    roster = _roster(6, agencies=("Station 9",))
    result = generate_groups(roster, [], [], 3, rng=11)
    
    assert _sizes(result) == [2, 2, 2]
    for dist in result.stats["agency_distribution"]:
        assert dist["agencies"] == {"Station 9": 2}
    assert result.stats["agency_counts"] == {"Station 9": 6}


def test_five_trainees_two_groups():
    """Five unconstrained trainees split 3/2."""
    roster = [_trainee(x, x) for x in "ABCDE"]
    result = generate_groups(roster, [], [], 2)
    
    assert sorted(_sizes(result)) == [2, 3]
    assert result.warnings == []
    assert result.stats["avoidance_conflicts"] == 0


def test_two_avoiding_trainees_two_groups():
    roster = [_trainee("A", "A"), _trainee("B", "B")]
    result = generate_groups(roster, [], [_avoid("A", "B")], 2)
    
    assert _group_of(result, "A") != _group_of(result, "B")
    assert result.warnings == []


def test_empty_roster():
    """An empty roster yields empty groups and zero-filled stats."""
    result = generate_groups([], [], [], 3)
    
    assert [g.trainee_ids for g in result.groups] == [[], [], []]
    assert result.warnings == []
    assert result.stats["total_trainees"] == 0
    assert result.stats["num_groups"] == 3
    assert result.stats["group_sizes"] == [0, 0, 0]
    assert result.stats["agency_counts"] == {}
    assert result.stats["avoidance_conflicts"] == 0
    for dist in result.stats["learning_style_distribution"]:
        assert dist["styles"] == {"audio": 0, "visual": 0, "kinesthetic": 0, "unassessed": 0}


def test_more_groups_than_trainees():
    """Extra groups are simply left empty."""
    result = generate_groups(_roster(2), [], [], 4)
    assert sorted(_sizes(result)) == [0, 0, 1, 1]


def test_trainee_avoiding_everyone_still_placed():
    """A trainee who avoids everyone is placed; balance yields to the avoidances."""
    roster = [_trainee("a", "Ann"), _trainee("b", "Ben"), _trainee("c", "Cy"), _trainee("d", "Di")]
    avoidances = [_avoid("a", "b"), _avoid("a", "c"), _avoid("d", "a")]
    
    result = generate_groups(roster, [], avoidances, 2)
    
    assert result.groups[0].trainee_ids == ["a"]
    assert sorted(result.groups[1].trainee_ids) == ["b", "c", "d"]
    assert result.warnings == []


def test_trainee_avoiding_everyone_in_one_group():
    roster = [_trainee("a", "Ann"), _trainee("b", "Ben"), _trainee("c", "Cy")]
    avoidances = [_avoid("a", "b"), _avoid("a", "c")]
    
    result = generate_groups(roster, [], avoidances, 1)
    
    assert result.stats["avoidance_conflicts"] == 4
    assert "Conflict in Group 1: Ann should avoid Ben" in result.warnings
    assert "Conflict in Group 1: Cy should avoid Ann" in result.warnings


def test_identical_messages_deduplicated():
    """Only byte-identical warnings collapse; both directions are otherwise kept."""
    roster = [_trainee("s1", "Sam"), _trainee("s2", "Sam")]
    result = generate_groups(roster, [], [_avoid("s1", "s2"), _avoid("s2", "s1")], 1)
    
    assert result.warnings == ["Conflict in Group 1: Sam should avoid Sam"]
    assert result.stats["avoidance_conflicts"] == 1


def test_prefer_near_is_ignored():
    roster = [_trainee("a", "A"), _trainee("b", "B")]
    result = generate_groups(roster, [], [_avoid("a", "b", kind="prefer_near")], 1)
    assert result.warnings == []


def test_learning_styles_diversified():
    """Trainees sharing a style are spread before group size is considered."""
    roster = [_trainee("v1", "V1"), _trainee("v2", "V2"), _trainee("a1", "A1"), _trainee("a2", "A2")]
    styles = [_style("v1", "visual"), _style("v2", "visual"), _style("a1", "audio"), _style("a2", "audio")]
    
    result = generate_groups(roster, styles, [], 2)
    
    for dist in result.stats["learning_style_distribution"]:
        assert dist["styles"] == {"audio": 1, "visual": 1, "kinesthetic": 0, "unassessed": 0}


def test_unknown_style_counts_as_unassessed():
    roster = [_trainee("a", "A"), _trainee("b", "B")]
    result = generate_groups(roster, [_style("a", "reading"), _style("b", "Visual")], [], 1)
    
    styles = result.stats["learning_style_distribution"][0]["styles"]
    assert styles["unassessed"] == 1
    assert styles["visual"] == 1


def test_empty_agency_treated_as_unaffiliated():
    roster = [_trainee("a", "A", ""), _trainee("b", "B", "Fire")]
    result = generate_groups(roster, [], [], 2)
    assert result.stats["agency_counts"] == {"Fire": 1}


def test_largest_agency_placed_first():
    """Agency spread holds for several agencies at once."""
    roster = _roster(4, agencies=("Small",)) + [
        _trainee(f"b{i}", f"B{i}", "Big") for i in range(8)
    ]
    result = generate_groups(roster, [], [], 4, rng=5)
    
    for dist in result.stats["agency_distribution"]:
        assert dist["agencies"] == {"Big": 2, "Small": 1}
    assert _sizes(result) == [3, 3, 3, 3]


def test_to_dict_shape():
    result = generate_groups(_roster(3), [], [], 2)
    body = result.to_dict()
    
    assert set(body) == {"groups", "warnings", "stats"}
    assert body["groups"][0] == {"group_index": 0, "trainee_ids": result.groups[0].trainee_ids}


def test_rebalance_moves_most_recent_first():
    """Rebalancing moves the most recently added trainees from the largest group."""
    groups = [GroupState(index=0), GroupState(index=1)]
    for tid in ["a", "b", "c", "d"]:
        groups[0].add(tid, None, None)
    
    moves = GroupBalancer().rebalance(groups, {}, {}, {})
    
    assert moves == 2
    assert groups[0].members == ["a", "b"]
    assert groups[1].members == ["d", "c"]


def test_rebalance_respects_agency_spread():
    """Members whose move would just relocate an agency imbalance stay put."""
    groups = [GroupState(index=0), GroupState(index=1)]
    agency_of = {"x1": "X", "x2": "X", "n1": None, "n2": None, "x3": "X"}
    for tid in ["x1", "n1", "n2", "x2"]:
        groups[0].add(tid, agency_of[tid], None)
    groups[1].add("x3", "X", None)
    
    # x2 is most recent, but the target already holds one X against two in the source
    moves = GroupBalancer().rebalance(groups, agency_of, {}, {})
    
    assert moves == 1
    assert groups[1].members == ["x3", "n2"]
    assert groups[0].agency_counts["X"] == 2


def test_rebalance_stops_when_blocked():
    """No move is forced when every candidate would create an avoidance conflict."""
    groups = [GroupState(index=0), GroupState(index=1)]
    for tid in ["a", "b", "c", "d"]:
        groups[0].add(tid, None, None)
    groups[1].add("w", None, None)
    avoid_map = {tid: {"w"} for tid in "abcd"}
    avoid_map["w"] = set("abcd")
    
    moves = GroupBalancer().rebalance(groups, {}, {}, avoid_map)
    
    assert moves == 0
    assert [g.size for g in groups] == [4, 1]


def test_rebalance_iteration_cap():
    groups = [GroupState(index=0), GroupState(index=1)]
    for i in range(10):
        groups[0].add(f"t{i}", None, None)
    
    moves = GroupBalancer(max_iterations=2).rebalance(groups, {}, {}, {})
    
    assert moves == 2
    assert [g.size for g in groups] == [8, 2]
