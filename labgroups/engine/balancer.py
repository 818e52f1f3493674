"""Heuristic group balancer: spreads agencies, diversifies learning styles, honors avoidances."""

from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from labgroups.services.constraints import (
    build_avoidance_map,
    can_move_trainee,
    find_avoidance_conflicts,
    has_avoidance_conflict,
    normalize_agency,
)
from labgroups.services.scoring import build_style_map, least_represented_groups, pick_diverse_group
from labgroups.services.stats import build_grouping_stats


DEFAULT_MAX_ITERATIONS = 50


@dataclass
class GroupAssignment:
    group_index: int
    trainee_ids: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"group_index": self.group_index, "trainee_ids": list(self.trainee_ids)}


@dataclass
class BalanceResult:
    groups: List[GroupAssignment]
    warnings: List[str]
    stats: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable response body."""
        return {
            "groups": [g.to_dict() for g in self.groups],
            "warnings": list(self.warnings),
            "stats": self.stats,
        }


@dataclass
class GroupState:
    """Members of one group plus running agency and style counts."""

    index: int
    members: List[str] = field(default_factory=list)
    agency_counts: Counter = field(default_factory=Counter)
    style_counts: Counter = field(default_factory=Counter)

    @property
    def size(self) -> int:
        return len(self.members)

    def add(self, trainee_id: str, agency: Optional[str], style: Optional[str]) -> None:
        self.members.append(trainee_id)
        if agency is not None:
            self.agency_counts[agency] += 1
        if style is not None:
            self.style_counts[style] += 1

    def remove(self, trainee_id: str, agency: Optional[str], style: Optional[str]) -> None:
        self.members.remove(trainee_id)
        if agency is not None:
            self.agency_counts[agency] -= 1
        if style is not None:
            self.style_counts[style] -= 1


class GroupBalancer:
    """
    Assign a roster of trainees to a fixed number of groups.

    Phases run in a fixed order:
    1. Agency members are placed first, largest agency first, each into a
       group holding the fewest of that agency.
    2. Unaffiliated trainees are placed into any group.
    3. Group sizes are rebalanced until they differ by at most one, or no
       move is possible without breaking a constraint.
    4. Avoidance conflicts left in the final groups are reported.

    In phases 1 and 2 groups with an avoidance conflict are skipped unless
    every candidate has one. Among the remaining candidates the group with
    the fewest members of the trainee's learning style wins, then the
    smallest group.

    The balancer never raises for unsatisfiable constraints; they surface
    as warnings and in stats["avoidance_conflicts"].
    """

    def __init__(
        self,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        rng: random.Random | int | None = None,
    ):
        """
        Args:
            max_iterations: Cap on rebalancing moves
            rng: random.Random instance or integer seed for reproducible shuffles
        """
        self.max_iterations = max_iterations
        self.rng = rng if isinstance(rng, random.Random) else random.Random(rng)

    def balance(
        self,
        roster: Sequence,
        learning_styles: Iterable,
        avoidances: Iterable,
        num_groups: int,
    ) -> BalanceResult:
        """
        Build groups for a roster.

        Args:
            roster: Trainee-like objects (trainee_id, first_name, home_agency)
            learning_styles: LearningStyle-like objects (trainee_id, primary_style)
            avoidances: SeatingPreference-like objects; only 'avoid' entries count
            num_groups: Number of groups to build (validated by the caller)

        Returns:
            BalanceResult with groups, warnings and stats
        """
        avoid_map = build_avoidance_map(avoidances)
        style_of = build_style_map(learning_styles)
        agency_of = {t.trainee_id: normalize_agency(t.home_agency) for t in roster}

        agency_members: Dict[str, list] = {}
        unaffiliated = []
        for trainee in roster:
            agency = agency_of[trainee.trainee_id]
            if agency is None:
                unaffiliated.append(trainee)
            else:
                agency_members.setdefault(agency, []).append(trainee)

        groups = [GroupState(index=i) for i in range(num_groups)]

        # Phase 1: largest agencies first, while groups are still empty
        for agency, members in sorted(agency_members.items(), key=lambda item: -len(item[1])):
            shuffled = list(members)
            self.rng.shuffle(shuffled)
            for trainee in shuffled:
                candidates = least_represented_groups([g.agency_counts[agency] for g in groups])
                self._place(trainee.trainee_id, candidates, groups, agency, style_of, avoid_map)

        # Phase 2
        for trainee in unaffiliated:
            candidates = list(range(num_groups))
            self._place(trainee.trainee_id, candidates, groups, None, style_of, avoid_map)

        # Phase 3
        self.rebalance(groups, agency_of, style_of, avoid_map)

        # Phase 4
        member_lists = [g.members for g in groups]
        first_names = {t.trainee_id: t.first_name for t in reversed(list(roster))}
        warnings = find_avoidance_conflicts(member_lists, avoid_map, first_names)

        stats = build_grouping_stats(
            member_lists,
            agency_of,
            style_of,
            {agency: len(members) for agency, members in agency_members.items()},
            avoidance_conflicts=len(warnings),
            total_trainees=len(roster),
        )

        return BalanceResult(
            groups=[GroupAssignment(group_index=g.index, trainee_ids=list(g.members)) for g in groups],
            warnings=warnings,
            stats=stats,
        )

    def _place(
        self,
        trainee_id: str,
        candidates: List[int],
        groups: List[GroupState],
        agency: Optional[str],
        style_of: Dict[str, Optional[str]],
        avoid_map,
    ) -> int:
        available = [
            idx for idx in candidates
            if not has_avoidance_conflict(trainee_id, groups[idx].members, avoid_map)
        ]
        if not available:
            # Conflict is unavoidable here; it is reported after balancing
            available = candidates

        style = style_of.get(trainee_id)
        target = pick_diverse_group(
            available,
            [g.size for g in groups],
            [g.style_counts for g in groups],
            style,
        )
        groups[target].add(trainee_id, agency, style)
        return target

    def rebalance(
        self,
        groups: List[GroupState],
        agency_of: Dict[str, Optional[str]],
        style_of: Dict[str, Optional[str]],
        avoid_map,
    ) -> int:
        """Move trainees from the largest to the smallest group. Returns the number of moves."""
        if not groups:
            return 0

        moves = 0
        while moves < self.max_iterations:
            sizes = [g.size for g in groups]
            max_size = max(sizes)
            min_size = min(sizes)
            if max_size - min_size <= 1:
                break

            source = groups[sizes.index(max_size)]
            target = groups[sizes.index(min_size)]

            moved = False
            for trainee_id in reversed(list(source.members)):
                agency = agency_of.get(trainee_id)
                if not can_move_trainee(
                    trainee_id,
                    agency,
                    target.members,
                    source.agency_counts[agency] if agency is not None else 0,
                    target.agency_counts[agency] if agency is not None else 0,
                    avoid_map,
                ):
                    continue
                style = style_of.get(trainee_id)
                source.remove(trainee_id, agency, style)
                target.add(trainee_id, agency, style)
                moved = True
                break

            if not moved:
                break
            moves += 1

        return moves


def generate_groups(
    roster: Sequence,
    learning_styles: Iterable,
    avoidances: Iterable,
    num_groups: int,
    rng: random.Random | int | None = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> BalanceResult:
    """
    Convenience function to run the GroupBalancer once.

    Args:
        roster: Trainees to group
        learning_styles: Learning style records
        avoidances: Seating preference records
        num_groups: Number of groups
        rng: Optional random.Random or seed
        max_iterations: Cap on rebalancing moves

    Returns:
        BalanceResult
    """
    balancer = GroupBalancer(max_iterations=max_iterations, rng=rng)
    return balancer.balance(roster, learning_styles, avoidances, num_groups)
