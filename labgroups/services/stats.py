"""Diagnostic statistics for a group assignment."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence

from labgroups.domain.models import PRIMARY_STYLES

from .scoring import UNASSESSED


def empty_style_counts() -> Dict[str, int]:
    counts = {style: 0 for style in PRIMARY_STYLES}
    counts[UNASSESSED] = 0
    return counts


def build_grouping_stats(
    groups: Sequence[Sequence[str]],
    agency_of: Mapping[str, Optional[str]],
    style_of: Mapping[str, Optional[str]],
    agency_counts: Mapping[str, int],
    avoidance_conflicts: int,
    total_trainees: int,
) -> Dict[str, Any]:
    """
    Summarize group composition.
    
    Returns:
        JSON-serializable dict with total_trainees, num_groups, group_sizes,
        agency_counts, agency_distribution, learning_style_distribution and
        avoidance_conflicts
    """
    agency_distribution = []
    style_distribution = []
    for idx, member_ids in enumerate(groups):
        agencies: Dict[str, int] = {}
        styles = empty_style_counts()
        for trainee_id in member_ids:
            agency = agency_of.get(trainee_id)
            if agency is not None:
                agencies[agency] = agencies.get(agency, 0) + 1
            styles[style_of.get(trainee_id) or UNASSESSED] += 1
        agency_distribution.append({"group": idx + 1, "agencies": agencies})
        style_distribution.append({"group": idx + 1, "styles": styles})
    
    return {
        "total_trainees": total_trainees,
        "num_groups": len(groups),
        "group_sizes": [len(g) for g in groups],
        "agency_counts": dict(agency_counts),
        "agency_distribution": agency_distribution,
        "learning_style_distribution": style_distribution,
        "avoidance_conflicts": avoidance_conflicts,
    }
