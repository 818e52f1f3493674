"""Avoidance constraint checks and conflict reporting."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set


AVOID = "avoid"


def normalize_agency(agency: Optional[str]) -> Optional[str]:
    """Return the agency value, or None when it is missing or empty."""
    return agency if agency else None


def build_avoidance_map(preferences: Iterable) -> Dict[str, Set[str]]:
    """
    Build a symmetric trainee_id -> avoided ids map.
    
    Only preferences of type 'avoid' are used; 'prefer_near' and other kinds
    are ignored, as are self-pairs.
    
    Args:
        preferences: SeatingPreference-like objects (trainee_id, other_trainee_id, preference_type)
    
    Returns:
        Dict of trainee_id -> set of trainee ids to keep apart from
    """
    avoid_map: Dict[str, Set[str]] = {}
    for pref in preferences:
        if (pref.preference_type or "").lower() != AVOID:
            continue
        a, b = pref.trainee_id, pref.other_trainee_id
        if a == b:
            continue
        avoid_map.setdefault(a, set()).add(b)
        avoid_map.setdefault(b, set()).add(a)
    return avoid_map


def has_avoidance_conflict(
    trainee_id: str,
    member_ids: Iterable[str],
    avoid_map: Mapping[str, Set[str]],
) -> bool:
    """Check whether a trainee avoids anyone already among member_ids."""
    avoid_set = avoid_map.get(trainee_id)
    if not avoid_set:
        return False
    return any(member_id in avoid_set for member_id in member_ids)


def can_move_trainee(
    trainee_id: str,
    agency: Optional[str],
    target_members: Iterable[str],
    source_agency_count: int,
    target_agency_count: int,
    avoid_map: Mapping[str, Set[str]],
) -> bool:
    """
    Check whether moving a trainee into a target group keeps constraints intact.
    
    The move is refused if it introduces an avoidance conflict, or if the
    target would end up with more than (source count - 1) members of the
    trainee's agency, which would only relocate an agency imbalance.
    """
    if has_avoidance_conflict(trainee_id, target_members, avoid_map):
        return False
    if agency is not None and target_agency_count >= source_agency_count - 1:
        return False
    return True


def find_avoidance_conflicts(
    groups: Sequence[Sequence[str]],
    avoid_map: Mapping[str, Set[str]],
    first_names: Mapping[str, str],
) -> List[str]:
    """
    Describe every avoidance conflict left in the final groups.
    
    Each ordered pair is reported, so a symmetric conflict yields one message
    per direction. Exact duplicate messages are dropped, keeping first-seen order.
    
    Args:
        groups: Member id lists, indexed by group position
        avoid_map: Symmetric avoidance map
        first_names: trainee_id -> first name for messages
    
    Returns:
        List of warning strings
    """
    warnings: List[str] = []
    for group_index, member_ids in enumerate(groups):
        for trainee_id in member_ids:
            avoid_set = avoid_map.get(trainee_id)
            if not avoid_set:
                continue
            for other_id in member_ids:
                if other_id == trainee_id:
                    continue
                if other_id in avoid_set:
                    warnings.append(
                        f"Conflict in Group {group_index + 1}: "
                        f"{first_names.get(trainee_id)} should avoid {first_names.get(other_id)}"
                    )
    return list(dict.fromkeys(warnings))
