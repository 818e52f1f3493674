"""Candidate selection for agency spread and learning-style diversity."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from labgroups.domain.models import PRIMARY_STYLES


UNASSESSED = "unassessed"


def normalize_style(style: Optional[str]) -> Optional[str]:
    """Return a known primary style in lower case, or None (unassessed)."""
    if not style:
        return None
    style = str(style).strip().lower()
    return style if style in PRIMARY_STYLES else None


def build_style_map(learning_styles: Iterable) -> Dict[str, Optional[str]]:
    """Map trainee_id -> primary style. Later records for the same trainee win."""
    return {ls.trainee_id: normalize_style(ls.primary_style) for ls in learning_styles}


def least_represented_groups(counts: Sequence[int]) -> List[int]:
    """Return every group index whose count equals the minimum count."""
    if not counts:
        return []
    lowest = min(counts)
    return [idx for idx, count in enumerate(counts) if count == lowest]


def pick_diverse_group(
    candidates: Sequence[int],
    sizes: Sequence[int],
    style_counts: Sequence[Mapping[str, int]],
    style: Optional[str],
) -> int:
    """
    Pick the candidate group best suited for a trainee's learning style.
    
    Prefers the group with the fewest members sharing the style, then the
    smallest group. Unassessed trainees just go to the smallest group.
    Ties go to the earliest candidate.
    
    Args:
        candidates: Group indices to choose from (non-empty)
        sizes: Current size of every group
        style_counts: Per-group style -> count
        style: Trainee's primary style, or None
    
    Returns:
        Chosen group index
    """
    if style is None:
        return min(candidates, key=lambda idx: sizes[idx])
    return min(candidates, key=lambda idx: (style_counts[idx].get(style, 0), sizes[idx]))
