"""Services for grouping logic."""

from .constraints import build_avoidance_map, find_avoidance_conflicts, has_avoidance_conflict
from .scoring import build_style_map, normalize_style, pick_diverse_group
from .stats import build_grouping_stats

__all__ = [
    "build_avoidance_map",
    "has_avoidance_conflict",
    "find_avoidance_conflicts",
    "build_style_map",
    "normalize_style",
    "pick_diverse_group",
    "build_grouping_stats",
]
