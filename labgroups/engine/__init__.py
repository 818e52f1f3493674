"""Grouping engine and cohort orchestration."""

from .balancer import BalanceResult, GroupAssignment, GroupBalancer, GroupState, generate_groups
from .orchestrator import GroupOrchestrator, build_cohort_groups, validate_num_groups

__all__ = [
    "GroupBalancer",
    "GroupState",
    "GroupAssignment",
    "BalanceResult",
    "generate_groups",
    "GroupOrchestrator",
    "build_cohort_groups",
    "validate_num_groups",
]
