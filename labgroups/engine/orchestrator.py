"""Orchestrator - loads a cohort, runs the balancer, and stores the resulting groups."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from labgroups.config import GroupingConfig
from labgroups.domain.repositories import (
    LabGroupRepository,
    LearningStyleRepository,
    PreferenceRepository,
    TraineeRepository,
)
from labgroups.validator import validate_group_assignment

from .balancer import BalanceResult, GroupBalancer


def validate_num_groups(num_groups) -> int:
    """
    Validate a requested group count.
    
    Raises:
        ValueError: If num_groups is not an integer >= 2
    """
    if isinstance(num_groups, bool) or not isinstance(num_groups, int):
        raise ValueError(f"num_groups must be an integer, got {num_groups!r}")
    if num_groups < 2:
        raise ValueError(f"num_groups must be at least 2, got {num_groups}")
    return num_groups


class GroupOrchestrator:
    """
    Orchestrator coordinates data loading, balancing and validation for one cohort.
    
    The balancer itself is pure; this layer owns the database reads and the
    request-level checks the balancer leaves to its caller.
    """
    
    def __init__(self, cfg: GroupingConfig | None = None):
        self.cfg = cfg or GroupingConfig()
    
    def build_groups(
        self,
        session: Session,
        cohort_id: str,
        num_groups: Optional[int] = None,
        seed: Optional[int] = None,
    ) -> BalanceResult:
        """
        Build groups for a cohort's active trainees.
        
        Args:
            session: Database session
            cohort_id: Cohort identifier
            num_groups: Group count (default: cfg.default_num_groups)
            seed: Random seed (default: cfg.seed)
        
        Returns:
            BalanceResult
        
        Raises:
            ValueError: If num_groups is invalid or the result fails coverage validation
            RuntimeError: If the cohort has no active trainees
        """
        num_groups = validate_num_groups(self.cfg.default_num_groups if num_groups is None else num_groups)
        seed = self.cfg.seed if seed is None else seed
        
        print(f"[INFO] Orchestrator: Building {num_groups} groups for cohort {cohort_id}")
        
        trainees = TraineeRepository.get_active_by_cohort(session, cohort_id, self.cfg.active_status)
        if not trainees:
            raise RuntimeError(f"No {self.cfg.active_status} trainees in cohort {cohort_id}")
        
        trainee_ids = [t.trainee_id for t in trainees]
        styles = LearningStyleRepository.get_for_trainees(session, trainee_ids)
        preferences = PreferenceRepository.get_for_trainees(session, trainee_ids)
        print(
            f"[INFO] Loaded {len(trainees)} trainees, {len(styles)} learning styles, "
            f"{len(preferences)} preferences"
        )
        if num_groups > len(trainees):
            print(f"[WARN] More groups ({num_groups}) than trainees ({len(trainees)}); some groups will be empty")
        
        balancer = GroupBalancer(max_iterations=self.cfg.max_rebalance_iterations, rng=seed)
        result = balancer.balance(trainees, styles, preferences, num_groups)
        
        validate_group_assignment(result.groups, trainees)
        
        for warning in result.warnings:
            print(f"[WARN] {warning}")
        print(f"[OK] Orchestrator: Group sizes {result.stats['group_sizes']}")
        return result


def build_cohort_groups(
    session: Session,
    cohort_id: str,
    cfg: GroupingConfig | None = None,
    num_groups: Optional[int] = None,
    seed: Optional[int] = None,
    persist: bool = True,
) -> BalanceResult:
    """
    Convenience function to build (and optionally store) groups for a cohort.
    
    Args:
        session: Database session
        cohort_id: Cohort identifier
        cfg: GroupingConfig
        num_groups: Optional group count override
        seed: Optional random seed override
        persist: If True, replace the cohort's stored groups (ValueError if one is locked)
    
    Returns:
        BalanceResult
    """
    orchestrator = GroupOrchestrator(cfg)
    result = orchestrator.build_groups(session, cohort_id, num_groups=num_groups, seed=seed)
    
    if persist:
        stored = LabGroupRepository.replace_for_cohort(
            session,
            cohort_id,
            result.groups,
            name_template=orchestrator.cfg.group_name_template,
        )
        print(f"[INFO] Persisted {len(stored)} groups for cohort {cohort_id}")
    
    return result
