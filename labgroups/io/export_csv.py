"""CSV export utilities."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
from sqlalchemy.orm import Session

from labgroups.domain.repositories import LabGroupRepository


EXPORT_COLUMNS = [
    "group_index",
    "group_name",
    "trainee_id",
    "first_name",
    "last_name",
    "home_agency",
]


def export_groups_csv(session: Session, csv_path: str | Path, cohort_id: str) -> int:
    """
    Export a cohort's stored groups to CSV, one row per member.
    
    Returns:
        Number of rows written
    """
    rows = []
    for group in LabGroupRepository.get_by_cohort(session, cohort_id):
        for trainee in LabGroupRepository.get_members(session, group.id):
            rows.append(
                {
                    "group_index": group.group_index,
                    "group_name": group.name,
                    "trainee_id": trainee.trainee_id,
                    "first_name": trainee.first_name,
                    "last_name": trainee.last_name,
                    "home_agency": trainee.home_agency,
                }
            )
    
    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
    df.to_csv(csv_path, index=False)
    
    print(f"[INFO] Exported {len(df)} group members to {csv_path}")
    return len(df)
