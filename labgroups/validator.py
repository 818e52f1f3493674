from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence

import pandas as pd

from labgroups.services.scoring import UNASSESSED, build_style_map


def validate_group_assignment(groups: Sequence, roster: Sequence) -> None:
    # Every roster trainee in exactly one group, nothing else
    roster_ids = [t.trainee_id for t in roster]
    placed = [tid for g in groups for tid in g.trainee_ids]

    unknown = sorted(set(placed) - set(roster_ids))
    if unknown:
        raise ValueError(f"Groups reference unknown trainee ids: {unknown}")

    duplicates = sorted(tid for tid, n in Counter(placed).items() if n > 1)
    if duplicates:
        raise ValueError(f"Trainees placed in more than one group: {duplicates}")

    missing = sorted(set(roster_ids) - set(placed))
    if missing:
        raise ValueError(f"Trainees missing from groups: {missing}")


def summarize_groups(result, roster: Sequence, learning_styles: Iterable = ()) -> str:
    if not roster:
        return "No trainees."
    style_of = build_style_map(learning_styles)
    rows = []
    by_id = {t.trainee_id: t for t in roster}
    for g in result.groups:
        for tid in g.trainee_ids:
            t = by_id[tid]
            rows.append(
                {
                    "group": g.group_index + 1,
                    "trainee_id": tid,
                    "agency": t.home_agency or "(none)",
                    "style": style_of.get(tid) or UNASSESSED,
                }
            )
    df = pd.DataFrame(rows, columns=["group", "trainee_id", "agency", "style"])

    sizes = pd.Series(
        {g.group_index + 1: len(g.trainee_ids) for g in result.groups}, name="size"
    )
    agencies = pd.crosstab(df["group"], df["agency"])
    styles = pd.crosstab(df["group"], df["style"])

    lines = ["Group sizes:"]
    lines.append(sizes.to_string())
    lines.append("")
    lines.append("Agencies per group:")
    lines.append(agencies.to_string())
    lines.append("")
    lines.append("Learning styles per group:")
    lines.append(styles.to_string())
    lines.append("")
    if result.warnings:
        lines.append(f"Warnings ({len(result.warnings)}):")
        lines.extend(f"  - {w}" for w in result.warnings)
    else:
        lines.append("No avoidance conflicts.")
    return "\n".join(lines)
