"""Configuration for cohort grouping (JSON or YAML)."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml


@dataclass
class GroupingConfig:
    default_num_groups: int = 4
    max_rebalance_iterations: int = 50
    seed: Optional[int] = None
    db_url: str = "sqlite:///labgroups.db"
    active_status: str = "active"
    group_name_template: str = "Group {n}"

    def validate(self) -> None:
        if not isinstance(self.default_num_groups, int) or self.default_num_groups < 2:
            raise ValueError(f"default_num_groups must be an integer >= 2, got {self.default_num_groups!r}")
        if not isinstance(self.max_rebalance_iterations, int) or self.max_rebalance_iterations < 1:
            raise ValueError(
                f"max_rebalance_iterations must be a positive integer, got {self.max_rebalance_iterations!r}"
            )
        if self.seed is not None and not isinstance(self.seed, int):
            raise ValueError(f"seed must be an integer or null, got {self.seed!r}")
        if "{n}" not in self.group_name_template:
            raise ValueError("group_name_template must contain '{n}'")


def load_config(path: str | Path | None = None) -> GroupingConfig:
    """
    Load configuration from a YAML or JSON file.
    
    Args:
        path: Path to .yaml/.yml/.json file, or None for defaults
    
    Returns:
        Validated GroupingConfig
    
    Raises:
        ValueError: On unknown keys, unsupported file types or invalid values
    """
    if path is None:
        cfg = GroupingConfig()
        cfg.validate()
        return cfg
    
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        raw = yaml.safe_load(text) or {}
    elif suffix == ".json":
        raw = json.loads(text)
    else:
        raise ValueError(f"Unsupported config format: {path.suffix}")
    
    if not isinstance(raw, dict):
        raise ValueError(f"Config root must be a mapping: {path}")
    
    known = {f.name for f in fields(GroupingConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
    
    cfg = GroupingConfig(**raw)
    cfg.validate()
    return cfg
