"""Configuration loading utility."""

# Re-export from the package config module
from labgroups.config import GroupingConfig, load_config

__all__ = ["load_config", "GroupingConfig"]
