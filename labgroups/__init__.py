"""Lab group balancing for training cohorts.

Modules:
- config: load and validate configuration (JSON or YAML)
- domain: SQLAlchemy models, repositories and database helpers
- services: avoidance constraints, learning-style scoring, statistics
- engine: group balancer and cohort orchestrator
- io: CSV import/export
- validator: coverage validation and text summaries
- cli: command-line interface entrypoints
"""

__all__ = [
    "config",
    "domain",
    "services",
    "engine",
    "io",
    "validator",
    "cli",
]
