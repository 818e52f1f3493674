"""Domain models and data access layer."""

from .models import Base, LabGroup, LabGroupHistory, LabGroupMember, LearningStyle, SeatingPreference, Trainee
from .repositories import (
    LabGroupRepository,
    LearningStyleRepository,
    PreferenceRepository,
    TraineeRepository,
)

__all__ = [
    "Trainee",
    "LearningStyle",
    "SeatingPreference",
    "LabGroup",
    "LabGroupMember",
    "LabGroupHistory",
    "Base",
    "TraineeRepository",
    "LearningStyleRepository",
    "PreferenceRepository",
    "LabGroupRepository",
]
