"""I/O utilities for CSV import/export."""

from .export_csv import export_groups_csv
from .import_csv import import_learning_styles_csv, import_preferences_csv, import_trainees_csv

__all__ = [
    "import_trainees_csv",
    "import_learning_styles_csv",
    "import_preferences_csv",
    "export_groups_csv",
]
