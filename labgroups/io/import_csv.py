"""CSV import utilities to load data into database."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pandas as pd
from sqlalchemy.orm import Session

from labgroups.domain.models import PREFERENCE_TYPES, SOCIAL_STYLES, LearningStyle, SeatingPreference, Trainee
from labgroups.domain.repositories import LearningStyleRepository, PreferenceRepository, TraineeRepository
from labgroups.services.scoring import normalize_style


def _text(value) -> Optional[str]:
    """Cell value as a stripped string, or None for blanks/NaN."""
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _id(value) -> str:
    # pandas reads numeric ids as floats when a column has blanks
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def import_trainees_csv(session: Session, csv_path: str | Path, cohort_id: str | None = None) -> int:
    """
    Import trainees from CSV into database.
    
    Args:
        session: Database session
        csv_path: Path to trainees CSV
        cohort_id: Optional cohort to filter on; also used as the cohort for
            rows without a cohort_id column
    
    Returns:
        Number of trainees imported
    """
    df = pd.read_csv(csv_path)
    
    # Normalize column names
    df.columns = df.columns.str.lower().str.strip()
    df.rename(columns={"id": "trainee_id", "student_id": "trainee_id", "agency": "home_agency"}, inplace=True)
    
    if "cohort_id" not in df.columns:
        df["cohort_id"] = cohort_id
    else:
        df["cohort_id"] = df["cohort_id"].map(lambda v: None if pd.isna(v) else _id(v))
        if cohort_id is not None:
            df = df[df["cohort_id"] == str(cohort_id)].copy()
    
    trainees = []
    for _, row in df.iterrows():
        trainee = Trainee(
            trainee_id=_id(row["trainee_id"]),
            first_name=str(row["first_name"]).strip(),
            last_name=str(row["last_name"]).strip(),
            home_agency=_text(row.get("home_agency")),
            cohort_id=_text(row.get("cohort_id")),
            status=(_text(row.get("status")) or "active").lower(),
        )
        trainees.append(trainee)
    
    TraineeRepository.bulk_create(session, trainees)
    
    print(f"[INFO] Imported {len(trainees)} trainees from {csv_path}")
    return len(trainees)


def import_learning_styles_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import learning styles from CSV into database.
    
    Unknown primary styles are stored as NULL (unassessed). When a trainee
    appears more than once, the last row wins.
    
    Returns:
        Number of learning style records imported
    """
    df = pd.read_csv(csv_path)
    
    df.columns = df.columns.str.lower().str.strip()
    df.rename(columns={"student_id": "trainee_id"}, inplace=True)
    df = df.drop_duplicates(subset=["trainee_id"], keep="last")
    
    styles = []
    for _, row in df.iterrows():
        social = (_text(row.get("social_style")) or "").lower()
        styles.append(
            LearningStyle(
                trainee_id=_id(row["trainee_id"]),
                primary_style=normalize_style(_text(row.get("primary_style"))),
                social_style=social if social in SOCIAL_STYLES else None,
            )
        )
    
    LearningStyleRepository.bulk_create(session, styles)
    
    print(f"[INFO] Imported {len(styles)} learning styles from {csv_path}")
    return len(styles)


def import_preferences_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import seating preferences from CSV into database.
    
    Rows with an unrecognized preference_type are skipped.
    
    Returns:
        Number of preferences imported
    """
    df = pd.read_csv(csv_path)
    
    df.columns = df.columns.str.lower().str.strip()
    df.rename(columns={"student_id": "trainee_id", "other_student_id": "other_trainee_id"}, inplace=True)
    
    preferences = []
    skipped = 0
    for _, row in df.iterrows():
        pref_type = (_text(row.get("preference_type")) or "avoid").lower()
        if pref_type not in PREFERENCE_TYPES:
            skipped += 1
            continue
        preferences.append(
            SeatingPreference(
                trainee_id=_id(row["trainee_id"]),
                other_trainee_id=_id(row["other_trainee_id"]),
                preference_type=pref_type,
            )
        )
    
    PreferenceRepository.bulk_create(session, preferences)
    
    if skipped:
        print(f"[WARN] Skipped {skipped} preferences with unknown type in {csv_path}")
    print(f"[INFO] Imported {len(preferences)} preferences from {csv_path}")
    return len(preferences)
