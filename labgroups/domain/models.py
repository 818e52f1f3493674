"""SQLAlchemy models for cohort lab grouping."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, relationship


PRIMARY_STYLES = ("audio", "visual", "kinesthetic")
SOCIAL_STYLES = ("social", "independent")
PREFERENCE_TYPES = ("avoid", "prefer_near")


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Trainee(Base):
    """Trainee enrolled in a cohort."""
    
    __tablename__ = "trainees"
    
    trainee_id = Column(String(64), primary_key=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    home_agency = Column(String(200), nullable=True)  # Shared agency => spread across groups
    cohort_id = Column(String(64), nullable=True)
    status = Column(String(20), nullable=False, default="active")
    
    # Relationships
    learning_style = relationship("LearningStyle", back_populates="trainee", uselist=False)
    memberships = relationship("LabGroupMember", back_populates="trainee")
    
    def __repr__(self) -> str:
        return f"<Trainee(id={self.trainee_id}, name='{self.first_name} {self.last_name}', agency='{self.home_agency}')>"


class LearningStyle(Base):
    """Assessed learning style, at most one per trainee."""
    
    __tablename__ = "learning_styles"
    
    trainee_id = Column(String(64), ForeignKey("trainees.trainee_id"), primary_key=True)
    primary_style = Column(String(20), nullable=True)  # audio, visual, kinesthetic or NULL (unassessed)
    social_style = Column(String(20), nullable=True)  # social, independent (not used for grouping)
    
    trainee = relationship("Trainee", back_populates="learning_style")
    
    def __repr__(self) -> str:
        return f"<LearningStyle(trainee={self.trainee_id}, primary='{self.primary_style}')>"


class SeatingPreference(Base):
    """Pairwise preference between two trainees; only 'avoid' affects grouping."""
    
    __tablename__ = "seating_preferences"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    trainee_id = Column(String(64), ForeignKey("trainees.trainee_id"), nullable=False)
    other_trainee_id = Column(String(64), ForeignKey("trainees.trainee_id"), nullable=False)
    preference_type = Column(String(20), nullable=False, default="avoid")  # avoid, prefer_near
    
    def __repr__(self) -> str:
        return f"<SeatingPreference({self.trainee_id} {self.preference_type} {self.other_trainee_id})>"


class LabGroup(Base):
    """A persisted lab group for a cohort."""
    
    __tablename__ = "lab_groups"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    cohort_id = Column(String(64), nullable=False)
    group_index = Column(Integer, nullable=False)  # 0-based position from the balancer
    name = Column(String(100), nullable=False)
    is_locked = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    
    members = relationship(
        "LabGroupMember",
        back_populates="group",
        cascade="all, delete-orphan",
    )
    
    def __repr__(self) -> str:
        return f"<LabGroup(id={self.id}, cohort={self.cohort_id}, name='{self.name}', locked={self.is_locked})>"


class LabGroupMember(Base):
    """Membership of a trainee in a lab group."""
    
    __tablename__ = "lab_group_members"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey("lab_groups.id"), nullable=False)
    trainee_id = Column(String(64), ForeignKey("trainees.trainee_id"), nullable=False, unique=True)  # One group at a time
    
    group = relationship("LabGroup", back_populates="members")
    trainee = relationship("Trainee", back_populates="memberships")
    
    def __repr__(self) -> str:
        return f"<LabGroupMember(group={self.group_id}, trainee={self.trainee_id})>"


class LabGroupHistory(Base):
    """Audit record of a manual group change."""
    
    __tablename__ = "lab_group_history"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    trainee_id = Column(String(64), ForeignKey("trainees.trainee_id"), nullable=False, index=True)
    from_group_id = Column(Integer, ForeignKey("lab_groups.id", ondelete="SET NULL"), nullable=True)  # NULL: was unassigned
    to_group_id = Column(Integer, ForeignKey("lab_groups.id", ondelete="SET NULL"), nullable=True)  # NULL: unassigned
    changed_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    changed_by = Column(String(200), nullable=True)
    reason = Column(String(500), nullable=True)
    
    def __repr__(self) -> str:
        return f"<LabGroupHistory(trainee={self.trainee_id}, {self.from_group_id} -> {self.to_group_id})>"
