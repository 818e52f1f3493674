"""Repository classes for data access."""

from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from .models import LabGroup, LabGroupHistory, LabGroupMember, LearningStyle, SeatingPreference, Trainee


class TraineeRepository:
    """Repository for trainee data access."""
    
    @staticmethod
    def get_all(session: Session) -> List[Trainee]:
        """Get all trainees."""
        return session.query(Trainee).all()
    
    @staticmethod
    def get_by_id(session: Session, trainee_id: str) -> Optional[Trainee]:
        """Get trainee by ID."""
        return session.query(Trainee).filter(Trainee.trainee_id == trainee_id).first()
    
    @staticmethod
    def get_active_by_cohort(session: Session, cohort_id: str, status: str = "active") -> List[Trainee]:
        """Get trainees of a cohort with the given status, in a stable order."""
        return (
            session.query(Trainee)
            .filter(Trainee.cohort_id == cohort_id, Trainee.status == status)
            .order_by(Trainee.last_name, Trainee.first_name, Trainee.trainee_id)
            .all()
        )
    
    @staticmethod
    def bulk_create(session: Session, trainees: List[Trainee]) -> None:
        """Create multiple trainees."""
        session.add_all(trainees)
        session.commit()


class LearningStyleRepository:
    """Repository for learning style data access."""
    
    @staticmethod
    def get_for_trainees(session: Session, trainee_ids: Iterable[str]) -> List[LearningStyle]:
        """Get learning styles recorded for the given trainees."""
        ids = list(trainee_ids)
        if not ids:
            return []
        return session.query(LearningStyle).filter(LearningStyle.trainee_id.in_(ids)).all()
    
    @staticmethod
    def bulk_create(session: Session, styles: List[LearningStyle]) -> None:
        """Create multiple learning style records."""
        session.add_all(styles)
        session.commit()


class PreferenceRepository:
    """Repository for seating preference data access."""
    
    @staticmethod
    def get_for_trainees(session: Session, trainee_ids: Iterable[str]) -> List[SeatingPreference]:
        """Get preferences where either side of the pair is one of the given trainees."""
        ids = list(trainee_ids)
        if not ids:
            return []
        return (
            session.query(SeatingPreference)
            .filter(
                or_(
                    SeatingPreference.trainee_id.in_(ids),
                    SeatingPreference.other_trainee_id.in_(ids),
                )
            )
            .order_by(SeatingPreference.id)
            .all()
        )
    
    @staticmethod
    def bulk_create(session: Session, preferences: List[SeatingPreference]) -> None:
        """Create multiple preference records."""
        session.add_all(preferences)
        session.commit()


class LabGroupRepository:
    """Repository for lab group data access."""
    
    @staticmethod
    def get_by_id(session: Session, group_id: int) -> Optional[LabGroup]:
        """Get group by ID."""
        return session.query(LabGroup).filter(LabGroup.id == group_id).first()
    
    @staticmethod
    def get_by_cohort(session: Session, cohort_id: str) -> List[LabGroup]:
        """Get all groups for a cohort ordered by group index."""
        return (
            session.query(LabGroup)
            .filter(LabGroup.cohort_id == cohort_id)
            .order_by(LabGroup.group_index)
            .all()
        )
    
    @staticmethod
    def get_members(session: Session, group_id: int) -> List[Trainee]:
        """Get trainees who are members of a group."""
        return (
            session.query(Trainee)
            .join(LabGroupMember, LabGroupMember.trainee_id == Trainee.trainee_id)
            .filter(LabGroupMember.group_id == group_id)
            .order_by(LabGroupMember.id)
            .all()
        )
    
    @staticmethod
    def replace_for_cohort(
        session: Session,
        cohort_id: str,
        groups,
        name_template: str = "Group {n}",
    ) -> List[LabGroup]:
        """
        Replace a cohort's stored groups with a new assignment.
        
        Args:
            session: Database session
            cohort_id: Cohort whose groups are replaced
            groups: Iterable of GroupAssignment (group_index, trainee_ids)
            name_template: Format string for group names, receives n = group_index + 1
        
        Returns:
            The newly created LabGroup objects
        
        Raises:
            ValueError: If any of the cohort's stored groups is locked
        """
        existing_groups = LabGroupRepository.get_by_cohort(session, cohort_id)
        locked = [g.name for g in existing_groups if g.is_locked]
        if locked:
            raise ValueError(f"Cannot replace groups for cohort {cohort_id}: locked groups {locked}")
        
        for existing in existing_groups:
            session.delete(existing)
        session.flush()
        
        created: List[LabGroup] = []
        for assignment in groups:
            lab_group = LabGroup(
                cohort_id=cohort_id,
                group_index=assignment.group_index,
                name=name_template.format(n=assignment.group_index + 1),
            )
            lab_group.members = [LabGroupMember(trainee_id=tid) for tid in assignment.trainee_ids]
            created.append(lab_group)
        
        session.add_all(created)
        session.commit()
        return created
    
    @staticmethod
    def set_locked(session: Session, group_id: int, locked: bool = True) -> LabGroup:
        """Lock or unlock a group against manual moves."""
        group = LabGroupRepository.get_by_id(session, group_id)
        if group is None:
            raise ValueError(f"Group {group_id} not found")
        group.is_locked = locked
        session.commit()
        return group
    
    @staticmethod
    def get_membership(session: Session, trainee_id: str) -> Optional[LabGroupMember]:
        """Get a trainee's current group membership, if any."""
        return session.query(LabGroupMember).filter(LabGroupMember.trainee_id == trainee_id).first()
    
    @staticmethod
    def move_trainee(
        session: Session,
        trainee_id: str,
        from_group_id: Optional[int],
        to_group_id: Optional[int],
        changed_by: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> Optional[LabGroupMember]:
        """
        Move a trainee to another group and record the change in the group history.
        
        A trainee belongs to at most one group. A None source takes the trainee
        out of whatever group currently holds them; a None target unassigns.
        
        Args:
            session: Database session
            trainee_id: Trainee to move
            from_group_id: Expected current group, or None
            to_group_id: New group, or None to unassign
            changed_by: Who made the change (stored in history)
            reason: Optional reason (stored in history)
        
        Returns:
            The new membership, or None when unassigned
        
        Raises:
            ValueError: If a group is missing or locked, or the trainee is not in the source group
        """
        current = LabGroupRepository.get_membership(session, trainee_id)
        
        source = None
        if from_group_id is not None:
            source = LabGroupRepository.get_by_id(session, from_group_id)
            if source is None:
                raise ValueError(f"Group {from_group_id} not found")
            if current is None or current.group_id != source.id:
                raise ValueError(f"Trainee {trainee_id} is not a member of group {source.id}")
        elif current is not None:
            source = current.group
        
        target = None
        if to_group_id is not None:
            target = LabGroupRepository.get_by_id(session, to_group_id)
            if target is None:
                raise ValueError(f"Group {to_group_id} not found")
        
        for group in (source, target):
            if group is not None and group.is_locked:
                raise ValueError(f'Group "{group.name}" is locked')
        
        session.add(
            LabGroupHistory(
                trainee_id=trainee_id,
                from_group_id=source.id if source is not None else None,
                to_group_id=target.id if target is not None else None,
                changed_by=changed_by,
                reason=reason,
            )
        )
        
        if current is not None:
            session.delete(current)
            # Flush the delete first so the one-group-per-trainee constraint holds
            session.flush()
        
        new_membership = None
        if target is not None:
            new_membership = LabGroupMember(group_id=target.id, trainee_id=trainee_id)
            session.add(new_membership)
        
        session.commit()
        return new_membership
    
    @staticmethod
    def get_history(
        session: Session,
        trainee_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[LabGroupHistory]:
        """Get group change history, newest first, optionally for one trainee."""
        query = session.query(LabGroupHistory)
        if trainee_id is not None:
            query = query.filter(LabGroupHistory.trainee_id == trainee_id)
        query = query.order_by(LabGroupHistory.changed_at.desc(), LabGroupHistory.id.desc())
        if limit is not None:
            query = query.limit(limit)
        return query.all()
