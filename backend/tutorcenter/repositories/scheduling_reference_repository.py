# backend/tutorcenter/repositories/scheduling_reference_repository.py
"""
Scheduling Reference Repository for the tutoring-center backend

Tenant-scoped lookups for the entities a generation request points at:
the center, the tutor's role and center assignment, the student, and the
group with its roster.
"""

import logging
from typing import List, Optional, cast

from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.center import Center, MembershipRole, StaffCenter, TenantMembership
from ..models.student import Group, GroupStudent, Student
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SchedulingReferenceRepository(BaseRepository[Center]):
    """
    Repository for reference checks made before sessions are generated.

    Every query filters on the tenant, so ids from another tenant read as missing.
    """

    def __init__(self, db: Session):
        """Initialize with Center model as primary."""
        super().__init__(db, Center)
        self.logger = logging.getLogger(__name__)

    def get_center(self, tenant_id: str, center_id: str) -> Optional[Center]:
        try:
            return cast(
                Optional[Center],
                self.db.query(Center)
                .filter(Center.tenant_id == tenant_id, Center.id == center_id)
                .first(),
            )
        except Exception as e:
            self.logger.error(f"Error getting center {center_id}: {str(e)}")
            raise RepositoryException(f"Failed to get center: {str(e)}")

    def has_tutor_role(self, tenant_id: str, user_id: str) -> bool:
        try:
            return (
                self.db.query(TenantMembership.id)
                .filter(
                    TenantMembership.tenant_id == tenant_id,
                    TenantMembership.user_id == user_id,
                    TenantMembership.role == MembershipRole.TUTOR.value,
                )
                .first()
                is not None
            )
        except Exception as e:
            self.logger.error(f"Error checking tutor role for {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to check tutor role: {str(e)}")

    def is_assigned_to_center(self, tenant_id: str, user_id: str, center_id: str) -> bool:
        try:
            return (
                self.db.query(StaffCenter.id)
                .filter(
                    StaffCenter.tenant_id == tenant_id,
                    StaffCenter.user_id == user_id,
                    StaffCenter.center_id == center_id,
                )
                .first()
                is not None
            )
        except Exception as e:
            self.logger.error(f"Error checking center assignment for {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to check center assignment: {str(e)}")

    def get_student(self, tenant_id: str, student_id: str) -> Optional[Student]:
        try:
            return cast(
                Optional[Student],
                self.db.query(Student)
                .filter(Student.tenant_id == tenant_id, Student.id == student_id)
                .first(),
            )
        except Exception as e:
            self.logger.error(f"Error getting student {student_id}: {str(e)}")
            raise RepositoryException(f"Failed to get student: {str(e)}")

    def get_group(self, tenant_id: str, group_id: str) -> Optional[Group]:
        try:
            return cast(
                Optional[Group],
                self.db.query(Group)
                .filter(Group.tenant_id == tenant_id, Group.id == group_id)
                .first(),
            )
        except Exception as e:
            self.logger.error(f"Error getting group {group_id}: {str(e)}")
            raise RepositoryException(f"Failed to get group: {str(e)}")

    def get_group_roster_ids(self, tenant_id: str, group_id: str) -> List[str]:
        """Student ids currently on the group's roster, in a stable order."""
        try:
            rows = (
                self.db.query(GroupStudent.student_id)
                .filter(GroupStudent.tenant_id == tenant_id, GroupStudent.group_id == group_id)
                .order_by(GroupStudent.student_id)
                .all()
            )
            return [student_id for (student_id,) in rows]
        except Exception as e:
            self.logger.error(f"Error getting roster for group {group_id}: {str(e)}")
            raise RepositoryException(f"Failed to get group roster: {str(e)}")
