"""
Database models for the tutoring-center backend.

The models are organized by functionality:
- Centers, tenant memberships and staff assignments
- Students, groups and group rosters
- Scheduled sessions and their student rosters
- Audit trail events
"""

from .audit_event import AuditEvent, AuditResult
from .center import Center, MembershipRole, StaffCenter, TenantMembership
from .session import SessionStudent, SessionType, TutoringSession
from .student import Group, GroupStudent, GroupType, Student

__all__ = [
    "AuditEvent",
    "AuditResult",
    "Center",
    "MembershipRole",
    "StaffCenter",
    "TenantMembership",
    "Group",
    "GroupStudent",
    "GroupType",
    "Student",
    "SessionStudent",
    "SessionType",
    "TutoringSession",
]
