"""
Models module - domain records and enums shared by every layer.

- Profile, Internship, Application, Task, InternshipMembership
- Role and the per-entity status enums
"""

from app.models.entities import (
    Application,
    ApplicationStatus,
    Internship,
    InternshipMembership,
    InternshipStatus,
    MembershipStatus,
    Profile,
    Record,
    Role,
    Task,
    TaskPriority,
    TaskStatus,
    new_id,
)

__all__ = [
    "Application",
    "ApplicationStatus",
    "Internship",
    "InternshipMembership",
    "InternshipStatus",
    "MembershipStatus",
    "Profile",
    "Record",
    "Role",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "new_id",
]
