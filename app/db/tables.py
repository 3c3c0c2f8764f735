"""
SQLAlchemy Core table definitions.

One table per record collection (see app.models.entities). Create them with:
    metadata.create_all(get_engine())
"""

from sqlalchemy import (
    JSON, Column, Date, DateTime, Float, ForeignKey, Integer, MetaData, String, Table, Text,
    UniqueConstraint,
)

metadata = MetaData()

profiles = Table(
    "profiles",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("role", String(20), nullable=False),
    Column("full_name", String(200), nullable=False),
    Column("email", String(320)),
    Column("company_name", String(200)),
    Column("college_name", String(200)),
    Column("skills", JSON, nullable=False, default=list),
    Column("bio", Text),
    Column("phone", String(50)),
    Column("location", String(200)),
    Column("website", String(500)),
    Column("linkedin_url", String(500)),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

internships = Table(
    "internships",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("employer_id", String(36), ForeignKey("profiles.id"), nullable=False, index=True),
    Column("title", String(200), nullable=False),
    Column("status", String(20), nullable=False, index=True),
    Column("vacancies", Integer, nullable=False),
    Column("application_deadline", Date, nullable=False),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date, nullable=False),
    Column("skills_required", JSON, nullable=False, default=list),
    Column("description", Text, nullable=False, default=""),
    Column("requirements", Text),
    Column("duration_weeks", Integer),
    Column("stipend", Float),
    Column("location", String(200), nullable=False, default="Remote"),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

applications = Table(
    "applications",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("internship_id", String(36), ForeignKey("internships.id"), nullable=False, index=True),
    Column("student_id", String(36), ForeignKey("profiles.id"), nullable=False, index=True),
    Column("status", String(20), nullable=False, index=True),
    Column("applied_at", DateTime(timezone=True), nullable=False),
    Column("reviewed_by", String(36), ForeignKey("profiles.id")),
    Column("reviewed_at", DateTime(timezone=True)),
    Column("notes", Text),
    Column("resume_url", String(500)),
    Column("cover_letter", Text),
    UniqueConstraint("internship_id", "student_id", name="uq_applications_internship_student"),
)

tasks = Table(
    "tasks",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("internship_id", String(36), ForeignKey("internships.id"), nullable=False, index=True),
    Column("created_by", String(36), ForeignKey("profiles.id"), nullable=False),
    Column("assigned_to", String(36), ForeignKey("profiles.id"), nullable=False, index=True),
    Column("title", String(200), nullable=False),
    Column("status", String(20), nullable=False, index=True),
    Column("priority", String(20), nullable=False),
    Column("progress_percentage", Integer, nullable=False, default=0),
    Column("parent_task_id", String(36), ForeignKey("tasks.id")),
    Column("due_date", Date),
    Column("start_date", Date),
    Column("description", Text),
    Column("estimated_hours", Float),
    Column("actual_hours", Float, nullable=False, default=0.0),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

internship_memberships = Table(
    "internship_memberships",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("internship_id", String(36), ForeignKey("internships.id"), nullable=False, index=True),
    Column("student_id", String(36), ForeignKey("profiles.id"), nullable=False, index=True),
    Column("status", String(20), nullable=False),
    Column("joined_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("internship_id", "student_id", name="uq_memberships_internship_student"),
)

# Collection name -> table (keys match Record.COLLECTION)
TABLES = {table.name: table for table in metadata.sorted_tables}
