"""
Relational schema for the placement portal.

Tables are declared with SQLAlchemy Core so the same definitions create the
schema on PostgreSQL (production) and SQLite (local runs, tests). Route and
service code still talks to these tables through raw text() SQL.

Ownership:
- users               every login (student, company, tpo) + student profile fields
- companies           company profile, one per company login
- user_*/resumes      student profile collections
- jobs, job_*         job postings with branches, skills and process steps
- applications        one row per student submission, six status flags
- process_step_completions  append-only log of completed process steps
- notifications       per-user messages with a read flag
"""

import logging

from sqlalchemy import (
    Boolean, Column, DateTime, Float, ForeignKey, Integer, MetaData, String,
    Table, Text, false, func, true
)

logger = logging.getLogger(__name__)

metadata = MetaData()


def _created_at() -> Column:
    return Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp())


def _updated_at() -> Column:
    return Column("updated_at", DateTime, nullable=False, server_default=func.current_timestamp())


users = Table(
    "users", metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("role", String(20), nullable=False),
    Column("is_active", Boolean, nullable=False, server_default=true()),
    Column("first_name", String(100)),
    Column("last_name", String(100)),
    Column("phone", String(30)),
    Column("address", Text),
    Column("mother_name", String(100)),
    # Education
    Column("degree", String(100)),
    Column("branch", String(100)),
    Column("year_of_graduation", Integer),
    Column("cgpa", Float),
    Column("roll_no", String(50)),
    Column("university_name", String(200)),
    _created_at(),
    _updated_at(),
)

companies = Table(
    "companies", metadata,
    Column("company_id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, unique=True),
    Column("company_name", String(200), nullable=False),
    Column("description", Text),
    Column("website", String(255)),
    _created_at(),
    _updated_at(),
)

user_skills = Table(
    "user_skills", metadata,
    Column("skill_id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
    Column("skill_name", String(100), nullable=False),
    _created_at(),
)

user_projects = Table(
    "user_projects", metadata,
    Column("project_id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
    Column("project_name", String(200), nullable=False),
    Column("description", Text),
    Column("link", String(255)),
    _created_at(),
)

user_certifications = Table(
    "user_certifications", metadata,
    Column("certification_id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
    Column("certification_name", String(200), nullable=False),
    Column("organization", String(200)),
    Column("credential_id", String(100)),
    Column("issue_date", String(10)),
    Column("expiry_date", String(10)),
    _created_at(),
)

user_experiences = Table(
    "user_experiences", metadata,
    Column("experience_id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
    Column("company", String(200), nullable=False),
    Column("profile", String(200)),
    Column("from_date", String(10)),
    Column("to_date", String(10)),
    Column("description", Text),
    _created_at(),
)

resumes = Table(
    "resumes", metadata,
    Column("resume_id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
    Column("resume_name", String(200), nullable=False),
    Column("resume_url", String(500), nullable=False),
    _created_at(),
)

jobs = Table(
    "jobs", metadata,
    Column("job_id", Integer, primary_key=True, autoincrement=True),
    Column("company_id", Integer, ForeignKey("companies.company_id", ondelete="CASCADE"), nullable=False, index=True),
    Column("title", String(200), nullable=False),
    Column("description", Text),
    Column("location", String(200)),
    Column("salary", Float),
    Column("application_deadline", String(10)),
    Column("degree", String(100)),
    Column("min_cgpa", Float),
    Column("min_experience_months", Integer),
    Column("is_active", Boolean, nullable=False, server_default=true()),
    Column("is_verified", Boolean, nullable=False, server_default=false()),
    _created_at(),
    _updated_at(),
)

job_branches = Table(
    "job_branches", metadata,
    Column("branch_id", Integer, primary_key=True, autoincrement=True),
    Column("job_id", Integer, ForeignKey("jobs.job_id", ondelete="CASCADE"), nullable=False, index=True),
    Column("branch_name", String(100), nullable=False),
)

job_skills = Table(
    "job_skills", metadata,
    Column("job_skill_id", Integer, primary_key=True, autoincrement=True),
    Column("job_id", Integer, ForeignKey("jobs.job_id", ondelete="CASCADE"), nullable=False, index=True),
    Column("skill_name", String(100), nullable=False),
)

job_process_steps = Table(
    "job_process_steps", metadata,
    Column("step_id", Integer, primary_key=True, autoincrement=True),
    Column("job_id", Integer, ForeignKey("jobs.job_id", ondelete="CASCADE"), nullable=False, index=True),
    Column("step_number", Integer, nullable=False),
    Column("step_name", String(200), nullable=False),
    Column("description", Text),
    Column("from_date", String(10)),
    Column("till_date", String(10)),
    Column("location", String(200)),
    Column("duration_minutes", Integer),
)

# Applications and their completions are never deleted; their parents use RESTRICT.
# No unique (student_id, job_id) constraint: duplicates are rejected by the apply route.
applications = Table(
    "applications", metadata,
    Column("application_id", Integer, primary_key=True, autoincrement=True),
    Column("student_id", Integer, ForeignKey("users.user_id", ondelete="RESTRICT"), nullable=False, index=True),
    Column("job_id", Integer, ForeignKey("jobs.job_id", ondelete="RESTRICT"), nullable=False, index=True),
    Column("resume_id", Integer, ForeignKey("resumes.resume_id", ondelete="SET NULL")),
    Column("application_date", DateTime, nullable=False, server_default=func.current_timestamp()),
    Column("status_applied", Boolean, nullable=False, server_default=true()),
    Column("status_shortlisted", Boolean, nullable=False, server_default=false()),
    Column("status_interview_scheduled", Boolean, nullable=False, server_default=false()),
    Column("status_technical_round", Boolean, nullable=False, server_default=false()),
    Column("status_offer_made", Boolean, nullable=False, server_default=false()),
    Column("status_offer_accepted", Boolean, nullable=False, server_default=false()),
    _updated_at(),
)

process_step_completions = Table(
    "process_step_completions", metadata,
    Column("completion_id", Integer, primary_key=True, autoincrement=True),
    Column("application_id", Integer, ForeignKey("applications.application_id", ondelete="RESTRICT"), nullable=False, index=True),
    Column("step_id", Integer, ForeignKey("job_process_steps.step_id", ondelete="RESTRICT"), nullable=False),
    Column("status", Boolean, nullable=False, server_default=true()),
    Column("completion_date", DateTime, nullable=False, server_default=func.current_timestamp()),
)

notifications = Table(
    "notifications", metadata,
    Column("notification_id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
    Column("message", Text, nullable=False),
    Column("is_read", Boolean, nullable=False, server_default=false()),
    _created_at(),
)


def init_db(bind=None) -> None:
    """
    Create all tables that do not exist yet.
    Call this once during app startup.
    """
    if bind is None:
        from app.db.postgres import engine
        bind = engine
    metadata.create_all(bind)
    logger.info("Database tables ensured (%d tables)", len(metadata.tables))
