"""
Application Service - applying, status flags and the process-step ledger.

Status flags:
- six independent booleans, one column each
- a mutation writes exactly one column (plus updated_at), never a neighbour
- setting a flag to true notifies the student in the same transaction
- only a TPO or the company that owns the job may change them

Process-step ledger:
- append-only, one row per recorded completion
- recording the same step twice yields two rows
- never touches the status flags; callers keep the two in step themselves
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import (
    ConflictError, ForbiddenError, NotFoundError, persistence_error
)
from app.db.postgres import get_db_session
from app.models.application import (
    Stage, StatusFlags, derive_stage, normalize_status_field
)
from app.services import notification_service

logger = logging.getLogger(__name__)


APPLICATION_SELECT = """
    SELECT a.application_id, a.student_id, a.job_id, a.resume_id, a.application_date,
           a.status_applied, a.status_shortlisted, a.status_interview_scheduled,
           a.status_technical_round, a.status_offer_made, a.status_offer_accepted,
           j.title AS job_title, j.company_id, c.company_name
    FROM applications a
    JOIN jobs j ON a.job_id = j.job_id
    JOIN companies c ON j.company_id = c.company_id
"""

COMPLETION_COLUMNS = "completion_id, application_id, step_id, status, completion_date"


# ============================================================
# AUTHORIZATION
# ============================================================

def can_manage(actor: dict, application: dict) -> bool:
    """True if the actor may change this application's progress."""
    if actor["role"] == "tpo":
        return True
    if actor["role"] == "company":
        return actor.get("company_id") is not None and actor["company_id"] == application["company_id"]
    return False


def can_view(actor: dict, application: dict) -> bool:
    if actor["role"] == "student":
        return actor["user_id"] == application["student_id"]
    return can_manage(actor, application)


def _require_manage(actor: dict, application: dict) -> None:
    if not can_manage(actor, application):
        raise ForbiddenError("Only the company that owns this job or a TPO can update this application")


# ============================================================
# READS
# ============================================================

def _fetch_application(db, application_id: int) -> dict:
    row = db.execute(
        text(APPLICATION_SELECT + " WHERE a.application_id = :aid"),
        {"aid": application_id}
    ).mappings().fetchone()
    if not row:
        raise NotFoundError(f"Application {application_id} not found")
    return dict(row)


def _fetch_completions(db, application_ids: List[int]) -> Dict[int, List[dict]]:
    """Completion records grouped by application, oldest first."""
    grouped = {aid: [] for aid in application_ids}
    if not application_ids:
        return grouped

    params = {f"a{i}": aid for i, aid in enumerate(application_ids)}
    placeholders = ", ".join(f":{key}" for key in params)
    rows = db.execute(
        text(f"""
            SELECT {COMPLETION_COLUMNS} FROM process_step_completions
            WHERE application_id IN ({placeholders})
            ORDER BY completion_date, completion_id
        """),
        params
    ).mappings().fetchall()

    for row in rows:
        grouped[row["application_id"]].append(dict(row))
    return grouped


def to_application_record(row: dict, completions: Optional[List[dict]] = None) -> dict:
    """Shape a joined application row into the API record with its derived stage."""
    flags = StatusFlags.from_row(row)
    return {
        "application_id": row["application_id"],
        "student_id": row["student_id"],
        "job_id": row["job_id"],
        "resume_id": row["resume_id"],
        "job_title": row.get("job_title"),
        "company_name": row.get("company_name"),
        "application_date": row["application_date"],
        "status": flags,
        "stage": derive_stage(flags).value,
        "completions": completions or [],
    }


def get_application(application_id: int, actor: dict) -> dict:
    try:
        with get_db_session() as db:
            row = _fetch_application(db, application_id)
            if not can_view(actor, row):
                raise ForbiddenError("Not authorized to view this application")
            completions = _fetch_completions(db, [application_id])[application_id]
    except SQLAlchemyError as e:
        logger.error("Failed to load application %s", application_id, exc_info=True)
        raise persistence_error(e)

    return to_application_record(row, completions)


def list_applications(
    student_id: Optional[int] = None,
    company_id: Optional[int] = None,
    job_id: Optional[int] = None,
    stage: Optional[Stage] = None,
) -> List[dict]:
    """
    List applications with completions embedded, newest first.

    The stage filter compares the derived label, so it runs after projection.
    """
    sql = APPLICATION_SELECT + " WHERE 1 = 1"
    params = {}

    if student_id is not None:
        sql += " AND a.student_id = :sid"
        params["sid"] = student_id
    if company_id is not None:
        sql += " AND j.company_id = :cid"
        params["cid"] = company_id
    if job_id is not None:
        sql += " AND a.job_id = :jid"
        params["jid"] = job_id

    sql += " ORDER BY a.application_date DESC, a.application_id DESC"

    try:
        with get_db_session() as db:
            rows = [dict(r) for r in db.execute(text(sql), params).mappings().fetchall()]
            completions = _fetch_completions(db, [r["application_id"] for r in rows])
    except SQLAlchemyError as e:
        logger.error("Failed to list applications", exc_info=True)
        raise persistence_error(e)

    records = [to_application_record(r, completions[r["application_id"]]) for r in rows]
    if stage is not None:
        records = [r for r in records if r["stage"] == stage.value]
    return records


# ============================================================
# WRITES
# ============================================================

def create_application(student: dict, job_id: int, resume_id: int) -> dict:
    """
    Submit a student's application to a job.

    Starts with only the applied flag set. The job must be active and
    verified, the resume must be the student's own, and the student may not
    already have an application for this job.
    """
    try:
        with get_db_session() as db:
            job = db.execute(
                text("SELECT is_active, is_verified FROM jobs WHERE job_id = :jid"),
                {"jid": job_id}
            ).fetchone()
            if not job:
                raise NotFoundError(f"Job {job_id} not found")
            if not job[0] or not job[1]:
                raise ConflictError("Job is not accepting applications")

            resume = db.execute(
                text("SELECT resume_id FROM resumes WHERE resume_id = :rid AND user_id = :uid"),
                {"rid": resume_id, "uid": student["user_id"]}
            ).fetchone()
            if not resume:
                raise NotFoundError(f"Resume {resume_id} not found")

            existing = db.execute(
                text("SELECT application_id FROM applications WHERE student_id = :sid AND job_id = :jid"),
                {"sid": student["user_id"], "jid": job_id}
            ).fetchone()
            if existing:
                raise ConflictError("Already applied to this job")

            result = db.execute(
                text("""
                    INSERT INTO applications (student_id, job_id, resume_id, status_applied)
                    VALUES (:sid, :jid, :rid, :applied)
                    RETURNING application_id
                """),
                {"sid": student["user_id"], "jid": job_id, "rid": resume_id, "applied": True}
            )
            application_id = result.fetchone()[0]
            row = _fetch_application(db, application_id)
    except SQLAlchemyError as e:
        logger.error("Failed to create application for job %s", job_id, exc_info=True)
        raise persistence_error(e)

    logger.info("Student %s applied to job %s (application %s)", student["user_id"], job_id, application_id)
    return to_application_record(row)


def set_status_flag(application_id: int, field_name: str, value: bool, actor: dict) -> dict:
    """
    Set one status flag and return the full updated application.

    Raises:
        InvalidFieldError: field_name is not one of the six status fields
            (checked before any database access)
        NotFoundError: no such application
        ForbiddenError: actor is neither a TPO nor the owning company
        PersistenceError: the store failed
    """
    field = normalize_status_field(field_name)

    try:
        with get_db_session() as db:
            row = _fetch_application(db, application_id)
            _require_manage(actor, row)

            # Column name comes from the StatusField whitelist, never from input
            db.execute(
                text(f"""
                    UPDATE applications SET {field.column} = :value, updated_at = CURRENT_TIMESTAMP
                    WHERE application_id = :aid
                """),
                {"aid": application_id, "value": bool(value)}
            )
            updated = _fetch_application(db, application_id)
            completions = _fetch_completions(db, [application_id])[application_id]

            if value:
                message = notification_service.flag_message(field, updated)
                if message:
                    notification_service.notify(db, updated["student_id"], message)
    except SQLAlchemyError as e:
        logger.error("Failed to set %s on application %s", field.value, application_id, exc_info=True)
        raise persistence_error(e)

    logger.info(
        "Application %s: %s=%s by %s %s",
        application_id, field.value, value, actor["role"], actor["user_id"]
    )
    return to_application_record(updated, completions)


def record_step_completion(application_id: int, step_id: int, actor: dict) -> dict:
    """
    Append a completion record for one process step of the application's job.

    Every call inserts a new row; earlier completions of the same step are
    left as they are.
    """
    try:
        with get_db_session() as db:
            application = _fetch_application(db, application_id)
            _require_manage(actor, application)

            step = db.execute(
                text("SELECT step_id FROM job_process_steps WHERE step_id = :sid AND job_id = :jid"),
                {"sid": step_id, "jid": application["job_id"]}
            ).fetchone()
            if not step:
                raise NotFoundError(f"Process step {step_id} not found for this job")

            result = db.execute(
                text(f"""
                    INSERT INTO process_step_completions (application_id, step_id, status)
                    VALUES (:aid, :sid, :status)
                    RETURNING {COMPLETION_COLUMNS}
                """),
                {"aid": application_id, "sid": step_id, "status": True}
            )
            completion = dict(result.mappings().fetchone())
    except SQLAlchemyError as e:
        logger.error("Failed to record step %s for application %s", step_id, application_id, exc_info=True)
        raise persistence_error(e)

    logger.info("Application %s: step %s completed (record %s)", application_id, step_id, completion["completion_id"])
    return completion
