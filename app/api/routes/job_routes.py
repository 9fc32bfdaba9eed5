"""
Job Routes

GET /jobs - List active, verified jobs with filters
GET /jobs/{job_id} - Get job details
POST /jobs - Create job posting (company only, starts unverified)
PUT /jobs/{job_id} - Update job (owning company only)
PATCH /jobs/{job_id}/verify - Verify or unverify a job (TPO only)
DELETE /jobs/{job_id} - Delete job without applications (owning company or TPO)
"""

import logging

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy import text
from typing import List, Optional

from app.db.postgres import get_db_session
from app.core.auth import get_current_user, get_current_company, get_current_tpo
from app.core.exceptions import ConflictError
from app.services.job_service import get_job as load_job, list_jobs as load_jobs
from app.schemas.schemas import (
    JobCreate, JobUpdate, JobResponse, JobVerifyRequest, MessageResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])

JOB_UPDATE_FIELDS = [
    "title", "description", "location", "salary", "application_deadline",
    "degree", "min_cgpa", "min_experience_months", "is_active"
]


def _iso(value):
    return value.isoformat() if value is not None else None


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(job: JobCreate, company: dict = Depends(get_current_company)):
    """Create a new job posting. It stays hidden from students until a TPO verifies it."""
    with get_db_session() as db:
        result = db.execute(
            text("""
                INSERT INTO jobs (company_id, title, description, location, salary,
                    application_deadline, degree, min_cgpa, min_experience_months,
                    is_active, is_verified)
                VALUES (:company_id, :title, :description, :location, :salary,
                    :deadline, :degree, :min_cgpa, :min_exp, :active, :verified)
                RETURNING job_id
            """),
            {
                "company_id": company["company_id"], "title": job.title,
                "description": job.description, "location": job.location,
                "salary": job.salary, "deadline": _iso(job.application_deadline),
                "degree": job.degree, "min_cgpa": job.min_cgpa,
                "min_exp": job.min_experience_months, "active": True, "verified": False
            }
        )
        job_id = result.fetchone()[0]

        for branch in job.branches:
            db.execute(
                text("INSERT INTO job_branches (job_id, branch_name) VALUES (:jid, :name)"),
                {"jid": job_id, "name": branch}
            )

        for skill in job.skills:
            db.execute(
                text("INSERT INTO job_skills (job_id, skill_name) VALUES (:jid, :name)"),
                {"jid": job_id, "name": skill}
            )

        # Steps are numbered in the order given, starting at 1
        for number, step in enumerate(job.process_steps, start=1):
            db.execute(
                text("""
                    INSERT INTO job_process_steps (job_id, step_number, step_name, description,
                        from_date, till_date, location, duration_minutes)
                    VALUES (:jid, :number, :name, :description, :from_date, :till_date,
                        :location, :duration)
                """),
                {
                    "jid": job_id, "number": number, "name": step.step_name,
                    "description": step.description, "from_date": _iso(step.from_date),
                    "till_date": _iso(step.till_date), "location": step.location,
                    "duration": step.duration_minutes
                }
            )

    logger.info("Company %s posted job %s", company["company_id"], job_id)
    return load_job(job_id)


@router.get("", response_model=List[JobResponse])
async def list_jobs(
    search: Optional[str] = Query(None, description="Search in title"),
    location: Optional[str] = Query(None)
):
    """List all active, verified job postings."""
    return load_jobs(only_open=True, search=search, location=location)


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: int):
    """Get details of a specific job."""
    return load_job(job_id)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(job_id: int, update: JobUpdate, company: dict = Depends(get_current_company)):
    """Update a job posting. Only the owning company can update."""
    existing = load_job(job_id)
    if existing["company_id"] != company["company_id"]:
        raise HTTPException(status_code=403, detail="Not authorized to modify this job")

    updates = []
    params = {"jid": job_id}
    for field in JOB_UPDATE_FIELDS:
        value = getattr(update, field)
        if value is not None:
            updates.append(f"{field} = :{field}")
            params[field] = _iso(value) if field == "application_deadline" else value

    if updates:
        with get_db_session() as db:
            db.execute(
                text(f"UPDATE jobs SET {', '.join(updates)}, updated_at = CURRENT_TIMESTAMP WHERE job_id = :jid"),
                params
            )

    return load_job(job_id)


@router.patch("/{job_id}/verify", response_model=JobResponse)
async def verify_job(job_id: int, data: JobVerifyRequest, tpo: dict = Depends(get_current_tpo)):
    """Verify a job posting so students can see it. TPO only."""
    with get_db_session() as db:
        result = db.execute(
            text("UPDATE jobs SET is_verified = :verified, updated_at = CURRENT_TIMESTAMP WHERE job_id = :jid"),
            {"jid": job_id, "verified": data.verified}
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Job not found")

    logger.info("TPO %s set job %s verified=%s", tpo["user_id"], job_id, data.verified)
    return load_job(job_id)


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: int, user: dict = Depends(get_current_user)):
    """
    Delete a job posting. Allowed for the owning company or a TPO.

    A job that has received applications cannot be deleted; close it with
    PUT {"is_active": false} instead.
    """
    existing = load_job(job_id)

    if user["role"] != "tpo" and user.get("company_id") != existing["company_id"]:
        raise HTTPException(status_code=403, detail="Not authorized to delete this job")

    with get_db_session() as db:
        applied = db.execute(
            text("SELECT COUNT(*) FROM applications WHERE job_id = :jid"),
            {"jid": job_id}
        ).scalar()
        if applied:
            raise ConflictError(
                f"Job {job_id} has {applied} application(s) and cannot be deleted; deactivate it instead"
            )

        db.execute(text("DELETE FROM job_process_steps WHERE job_id = :jid"), {"jid": job_id})
        db.execute(text("DELETE FROM job_skills WHERE job_id = :jid"), {"jid": job_id})
        db.execute(text("DELETE FROM job_branches WHERE job_id = :jid"), {"jid": job_id})
        db.execute(text("DELETE FROM jobs WHERE job_id = :jid"), {"jid": job_id})

    return MessageResponse(message="Job deleted successfully")
