"""
Job Service - loading job postings with their branches, skills and process steps.

Shared by the job and company routes.
"""

from typing import List, Optional

from fastapi import HTTPException

from app.db.postgres import execute_raw_sql

JOB_SELECT = """
    SELECT j.job_id, j.company_id, c.company_name, j.title, j.description, j.location,
           j.salary, j.application_deadline, j.degree, j.min_cgpa, j.min_experience_months,
           j.is_active, j.is_verified, j.created_at
    FROM jobs j JOIN companies c ON j.company_id = c.company_id
"""


def _attach_details(job: dict) -> dict:
    params = {"jid": job["job_id"]}
    job["branches"] = [
        r["branch_name"] for r in execute_raw_sql(
            "SELECT branch_name FROM job_branches WHERE job_id = :jid ORDER BY branch_id", params)
    ]
    job["skills"] = [
        r["skill_name"] for r in execute_raw_sql(
            "SELECT skill_name FROM job_skills WHERE job_id = :jid ORDER BY job_skill_id", params)
    ]
    job["process_steps"] = execute_raw_sql("""
        SELECT step_id, step_number, step_name, description, from_date, till_date,
               location, duration_minutes
        FROM job_process_steps WHERE job_id = :jid ORDER BY step_number
    """, params)
    return job


def get_job(job_id: int) -> dict:
    """Get one job with details. Raises 404 if it does not exist."""
    results = execute_raw_sql(JOB_SELECT + " WHERE j.job_id = :jid", {"jid": job_id})
    if not results:
        raise HTTPException(status_code=404, detail="Job not found")
    return _attach_details(results[0])


def list_jobs(
    company_id: Optional[int] = None,
    only_open: bool = False,
    search: Optional[str] = None,
    location: Optional[str] = None,
) -> List[dict]:
    """
    List jobs newest first.

    only_open restricts to postings students can see (active and verified).
    """
    sql = JOB_SELECT + " WHERE 1 = 1"
    params = {}

    if company_id is not None:
        sql += " AND j.company_id = :cid"
        params["cid"] = company_id
    if only_open:
        sql += " AND j.is_active = :active AND j.is_verified = :verified"
        params["active"] = True
        params["verified"] = True
    if search:
        sql += " AND LOWER(j.title) LIKE :search"
        params["search"] = f"%{search.lower()}%"
    if location:
        sql += " AND LOWER(j.location) LIKE :location"
        params["location"] = f"%{location.lower()}%"

    sql += " ORDER BY j.created_at DESC, j.job_id DESC"
    return [_attach_details(r) for r in execute_raw_sql(sql, params)]
