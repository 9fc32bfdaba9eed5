"""
User Routes - student profile and its collections

GET /users/profile - Profile with skills, projects, certifications, experiences, resumes
PUT /users/profile - Update personal fields (partial)
POST /users/skills, DELETE /users/skills/{id}
POST /users/projects, PUT/DELETE /users/projects/{id}
POST /users/certifications, DELETE /users/certifications/{id}
POST /users/experiences, PUT/DELETE /users/experiences/{id}
POST /users/resumes, DELETE /users/resumes/{id} - Resume metadata (name + URL)
GET /users - List students (TPO only)
GET /users/notifications, PUT /users/notifications/{id}/read, PUT /users/notifications/read-all
"""

import logging

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy import text
from typing import List

from app.db.postgres import get_db_session, execute_raw_sql
from app.core.auth import get_current_user, get_current_tpo
from app.services import notification_service
from app.schemas.schemas import (
    ProfileResponse, ProfileUpdate, SkillCreate, SkillResponse,
    ProjectCreate, ProjectUpdate, ProjectResponse,
    CertificationCreate, CertificationResponse,
    ExperienceCreate, ExperienceUpdate, ExperienceResponse,
    ResumeCreate, ResumeResponse, StudentSummary, NotificationResponse, MessageResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])

PROFILE_FIELDS = [
    "first_name", "last_name", "phone", "address", "mother_name",
    "degree", "branch", "year_of_graduation", "cgpa", "roll_no"
]


def _iso(value):
    return value.isoformat() if value is not None else None


def load_profile(user_id: int) -> dict:
    """Profile row plus every owned collection, as one payload."""
    rows = execute_raw_sql("""
        SELECT user_id, email, role, first_name, last_name, phone, address, mother_name,
               degree, branch, year_of_graduation, cgpa, roll_no, university_name
        FROM users WHERE user_id = :id
    """, {"id": user_id})
    if not rows:
        raise HTTPException(status_code=404, detail="User not found")

    profile = rows[0]
    params = {"id": user_id}
    profile["skills"] = execute_raw_sql(
        "SELECT skill_id, skill_name FROM user_skills WHERE user_id = :id ORDER BY skill_id", params)
    profile["projects"] = execute_raw_sql(
        "SELECT project_id, project_name, description, link FROM user_projects WHERE user_id = :id ORDER BY project_id", params)
    profile["certifications"] = execute_raw_sql(
        "SELECT certification_id, certification_name, organization, credential_id, issue_date, expiry_date FROM user_certifications WHERE user_id = :id ORDER BY certification_id", params)
    profile["experiences"] = execute_raw_sql(
        "SELECT experience_id, company, profile, from_date, to_date, description FROM user_experiences WHERE user_id = :id ORDER BY experience_id", params)
    profile["resumes"] = execute_raw_sql(
        "SELECT resume_id, resume_name, resume_url, created_at FROM resumes WHERE user_id = :id ORDER BY resume_id", params)
    return profile


def _delete_owned(table: str, id_column: str, item_id: int, user_id: int, label: str) -> None:
    with get_db_session() as db:
        result = db.execute(
            text(f"DELETE FROM {table} WHERE {id_column} = :item_id AND user_id = :uid"),
            {"item_id": item_id, "uid": user_id}
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail=f"{label} not found")


# ============================================================
# PROFILE
# ============================================================

@router.get("/profile", response_model=ProfileResponse)
async def get_profile(user: dict = Depends(get_current_user)):
    """Get current user's profile with all collections."""
    return load_profile(user["user_id"])


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(data: ProfileUpdate, user: dict = Depends(get_current_user)):
    """Update profile. Only provided fields are updated."""
    updates = []
    params = {"id": user["user_id"]}

    for field in PROFILE_FIELDS:
        value = getattr(data, field)
        if value is not None:
            updates.append(f"{field} = :{field}")
            params[field] = value

    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    with get_db_session() as db:
        db.execute(
            text(f"UPDATE users SET {', '.join(updates)}, updated_at = CURRENT_TIMESTAMP WHERE user_id = :id"),
            params
        )

    return load_profile(user["user_id"])


@router.get("", response_model=List[StudentSummary])
async def list_students(tpo: dict = Depends(get_current_tpo)):
    """List all student accounts. TPO only."""
    return execute_raw_sql("""
        SELECT user_id, email, first_name, last_name, degree, branch, year_of_graduation, cgpa, roll_no
        FROM users WHERE role = 'student' ORDER BY user_id
    """)


# ============================================================
# SKILLS
# ============================================================

@router.post("/skills", response_model=SkillResponse, status_code=201)
async def add_skill(skill: SkillCreate, user: dict = Depends(get_current_user)):
    with get_db_session() as db:
        result = db.execute(
            text("INSERT INTO user_skills (user_id, skill_name) VALUES (:uid, :name) RETURNING skill_id, skill_name"),
            {"uid": user["user_id"], "name": skill.skill_name}
        )
        row = result.mappings().fetchone()
    return dict(row)


@router.delete("/skills/{skill_id}", response_model=MessageResponse)
async def delete_skill(skill_id: int, user: dict = Depends(get_current_user)):
    _delete_owned("user_skills", "skill_id", skill_id, user["user_id"], "Skill")
    return MessageResponse(message="Skill removed")


# ============================================================
# PROJECTS
# ============================================================

@router.post("/projects", response_model=ProjectResponse, status_code=201)
async def add_project(project: ProjectCreate, user: dict = Depends(get_current_user)):
    with get_db_session() as db:
        result = db.execute(
            text("""
                INSERT INTO user_projects (user_id, project_name, description, link)
                VALUES (:uid, :name, :description, :link)
                RETURNING project_id, project_name, description, link
            """),
            {"uid": user["user_id"], "name": project.project_name,
             "description": project.description, "link": project.link}
        )
        row = result.mappings().fetchone()
    return dict(row)


@router.put("/projects/{project_id}", response_model=ProjectResponse)
async def update_project(project_id: int, data: ProjectUpdate, user: dict = Depends(get_current_user)):
    updates = []
    params = {"pid": project_id, "uid": user["user_id"]}
    for field in ["project_name", "description", "link"]:
        value = getattr(data, field)
        if value is not None:
            updates.append(f"{field} = :{field}")
            params[field] = value

    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    with get_db_session() as db:
        result = db.execute(
            text(f"""
                UPDATE user_projects SET {', '.join(updates)}
                WHERE project_id = :pid AND user_id = :uid
                RETURNING project_id, project_name, description, link
            """),
            params
        )
        row = result.mappings().fetchone()
        if not row:
            raise HTTPException(status_code=404, detail="Project not found")
    return dict(row)


@router.delete("/projects/{project_id}", response_model=MessageResponse)
async def delete_project(project_id: int, user: dict = Depends(get_current_user)):
    _delete_owned("user_projects", "project_id", project_id, user["user_id"], "Project")
    return MessageResponse(message="Project removed")


# ============================================================
# CERTIFICATIONS
# ============================================================

@router.post("/certifications", response_model=CertificationResponse, status_code=201)
async def add_certification(cert: CertificationCreate, user: dict = Depends(get_current_user)):
    with get_db_session() as db:
        result = db.execute(
            text("""
                INSERT INTO user_certifications (user_id, certification_name, organization, credential_id,
                    issue_date, expiry_date)
                VALUES (:uid, :name, :organization, :credential_id, :issue_date, :expiry_date)
                RETURNING certification_id, certification_name, organization, credential_id,
                    issue_date, expiry_date
            """),
            {"uid": user["user_id"], "name": cert.certification_name,
             "organization": cert.organization, "credential_id": cert.credential_id,
             "issue_date": _iso(cert.issue_date), "expiry_date": _iso(cert.expiry_date)}
        )
        row = result.mappings().fetchone()
    return dict(row)


@router.delete("/certifications/{certification_id}", response_model=MessageResponse)
async def delete_certification(certification_id: int, user: dict = Depends(get_current_user)):
    _delete_owned("user_certifications", "certification_id", certification_id, user["user_id"], "Certification")
    return MessageResponse(message="Certification removed")


# ============================================================
# EXPERIENCES
# ============================================================

@router.post("/experiences", response_model=ExperienceResponse, status_code=201)
async def add_experience(exp: ExperienceCreate, user: dict = Depends(get_current_user)):
    with get_db_session() as db:
        result = db.execute(
            text("""
                INSERT INTO user_experiences (user_id, company, profile, from_date, to_date, description)
                VALUES (:uid, :company, :profile, :from_date, :to_date, :description)
                RETURNING experience_id, company, profile, from_date, to_date, description
            """),
            {"uid": user["user_id"], "company": exp.company, "profile": exp.profile,
             "from_date": _iso(exp.from_date), "to_date": _iso(exp.to_date),
             "description": exp.description}
        )
        row = result.mappings().fetchone()
    return dict(row)


@router.put("/experiences/{experience_id}", response_model=ExperienceResponse)
async def update_experience(experience_id: int, data: ExperienceUpdate, user: dict = Depends(get_current_user)):
    updates = []
    params = {"eid": experience_id, "uid": user["user_id"]}
    for field in ["company", "profile", "from_date", "to_date", "description"]:
        value = getattr(data, field)
        if value is not None:
            updates.append(f"{field} = :{field}")
            params[field] = _iso(value) if field.endswith("_date") else value

    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    with get_db_session() as db:
        result = db.execute(
            text(f"""
                UPDATE user_experiences SET {', '.join(updates)}
                WHERE experience_id = :eid AND user_id = :uid
                RETURNING experience_id, company, profile, from_date, to_date, description
            """),
            params
        )
        row = result.mappings().fetchone()
        if not row:
            raise HTTPException(status_code=404, detail="Experience not found")
    return dict(row)


@router.delete("/experiences/{experience_id}", response_model=MessageResponse)
async def delete_experience(experience_id: int, user: dict = Depends(get_current_user)):
    _delete_owned("user_experiences", "experience_id", experience_id, user["user_id"], "Experience")
    return MessageResponse(message="Experience removed")


# ============================================================
# RESUMES
# ============================================================

@router.post("/resumes", response_model=ResumeResponse, status_code=201)
async def add_resume(resume: ResumeCreate, user: dict = Depends(get_current_user)):
    """Register an uploaded resume by name and URL."""
    with get_db_session() as db:
        result = db.execute(
            text("""
                INSERT INTO resumes (user_id, resume_name, resume_url)
                VALUES (:uid, :name, :url)
                RETURNING resume_id, resume_name, resume_url, created_at
            """),
            {"uid": user["user_id"], "name": resume.resume_name, "url": resume.resume_url}
        )
        row = result.mappings().fetchone()
    logger.info("User %s added resume %s", user["user_id"], row["resume_id"])
    return dict(row)


@router.delete("/resumes/{resume_id}", response_model=MessageResponse)
async def delete_resume(resume_id: int, user: dict = Depends(get_current_user)):
    _delete_owned("resumes", "resume_id", resume_id, user["user_id"], "Resume")
    return MessageResponse(message="Resume removed")


# ============================================================
# NOTIFICATIONS
# ============================================================

@router.get("/notifications", response_model=List[NotificationResponse])
async def get_notifications(
    unread_only: bool = Query(False),
    user: dict = Depends(get_current_user)
):
    """Current user's notifications, newest first."""
    return notification_service.list_notifications(user["user_id"], unread_only=unread_only)


@router.put("/notifications/read-all", response_model=MessageResponse)
async def mark_all_notifications_read(user: dict = Depends(get_current_user)):
    changed = notification_service.mark_all_read(user["user_id"])
    return MessageResponse(message=f"{changed} notification(s) marked as read")


@router.put("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(notification_id: int, user: dict = Depends(get_current_user)):
    return notification_service.mark_read(user["user_id"], notification_id)
