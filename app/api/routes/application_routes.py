"""
Application Routes

POST /applications - Apply to a job (student only)
GET /applications/my-applications - Own applications with completions (student only)
GET /applications - Applications to own jobs (company) or all (TPO)
GET /applications/{id} - Single application
PATCH /applications/{id}/status - Set one status flag (owning company or TPO)
POST /applications/{id}/complete-step - Record a process-step completion (owning company or TPO)
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from app.core.auth import get_current_user, get_current_student, get_current_staff
from app.models.application import parse_stage
from app.services import application_service
from app.schemas.schemas import (
    ApplicationCreate, ApplicationResponse, CompletionResponse,
    ErrorResponse, StatusFlagUpdate, StepCompletionCreate
)

router = APIRouter(
    prefix="/applications",
    tags=["Applications"],
    responses={code: {"model": ErrorResponse} for code in (400, 403, 404, 500)},
)


@router.post("", response_model=ApplicationResponse, status_code=201)
async def apply_to_job(data: ApplicationCreate, student: dict = Depends(get_current_student)):
    """Apply to a job with one of your resumes. Cannot apply twice to the same job."""
    return application_service.create_application(student, data.job_id, data.resume_id)


@router.get("/my-applications", response_model=List[ApplicationResponse])
async def get_my_applications(
    stage: Optional[str] = Query(None, description="Filter by derived stage, e.g. Offer"),
    student: dict = Depends(get_current_student)
):
    """Get all applications of the current student with completed process steps."""
    return application_service.list_applications(
        student_id=student["user_id"],
        stage=parse_stage(stage) if stage else None
    )


@router.get("", response_model=List[ApplicationResponse])
async def get_applications(
    job_id: Optional[int] = Query(None),
    stage: Optional[str] = Query(None, description="Filter by derived stage, e.g. Shortlisted"),
    user: dict = Depends(get_current_staff)
):
    """Companies see applications to their own jobs; TPOs see every application."""
    company_id = user["company_id"] if user["role"] == "company" else None
    return application_service.list_applications(
        company_id=company_id,
        job_id=job_id,
        stage=parse_stage(stage) if stage else None
    )


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(application_id: int, user: dict = Depends(get_current_user)):
    """Get one application. Visible to its student, the owning company and TPOs."""
    return application_service.get_application(application_id, user)


@router.patch("/{application_id}/status", response_model=ApplicationResponse)
async def update_status(
    application_id: int,
    update: StatusFlagUpdate,
    user: dict = Depends(get_current_user)
):
    """
    Set a single status flag.

    Body: {"statusField": "shortlisted", "value": true}
    Other flags are left untouched; no ordering between flags is enforced.
    """
    return application_service.set_status_flag(application_id, update.status_field, update.value, user)


@router.post("/{application_id}/complete-step", response_model=CompletionResponse, status_code=201)
async def complete_step(
    application_id: int,
    data: StepCompletionCreate,
    user: dict = Depends(get_current_user)
):
    """Record that a process step happened for this application. Each call adds a record."""
    return application_service.record_step_completion(application_id, data.step_id, user)
