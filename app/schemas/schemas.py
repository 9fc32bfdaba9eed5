"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Application endpoints use the camelCase body keys existing clients send
(statusField, stepId, jobId, resumeId); everything else is snake_case.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictBool
from typing import Optional, List
from datetime import date, datetime
from enum import Enum

from app.models.application import StatusFlags


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    company = "company"
    tpo = "tpo"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: UserRole

class UserResponse(BaseModel):
    user_id: int
    email: str
    role: UserRole
    is_active: bool
    created_at: datetime


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = None
    address: Optional[str] = None
    mother_name: Optional[str] = None
    degree: Optional[str] = None
    branch: Optional[str] = None
    year_of_graduation: Optional[int] = Field(None, ge=2000, le=2100)
    cgpa: Optional[float] = Field(None, ge=0, le=10)
    roll_no: Optional[str] = None

class SkillCreate(BaseModel):
    skill_name: str = Field(..., min_length=1, max_length=100)

class SkillResponse(BaseModel):
    skill_id: int
    skill_name: str

class ProjectCreate(BaseModel):
    project_name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    link: Optional[str] = None

class ProjectUpdate(BaseModel):
    project_name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    link: Optional[str] = None

class ProjectResponse(BaseModel):
    project_id: int
    project_name: str
    description: Optional[str] = None
    link: Optional[str] = None

class CertificationCreate(BaseModel):
    certification_name: str = Field(..., min_length=1, max_length=200)
    organization: Optional[str] = None
    credential_id: Optional[str] = None
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None

class CertificationResponse(BaseModel):
    certification_id: int
    certification_name: str
    organization: Optional[str] = None
    credential_id: Optional[str] = None
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None

class ExperienceCreate(BaseModel):
    company: str = Field(..., min_length=1, max_length=200)
    profile: Optional[str] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    description: Optional[str] = None

class ExperienceUpdate(BaseModel):
    company: Optional[str] = Field(None, min_length=1, max_length=200)
    profile: Optional[str] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    description: Optional[str] = None

class ExperienceResponse(BaseModel):
    experience_id: int
    company: str
    profile: Optional[str] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    description: Optional[str] = None

class ResumeCreate(BaseModel):
    resume_name: str = Field(..., min_length=1, max_length=200)
    resume_url: str = Field(..., min_length=1, max_length=500)

class ResumeResponse(BaseModel):
    resume_id: int
    resume_name: str
    resume_url: str
    created_at: datetime

class ProfileResponse(BaseModel):
    user_id: int
    email: str
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    mother_name: Optional[str] = None
    degree: Optional[str] = None
    branch: Optional[str] = None
    year_of_graduation: Optional[int] = None
    cgpa: Optional[float] = None
    roll_no: Optional[str] = None
    university_name: Optional[str] = None
    skills: List[SkillResponse] = []
    projects: List[ProjectResponse] = []
    certifications: List[CertificationResponse] = []
    experiences: List[ExperienceResponse] = []
    resumes: List[ResumeResponse] = []

class StudentSummary(BaseModel):
    user_id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    degree: Optional[str] = None
    branch: Optional[str] = None
    year_of_graduation: Optional[int] = None
    cgpa: Optional[float] = None
    roll_no: Optional[str] = None


# ============================================================
# EDUCATION SCHEMAS
# ============================================================

class EducationInfo(BaseModel):
    degree: Optional[str] = None
    branch: Optional[str] = None
    year_of_graduation: Optional[int] = Field(None, ge=2000, le=2100)
    cgpa: Optional[float] = Field(None, ge=0, le=10)
    roll_no: Optional[str] = None
    university_name: Optional[str] = None


# ============================================================
# COMPANY SCHEMAS
# ============================================================

class CompanyCreate(BaseModel):
    company_name: str = Field(..., min_length=2, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=8)
    description: Optional[str] = None
    website: Optional[str] = None

class CompanyUpdate(BaseModel):
    company_name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = None
    website: Optional[str] = None

class CompanyResponse(BaseModel):
    company_id: int
    company_name: str
    email: str
    description: Optional[str] = None
    website: Optional[str] = None


# ============================================================
# JOB SCHEMAS
# ============================================================

class ProcessStepCreate(BaseModel):
    step_name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    from_date: Optional[date] = None
    till_date: Optional[date] = None
    location: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, ge=0)

class ProcessStepResponse(BaseModel):
    step_id: int
    step_number: int
    step_name: str
    description: Optional[str] = None
    from_date: Optional[date] = None
    till_date: Optional[date] = None
    location: Optional[str] = None
    duration_minutes: Optional[int] = None

class JobCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[float] = Field(None, ge=0)
    application_deadline: Optional[date] = None
    degree: Optional[str] = None
    min_cgpa: Optional[float] = Field(None, ge=0, le=10)
    min_experience_months: Optional[int] = Field(None, ge=0)
    branches: List[str] = []
    skills: List[str] = []
    process_steps: List[ProcessStepCreate] = []

class JobUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[float] = Field(None, ge=0)
    application_deadline: Optional[date] = None
    degree: Optional[str] = None
    min_cgpa: Optional[float] = Field(None, ge=0, le=10)
    min_experience_months: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None

class JobVerifyRequest(BaseModel):
    verified: StrictBool

class JobResponse(BaseModel):
    job_id: int
    company_id: int
    company_name: str
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[float] = None
    application_deadline: Optional[date] = None
    degree: Optional[str] = None
    min_cgpa: Optional[float] = None
    min_experience_months: Optional[int] = None
    is_active: bool
    is_verified: bool
    branches: List[str] = []
    skills: List[str] = []
    process_steps: List[ProcessStepResponse] = []
    created_at: datetime


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: int = Field(..., alias="jobId")
    resume_id: int = Field(..., alias="resumeId")

class StatusFlagUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status_field: str = Field(..., alias="statusField")
    value: StrictBool

class StepCompletionCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    step_id: int = Field(..., alias="stepId")

class CompletionResponse(BaseModel):
    completion_id: int
    application_id: int
    step_id: int
    status: bool
    completion_date: datetime

class ApplicationResponse(BaseModel):
    application_id: int
    student_id: int
    job_id: int
    resume_id: Optional[int] = None
    job_title: Optional[str] = None
    company_name: Optional[str] = None
    application_date: datetime
    status: StatusFlags
    stage: str
    completions: List[CompletionResponse] = []


# ============================================================
# NOTIFICATION SCHEMAS
# ============================================================

class NotificationResponse(BaseModel):
    notification_id: int
    message: str
    is_read: bool
    created_at: datetime


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    detail: str
    code: Optional[str] = None
