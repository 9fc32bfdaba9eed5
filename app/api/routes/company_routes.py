"""
Company Routes

GET /companies - List companies (public)
GET /companies/{id} - Get company (public)
POST /companies - Register a company and its login (TPO only)
PUT /companies/{id} - Update company (the company itself or a TPO)
GET /companies/{id}/jobs - Jobs posted by a company (public)
"""

import logging

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from typing import List

from app.db.postgres import get_db_session, execute_raw_sql
from app.core.auth import hash_password, get_current_user, get_current_tpo
from app.services.job_service import list_jobs
from app.schemas.schemas import (
    CompanyCreate, CompanyUpdate, CompanyResponse, JobResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/companies", tags=["Companies"])

COMPANY_SELECT = """
    SELECT c.company_id, c.company_name, u.email, c.description, c.website
    FROM companies c JOIN users u ON c.user_id = u.user_id
"""


def _get_company(company_id: int) -> dict:
    results = execute_raw_sql(COMPANY_SELECT + " WHERE c.company_id = :id", {"id": company_id})
    if not results:
        raise HTTPException(status_code=404, detail="Company not found")
    return results[0]


@router.get("", response_model=List[CompanyResponse])
async def list_companies():
    return execute_raw_sql(COMPANY_SELECT + " ORDER BY c.company_name")


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(company_id: int):
    return _get_company(company_id)


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(data: CompanyCreate, tpo: dict = Depends(get_current_tpo)):
    """Register a company. Creates the company login with the given email and password."""
    duplicate = HTTPException(status_code=400, detail="Company with this email already exists")

    if execute_raw_sql("SELECT user_id FROM users WHERE email = :email", {"email": data.email}):
        raise duplicate

    try:
        with get_db_session() as db:
            user_id = db.execute(
                text("""
                    INSERT INTO users (email, password_hash, role)
                    VALUES (:email, :password_hash, 'company')
                    RETURNING user_id
                """),
                {"email": data.email, "password_hash": hash_password(data.password)}
            ).fetchone()[0]

            company_id = db.execute(
                text("""
                    INSERT INTO companies (user_id, company_name, description, website)
                    VALUES (:user_id, :company_name, :description, :website)
                    RETURNING company_id
                """),
                {
                    "user_id": user_id,
                    "company_name": data.company_name,
                    "description": data.description,
                    "website": data.website
                }
            ).fetchone()[0]
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email
        raise duplicate

    logger.info("TPO %s registered company %s (%s)", tpo["user_id"], company_id, data.company_name)
    return _get_company(company_id)


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(company_id: int, data: CompanyUpdate, user: dict = Depends(get_current_user)):
    """Update company profile. Allowed for the company itself or a TPO."""
    _get_company(company_id)

    if user["role"] != "tpo" and user.get("company_id") != company_id:
        raise HTTPException(status_code=403, detail="Not authorized to update this company")

    updates = []
    params = {"id": company_id}
    for field in ["company_name", "description", "website"]:
        value = getattr(data, field)
        if value is not None:
            updates.append(f"{field} = :{field}")
            params[field] = value

    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    with get_db_session() as db:
        db.execute(
            text(f"UPDATE companies SET {', '.join(updates)}, updated_at = CURRENT_TIMESTAMP WHERE company_id = :id"),
            params
        )

    return _get_company(company_id)


@router.get("/{company_id}/jobs", response_model=List[JobResponse])
async def get_company_jobs(company_id: int):
    """Get all jobs posted by a company."""
    _get_company(company_id)
    return list_jobs(company_id=company_id)
