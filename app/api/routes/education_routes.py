"""
Education Routes

GET /education/info - Get education details of current user
PUT /education/info - Update education details
"""

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy import text

from app.db.postgres import get_db_session
from app.core.auth import get_current_user
from app.schemas.schemas import EducationInfo

router = APIRouter(prefix="/education", tags=["Education"])

EDUCATION_FIELDS = ["degree", "branch", "year_of_graduation", "cgpa", "roll_no", "university_name"]


def _select_education(db, user_id: int):
    result = db.execute(
        text(f"SELECT {', '.join(EDUCATION_FIELDS)} FROM users WHERE user_id = :id"),
        {"id": user_id}
    )
    return result.mappings().fetchone()


@router.get("/info", response_model=EducationInfo)
async def get_education_info(user: dict = Depends(get_current_user)):
    with get_db_session() as db:
        row = _select_education(db, user["user_id"])
    if not row:
        raise HTTPException(status_code=404, detail="User not found")
    return dict(row)


@router.put("/info", response_model=EducationInfo)
async def update_education_info(data: EducationInfo, user: dict = Depends(get_current_user)):
    """Update education details. Fields left out of the body keep their value."""
    updates = []
    params = {"id": user["user_id"]}

    for field in EDUCATION_FIELDS:
        value = getattr(data, field)
        if value is not None:
            updates.append(f"{field} = :{field}")
            params[field] = value

    with get_db_session() as db:
        if updates:
            db.execute(
                text(f"UPDATE users SET {', '.join(updates)}, updated_at = CURRENT_TIMESTAMP WHERE user_id = :id"),
                params
            )
        row = _select_education(db, user["user_id"])

    return dict(row)
