"""
Authentication Routes

POST /auth/register - Student self-registration
POST /auth/login - Login for any role, returns a bearer token
GET /auth/me - Account of the current token
"""

import logging

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from app.db.postgres import get_db_session, execute_raw_sql
from app.core.auth import hash_password, verify_password, create_access_token, get_current_user
from app.schemas.schemas import (
    RegisterRequest, LoginRequest, TokenResponse, UserResponse, MessageResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _account_by_email(email: str):
    rows = execute_raw_sql(
        "SELECT user_id, password_hash, role, is_active FROM users WHERE email = :email",
        {"email": email}
    )
    return rows[0] if rows else None


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(request: RegisterRequest):
    """
    Create a student account.

    Companies cannot self-register; the TPO creates their logins via POST /companies.
    """
    if _account_by_email(request.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    try:
        with get_db_session() as db:
            user_id = db.execute(
                text("""
                    INSERT INTO users (email, password_hash, role, first_name, last_name)
                    VALUES (:email, :password_hash, 'student', :first_name, :last_name)
                    RETURNING user_id
                """),
                {
                    "email": request.email,
                    "password_hash": hash_password(request.password),
                    "first_name": request.first_name,
                    "last_name": request.last_name,
                }
            ).fetchone()[0]
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email
        raise HTTPException(status_code=400, detail="Email already registered")

    logger.info("Student account %s created for %s", user_id, request.email)
    return MessageResponse(message="Registered successfully. Please login.")


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Exchange email and password for a token.

    Send it on later calls as: Authorization: Bearer <token>
    """
    account = _account_by_email(request.email)

    if not account or not verify_password(request.password, account["password_hash"]):
        logger.info("Failed login for %s", request.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not account["is_active"]:
        raise HTTPException(status_code=403, detail="Account deactivated")

    return TokenResponse(
        access_token=create_access_token(account["user_id"], account["role"]),
        user_id=account["user_id"],
        role=account["role"],
    )


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    rows = execute_raw_sql(
        "SELECT user_id, email, role, is_active, created_at FROM users WHERE user_id = :id",
        {"id": user["user_id"]}
    )
    return rows[0]
