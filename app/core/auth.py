"""
Authentication - passwords, JWT tokens and the actor behind a request.

Every protected route receives the caller as a plain dict:

    {"user_id": 12, "email": "...", "role": "company", "company_id": 3}

company_id is only set for company accounts. Role checks are built with
require_roles(); the ready-made dependencies below cover the portal's roles.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import text

from app.core.config import get_settings
from app.db.postgres import get_db_session

logger = logging.getLogger(__name__)

settings = get_settings()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

bearer_scheme = HTTPBearer()

ROLE_LABELS = {"student": "Students", "company": "Companies", "tpo": "TPO"}


# ============================================================
# PASSWORDS & TOKENS
# ============================================================

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: int, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """Signed token carrying the user id (sub) and role."""
    lifetime = expires_delta or timedelta(minutes=settings.jwt_expire_minutes)
    claims = {
        "sub": str(user_id),
        "role": role,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Claims of a valid token, or None if it is malformed, forged or expired."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.debug("Rejected token: %s", e)
        return None


# ============================================================
# REQUEST ACTOR
# ============================================================

def load_actor(user_id: int) -> Optional[dict]:
    """User row joined with the company it owns, if any."""
    with get_db_session() as db:
        row = db.execute(
            text("""
                SELECT u.user_id, u.email, u.role, u.is_active, c.company_id
                FROM users u LEFT JOIN companies c ON c.user_id = u.user_id
                WHERE u.user_id = :id
            """),
            {"id": user_id}
        ).mappings().fetchone()
    return dict(row) if row else None


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> dict:
    """
    FastAPI dependency - the authenticated actor for this request.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    claims = decode_token(credentials.credentials)
    subject = claims.get("sub") if claims else None
    if not subject or not subject.isdigit():
        raise unauthorized

    actor = load_actor(int(subject))
    if not actor:
        raise unauthorized

    if not actor.pop("is_active"):
        raise HTTPException(status_code=403, detail="Account deactivated")

    return actor


def require_roles(*roles: str):
    """Build a dependency that admits only the given roles."""
    label = " or ".join(ROLE_LABELS.get(role, role) for role in roles)

    async def dependency(user: dict = Depends(get_current_user)) -> dict:
        if user["role"] not in roles:
            raise HTTPException(status_code=403, detail=f"{label} only")
        return user

    return dependency


get_current_student = require_roles("student")
get_current_tpo = require_roles("tpo")
get_current_staff = require_roles("company", "tpo")


async def get_current_company(user: dict = Depends(require_roles("company"))) -> dict:
    """Company account that also has its company profile row."""
    if user["company_id"] is None:
        raise HTTPException(status_code=404, detail="Company profile not found")
    return user
