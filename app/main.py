"""
Campus Placement Portal - Main Application

FastAPI backend with:
- PostgreSQL for users, companies, jobs, applications
- JWT authentication with student / company / TPO roles
- Application progress tracking (status flags + process-step ledger)

Run: uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.exceptions import PortalError
from app.core.logging import setup_logging
from app.db.postgres import test_database_connection
from app.db.tables import init_db

settings = get_settings()

setup_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Campus Placement Portal",
    description="""
    Placement portal backend for students, companies and the Training & Placement Office.

    ## Features
    - **Authentication**: JWT-based auth for students, companies and TPOs
    - **Students**: Profile, education, skills, projects, certifications, experiences, resumes
    - **Companies**: Registered by the TPO, post jobs with hiring process steps
    - **Jobs**: Verified by the TPO before students can see them
    - **Applications**: Six progress flags, derived stage, process-step completion log
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    """Translate service-layer errors into their HTTP status."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Startup event
@app.on_event("startup")
async def startup_event():
    """Create missing tables on startup."""
    try:
        init_db()
    except Exception as e:
        logger.warning("Table initialization failed: %s", e)


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Campus Placement Portal"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "database": "connected" if test_database_connection() else "disconnected"
    }
