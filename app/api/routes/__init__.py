"""
API Routes - every resource router, mounted by app.main under /api.
"""

from fastapi import APIRouter

from app.api.routes import (
    application_routes, auth_routes, company_routes,
    education_routes, job_routes, user_routes
)

api_router = APIRouter()

for module in (auth_routes, user_routes, education_routes, company_routes, job_routes, application_routes):
    api_router.include_router(module.router)
