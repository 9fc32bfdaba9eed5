"""
Campus Placement Portal
Backend for students, recruiting companies and the Training & Placement Office.

Architecture:
- PostgreSQL: users, companies, jobs, applications, process-step completions
- FastAPI: REST API under /api with JWT roles (student / company / tpo)
- app.client: Python client with a cached profile for the signed-in user
"""

__version__ = "1.0.0"
