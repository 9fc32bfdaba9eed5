"""
Shared fixtures: a throwaway SQLite database, an API client and seeded actors.

The database URL must be set before any app module is imported, because the
engine is created at import time.
"""

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="placement-portal-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'portal.db')}"
os.environ["JWT_SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from app.core.auth import create_access_token
from app.db.postgres import engine, get_db_session
from app.db.tables import metadata
from app.main import app


@pytest.fixture(autouse=True)
def fresh_db():
    """Recreate every table for each test."""
    metadata.drop_all(engine)
    metadata.create_all(engine)
    yield


@pytest.fixture
def client():
    return TestClient(app)


def insert(sql: str, params: dict) -> int:
    """Run an INSERT ... RETURNING <id> and return the id."""
    with get_db_session() as db:
        return db.execute(text(sql), params).fetchone()[0]


def make_user(email: str, role: str, first_name: str = None) -> dict:
    user_id = insert(
        "INSERT INTO users (email, password_hash, role, first_name) VALUES (:e, 'not-a-hash', :r, :f) RETURNING user_id",
        {"e": email, "r": role, "f": first_name}
    )
    token = create_access_token(user_id, role)
    return {
        "user_id": user_id,
        "email": email,
        "role": role,
        "company_id": None,
        "headers": {"Authorization": f"Bearer {token}"},
    }


def make_company(email: str, name: str) -> dict:
    user = make_user(email, "company")
    user["company_id"] = insert(
        "INSERT INTO companies (user_id, company_name) VALUES (:u, :n) RETURNING company_id",
        {"u": user["user_id"], "n": name}
    )
    return user


def make_job(company: dict, title: str = "Software Engineer", verified: bool = True,
             steps=("Aptitude Test", "Technical Interview")) -> dict:
    job_id = insert(
        """INSERT INTO jobs (company_id, title, is_active, is_verified)
           VALUES (:c, :t, :a, :v) RETURNING job_id""",
        {"c": company["company_id"], "t": title, "a": True, "v": verified}
    )
    step_ids = [
        insert(
            """INSERT INTO job_process_steps (job_id, step_number, step_name)
               VALUES (:j, :n, :s) RETURNING step_id""",
            {"j": job_id, "n": number, "s": name}
        )
        for number, name in enumerate(steps, start=1)
    ]
    return {"job_id": job_id, "step_ids": step_ids}


def make_resume(student: dict, name: str = "resume.pdf") -> int:
    return insert(
        "INSERT INTO resumes (user_id, resume_name, resume_url) VALUES (:u, :n, :url) RETURNING resume_id",
        {"u": student["user_id"], "n": name, "url": f"https://files.example.edu/{name}"}
    )


@pytest.fixture
def student():
    return make_user("asha@college.edu", "student", "Asha")


@pytest.fixture
def other_student():
    return make_user("ravi@college.edu", "student", "Ravi")


@pytest.fixture
def company():
    return make_company("hr@techcorp.com", "TechCorp")


@pytest.fixture
def other_company():
    return make_company("jobs@datasystems.com", "DataSystems")


@pytest.fixture
def tpo():
    return make_user("tpo@college.edu", "tpo")


@pytest.fixture
def job(company):
    return make_job(company)


@pytest.fixture
def resume_id(student):
    return make_resume(student)


@pytest.fixture
def application(client, student, job, resume_id):
    response = client.post(
        "/api/applications",
        json={"jobId": job["job_id"], "resumeId": resume_id},
        headers=student["headers"]
    )
    assert response.status_code == 201, response.text
    return response.json()
