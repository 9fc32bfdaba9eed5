"""
Tests for company registration and job postings.
"""

from app.api.routes import company_routes
from tests.conftest import make_job

JOB = {
    "title": "Graduate Engineer Trainee",
    "description": "Backend services",
    "location": "Pune",
    "salary": 850000,
    "application_deadline": "2026-12-31",
    "branches": ["CSE", "IT"],
    "skills": ["Python", "SQL"],
    "process_steps": [
        {"step_name": "Online Assessment", "duration_minutes": 90},
        {"step_name": "Technical Interview"},
        {"step_name": "HR Interview"},
    ],
}


class TestCompanies:

    def test_tpo_registers_company(self, client, tpo):
        response = client.post(
            "/api/companies",
            json={"company_name": "Infra Labs", "email": "hr@infralabs.com", "password": "secret123"},
            headers=tpo["headers"]
        )
        assert response.status_code == 201
        assert response.json()["email"] == "hr@infralabs.com"

        login = client.post("/api/auth/login", json={"email": "hr@infralabs.com", "password": "secret123"})
        assert login.json()["role"] == "company"

    def test_duplicate_company_email(self, client, tpo, company):
        response = client.post(
            "/api/companies",
            json={"company_name": "Again", "email": company["email"], "password": "secret123"},
            headers=tpo["headers"]
        )
        assert response.status_code == 400

    def test_concurrent_duplicate_company_email(self, client, tpo, company, monkeypatch):
        real_execute = company_routes.execute_raw_sql

        def email_check_misses(sql, params=None):
            if "FROM users WHERE email" in sql:
                return []
            return real_execute(sql, params)

        monkeypatch.setattr(company_routes, "execute_raw_sql", email_check_misses)

        response = client.post(
            "/api/companies",
            json={"company_name": "Again", "email": company["email"], "password": "secret123"},
            headers=tpo["headers"]
        )
        assert response.status_code == 400
        assert len(client.get("/api/companies").json()) == 1

    def test_student_cannot_register_company(self, client, student):
        response = client.post(
            "/api/companies",
            json={"company_name": "Nope Inc", "email": "nope@example.com", "password": "secret123"},
            headers=student["headers"]
        )
        assert response.status_code == 403

    def test_company_updates_itself_only(self, client, company, other_company):
        own = client.put(
            f"/api/companies/{company['company_id']}",
            json={"website": "https://techcorp.example.com"},
            headers=company["headers"]
        )
        assert own.status_code == 200
        assert own.json()["website"] == "https://techcorp.example.com"

        foreign = client.put(
            f"/api/companies/{company['company_id']}",
            json={"website": "https://evil.example.com"},
            headers=other_company["headers"]
        )
        assert foreign.status_code == 403

    def test_empty_update(self, client, company):
        response = client.put(f"/api/companies/{company['company_id']}", json={}, headers=company["headers"])
        assert response.status_code == 400

    def test_company_jobs(self, client, company, job):
        jobs = client.get(f"/api/companies/{company['company_id']}/jobs").json()
        assert [j["job_id"] for j in jobs] == [job["job_id"]]

    def test_unknown_company(self, client):
        assert client.get("/api/companies/9999").status_code == 404


class TestJobs:

    def test_posted_job_is_hidden_until_verified(self, client, company, tpo):
        response = client.post("/api/jobs", json=JOB, headers=company["headers"])
        assert response.status_code == 201
        job = response.json()
        assert job["is_verified"] is False
        assert job["branches"] == ["CSE", "IT"]
        assert [s["step_number"] for s in job["process_steps"]] == [1, 2, 3]
        assert job["application_deadline"] == "2026-12-31"

        assert client.get("/api/jobs").json() == []

        verified = client.patch(
            f"/api/jobs/{job['job_id']}/verify", json={"verified": True}, headers=tpo["headers"]
        )
        assert verified.status_code == 200
        assert [j["job_id"] for j in client.get("/api/jobs").json()] == [job["job_id"]]

    def test_only_tpo_verifies(self, client, company):
        pending = make_job(company, verified=False)
        response = client.patch(
            f"/api/jobs/{pending['job_id']}/verify", json={"verified": True}, headers=company["headers"]
        )
        assert response.status_code == 403

    def test_search_and_location(self, client, company):
        make_job(company, title="Backend Developer")
        make_job(company, title="Data Analyst")

        found = client.get("/api/jobs", params={"search": "backend"}).json()
        assert [j["title"] for j in found] == ["Backend Developer"]

    def test_student_cannot_post(self, client, student):
        assert client.post("/api/jobs", json=JOB, headers=student["headers"]).status_code == 403

    def test_update_by_other_company_forbidden(self, client, job, other_company):
        response = client.put(
            f"/api/jobs/{job['job_id']}", json={"title": "Hijacked"}, headers=other_company["headers"]
        )
        assert response.status_code == 403

    def test_owner_updates_job(self, client, job, company):
        response = client.put(
            f"/api/jobs/{job['job_id']}", json={"location": "Bengaluru"}, headers=company["headers"]
        )
        assert response.status_code == 200
        assert response.json()["location"] == "Bengaluru"

    def test_delete_job(self, client, job, tpo):
        response = client.delete(f"/api/jobs/{job['job_id']}", headers=tpo["headers"])
        assert response.status_code == 200
        assert client.get(f"/api/jobs/{job['job_id']}").status_code == 404

    def test_job_with_applications_cannot_be_deleted(self, client, application, job, company, tpo, student):
        aid = application["application_id"]
        completed = client.post(
            f"/api/applications/{aid}/complete-step",
            json={"stepId": job["step_ids"][0]},
            headers=company["headers"]
        )
        assert completed.status_code == 201

        for actor in (company, tpo):
            response = client.delete(f"/api/jobs/{job['job_id']}", headers=actor["headers"])
            assert response.status_code == 400
            assert response.json()["code"] == "CONFLICT"

        assert client.get(f"/api/jobs/{job['job_id']}").status_code == 200
        kept = client.get(f"/api/applications/{aid}", headers=student["headers"])
        assert kept.status_code == 200
        assert [c["step_id"] for c in kept.json()["completions"]] == [job["step_ids"][0]]
        mine = client.get("/api/applications/my-applications", headers=student["headers"]).json()
        assert [a["application_id"] for a in mine] == [aid]

    def test_job_with_applications_can_be_closed(self, client, application, job, company):
        response = client.put(
            f"/api/jobs/{job['job_id']}", json={"is_active": False}, headers=company["headers"]
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert client.get("/api/jobs").json() == []

    def test_job_details_include_steps(self, client, job):
        details = client.get(f"/api/jobs/{job['job_id']}").json()
        assert [s["step_id"] for s in details["process_steps"]] == job["step_ids"]
