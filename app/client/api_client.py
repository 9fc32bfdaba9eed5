"""
Portal API Client - Python client for the placement portal REST API.

Wraps the /api endpoints with requests and keeps the signed-in user's
profile in a ProfileCache. Profile mutations call the server first and then
patch the cache; a 401 from any call drops the token and the cache.

Usage:
    client = PortalClient("http://localhost:8000")
    client.login("student@college.edu", "secret123")
    profile = client.get_profile()          # fetches
    profile = client.get_profile()          # served from cache
    client.add_skill("Python")              # server call + cache patch
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from app.client.profile_cache import ProfileCache
from app.core.config import get_settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class PortalApiError(Exception):
    """Non-2xx response from the portal API."""

    def __init__(self, status_code: int, detail: str, code: Optional[str] = None):
        self.status_code = status_code
        self.detail = detail
        self.code = code
        super().__init__(f"{status_code}: {detail}")


class PortalClient:

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        cache_ttl_seconds: Optional[float] = None,
        timeout: float = DEFAULT_TIMEOUT,
        clock=None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout
        if cache_ttl_seconds is None:
            cache_ttl_seconds = get_settings().profile_cache_ttl_seconds
        cache_kwargs = {"clock": clock} if clock else {}
        self.profile_cache = ProfileCache(self._fetch_profile, ttl_seconds=cache_ttl_seconds, **cache_kwargs)

    # ============================================================
    # TRANSPORT
    # ============================================================

    def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        headers["Content-Type"] = "application/json"
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        url = f"{self.base_url}/api{path}"
        response = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)

        if response.status_code == 401:
            logger.info("Received 401 from %s %s, clearing session", method, path)
            self.token = None
            self.profile_cache.invalidate()

        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = {}
            detail = body.get("detail") or body.get("message") or response.reason or "Request failed"
            raise PortalApiError(response.status_code, str(detail), body.get("code"))

        if not response.content:
            return None
        return response.json()

    # ============================================================
    # AUTH
    # ============================================================

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["access_token"]
        self.profile_cache.invalidate()
        return data

    def logout(self) -> None:
        self.token = None
        self.profile_cache.invalidate()

    def me(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/me")

    # ============================================================
    # PROFILE (cached)
    # ============================================================

    def _fetch_profile(self) -> Dict[str, Any]:
        return self._request("GET", "/users/profile")

    def get_profile(self, force_refresh: bool = False) -> Dict[str, Any]:
        return self.profile_cache.get_profile(force_refresh=force_refresh)

    def refresh_profile(self) -> Dict[str, Any]:
        return self.profile_cache.get_profile(force_refresh=True)

    def update_profile(self, **fields) -> Dict[str, Any]:
        result = self._request("PUT", "/users/profile", json=fields)
        self.profile_cache.merge_fields(result)
        return result

    def add_skill(self, skill_name: str) -> Dict[str, Any]:
        result = self._request("POST", "/users/skills", json={"skill_name": skill_name})
        self.profile_cache.append_item("skills", result)
        return result

    def delete_skill(self, skill_id: int) -> Dict[str, Any]:
        result = self._request("DELETE", f"/users/skills/{skill_id}")
        self.profile_cache.remove_item("skills", "skill_id", skill_id)
        return result

    def add_project(self, project_name: str, description: Optional[str] = None,
                    link: Optional[str] = None) -> Dict[str, Any]:
        body = {"project_name": project_name, "description": description, "link": link}
        result = self._request("POST", "/users/projects", json=body)
        self.profile_cache.append_item("projects", result)
        return result

    def update_project(self, project_id: int, **fields) -> Dict[str, Any]:
        result = self._request("PUT", f"/users/projects/{project_id}", json=fields)
        self.profile_cache.replace_item("projects", "project_id", result)
        return result

    def delete_project(self, project_id: int) -> Dict[str, Any]:
        result = self._request("DELETE", f"/users/projects/{project_id}")
        self.profile_cache.remove_item("projects", "project_id", project_id)
        return result

    def add_certification(self, certification_name: str, organization: Optional[str] = None,
                          credential_id: Optional[str] = None, issue_date: Optional[str] = None,
                          expiry_date: Optional[str] = None) -> Dict[str, Any]:
        body = {
            "certification_name": certification_name,
            "organization": organization,
            "credential_id": credential_id,
            "issue_date": issue_date,
            "expiry_date": expiry_date,
        }
        result = self._request("POST", "/users/certifications", json=body)
        self.profile_cache.append_item("certifications", result)
        return result

    def delete_certification(self, certification_id: int) -> Dict[str, Any]:
        result = self._request("DELETE", f"/users/certifications/{certification_id}")
        self.profile_cache.remove_item("certifications", "certification_id", certification_id)
        return result

    def add_experience(self, company: str, **fields) -> Dict[str, Any]:
        result = self._request("POST", "/users/experiences", json={"company": company, **fields})
        self.profile_cache.append_item("experiences", result)
        return result

    def update_experience(self, experience_id: int, **fields) -> Dict[str, Any]:
        result = self._request("PUT", f"/users/experiences/{experience_id}", json=fields)
        self.profile_cache.replace_item("experiences", "experience_id", result)
        return result

    def delete_experience(self, experience_id: int) -> Dict[str, Any]:
        result = self._request("DELETE", f"/users/experiences/{experience_id}")
        self.profile_cache.remove_item("experiences", "experience_id", experience_id)
        return result

    def add_resume(self, resume_name: str, resume_url: str) -> Dict[str, Any]:
        result = self._request("POST", "/users/resumes", json={"resume_name": resume_name, "resume_url": resume_url})
        self.profile_cache.append_item("resumes", result)
        return result

    def delete_resume(self, resume_id: int) -> Dict[str, Any]:
        result = self._request("DELETE", f"/users/resumes/{resume_id}")
        self.profile_cache.remove_item("resumes", "resume_id", resume_id)
        return result

    # ============================================================
    # JOBS & APPLICATIONS
    # ============================================================

    def list_jobs(self, **filters) -> List[Dict[str, Any]]:
        return self._request("GET", "/jobs", params=filters)

    def get_job(self, job_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/jobs/{job_id}")

    def apply(self, job_id: int, resume_id: int) -> Dict[str, Any]:
        return self._request("POST", "/applications", json={"jobId": job_id, "resumeId": resume_id})

    def get_my_applications(self, stage: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"stage": stage} if stage else None
        return self._request("GET", "/applications/my-applications", params=params)

    def update_status(self, application_id: int, status_field: str, value: bool) -> Dict[str, Any]:
        body = {"statusField": status_field, "value": value}
        return self._request("PATCH", f"/applications/{application_id}/status", json=body)

    def complete_step(self, application_id: int, step_id: int) -> Dict[str, Any]:
        return self._request("POST", f"/applications/{application_id}/complete-step", json={"stepId": step_id})

    # ============================================================
    # NOTIFICATIONS
    # ============================================================

    def get_notifications(self, unread_only: bool = False) -> List[Dict[str, Any]]:
        params = {"unread_only": "true"} if unread_only else None
        return self._request("GET", "/users/notifications", params=params)

    def mark_notification_read(self, notification_id: int) -> Dict[str, Any]:
        return self._request("PUT", f"/users/notifications/{notification_id}/read")

    def mark_all_notifications_read(self) -> Dict[str, Any]:
        return self._request("PUT", "/users/notifications/read-all")
