"""
Tests for registration, login and role dependencies.
"""

from app.api.routes import auth_routes

STUDENT = {
    "email": "meera@college.edu",
    "password": "secret123",
    "first_name": "Meera",
    "last_name": "Iyer",
}


def register(client, body=None):
    return client.post("/api/auth/register", json=body or STUDENT)


def test_register_and_login(client):
    assert register(client).status_code == 201

    response = client.post("/api/auth/login", json={"email": STUDENT["email"], "password": "secret123"})
    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "student"
    assert body["token_type"] == "bearer"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == STUDENT["email"]
    assert me.json()["is_active"] is True


def test_duplicate_email(client):
    register(client)
    response = register(client)
    assert response.status_code == 400


def test_short_password_rejected(client):
    response = register(client, dict(STUDENT, password="short"))
    assert response.status_code == 422


def test_wrong_password(client):
    register(client)
    response = client.post("/api/auth/login", json={"email": STUDENT["email"], "password": "wrong-password"})
    assert response.status_code == 401


def test_unknown_email(client):
    response = client.post("/api/auth/login", json={"email": "nobody@college.edu", "password": "secret123"})
    assert response.status_code == 401


def test_invalid_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_missing_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code in (401, 403)


def test_me_for_seeded_company(client, company):
    response = client.get("/api/auth/me", headers=company["headers"])
    assert response.status_code == 200
    assert response.json()["role"] == "company"


def test_concurrent_duplicate_registration(client, monkeypatch):
    register(client)
    # Simulate a second request that passed the email check before the first committed
    monkeypatch.setattr(auth_routes, "_account_by_email", lambda email: None)

    response = register(client)
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


def test_role_is_one_of_the_portal_roles(client):
    schemas = client.get("/openapi.json").json()["components"]["schemas"]
    assert schemas["UserRole"]["enum"] == ["student", "company", "tpo"]
    assert "$ref" in str(schemas["TokenResponse"]["properties"]["role"])


def test_application_errors_are_documented(client):
    openapi = client.get("/openapi.json").json()
    responses = openapi["paths"]["/api/applications/{application_id}/status"]["patch"]["responses"]
    for code in ("400", "403", "404"):
        assert responses[code]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
