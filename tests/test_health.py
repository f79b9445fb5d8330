"""Smoke tests - verify the app starts and identity is enforced."""

import httpx


async def test_health_returns_200(client: httpx.AsyncClient):
    """GET /health should report a healthy service."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_missing_identity_header_is_401(client: httpx.AsyncClient):
    """API routes require the proxy identity header."""
    response = await client.get("/api/ranking/students")
    assert response.status_code == 401


async def test_unregistered_email_is_403(client: httpx.AsyncClient):
    response = await client.get(
        "/api/ranking/students",
        headers={"x-authenticated-user-email": "nobody@example.com"},
    )
    assert response.status_code == 403


async def test_teacher_cannot_use_student_routes(
    client: httpx.AsyncClient, make_user, auth_headers
):
    teacher = await make_user(name="Teacher", role="teacher")
    response = await client.post("/api/student/study/start", headers=auth_headers(teacher))
    assert response.status_code == 403


async def test_identity_email_matches_case_insensitively(
    client: httpx.AsyncClient, make_user
):
    await make_user(email="Mixed.Case@Example.com")
    response = await client.get(
        "/api/ranking/students",
        headers={"x-authenticated-user-email": "Mixed.Case@Example.com"},
    )
    assert response.status_code == 200
