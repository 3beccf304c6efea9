"""
Tests for Auth API
==================

Tests login, logout, token validation and role checks.
"""

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from tests.conftest import TEST_PASSWORD


# ==================== LOGIN TESTS ====================

class TestLogin:
    """Tests for the login endpoint"""

    @pytest.mark.api
    def test_login_success(self, client: TestClient, doctor_user):
        response = client.post("/api/v1/auth/login", json={
            "email": "anna@example.com",
            "password": TEST_PASSWORD
        })

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["user"]["id"] == doctor_user.id
        assert data["user"]["role"] == "doctor"
        assert "password_hash" not in data["user"]

    @pytest.mark.api
    def test_login_is_case_insensitive_on_email(self, client: TestClient, operator_user):
        response = client.post("/api/v1/auth/login", json={
            "email": "  OPERATOR@example.com ",
            "password": TEST_PASSWORD
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["role"] == "operator"

    @pytest.mark.api
    def test_login_wrong_password(self, client: TestClient, doctor_user):
        response = client.post("/api/v1/auth/login", json={
            "email": "anna@example.com",
            "password": "wrong-password"
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        body = response.json()
        assert body["error"] is True
        assert body["message"] == "Invalid email or password"

    @pytest.mark.api
    def test_login_unknown_email(self, client: TestClient):
        response = client.post("/api/v1/auth/login", json={
            "email": "nobody@example.com",
            "password": TEST_PASSWORD
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.api
    def test_token_from_login_authenticates(self, client: TestClient, operator_user):
        token = client.post("/api/v1/auth/login", json={
            "email": "operator@example.com",
            "password": TEST_PASSWORD
        }).json()["access_token"]

        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["email"] == "operator@example.com"


# ==================== SESSION TESTS ====================

class TestSession:
    """Tests for the current user and logout"""

    @pytest.mark.api
    def test_me_requires_token(self, client: TestClient):
        response = client.get("/api/v1/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["message"] == "Not authenticated"

    @pytest.mark.api
    def test_me_rejects_garbage_token(self, client: TestClient):
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.api
    def test_logout_revokes_token(self, client: TestClient, doctor_headers):
        response = client.post("/api/v1/auth/logout", headers=doctor_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["success"] is True

        response = client.get("/api/v1/auth/me", headers=doctor_headers)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.api
    def test_deleted_user_token_is_rejected(self, client: TestClient, operator_headers, db_session, operator_user):
        db_session.delete(operator_user)
        db_session.commit()

        response = client.get("/api/v1/auth/me", headers=operator_headers)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# ==================== ROLE TESTS ====================

class TestRoles:
    """Tests for role-restricted endpoints"""

    @pytest.mark.api
    def test_doctor_cannot_create_doctor(self, client: TestClient, doctor_headers):
        response = client.post("/api/v1/doctors/", headers=doctor_headers, json={
            "name": "Dr. New",
            "email": "new@example.com",
            "password": "secret123",
            "specialization": "Cardiology",
            "license_number": "SIP-NEW"
        })

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["message"] == "Insufficient permissions for this operation"

    @pytest.mark.api
    def test_doctor_cannot_edit_records(self, client: TestClient, doctor_headers, test_schedule, db_session):
        from models import ConsumptionRecord

        record = db_session.query(ConsumptionRecord).first()
        response = client.put(
            f"/api/v1/records/{record.id}",
            headers=doctor_headers,
            json={"status": "taken"}
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
