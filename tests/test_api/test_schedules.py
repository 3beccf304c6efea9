"""
Tests for Schedules API
=======================

Tests schedule writes, validation, visibility and the webhook hand-off.
"""

import json
import pytest
from unittest.mock import patch

import httpx
from fastapi import status
from fastapi.testclient import TestClient

from models import ConsumptionRecord
from tools.webhook_notifier import WebhookNotifier


# ==================== CREATE TESTS ====================

class TestCreateSchedule:
    """Tests for schedule creation endpoint"""

    @pytest.mark.api
    def test_create_schedule_generates_records(self, client: TestClient, doctor_headers, doctor_user, schedule_payload, db_session):
        response = client.post("/api/v1/schedules/", headers=doctor_headers, json=schedule_payload)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["records_created"] == 6
        assert data["records_deleted"] == 0
        assert data["schedule"]["patient_name"] == "Budi Santoso"
        assert data["schedule"]["prescribed_by"] == doctor_user.id
        assert data["schedule"]["duration_days"] == 3
        assert data["schedule"]["total_doses"] == 6

        assert db_session.query(ConsumptionRecord).filter(
            ConsumptionRecord.schedule_id == data["schedule"]["id"]
        ).count() == 6

    @pytest.mark.api
    def test_create_queues_webhook(self, client: TestClient, operator_headers, schedule_payload):
        delivered = []

        def handler(request: httpx.Request) -> httpx.Response:
            delivered.append(json.loads(request.content))
            return httpx.Response(200)

        notifier = WebhookNotifier(
            url="https://hooks.example.com/medtrack",
            transport=httpx.MockTransport(handler)
        )
        with patch("api.schedules.webhook_notifier", notifier):
            response = client.post("/api/v1/schedules/", headers=operator_headers, json=schedule_payload)

        assert response.status_code == status.HTTP_201_CREATED
        assert len(delivered) == 1
        payload = delivered[0]
        assert payload["action"] == "create"
        assert payload["collection"] == "medication_schedules"
        assert payload["documentId"] == response.json()["schedule"]["id"]
        assert payload["userRole"] == "operator"
        assert payload["data"]["times"] == ["08:00", "20:00"]

    @pytest.mark.api
    @pytest.mark.parametrize("times", [["8:00"], ["24:00"], ["08:00", "08:00"], ["noon"]])
    def test_invalid_times_rejected(self, client: TestClient, doctor_headers, schedule_payload, times):
        schedule_payload["times"] = times

        response = client.post("/api/v1/schedules/", headers=doctor_headers, json=schedule_payload)

        assert response.status_code == 422

    @pytest.mark.api
    def test_end_before_start_rejected(self, client: TestClient, doctor_headers, schedule_payload):
        schedule_payload["start_date"], schedule_payload["end_date"] = (
            schedule_payload["end_date"], schedule_payload["start_date"]
        )

        response = client.post("/api/v1/schedules/", headers=doctor_headers, json=schedule_payload)

        assert response.status_code == 422

    @pytest.mark.api
    def test_active_without_times_rejected(self, client: TestClient, doctor_headers, schedule_payload):
        schedule_payload["times"] = []

        response = client.post("/api/v1/schedules/", headers=doctor_headers, json=schedule_payload)

        assert response.status_code == 422

    @pytest.mark.api
    def test_doctor_cannot_prescribe_for_other_patient(self, client: TestClient, doctor_headers, schedule_payload, other_patient):
        schedule_payload["patient_id"] = other_patient.id

        response = client.post("/api/v1/schedules/", headers=doctor_headers, json=schedule_payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# ==================== READ TESTS ====================

class TestReadSchedules:
    """Tests for listing and fetching schedules"""

    @pytest.mark.api
    def test_list_scoped(self, client: TestClient, doctor_headers, operator_headers, test_schedule, other_schedule):
        mine = client.get("/api/v1/schedules/", headers=doctor_headers).json()
        everything = client.get("/api/v1/schedules/", headers=operator_headers).json()

        assert [s["id"] for s in mine["schedules"]] == [test_schedule.id]
        assert everything["total"] == 2

    @pytest.mark.api
    def test_status_filter(self, client: TestClient, operator_headers, test_schedule):
        active = client.get("/api/v1/schedules/", headers=operator_headers, params={"status": "active"})
        inactive = client.get("/api/v1/schedules/", headers=operator_headers, params={"status": "inactive"})
        invalid = client.get("/api/v1/schedules/", headers=operator_headers, params={"status": "paused"})

        assert active.json()["total"] == 1
        assert inactive.json()["total"] == 0
        assert invalid.status_code == 422

    @pytest.mark.api
    def test_other_doctor_gets_404(self, client: TestClient, other_doctor_headers, test_schedule):
        response = client.get(f"/api/v1/schedules/{test_schedule.id}", headers=other_doctor_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND


# ==================== UPDATE / DELETE TESTS ====================

class TestUpdateDeleteSchedule:
    """Tests for schedule updates and deletion"""

    @pytest.mark.api
    def test_update_times_regenerates(self, client: TestClient, doctor_headers, test_schedule):
        response = client.put(
            f"/api/v1/schedules/{test_schedule.id}",
            headers=doctor_headers,
            json={"times": ["09:00"]}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["records_deleted"] == 6
        assert data["records_created"] == 3
        assert data["schedule"]["times"] == ["09:00"]

    @pytest.mark.api
    def test_deactivate(self, client: TestClient, doctor_headers, test_schedule):
        response = client.put(
            f"/api/v1/schedules/{test_schedule.id}",
            headers=doctor_headers,
            json={"is_active": False}
        )

        assert response.json()["schedule"]["is_active"] is False
        assert response.json()["records_deleted"] == 6

    @pytest.mark.api
    def test_update_range_before_start_rejected(self, client: TestClient, doctor_headers, test_schedule):
        response = client.put(
            f"/api/v1/schedules/{test_schedule.id}",
            headers=doctor_headers,
            json={"end_date": "2000-01-01"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.api
    def test_update_missing(self, client: TestClient, doctor_headers):
        response = client.put("/api/v1/schedules/missing", headers=doctor_headers, json={"dosage": "1mg"})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.api
    def test_delete(self, client: TestClient, doctor_headers, test_schedule, db_session):
        response = client.delete(f"/api/v1/schedules/{test_schedule.id}", headers=doctor_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"success": True, "records_deleted": 6}
        db_session.expire_all()
        assert db_session.query(ConsumptionRecord).count() == 0

    @pytest.mark.api
    def test_other_doctor_cannot_delete(self, client: TestClient, other_doctor_headers, test_schedule):
        response = client.delete(f"/api/v1/schedules/{test_schedule.id}", headers=other_doctor_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
