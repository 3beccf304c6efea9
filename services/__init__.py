"""
Services Module
Business logic layer for the MedTrack application
"""

from services.auth_service import AuthService, auth_service
from services.doctor_service import DoctorService, doctor_service
from services.patient_service import PatientService, patient_service
from services.schedule_service import ScheduleService, schedule_service
from services.consumption_service import ConsumptionService, consumption_service
from services.dashboard_service import DashboardService, dashboard_service


__all__ = [
    # Service classes
    "AuthService",
    "DoctorService",
    "PatientService",
    "ScheduleService",
    "ConsumptionService",
    "DashboardService",
    # Singleton instances
    "auth_service",
    "doctor_service",
    "patient_service",
    "schedule_service",
    "consumption_service",
    "dashboard_service",
]
