"""
MedTrack Test Suite
===================

This package contains all tests for the MedTrack medication tracking backend.

Test Structure:
- test_api/: API endpoint tests for FastAPI routes
- test_services/: Service layer tests against an in-memory database
- test_tools/: Unit tests for expansion, compliance, webhook and change feed
- conftest.py: Shared pytest fixtures

Running Tests:
    # Run all tests
    pytest

    # Run specific test module
    pytest tests/test_api/

    # Run only marked tests
    pytest -m "unit"
    pytest -m "api"
"""

# Test configuration
TEST_DATABASE_URL = "sqlite:///:memory:"

# Common test data
SAMPLE_MEDICATIONS = [
    {"name": "Amlodipine", "dosage": "5mg", "times": ["08:00"]},
    {"name": "Metformin", "dosage": "500mg", "times": ["07:00", "19:00"]},
    {"name": "Paracetamol", "dosage": "500mg", "times": ["08:00", "14:00", "20:00"]},
]

__all__ = [
    "TEST_DATABASE_URL",
    "SAMPLE_MEDICATIONS",
]
