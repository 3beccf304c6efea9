"""
Tests for Compliance Aggregation Tool
Tests status counts, compliance rates, time buckets and categories
"""

import pytest
from types import SimpleNamespace
from datetime import date

from tools.compliance import (
    round_percent,
    compliance_rate,
    summarize,
    daily_compliance,
    monthly_compliance,
    categorize_medication,
    category_breakdown,
)
from models import ConsumptionStatus


def _record(status, scheduled_date=date(2024, 3, 15)):
    return SimpleNamespace(status=status, scheduled_date=scheduled_date)


# =============================================================================
# Rate Tests
# =============================================================================

class TestComplianceRate:
    """Tests for the compliance percentage"""

    @pytest.mark.unit
    def test_zero_records(self):
        assert compliance_rate(0, 0) == 0
        assert summarize([]).compliance_rate == 0

    @pytest.mark.unit
    def test_halves_round_up(self):
        assert round_percent(1, 8) == 13  # 12.5
        assert round_percent(1, 200) == 1  # 0.5
        assert round_percent(1, 3) == 33
        assert round_percent(2, 3) == 67

    @pytest.mark.unit
    def test_mixed_statuses(self):
        """7 taken, 1 missed, 1 late, 1 pending"""
        records = (
            [_record("taken")] * 7
            + [_record("missed"), _record("late"), _record("pending")]
        )

        summary = summarize(records)

        assert summary.total == 10
        assert summary.taken == 7
        assert summary.missed == 1
        assert summary.late == 1
        assert summary.pending == 1
        assert summary.compliance_rate == 70

    @pytest.mark.unit
    def test_enum_statuses_counted(self):
        records = [_record(ConsumptionStatus.TAKEN), _record(ConsumptionStatus.MISSED)]
        assert summarize(records).compliance_rate == 50

    @pytest.mark.unit
    def test_late_does_not_count_as_taken(self):
        assert summarize([_record("late"), _record("taken")]).compliance_rate == 50

    @pytest.mark.unit
    def test_to_dict(self):
        data = summarize([_record("taken")]).to_dict()
        assert data == {
            "total": 1, "taken": 1, "missed": 0, "late": 0, "pending": 0, "compliance_rate": 100
        }


# =============================================================================
# Bucket Tests
# =============================================================================

class TestDailyCompliance:
    """Tests for the per-day window"""

    @pytest.mark.unit
    def test_seven_buckets_oldest_first(self):
        buckets = daily_compliance([], today=date(2024, 3, 15), days=7)

        assert len(buckets) == 7
        assert buckets[0].date == "2024-03-09"
        assert buckets[-1].date == "2024-03-15"
        assert buckets[-1].label == "Fri"
        assert all(b.total == 0 and b.compliance == 0 and b.missed == 0 for b in buckets)

    @pytest.mark.unit
    def test_bucketed_by_scheduled_date(self):
        records = [
            _record("taken", date(2024, 3, 15)),
            _record("missed", date(2024, 3, 15)),
            _record("pending", date(2024, 3, 15)),
            _record("taken", date(2024, 3, 14)),
            _record("taken", date(2024, 3, 1)),  # outside the window
        ]

        buckets = daily_compliance(records, today=date(2024, 3, 15), days=7)

        today_bucket = buckets[-1]
        assert today_bucket.total == 3
        assert today_bucket.taken == 1
        assert today_bucket.compliance == 33
        assert today_bucket.missed == 67
        assert buckets[-2].compliance == 100
        assert sum(b.total for b in buckets) == 4


class TestMonthlyCompliance:
    """Tests for the per-month window"""

    @pytest.mark.unit
    def test_six_months_across_year_boundary(self):
        buckets = monthly_compliance([], today=date(2024, 2, 10), months=6)

        assert [b.month for b in buckets] == [
            "2023-09", "2023-10", "2023-11", "2023-12", "2024-01", "2024-02"
        ]
        assert buckets[-1].label == "Feb"

    @pytest.mark.unit
    def test_counts_per_month(self):
        records = [
            _record("taken", date(2024, 1, 5)),
            _record("taken", date(2024, 1, 20)),
            _record("missed", date(2024, 1, 31)),
            _record("taken", date(2024, 2, 1)),
        ]

        buckets = monthly_compliance(records, today=date(2024, 2, 10), months=6)

        january, february = buckets[-2], buckets[-1]
        assert (january.total, january.taken, january.compliance) == (3, 2, 67)
        assert (february.total, february.taken, february.compliance) == (1, 1, 100)


# =============================================================================
# Category Tests
# =============================================================================

class TestCategories:
    """Tests for keyword categorization"""

    @pytest.mark.unit
    @pytest.mark.parametrize("name,expected", [
        ("Amlodipine 5mg", "Antihypertensive"),
        ("CAPTOPRIL", "Antihypertensive"),
        ("Metformin XR", "Antidiabetic"),
        ("Insulin glargine", "Antidiabetic"),
        ("Amoxicillin", "Antibiotic"),
        ("Paracetamol", "Analgesic"),
        ("Ibuprofen", "Analgesic"),
        ("Vitamin D3", "Vitamin"),
        ("Omeprazole", "Other"),
        ("", "Other"),
    ])
    def test_categorize(self, name, expected):
        assert categorize_medication(name) == expected

    @pytest.mark.unit
    def test_breakdown_counts_schedules(self):
        schedules = [
            SimpleNamespace(medication_name="Amlodipine"),
            SimpleNamespace(medication_name="Metformin"),
            SimpleNamespace(medication_name="Captopril"),
            SimpleNamespace(medication_name=None),
        ]

        breakdown = category_breakdown(schedules)

        assert [(c.name, c.value) for c in breakdown] == [
            ("Antihypertensive", 2),
            ("Antidiabetic", 1),
            ("Other", 1),
        ]
