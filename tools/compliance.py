"""
Compliance Aggregation Tool
Folds consumption records into status counts, compliance rates and time buckets
"""

import math
from typing import Any, Dict, Iterable, List, Sequence
from dataclasses import dataclass, asdict
from datetime import date, datetime, timedelta
from collections import Counter

from config import tracking_config
from models import ConsumptionStatus


@dataclass
class ComplianceSummary:
    """Status counts over a set of records"""
    total: int = 0
    taken: int = 0
    missed: int = 0
    late: int = 0
    pending: int = 0
    compliance_rate: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DailyCompliance:
    """Compliance for one calendar day"""
    date: str
    label: str
    total: int
    taken: int
    compliance: int
    missed: int  # percentage of non-taken doses


@dataclass
class MonthlyCompliance:
    """Compliance for one calendar month"""
    month: str
    label: str
    total: int
    taken: int
    compliance: int


@dataclass
class CategoryCount:
    name: str
    value: int


def round_percent(numerator: int, denominator: int) -> int:
    """Integer percentage, halves rounded up"""
    if denominator <= 0:
        return 0
    return int(math.floor(100 * numerator / denominator + 0.5))


def compliance_rate(taken: int, total: int) -> int:
    """Percentage of taken doses, 0 when there are none"""
    return round_percent(taken, total)


def _status_of(record: Any) -> str:
    status = getattr(record, "status", None)
    if isinstance(status, ConsumptionStatus):
        return status.value
    return status


def _scheduled_day(record: Any) -> date:
    value = record.scheduled_date
    if isinstance(value, datetime):
        return value.date()
    return value


def summarize(records: Iterable[Any]) -> ComplianceSummary:
    """Count records per status and compute the compliance rate"""
    counts = Counter(_status_of(r) for r in records)
    total = sum(counts.values())
    taken = counts[ConsumptionStatus.TAKEN.value]

    return ComplianceSummary(
        total=total,
        taken=taken,
        missed=counts[ConsumptionStatus.MISSED.value],
        late=counts[ConsumptionStatus.LATE.value],
        pending=counts[ConsumptionStatus.PENDING.value],
        compliance_rate=compliance_rate(taken, total)
    )


def daily_compliance(
    records: Sequence[Any],
    today: date,
    days: int = tracking_config.DAILY_WINDOW_DAYS
) -> List[DailyCompliance]:
    """
    Per-day compliance for the last `days` days, oldest first.

    Records are bucketed by scheduled date, not creation time.
    """
    by_day: Dict[date, List[Any]] = {}
    for record in records:
        by_day.setdefault(_scheduled_day(record), []).append(record)

    buckets = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        day_records = by_day.get(day, [])
        total = len(day_records)
        taken = sum(1 for r in day_records if _status_of(r) == ConsumptionStatus.TAKEN.value)

        buckets.append(DailyCompliance(
            date=day.isoformat(),
            label=day.strftime("%a"),
            total=total,
            taken=taken,
            compliance=compliance_rate(taken, total),
            missed=round_percent(total - taken, total or 1)
        ))

    return buckets


def _shift_month(year: int, month: int, delta: int) -> tuple:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def monthly_compliance(
    records: Sequence[Any],
    today: date,
    months: int = tracking_config.MONTHLY_WINDOW_MONTHS
) -> List[MonthlyCompliance]:
    """Per-month compliance for the last `months` months, oldest first"""
    by_month: Dict[str, List[Any]] = {}
    for record in records:
        day = _scheduled_day(record)
        by_month.setdefault(f"{day.year}-{day.month:02d}", []).append(record)

    buckets = []
    for offset in range(months - 1, -1, -1):
        year, month = _shift_month(today.year, today.month, -offset)
        key = f"{year}-{month:02d}"
        month_records = by_month.get(key, [])
        total = len(month_records)
        taken = sum(1 for r in month_records if _status_of(r) == ConsumptionStatus.TAKEN.value)

        buckets.append(MonthlyCompliance(
            month=key,
            label=date(year, month, 1).strftime("%b"),
            total=total,
            taken=taken,
            compliance=compliance_rate(taken, total)
        ))

    return buckets


def categorize_medication(name: str) -> str:
    """Therapeutic category guessed from the medication name"""
    lowered = (name or "").lower()
    for category, keywords in tracking_config.MEDICATION_CATEGORIES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return tracking_config.DEFAULT_CATEGORY


def category_breakdown(schedules: Iterable[Any]) -> List[CategoryCount]:
    """Schedule counts per medication category, in first-seen order"""
    counts: Dict[str, int] = {}
    for schedule in schedules:
        category = categorize_medication(schedule.medication_name)
        counts[category] = counts.get(category, 0) + 1

    return [CategoryCount(name=name, value=value) for name, value in counts.items()]
