"""
Schedule Expander Tool
Expands a medication schedule into one consumption record per scheduled dose
"""

import logging
import re
from typing import Any, Dict, Iterator, List, Optional, Sequence
from dataclasses import dataclass
from datetime import datetime, date, time, timedelta

from models import ConsumptionStatus


logger = logging.getLogger(__name__)

SYSTEM_RECORDER = "system"

TIME_OF_DAY_PATTERN = re.compile(r"^\d{2}:\d{2}$")


@dataclass(frozen=True)
class DoseSlot:
    """A single (day, time-of-day) combination of a schedule"""
    scheduled_date: date
    scheduled_time: str
    scheduled_datetime: datetime


def parse_time_of_day(value: str) -> time:
    """
    Parse an "HH:MM" string into a time.

    Raises:
        ValueError: if the string is not a valid 24h time
    """
    if not isinstance(value, str):
        raise ValueError(f"Time of day must be a string, got {type(value).__name__}")
    if not TIME_OF_DAY_PATTERN.match(value.strip()):
        raise ValueError(f"Invalid time of day '{value}', expected HH:MM")
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError:
        raise ValueError(f"Invalid time of day '{value}', expected HH:MM")


def iter_days(start_date: date, end_date: date) -> Iterator[date]:
    """Calendar days in the inclusive range"""
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def iter_dose_slots(
    start_date: date,
    end_date: date,
    times: Optional[Sequence[str]]
) -> Iterator[DoseSlot]:
    """
    Yield every dose slot of a date range, day-major, times in list order.

    Nothing is yielded when times is empty or the range is inverted.
    """
    if not times or start_date is None or end_date is None:
        return

    parsed = [(label, parse_time_of_day(label)) for label in times]

    for day in iter_days(start_date, end_date):
        for label, tod in parsed:
            yield DoseSlot(
                scheduled_date=day,
                scheduled_time=label,
                scheduled_datetime=datetime.combine(day, tod)
            )


def build_record_payload(schedule: Any, slot: DoseSlot) -> Dict[str, Any]:
    """Field values of a fresh pending consumption record for one slot"""
    return {
        "schedule_id": schedule.id,
        "patient_id": schedule.patient_id,
        "patient_name": schedule.patient_name or "",
        "medication_name": schedule.medication_name or "",
        "dosage": schedule.dosage or "",
        "scheduled_date": slot.scheduled_date,
        "scheduled_time": slot.scheduled_time,
        "scheduled_datetime": slot.scheduled_datetime,
        "actual_time": None,
        "status": ConsumptionStatus.PENDING.value,
        "notes": "",
        "side_effects_reported": [],
        "recorded_by": SYSTEM_RECORDER,
    }


def expand_schedule(schedule: Any) -> List[Dict[str, Any]]:
    """
    Expand a schedule into pending record payloads.

    Produces len(days in [start_date, end_date]) x len(times) payloads.
    Existing records are not consulted.
    """
    payloads = [
        build_record_payload(schedule, slot)
        for slot in iter_dose_slots(schedule.start_date, schedule.end_date, schedule.times)
    ]
    logger.debug(
        f"Expanded schedule {schedule.id}: {len(payloads)} slots "
        f"({len(schedule.times or [])} per day)"
    )
    return payloads


def upcoming_slots(schedule: Any, today: date, days: int = 7) -> List[DoseSlot]:
    """
    Slots for today and the following days - 1 days, clipped to the schedule range.
    """
    if days <= 0:
        return []

    window_end = today + timedelta(days=days - 1)
    start = max(today, schedule.start_date)
    end = min(window_end, schedule.end_date)

    return list(iter_dose_slots(start, end, schedule.times))


def expected_record_count(start_date: date, end_date: date, times: Optional[Sequence[str]]) -> int:
    """Number of records a full expansion produces"""
    if not times or end_date < start_date:
        return 0
    return ((end_date - start_date).days + 1) * len(times)
