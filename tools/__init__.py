"""
Tools Package
Pure helpers for the MedTrack system: schedule expansion, compliance
aggregation, webhook notification and the in-process change feed
"""

from .schedule_expander import (
    DoseSlot,
    SYSTEM_RECORDER,
    parse_time_of_day,
    iter_dose_slots,
    expand_schedule,
    upcoming_slots,
    expected_record_count
)

from .compliance import (
    ComplianceSummary,
    DailyCompliance,
    MonthlyCompliance,
    CategoryCount,
    compliance_rate,
    summarize,
    daily_compliance,
    monthly_compliance,
    categorize_medication,
    category_breakdown
)

from .webhook_notifier import (
    WebhookNotifier,
    WebhookAction,
    WebhookResult,
    build_payload,
    webhook_notifier
)

from .change_feed import (
    ChangeFeed,
    ChangeEvent,
    Subscription,
    change_feed
)

__all__ = [
    # Schedule Expander
    "DoseSlot",
    "SYSTEM_RECORDER",
    "parse_time_of_day",
    "iter_dose_slots",
    "expand_schedule",
    "upcoming_slots",
    "expected_record_count",

    # Compliance
    "ComplianceSummary",
    "DailyCompliance",
    "MonthlyCompliance",
    "CategoryCount",
    "compliance_rate",
    "summarize",
    "daily_compliance",
    "monthly_compliance",
    "categorize_medication",
    "category_breakdown",

    # Webhook Notifier
    "WebhookNotifier",
    "WebhookAction",
    "WebhookResult",
    "build_payload",
    "webhook_notifier",

    # Change Feed
    "ChangeFeed",
    "ChangeEvent",
    "Subscription",
    "change_feed"
]
