"""
Test Tools Package
Tests for the tools module (schedule expander, compliance, webhook, change feed)
"""

__all__ = [
    "test_schedule_expander",
    "test_compliance",
    "test_webhook_notifier",
    "test_change_feed",
]
