"""
Tests for Change Feed Tool
Tests publish/subscribe delivery of collection change events
"""

import asyncio
import pytest

from tools.change_feed import ChangeFeed, ChangeEvent


@pytest.fixture
def feed():
    """Fresh feed, independent of the application singleton"""
    return ChangeFeed()


class TestChangeFeed:
    """Tests for subscription and delivery"""

    @pytest.mark.unit
    def test_publish_without_subscribers(self, feed):
        assert feed.publish("patients", "create", "p-1") == 0

    @pytest.mark.asyncio
    async def test_subscriber_receives_event(self, feed):
        subscription = feed.subscribe("patients")

        delivered = feed.publish("patients", "update", "p-1")
        event = await asyncio.wait_for(subscription.get(), timeout=1)

        assert delivered == 1
        assert isinstance(event, ChangeEvent)
        assert event.collection == "patients"
        assert event.action == "update"
        assert event.document_id == "p-1"

    @pytest.mark.asyncio
    async def test_events_are_per_collection(self, feed):
        patients = feed.subscribe("patients")
        records = feed.subscribe("consumption_records")

        feed.publish("consumption_records", "create")
        event = await asyncio.wait_for(records.get(), timeout=1)

        assert event.collection == "consumption_records"
        assert patients.queue.empty()

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_delivery(self, feed):
        subscription = feed.subscribe("doctors")
        assert feed.subscriber_count("doctors") == 1

        feed.unsubscribe(subscription)

        assert feed.subscriber_count("doctors") == 0
        assert feed.publish("doctors", "delete", "d-1") == 0

    @pytest.mark.asyncio
    async def test_publish_from_another_thread(self, feed):
        subscription = feed.subscribe("medication_schedules")

        await asyncio.to_thread(feed.publish, "medication_schedules", "create", "s-1")
        event = await asyncio.wait_for(subscription.get(), timeout=1)

        assert event.document_id == "s-1"
