"""
Change Feed Tool
In-process fan-out of collection change events to live subscribers
"""

import asyncio
import logging
from typing import Dict, Optional, Set
from dataclasses import dataclass, field
from datetime import datetime


logger = logging.getLogger(__name__)


@dataclass
class ChangeEvent:
    """A committed change to one collection"""
    collection: str
    action: str
    document_id: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)


class Subscription:
    """Queue of events for one subscriber, bound to the subscriber's event loop"""

    def __init__(self, collection: str, loop: asyncio.AbstractEventLoop):
        self.collection = collection
        self.loop = loop
        self.queue: asyncio.Queue = asyncio.Queue()

    def deliver(self, event: ChangeEvent) -> None:
        self.loop.call_soon_threadsafe(self.queue.put_nowait, event)

    async def get(self) -> ChangeEvent:
        return await self.queue.get()


class ChangeFeed:
    """
    Publish/subscribe registry keyed by collection name.

    Subscribers of different collections are not coordinated.
    """

    def __init__(self):
        self._subscriptions: Dict[str, Set[Subscription]] = {}

    def subscribe(self, collection: str) -> Subscription:
        """Register a subscriber on the running event loop"""
        subscription = Subscription(collection, asyncio.get_running_loop())
        self._subscriptions.setdefault(collection, set()).add(subscription)
        logger.debug(f"Subscribed to {collection} ({self.subscriber_count(collection)} active)")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscribers = self._subscriptions.get(subscription.collection)
        if subscribers:
            subscribers.discard(subscription)

    def subscriber_count(self, collection: str) -> int:
        return len(self._subscriptions.get(collection, ()))

    def publish(self, collection: str, action: str, document_id: Optional[str] = None) -> int:
        """
        Notify every subscriber of a collection.

        Returns:
            Number of subscribers notified
        """
        event = ChangeEvent(collection=collection, action=action, document_id=document_id)
        delivered = 0

        for subscription in list(self._subscriptions.get(collection, ())):
            try:
                subscription.deliver(event)
                delivered += 1
            except RuntimeError:
                # Subscriber's loop is closed
                self.unsubscribe(subscription)

        return delivered


# Singleton instance
change_feed = ChangeFeed()
