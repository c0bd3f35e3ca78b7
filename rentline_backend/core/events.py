"""
In-process change feed.

Services publish a ChangeEvent after a successful commit; WebSocket
subscribers receive the events addressed to them and re-fetch. Each
subscriber owns a bounded queue: when it is full the oldest event is
dropped so a slow client never blocks a publisher.
"""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..config import settings

logger = logging.getLogger(__name__)


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    """A committed change to one row."""

    table: str
    event: ChangeType
    row_id: int
    audience: frozenset[int] = field(default_factory=frozenset)

    def to_dict(self) -> dict[str, Any]:
        return {"table": self.table, "event": self.event.value, "row_id": self.row_id}


class Subscription:
    """A single subscriber's view of the feed."""

    def __init__(self, profile_id: int, is_admin: bool, queue_size: int):
        self.profile_id = profile_id
        self.is_admin = is_admin
        self.queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=queue_size)
        self.dropped = 0

    def wants(self, event: ChangeEvent) -> bool:
        return self.is_admin or self.profile_id in event.audience

    def offer(self, event: ChangeEvent) -> None:
        if self.queue.full():
            self.queue.get_nowait()
            self.dropped += 1
        self.queue.put_nowait(event)

    async def get(self) -> ChangeEvent:
        return await self.queue.get()


class ChangeFeed:
    """Fan-out of change events to subscribers."""

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscriptions: set[Subscription] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, profile_id: int, is_admin: bool = False) -> Subscription:
        subscription = Subscription(profile_id, is_admin, self.queue_size)
        self._subscriptions.add(subscription)
        logger.debug(
            "Change feed subscriber added",
            extra={"profile_id": profile_id, "subscribers": self.subscriber_count},
        )
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        self._subscriptions.discard(subscription)
        if subscription.dropped:
            logger.warning(
                "Change feed subscriber dropped events",
                extra={
                    "profile_id": subscription.profile_id,
                    "dropped": subscription.dropped,
                },
            )

    def publish(self, event: ChangeEvent) -> int:
        """Deliver an event to every interested subscriber.

        Returns:
            Number of subscribers the event was delivered to
        """
        delivered = 0
        for subscription in list(self._subscriptions):
            if subscription.wants(event):
                subscription.offer(event)
                delivered += 1
        return delivered


change_feed = ChangeFeed(queue_size=settings.change_feed_queue_size)


def publish_change(
    table: str,
    event: ChangeType,
    row_id: int,
    audience: Iterable[int | None] = (),
) -> int:
    """Publish a change on the application feed. None ids in audience are ignored."""
    return change_feed.publish(
        ChangeEvent(
            table=table,
            event=event,
            row_id=row_id,
            audience=frozenset(a for a in audience if a is not None),
        )
    )
