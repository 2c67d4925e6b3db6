"""
In-process notification hub.

Services publish per-user events (enrollment success, progress updates,
course completion, payment success) and every open Server-Sent Events
stream of that user receives them. Each subscriber owns a bounded queue;
when a slow subscriber falls behind the oldest pending event is dropped.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from datetime import datetime
from typing import Any, AsyncGenerator, Dict, Optional, Set

from pydantic import BaseModel, Field

from edustack.core.database.base import utc_now
from edustack.core.logging_config import get_logger
from edustack.core.models.domain.enums import NotificationEvent
from edustack.server.core.constant import NOTIFICATION_QUEUE_SIZE

logger = get_logger(__name__)


class Notification(BaseModel):
    event: NotificationEvent
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=utc_now)


class NotificationHub:
    """Fan-out of notifications to the open streams of each user."""

    def __init__(self, max_queue_size: int = NOTIFICATION_QUEUE_SIZE) -> None:
        self.max_queue_size = max_queue_size
        self._subscribers: Dict[str, Set[asyncio.Queue]] = defaultdict(set)

    def subscribe(self, user_id: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        self._subscribers[user_id].add(queue)
        logger.debug(f"Notification subscriber added for user {user_id}")
        return queue

    def unsubscribe(self, user_id: str, queue: asyncio.Queue) -> None:
        queues = self._subscribers.get(user_id)
        if not queues:
            return
        queues.discard(queue)
        if not queues:
            del self._subscribers[user_id]
        logger.debug(f"Notification subscriber removed for user {user_id}")

    def subscriber_count(self, user_id: str) -> int:
        return len(self._subscribers.get(user_id, ()))

    def publish(self, user_id: str, event: NotificationEvent, data: Optional[Dict[str, Any]] = None) -> int:
        """
        Deliver an event to every stream of ``user_id``.

        Args:
            user_id: Recipient user id
            event: Event name
            data: JSON-serializable payload

        Returns:
            Number of subscribers the event was queued for
        """
        notification = Notification(event=event, data=data or {})
        queues = list(self._subscribers.get(user_id, ()))
        for queue in queues:
            if queue.full():
                queue.get_nowait()
                logger.warning(f"Notification queue full for user {user_id}, dropped oldest event")
            queue.put_nowait(notification)
        logger.debug(f"Published {event.value} to {len(queues)} subscriber(s) of user {user_id}")
        return len(queues)

    async def stream(self, user_id: str) -> AsyncGenerator[Dict[str, str], None]:
        """Yield SSE messages for ``user_id`` until the consumer stops iterating."""
        queue = self.subscribe(user_id)
        try:
            while True:
                notification: Notification = await queue.get()
                yield {"event": notification.event.value, "data": notification.model_dump_json()}
        finally:
            self.unsubscribe(user_id, queue)


_hub: Optional[NotificationHub] = None


def get_notification_hub() -> NotificationHub:
    """Process-wide hub instance."""
    global _hub
    if _hub is None:
        _hub = NotificationHub()
    return _hub
