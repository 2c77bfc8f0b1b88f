"""
In-process message broker for live message delivery.

Each connected SSE client subscribes a bounded ``asyncio.Queue`` under its user
id. Publishing fans an event out to every queue of the recipient. A full queue
drops its oldest event so a slow client never blocks the sender.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Set

from tutorconnect.core.logging_config import get_logger

logger = get_logger(__name__)

QUEUE_MAX_SIZE = 100


class MessageBroker:
    """Fan-out of message events to the live streams of a user."""

    def __init__(self, max_queue_size: int = QUEUE_MAX_SIZE) -> None:
        self.max_queue_size = max_queue_size
        self._subscribers: Dict[str, Set[asyncio.Queue]] = {}

    def subscribe(self, user_id: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        self._subscribers.setdefault(user_id, set()).add(queue)
        logger.debug(f"Stream subscribed for user {user_id} ({len(self._subscribers[user_id])} open)")
        return queue

    def unsubscribe(self, user_id: str, queue: asyncio.Queue) -> None:
        queues = self._subscribers.get(user_id)
        if not queues:
            return
        queues.discard(queue)
        if not queues:
            del self._subscribers[user_id]
        logger.debug(f"Stream unsubscribed for user {user_id}")

    def subscriber_count(self, user_id: str) -> int:
        return len(self._subscribers.get(user_id, ()))

    def publish(self, user_id: str, event: Dict[str, Any]) -> int:
        """
        Deliver ``event`` to every open stream of ``user_id``.

        Returns:
            int: Number of streams the event was queued on
        """
        queues = self._subscribers.get(user_id)
        if not queues:
            return 0
        for queue in queues:
            if queue.full():
                queue.get_nowait()
                logger.warning(f"Live queue full for user {user_id}, dropped oldest event")
            queue.put_nowait(event)
        return len(queues)


# Global singleton
_broker: Optional[MessageBroker] = None


def get_message_broker() -> MessageBroker:
    global _broker
    if _broker is None:
        _broker = MessageBroker()
    return _broker
