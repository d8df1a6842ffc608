"""
Realtime broadcaster: owner id -> live channel subscribers.

Subscribe, unsubscribe and notify never suspend, so under cooperative
scheduling each of them is atomic with respect to every other connection.
Delivery is fire-and-forget: ``notify`` only offers a frame to each
subscriber's own outbound queue and returns.
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional, Protocol, Set

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    TASK_CREATED = "tasks:created"
    TASK_UPDATED = "tasks:updated"
    TASK_DELETED = "tasks:deleted"


class Subscriber(Protocol):
    """Anything that can accept an outbound frame without blocking."""

    def offer(self, message: Dict[str, Any]) -> bool:
        ...


class Broadcaster:
    """
    Fans change notifications out to exactly one owner's subscribers.

    Usage:
        broadcaster = Broadcaster()
        broadcaster.subscribe(user_id, connection)
        broadcaster.notify(user_id, EventKind.TASK_CREATED, task_payload)
        broadcaster.unsubscribe(connection)
    """

    def __init__(self) -> None:
        self._groups: Dict[int, Set[Subscriber]] = {}
        self._owners: Dict[Subscriber, int] = {}

    def subscribe(self, owner: Optional[int], subscriber: Subscriber) -> None:
        if owner is None:
            raise ValueError("Cannot subscribe a connection without a resolved owner")
        previous = self._owners.get(subscriber)
        if previous is not None and previous != owner:
            self.unsubscribe(subscriber)
        self._groups.setdefault(owner, set()).add(subscriber)
        self._owners[subscriber] = owner
        logger.debug("Subscriber added for owner %s (%d live)", owner, len(self._groups[owner]))

    def unsubscribe(self, subscriber: Subscriber) -> None:
        owner = self._owners.pop(subscriber, None)
        if owner is None:
            return
        group = self._groups.get(owner)
        if group is not None:
            group.discard(subscriber)
            if not group:
                del self._groups[owner]
        logger.debug("Subscriber removed for owner %s", owner)

    def notify(self, owner: int, event: EventKind, payload: Dict[str, Any]) -> int:
        """
        Offer an event to every live subscriber of ``owner``.

        Returns how many subscribers accepted it. A subscriber that refuses
        or raises is skipped; the caller never sees the failure.
        """
        message = {"type": EventKind(event).value, "data": payload, "id": None}
        delivered = 0
        for subscriber in list(self._groups.get(owner, ())):
            try:
                if subscriber.offer(message):
                    delivered += 1
            except Exception:
                logger.exception("Error offering %s to a subscriber of owner %s", message["type"], owner)
        return delivered

    def subscriber_count(self, owner: Optional[int] = None) -> int:
        if owner is None:
            return len(self._owners)
        return len(self._groups.get(owner, ()))
