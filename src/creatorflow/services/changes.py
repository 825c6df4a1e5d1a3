"""In-process change notifications.

Writers call ``publish(user_id, resource)`` after a successful commit.
Listeners only learn that *something* changed in a resource; they are
expected to re-fetch. Notifications are not deduplicated against the
listener's own writes.
"""
from __future__ import annotations

import asyncio
import json
import inspect
import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import AsyncIterator, Awaitable, Callable, Union

from creatorflow.models.base import utcnow

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    resource: str
    user_id: uuid.UUID
    at: datetime = field(default_factory=utcnow)

    def as_sse(self) -> str:
        payload = json.dumps({"resource": self.resource, "at": self.at.isoformat()})
        return f"event: change\ndata: {payload}\n\n"


Listener = Callable[[ChangeEvent], Union[None, Awaitable[None]]]


class ChangeNotifier:
    def __init__(self) -> None:
        self._listeners: dict[uuid.UUID, list[Listener]] = defaultdict(list)
        self._queues: dict[uuid.UUID, set[asyncio.Queue]] = defaultdict(set)

    def subscribe(self, user_id: uuid.UUID, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unsubscribes it."""
        self._listeners[user_id].append(listener)

        def _unsubscribe() -> None:
            try:
                self._listeners[user_id].remove(listener)
            except ValueError:
                pass

        return _unsubscribe

    async def publish(self, user_id: uuid.UUID, resource: str) -> ChangeEvent:
        event = ChangeEvent(resource=resource, user_id=user_id)
        for queue in list(self._queues.get(user_id, ())):
            queue.put_nowait(event)
        for listener in list(self._listeners.get(user_id, ())):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                # one broken listener must not stop delivery to the rest
                log.exception("change listener failed", extra={"resource": resource, "user_id": user_id})
        return event

    async def stream(self, user_id: uuid.UUID) -> AsyncIterator[ChangeEvent]:
        """Yield events for ``user_id`` until the consumer stops iterating."""
        queue: asyncio.Queue = asyncio.Queue()
        self._queues[user_id].add(queue)
        try:
            while True:
                yield await queue.get()
        finally:
            self._queues[user_id].discard(queue)

    def listener_count(self, user_id: uuid.UUID) -> int:
        return len(self._listeners.get(user_id, ())) + len(self._queues.get(user_id, ()))


_notifier = ChangeNotifier()


def get_notifier() -> ChangeNotifier:
    return _notifier
