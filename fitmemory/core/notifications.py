"""Broadcast channel for newly created memory records."""

import asyncio
import inspect
import logging
from typing import Any, Callable, List, Set

from ..models import MemoryRecord

logger = logging.getLogger(__name__)

MemoryCallback = Callable[[MemoryRecord], Any]


class Subscription:
    """Handle returned by ``ChangeNotificationChannel.subscribe``."""

    def __init__(self, channel: "ChangeNotificationChannel", callback: MemoryCallback):
        self._channel = channel
        self.callback = callback

    @property
    def active(self) -> bool:
        return self in self._channel._subscriptions

    def unsubscribe(self) -> None:
        self._channel.unsubscribe(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()


class ChangeNotificationChannel:
    """
    Single-producer, multi-consumer stream of created MemoryRecords.

    Delivery is at most once per subscriber present at emission time; there
    is no buffering, so late subscribers miss earlier events. Subscriber
    errors are logged and never reach the producer.
    """

    def __init__(self):
        self._subscriptions: List[Subscription] = []
        # Strong refs so fire-and-forget tasks are not collected mid-flight
        self._pending: Set[asyncio.Task] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, callback: MemoryCallback) -> Subscription:
        """Register a plain or coroutine callback; returns its handle."""
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Detach a subscription. Unknown or already-removed handles are ignored."""
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def emit(self, record: MemoryRecord) -> int:
        """
        Deliver a record to every current subscriber.

        Returns:
            Number of subscribers the record was handed to
        """
        delivered = 0
        for subscription in list(self._subscriptions):
            try:
                result = subscription.callback(record)
                if inspect.isawaitable(result):
                    self._schedule(result)
                delivered += 1
            except Exception:
                logger.warning(
                    "Memory subscriber %r failed for record %s",
                    subscription.callback,
                    record.id,
                    exc_info=True,
                )
        return delivered

    def _schedule(self, awaitable) -> None:
        try:
            loop = asyncio.get_running_loop()
            task = asyncio.ensure_future(awaitable, loop=loop)
        except RuntimeError:
            # No running loop: the event is dropped for this subscriber
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise
        self._pending.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(
                "Async memory subscriber failed", exc_info=(type(exc), exc, exc.__traceback__)
            )

    async def drain(self) -> None:
        """Wait for scheduled async deliveries to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
