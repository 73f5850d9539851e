"""Explicit change notification for reactive rendering.

There is no implicit dependency graph: a :class:`Computation` declares the
topics it depends on, runs once immediately and runs again every time one of
those topics is emitted on the :class:`ChangeBus`, until ``stop()`` is
called.

Scheduling is single-threaded and cooperative. ``emit`` notifies subscribers
in subscription order on the caller's thread. A computation invalidated while
it is running is re-run once, right after the current run returns; it is never
entered recursively.

Example::

    bus = ChangeBus()
    comp = Computation(lambda c: render(store.shop(shop_id)), bus,
                       topics=["shops.ready", f"shops:{shop_id}"])
    bus.emit(f"shops:{shop_id}")   # render runs again
    comp.stop()                    # no further runs
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List

__all__ = ["ChangeBus", "Computation", "Subscription"]

logger = logging.getLogger(__name__)


class Subscription:
    """Handle returned by :meth:`ChangeBus.subscribe`."""

    __slots__ = ("_bus", "topic", "callback", "active")

    def __init__(self, bus: "ChangeBus", topic: str, callback: Callable[[str], Any]):
        self._bus = bus
        self.topic = topic
        self.callback = callback
        self.active = True

    def stop(self) -> None:
        if not self.active:
            return
        self.active = False
        self._bus._discard(self)


class ChangeBus:
    """Topic based broadcast of change notifications."""

    __slots__ = ("_subscribers",)

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Subscription]] = {}

    def subscribe(self, topic: str, callback: Callable[[str], Any]) -> Subscription:
        subscription = Subscription(self, topic, callback)
        self._subscribers.setdefault(topic, []).append(subscription)
        return subscription

    def emit(self, topic: str) -> int:
        """Notify every active subscriber of ``topic``; return how many ran.

        A subscriber that raises is logged with its traceback and does not
        prevent the remaining subscribers from being notified.
        """
        notified = 0
        for subscription in list(self._subscribers.get(topic, ())):
            if not subscription.active:
                continue
            try:
                subscription.callback(topic)
            except Exception:
                logger.exception("subscriber of %s failed", topic)
                continue
            notified += 1
        return notified

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))

    def _discard(self, subscription: Subscription) -> None:
        bucket = self._subscribers.get(subscription.topic)
        if not bucket:
            return
        if subscription in bucket:
            bucket.remove(subscription)
        if not bucket:
            del self._subscribers[subscription.topic]


class Computation:
    """Re-run ``func(self)`` whenever one of ``topics`` changes."""

    __slots__ = ("_func", "_subscriptions", "_running", "_pending", "stopped", "runs")

    def __init__(
        self,
        func: Callable[["Computation"], Any],
        bus: ChangeBus,
        topics: Iterable[str] = (),
    ):
        self._func = func
        self._running = False
        self._pending = False
        self.stopped = False
        self.runs = 0
        self._subscriptions = [bus.subscribe(topic, self._invalidate) for topic in topics]
        self._run()

    def _invalidate(self, topic: str) -> None:
        if self.stopped:
            return
        logger.debug("computation invalidated by %s", topic)
        if self._running:
            self._pending = True
            return
        self._run()

    def _run(self) -> None:
        self._running = True
        try:
            while True:
                self._pending = False
                self.runs += 1
                self._func(self)
                if not self._pending or self.stopped:
                    break
        finally:
            self._running = False

    def stop(self) -> None:
        if self.stopped:
            return
        self.stopped = True
        for subscription in self._subscriptions:
            subscription.stop()
        self._subscriptions = []
