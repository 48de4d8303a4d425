import logging
import threading
from typing import Callable, List

from takeaway.interfaces.IOrderFeed import IOrderFeed, ISubscription, OrderChange

logger = logging.getLogger(__name__)


class Subscription(ISubscription):
    def __init__(self, feed: "OrderFeed", callback: Callable[[OrderChange], None], name: str):
        self._feed = feed
        self.callback = callback
        self.name = name
        self._active = True
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        """Release the subscription. Only the first call has an effect."""
        with self._lock:
            if not self._active:
                return
            self._active = False
        self._feed._remove(self)
        logger.debug(f"Feed subscriber '{self.name}' released")


class OrderFeed(IOrderFeed):
    """
    In-process change notifications for the orders table.

    Subscribers get every insert/update/delete and are expected to re-fetch
    their whole list; events carry only the kind and the order id.
    """

    def __init__(self):
        self._subscriptions: List[Subscription] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Callable[[OrderChange], None], name: str = "anonymous") -> Subscription:
        sub = Subscription(self, callback, name)
        with self._lock:
            self._subscriptions.append(sub)
        logger.debug(f"Feed subscriber '{name}' added")
        return sub

    def publish(self, change: OrderChange) -> None:
        with self._lock:
            targets = list(self._subscriptions)
        for sub in targets:
            try:
                sub.callback(change)
            except Exception as e:
                logger.error(f"❌ Feed subscriber '{sub.name}' failed on {change.event} #{change.order_id}: {e}", exc_info=True)

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)
