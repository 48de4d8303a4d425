"""
View models behind the two staff screens.
"""
import logging
from typing import Callable, List, Optional

from takeaway.application.order_controller import OrderController
from takeaway.domain.errors import ValidationError
from takeaway.domain.lifecycle import OrderStatus, is_forward, kitchen_action, status_display
from takeaway.domain.models import Order
from takeaway.domain.schemas import KitchenOrderOut, OrderOut
from takeaway.interfaces.IOrderFeed import IOrderFeed, ISubscription

logger = logging.getLogger(__name__)


class KitchenBoard:
    """Active orders, next pickup first. Offers only the two kitchen moves."""

    def __init__(self, controller: OrderController):
        self.controller = controller

    def orders(self) -> List[KitchenOrderOut]:
        return [KitchenOrderOut.model_validate(o) for o in self.controller.active_orders()]

    def advance(self, order_id: int, target: OrderStatus) -> Order:
        order = self.controller.get_order(order_id)
        offered = kitchen_action(order.status)
        if offered is None or offered != target:
            raise ValidationError(
                f"Transition non proposée en cuisine : "
                f"{status_display(order.status).label} → {status_display(target).label}"
            )
        return self.controller.advance(order_id, target)


class ManagerDashboard:
    """Every order, newest first. Any status may be set."""

    def __init__(self, controller: OrderController):
        self.controller = controller

    def orders(self) -> List[OrderOut]:
        return [OrderOut.model_validate(o) for o in self.controller.all_orders()]

    def order_detail(self, order_id: int) -> OrderOut:
        return OrderOut.model_validate(self.controller.get_order(order_id))

    def set_status(self, order_id: int, status: OrderStatus) -> Order:
        order = self.controller.get_order(order_id)
        if order.status != status and not is_forward(order.status, status):
            logger.warning(
                f"⚠️ Manager moved order {order.order_number} off the forward path: "
                f"{order.status.value} -> {OrderStatus(status).value}"
            )
        return self.controller.advance(order_id, status)


class LiveOrderList:
    """
    Keeps a full copy of a staff list and re-fetches all of it on every
    change notification. `on_refresh` receives each new list.
    """

    def __init__(self, feed: IOrderFeed, fetch: Callable[[], list], name: str,
                 on_refresh: Optional[Callable[[list], None]] = None):
        self.feed = feed
        self.fetch = fetch
        self.name = name
        self.on_refresh = on_refresh
        self.orders: list = []
        self._subscription: Optional[ISubscription] = None

    def start(self):
        # Subscribe before the first fetch so no change falls in between.
        if self._subscription is None:
            self._subscription = self.feed.subscribe(lambda change: self.refresh(), name=self.name)
        self.refresh()

    def refresh(self):
        self.orders = self.fetch()
        if self.on_refresh:
            self.on_refresh(self.orders)

    def stop(self):
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
