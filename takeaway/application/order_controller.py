import logging
from datetime import datetime
from typing import List, Optional

from takeaway.domain.cart import Cart
from takeaway.domain.errors import ValidationError
from takeaway.domain.lifecycle import ACTIVE_STATUSES, OrderStatus
from takeaway.domain.models import Order
from takeaway.domain.schemas import Customer, NewOrder, NewOrderItem, SubmitResult
from takeaway.domain.slots import DEFAULT_POLICY, SlotPolicy, is_valid_pickup
from takeaway.interfaces.IOrderRepository import IOrderRepository

logger = logging.getLogger(__name__)

MISSING_PICKUP = "Veuillez sélectionner une date et une heure de récupération."
EMPTY_CART = "Votre panier est vide."
SLOT_UNAVAILABLE = "Ce créneau de récupération n'est plus disponible."


class OrderController:
    """
    Turns a cart into a persisted order and writes status changes.

    It does not police the status graph: the kitchen board restricts what it
    offers, the manager dashboard does not.
    """

    def __init__(self, order_repo: IOrderRepository, notifier=None, policy: SlotPolicy = DEFAULT_POLICY):
        self.order_repo = order_repo
        self.notifier = notifier  # Injected NotificationService
        self.policy = policy

    def submit(
        self,
        cart: Cart,
        pickup: Optional[datetime],
        customer: Customer,
        notes: str = "",
        now: Optional[datetime] = None,
    ) -> SubmitResult:
        """
        Persist the cart as a pending order. Not idempotent: each call creates
        a new order, so callers must not resubmit while a call is outstanding.
        """
        # --- VALIDATION GATES (no store access before these pass) ---
        if pickup is None:
            raise ValidationError(MISSING_PICKUP)
        if cart.is_empty():
            raise ValidationError(EMPTY_CART)
        now = now or self.policy.now()
        if not is_valid_pickup(pickup, now, self.policy):
            raise ValidationError(SLOT_UNAVAILABLE)

        # Prices, names and categories are frozen here.
        snapshot = cart.snapshot()
        new_order = NewOrder(
            customer=customer,
            pickup_time=self.policy.to_local(pickup),
            total_amount=snapshot.total(),
            notes=notes.strip(),
            items=[
                NewOrderItem(
                    item_name=line.item.name,
                    item_category=line.item.category,
                    quantity=line.quantity,
                    unit_price=line.item.price,
                    total_price=line.line_total,
                )
                for line in snapshot.lines
            ],
        )

        order = self.order_repo.insert_order(new_order)
        logger.info(f"📨 Order {order.order_number} submitted by {customer.email} for {order.pickup_time:%d/%m %H:%M}")

        if self.notifier:
            self.notifier.notify_staff_new_order(order)

        return SubmitResult(
            order_id=order.id,
            order_number=order.order_number,
            pickup_time=order.pickup_time,
            total_amount=order.total_amount,
        )

    def advance(self, order_id: int, target: OrderStatus) -> Order:
        return self.order_repo.update_status(order_id, OrderStatus(target))

    def get_order(self, order_id: int) -> Order:
        return self.order_repo.get_order(order_id)

    def active_orders(self) -> List[Order]:
        return self.order_repo.list_by_status(ACTIVE_STATUSES)

    def all_orders(self) -> List[Order]:
        return self.order_repo.list_all()
