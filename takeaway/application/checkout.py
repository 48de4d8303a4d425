import logging
from datetime import date, datetime
from typing import Optional

from takeaway.application.order_controller import MISSING_PICKUP, OrderController
from takeaway.domain.cart import Cart
from takeaway.domain.errors import SubmissionInProgress, ValidationError
from takeaway.domain.menu import MenuCatalog
from takeaway.domain.schemas import (
    CartLineOut,
    CartOut,
    CheckoutRequest,
    Customer,
    PickupSlotsOut,
    SubmitResult,
    UserProfile,
)
from takeaway.domain.slots import SlotPolicy, generate_pickup_slots, is_selectable_date, pickup_moment
from takeaway.infrastructure.state_manager import StateManager

logger = logging.getLogger(__name__)

DATE_NOT_SELECTABLE = "Cette date de récupération n'est pas disponible."


def cart_view(cart: Cart) -> CartOut:
    return CartOut(
        items=[
            CartLineOut(
                item_id=line.item.id,
                name=line.item.name,
                category=line.item.category,
                price=line.item.price,
                quantity=line.quantity,
                line_total=line.line_total,
            )
            for line in cart.lines
        ],
        count=cart.count(),
        total=cart.total(),
    )


class CheckoutService:
    """Customer-side flow: cart edits, slot lookup, submission."""

    def __init__(self, catalog: MenuCatalog, carts: StateManager, controller: OrderController, policy: SlotPolicy):
        self.catalog = catalog
        self.carts = carts
        self.controller = controller
        self.policy = policy

    # --- CART ---

    def view_cart(self, cart_id: str) -> CartOut:
        return cart_view(self.carts.get_cart(cart_id))

    def add_item(self, cart_id: str, item_id: str) -> CartOut:
        item = self.catalog.get(item_id)
        if item is None:
            raise ValidationError(f"Article inconnu : {item_id}")
        cart = self.carts.get_cart(cart_id)
        cart.add(item)
        self.carts.save_cart(cart_id, cart)
        return cart_view(cart)

    def set_quantity(self, cart_id: str, item_id: str, quantity: int) -> CartOut:
        cart = self.carts.get_cart(cart_id)
        cart.set_quantity(item_id, quantity)
        self.carts.save_cart(cart_id, cart)
        return cart_view(cart)

    def remove_item(self, cart_id: str, item_id: str) -> CartOut:
        cart = self.carts.get_cart(cart_id)
        cart.remove(item_id)
        self.carts.save_cart(cart_id, cart)
        return cart_view(cart)

    def clear_cart(self, cart_id: str) -> CartOut:
        self.carts.clear_cart(cart_id)
        return cart_view(Cart())

    # --- SLOTS ---

    def pickup_slots(self, day: date, now: datetime) -> PickupSlotsOut:
        if not is_selectable_date(day, now, self.policy):
            raise ValidationError(DATE_NOT_SELECTABLE)
        slots = [slot.strftime("%H:%M") for slot in generate_pickup_slots(day, now, self.policy)]
        return PickupSlotsOut(date=day, slots=slots, can_confirm=bool(slots))

    # --- SUBMIT ---

    def checkout(self, cart_id: str, user: UserProfile, request: CheckoutRequest, now: Optional[datetime] = None) -> SubmitResult:
        if request.pickup_date is None or request.pickup_time is None:
            raise ValidationError(MISSING_PICKUP)
        now = now or self.policy.now()
        if not is_selectable_date(request.pickup_date, now, self.policy):
            raise ValidationError(DATE_NOT_SELECTABLE)

        if not self.carts.acquire_checkout(user.id):
            raise SubmissionInProgress()
        try:
            result = self.controller.submit(
                cart=self.carts.get_cart(cart_id),
                pickup=pickup_moment(request.pickup_date, request.pickup_time),
                customer=Customer.from_user(user),
                notes=request.notes,
                now=now,
            )
            # Only a successful submit empties the cart.
            self.carts.clear_cart(cart_id)
            return result
        finally:
            self.carts.release_checkout(user.id)
